from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, is_duplicate_key, is_missing_reference
from ..salary_logs.model import NewSalaryLog
from ..salary_logs.mysql_salary_log_repository import delete_salary_logs, insert_salary_log
from .model import AttendanceRecord, AttendanceReportRow, DeletionResult, NewAttendance, SlotSnapshot
from .query import AttendanceQuery
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    ar.attendance_id, ar.user_id, ar.attendance_date, ar.slot_id, ar.attendance_time, ar.status,
    ar.slot_salary, ar.late_by_minutes, ar.warning_message,
    ar.snapshot_name, ar.snapshot_start_minutes, ar.snapshot_end_minutes, ar.snapshot_salary,
    ar.admin_note, ar.reviewed_by, ar.reviewed_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        attendance_date=r["attendance_date"],
        slot_id=int(r["slot_id"]),
        attendance_time=r["attendance_time"],
        status=AttendanceStatus(r["status"]),
        slot_salary=as_decimal(r["slot_salary"]),
        slot_snapshot=SlotSnapshot(
            slot_id=int(r["slot_id"]),
            name=r["snapshot_name"],
            start_minutes=int(r["snapshot_start_minutes"]),
            end_minutes=int(r["snapshot_end_minutes"]),
            salary=as_decimal(r["snapshot_salary"]),
        ),
        late_by_minutes=int(r.get("late_by_minutes") or 0),
        warning_message=r.get("warning_message") or "",
        admin_note=r.get("admin_note") or "",
        reviewed_by=int(r["reviewed_by"]) if r.get("reviewed_by") is not None else None,
        reviewed_at=r.get("reviewed_at"),
    )


def _record_params(new: NewAttendance) -> tuple:
    snap = new.slot_snapshot
    return (
        int(new.user_id),
        new.attendance_date,
        int(new.slot_id),
        new.attendance_time,
        new.status.value,
        new.slot_salary,
        int(new.late_by_minutes),
        new.warning_message,
        snap.name,
        snap.start_minutes,
        snap.end_minutes,
        snap.salary,
        new.admin_note,
        new.reviewed_by,
        new.reviewed_at,
    )


_INSERT = """
    INSERT INTO attendance_records(
        user_id, attendance_date, slot_id, attendance_time, status,
        slot_salary, late_by_minutes, warning_message,
        snapshot_name, snapshot_start_minutes, snapshot_end_minutes, snapshot_salary,
        admin_note, reviewed_by, reviewed_at
    )
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
"""


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _select_by_id(cur, attendance_id: int) -> Optional[AttendanceRecord]:
        cur.execute(f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.attendance_id=%s", (int(attendance_id),))
        r = fetchone(cur)
        return _to_record(r) if r else None

    @staticmethod
    def _log(cur, record: AttendanceRecord, salary_log: Optional[NewSalaryLog]) -> None:
        if salary_log is None:
            return
        insert_salary_log(
            cur,
            user_id=record.user_id,
            attendance_id=record.attendance_id,
            attendance_date=record.attendance_date,
            amount=record.slot_salary,
            log=salary_log,
        )

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_by_id(cur, attendance_id)

    def insert(self, new: NewAttendance, *, salary_log: Optional[NewSalaryLog] = None) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(_INSERT, _record_params(new))
                record = self._select_by_id(cur, int(cur.lastrowid))
                self._log(cur, record, salary_log)
                return record
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError("Attendance already marked for this slot today")
            if is_missing_reference(e):
                raise NotFoundError("Employee not found")
            raise

    def upsert(self, new: NewAttendance, *, salary_log: Optional[NewSalaryLog] = None) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # LAST_INSERT_ID(expr) makes lastrowid the existing id on the update path.
                cur.execute(
                    _INSERT
                    + """
                    ON DUPLICATE KEY UPDATE
                        attendance_id=LAST_INSERT_ID(attendance_id),
                        attendance_time=VALUES(attendance_time),
                        status=VALUES(status),
                        slot_salary=VALUES(slot_salary),
                        late_by_minutes=VALUES(late_by_minutes),
                        warning_message=VALUES(warning_message),
                        snapshot_name=VALUES(snapshot_name),
                        snapshot_start_minutes=VALUES(snapshot_start_minutes),
                        snapshot_end_minutes=VALUES(snapshot_end_minutes),
                        snapshot_salary=VALUES(snapshot_salary),
                        admin_note=VALUES(admin_note),
                        reviewed_by=VALUES(reviewed_by),
                        reviewed_at=VALUES(reviewed_at)
                    """,
                    _record_params(new),
                )
                record = self._select_by_id(cur, int(cur.lastrowid))
                delete_salary_logs(cur, [record.attendance_id])
                self._log(cur, record, salary_log)
                return record
        except mysql.connector.IntegrityError as e:
            if is_missing_reference(e):
                raise NotFoundError("Employee not found")
            raise

    def decide_pending(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        admin_note: Optional[str] = None,
        salary_log: Optional[NewSalaryLog] = None,
    ) -> Optional[AttendanceRecord]:
        if status == AttendanceStatus.APPROVED:
            outcome = "status='APPROVED', slot_salary=snapshot_salary, warning_message=''"
        elif status == AttendanceStatus.REJECTED:
            outcome = "status='REJECTED', slot_salary=0"
        else:
            raise ValidationError(f"A pending record cannot move to {status.value}")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET {outcome}, reviewed_by=%s, reviewed_at=%s, admin_note=COALESCE(%s, admin_note)
                WHERE attendance_id=%s AND status='PENDING'
                """,
                (int(reviewed_by), reviewed_at, admin_note, int(attendance_id)),
            )
            if cur.rowcount == 0:
                return None
            record = self._select_by_id(cur, attendance_id)
            self._log(cur, record, salary_log)
            return record

    def delete_for_day(
        self,
        *,
        user_id: int,
        attendance_date: date,
        slot_id: Optional[int] = None,
        purge_salary_logs: bool,
    ) -> DeletionResult:
        clauses = ["user_id=%s", "attendance_date=%s"]
        params: list[object] = [int(user_id), attendance_date]
        if slot_id is not None:
            clauses.append("slot_id=%s")
            params.append(int(slot_id))
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT attendance_id FROM attendance_records WHERE {where} FOR UPDATE", tuple(params))
            ids = [int(r["attendance_id"]) for r in fetchall(cur)]
            if not ids:
                return DeletionResult(deleted_records=0)

            deleted_logs = delete_salary_logs(cur, ids) if purge_salary_logs else 0
            cur.execute(f"DELETE FROM attendance_records WHERE {where}", tuple(params))
            return DeletionResult(deleted_records=int(cur.rowcount), deleted_logs=deleted_logs)

    def list_report_rows(self, query: AttendanceQuery) -> Sequence[AttendanceReportRow]:
        clauses = ["ar.attendance_date BETWEEN %s AND %s"]
        params: list[object] = [query.start_date, query.end_date]
        if query.user_id is not None:
            clauses.append("ar.user_id=%s")
            params.append(int(query.user_id))
        if query.status is not None:
            clauses.append("ar.status=%s")
            params.append(query.status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, u.employee_code, u.full_name
                FROM attendance_records ar
                JOIN users u ON u.user_id = ar.user_id
                WHERE {" AND ".join(clauses)}
                ORDER BY ar.attendance_date ASC, u.employee_code ASC, ar.snapshot_end_minutes ASC
                """,
                tuple(params),
            )
            return [
                AttendanceReportRow(
                    record=_to_record(r),
                    employee_code=r["employee_code"],
                    full_name=r["full_name"],
                )
                for r in fetchall(cur)
            ]
