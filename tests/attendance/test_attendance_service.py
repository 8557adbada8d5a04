from datetime import datetime
from decimal import Decimal

import pytest

from src.slot_payroll.slot_payroll.core.enums import AttendanceStatus, SalaryAction
from src.slot_payroll.slot_payroll.core.exceptions import ConflictError, NotFoundError, ValidationError

ASHA = 2
WORK_DAY = datetime(2025, 3, 10).date()


def at(hour, minute):
    return datetime(2025, 3, 10, hour, minute)


def test_mark_on_time_is_auto_approved(attendance_service, attendance_repo):
    outcome = attendance_service.mark_attendance(ASHA, 1, now=at(11, 55))

    assert outcome.status == AttendanceStatus.APPROVED
    assert outcome.slot_salary == Decimal("200")
    assert outcome.record.attendance_date == WORK_DAY

    logs = attendance_repo.logs_for(outcome.record.attendance_id)
    assert [(log.action, log.amount, log.created_by) for log in logs] == [
        (SalaryAction.AUTO_APPROVED, Decimal("200"), None)
    ]


def test_mark_within_grace_is_pending_without_log(attendance_service, attendance_repo):
    outcome = attendance_service.mark_attendance(ASHA, 1, now=at(12, 3))

    assert outcome.status == AttendanceStatus.PENDING
    assert outcome.slot_salary == Decimal("0")
    assert outcome.late_by_minutes == 3
    assert outcome.warning_message == "Late by 3 minute(s). Admin approval required."
    assert attendance_repo.logs == []


def test_mark_after_grace_is_rejected(attendance_service, attendance_repo):
    outcome = attendance_service.mark_attendance(ASHA, 1, now=at(12, 10))

    assert outcome.status == AttendanceStatus.REJECTED
    assert outcome.late_by_minutes == 10
    assert outcome.warning_message == "Late by 10 minute(s). Attendance rejected."
    assert attendance_repo.logs == []


def test_mark_uses_clock_when_now_is_omitted(attendance_service, clock):
    clock.set(at(9, 0))
    outcome = attendance_service.mark_attendance(ASHA, 1)
    assert outcome.record.attendance_time == at(9, 0)


def test_second_mark_for_same_slot_conflicts(attendance_service, attendance_repo):
    attendance_service.mark_attendance(ASHA, 1, now=at(11, 55))

    with pytest.raises(ConflictError):
        attendance_service.mark_attendance(ASHA, 1, now=at(11, 58))

    assert len(attendance_repo.records) == 1
    assert len(attendance_repo.logs) == 1


def test_different_slots_same_day_are_independent(attendance_service, attendance_repo):
    attendance_service.mark_attendance(ASHA, 1, now=at(11, 55))
    attendance_service.mark_attendance(ASHA, 2, now=at(16, 0))
    assert len(attendance_repo.records) == 2


def test_mark_against_inactive_or_unknown_slot(attendance_service, slot_service):
    slot_service.update_slot(2, is_active=False)

    with pytest.raises(NotFoundError):
        attendance_service.mark_attendance(ASHA, 2, now=at(11, 0))
    with pytest.raises(NotFoundError):
        attendance_service.mark_attendance(ASHA, 42, now=at(11, 0))


def test_record_keeps_snapshot_after_slot_edit(attendance_service, slot_service, attendance_repo):
    outcome = attendance_service.mark_attendance(ASHA, 1, now=at(11, 55))

    slot_service.update_slot(1, name="Early", end=700, salary=999)

    stored = attendance_repo.get_by_id(outcome.record.attendance_id)
    assert stored.slot_snapshot.name == "Morning"
    assert stored.slot_snapshot.end_minutes == 720
    assert stored.slot_salary == Decimal("200")


def test_upsert_approved_pays_and_logs(attendance_service, attendance_repo, clock):
    record = attendance_service.upsert_attendance(
        "EMP000001", WORK_DAY, 2, "APPROVED", admin_note="covered shift", admin_user_id=1
    )

    assert record.status == AttendanceStatus.APPROVED
    assert record.slot_salary == Decimal("200")
    assert record.attendance_time == at(12, 0)
    assert record.admin_note == "covered shift"
    assert record.reviewed_by == 1
    assert record.reviewed_at == clock.now()

    logs = attendance_repo.logs_for(record.attendance_id)
    assert [(log.action, log.created_by) for log in logs] == [(SalaryAction.ADMIN_MODIFIED, 1)]


def test_upsert_overwrites_and_drops_stale_logs(attendance_service, attendance_repo):
    marked = attendance_service.mark_attendance(ASHA, 1, now=at(12, 3))

    record = attendance_service.upsert_attendance(
        "EMP000001", WORK_DAY, 1, "APPROVED", attendance_time="2025-03-10T12:03:00+05:30", admin_user_id=1
    )
    assert record.attendance_id == marked.record.attendance_id
    assert record.late_by_minutes == 0
    assert record.warning_message == ""
    assert record.attendance_time == at(12, 3)

    record = attendance_service.upsert_attendance("EMP000001", WORK_DAY, 1, AttendanceStatus.REJECTED, admin_user_id=1)
    assert record.slot_salary == Decimal("0")
    assert attendance_repo.logs_for(record.attendance_id) == []
    assert len(attendance_repo.records) == 1


def test_upsert_without_note_clears_existing_note(attendance_service):
    attendance_service.upsert_attendance("EMP000001", WORK_DAY, 1, "PENDING", admin_note="check", admin_user_id=1)
    record = attendance_service.upsert_attendance("EMP000001", WORK_DAY, 1, "APPROVED", admin_user_id=1)
    assert record.admin_note == ""


def test_upsert_accepts_inactive_slot(attendance_service, slot_service):
    slot_service.update_slot(3, is_active=False)
    record = attendance_service.upsert_attendance("EMP000001", WORK_DAY, 3, "APPROVED", admin_user_id=1)
    assert record.slot_snapshot.name == "Evening"


@pytest.mark.parametrize("status", ["ABSENT", "LATE", ""])
def test_upsert_rejects_non_stored_status(attendance_service, status):
    with pytest.raises(ValidationError):
        attendance_service.upsert_attendance("EMP000001", WORK_DAY, 1, status, admin_user_id=1)


@pytest.mark.parametrize("code, slot_id", [("EMP999999", 1), ("ADMIN", 1), ("EMP000001", 42)])
def test_upsert_unknown_employee_or_slot(attendance_service, code, slot_id):
    with pytest.raises(NotFoundError):
        attendance_service.upsert_attendance(code, WORK_DAY, slot_id, "APPROVED", admin_user_id=1)


def test_upsert_rejects_bad_timestamp(attendance_service):
    with pytest.raises(ValidationError):
        attendance_service.upsert_attendance(
            "EMP000001", WORK_DAY, 1, "APPROVED", attendance_time="noon", admin_user_id=1
        )


def test_clear_purges_logs_and_is_idempotent(attendance_service, attendance_repo):
    attendance_service.mark_attendance(ASHA, 1, now=at(11, 55))
    attendance_service.mark_attendance(ASHA, 2, now=at(17, 0))

    result = attendance_service.clear_attendance("EMP000001", WORK_DAY)
    assert (result.deleted_records, result.deleted_logs) == (2, 2)
    assert result.deleted_any
    assert attendance_repo.records == {}
    assert attendance_repo.logs == []

    again = attendance_service.clear_attendance("EMP000001", WORK_DAY)
    assert not again.deleted_any


def test_clear_single_slot(attendance_service, attendance_repo):
    attendance_service.mark_attendance(ASHA, 1, now=at(11, 55))
    kept = attendance_service.mark_attendance(ASHA, 2, now=at(17, 0))

    result = attendance_service.clear_attendance("EMP000001", WORK_DAY, 1)
    assert result.deleted_records == 1
    assert list(attendance_repo.records) == [kept.record.attendance_id]


def test_delete_keeps_salary_logs(attendance_service, attendance_repo):
    attendance_service.mark_attendance(ASHA, 1, now=at(11, 55))

    result = attendance_service.delete_attendance("EMP000001", WORK_DAY, 1)
    assert (result.deleted_records, result.deleted_logs) == (1, 0)
    assert attendance_repo.records == {}
    assert len(attendance_repo.logs) == 1

    assert not attendance_service.delete_attendance("EMP000001", WORK_DAY, 1).deleted_any


def test_clear_unknown_employee(attendance_service):
    with pytest.raises(NotFoundError):
        attendance_service.clear_attendance("NOPE", WORK_DAY)
