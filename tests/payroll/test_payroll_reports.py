from datetime import date, datetime
from decimal import Decimal

import pytest

from src.slot_payroll.slot_payroll.attendance.model import AttendanceRecord, SlotSnapshot
from src.slot_payroll.slot_payroll.attendance.query import AttendanceQuery
from src.slot_payroll.slot_payroll.core.enums import AttendanceStatus
from src.slot_payroll.slot_payroll.core.exceptions import NotFoundError, ValidationError
from src.slot_payroll.slot_payroll.payroll.service import day_status

DAY = date(2025, 3, 10)


def at(day, hour, minute):
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture
def ledger(attendance_service, attendance_repo):
    """Asha: approved morning + pending afternoon on the 10th, approved morning on the 11th.
    Ravi: rejected morning on the 10th. Inactive EMP000003: approved morning on the 10th."""
    attendance_service.mark_attendance(2, 1, now=at(DAY, 11, 0))
    attendance_service.mark_attendance(2, 2, now=at(DAY, 17, 3))
    attendance_service.mark_attendance(2, 1, now=at(date(2025, 3, 11), 10, 30))
    attendance_service.mark_attendance(3, 1, now=at(DAY, 12, 30))
    attendance_service.mark_attendance(4, 1, now=at(DAY, 11, 0))
    return attendance_repo


def _records(*statuses):
    snap = SlotSnapshot(slot_id=1, name="Morning", start_minutes=600, end_minutes=720, salary=Decimal("200"))
    return [
        AttendanceRecord(
            attendance_id=i,
            user_id=2,
            attendance_date=DAY,
            slot_id=1,
            attendance_time=at(DAY, 11, 0),
            status=s,
            slot_salary=Decimal("0"),
            slot_snapshot=snap,
        )
        for i, s in enumerate(statuses, start=1)
    ]


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ((), AttendanceStatus.ABSENT),
        ((AttendanceStatus.APPROVED, AttendanceStatus.APPROVED), AttendanceStatus.APPROVED),
        ((AttendanceStatus.APPROVED, AttendanceStatus.PENDING), AttendanceStatus.PENDING),
        ((AttendanceStatus.REJECTED, AttendanceStatus.PENDING), AttendanceStatus.PENDING),
        ((AttendanceStatus.APPROVED, AttendanceStatus.REJECTED), AttendanceStatus.REJECTED),
        ((AttendanceStatus.REJECTED,), AttendanceStatus.REJECTED),
    ],
)
def test_day_status_rollup(statuses, expected):
    assert day_status(_records(*statuses)) == expected


def test_daily_report_lists_active_employees_with_absent_rows(report_service, ledger):
    rows = {r.employee_code: r for r in report_service.daily_report(DAY)}

    assert set(rows) == {"EMP000001", "EMP000002"}
    assert rows["EMP000001"].status == AttendanceStatus.PENDING
    assert rows["EMP000001"].slots_count == 2
    assert rows["EMP000001"].daily_salary == Decimal("200")
    assert rows["EMP000002"].status == AttendanceStatus.REJECTED
    assert rows["EMP000002"].daily_salary == Decimal("0")

    quiet = {r.employee_code: r for r in report_service.daily_report(date(2025, 3, 12))}
    assert all(r.status == AttendanceStatus.ABSENT and r.slots_count == 0 for r in quiet.values())


def test_monthly_salary_counts_by_status(report_service, ledger):
    rows = {r.employee_code: r for r in report_service.monthly_salary("2025-03")}

    asha = rows["EMP000001"]
    assert (asha.approved_slots, asha.pending_slots, asha.rejected_slots) == (2, 1, 0)
    assert asha.total_salary == Decimal("400")
    assert rows["EMP000002"].rejected_slots == 1
    assert rows["EMP000002"].total_salary == Decimal("0")

    empty = report_service.monthly_salary("2025-04")
    assert all(r.total_salary == Decimal("0") for r in empty)


def test_monthly_salary_rejects_bad_month(report_service):
    with pytest.raises(ValidationError):
        report_service.monthly_salary("March")


def test_employee_summary_covers_every_day_of_month(report_service, ledger):
    summary = report_service.employee_summary("EMP000001", "2025-03")

    assert len(summary.days) == 31
    by_day = {d.attendance_date: d for d in summary.days}
    assert by_day[DAY].status == AttendanceStatus.PENDING
    assert len(by_day[DAY].records) == 2
    assert by_day[date(2025, 3, 11)].status == AttendanceStatus.APPROVED
    assert by_day[date(2025, 3, 1)].status == AttendanceStatus.ABSENT
    assert summary.total_salary == Decimal("400")

    assert len(report_service.employee_summary("EMP000001", "2024-02").days) == 29


def test_employee_summary_unknown_employee(report_service):
    with pytest.raises(NotFoundError):
        report_service.employee_summary("ADMIN", "2025-03")


def test_salary_slip_lists_approved_records_only(report_service, ledger):
    slip = report_service.salary_slip(2, "2025-03")

    assert (slip.start_date, slip.end_date) == (date(2025, 3, 1), date(2025, 3, 31))
    assert [r.status for r in slip.records] == [AttendanceStatus.APPROVED, AttendanceStatus.APPROVED]
    assert slip.total_salary == Decimal("400")


def test_attendance_by_date_groups_per_employee_day(report_service, ledger):
    days = report_service.attendance_by_date(
        AttendanceQuery(start_date=date(2025, 3, 1), end_date=date(2025, 3, 31), user_id=2)
    )

    assert [(d.attendance_date, len(d.records)) for d in days] == [(DAY, 2), (date(2025, 3, 11), 1)]
    assert [r.slot_id for r in days[0].records] == [1, 2]
    assert days[0].daily_salary == Decimal("200")


def test_salary_proposal_from_active_slots(report_service, slot_service):
    proposal = report_service.salary_proposal(now=at(DAY, 17, 30))

    assert proposal.proposed_slots == 2
    assert proposal.proposed_salary == Decimal("400")
    assert proposal.late_by_minutes == 25

    slot_service.update_slot(2, is_active=False)
    assert report_service.salary_proposal(now=at(DAY, 17, 30)).proposed_slots == 1
