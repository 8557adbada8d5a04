from datetime import datetime
from decimal import Decimal

import pytest

from src.slot_payroll.slot_payroll.core.enums import AttendanceStatus, SalaryAction
from src.slot_payroll.slot_payroll.core.exceptions import InvalidStateError, NotFoundError


@pytest.fixture
def pending(attendance_service):
    # Morning ends 12:00; 12:03 falls inside the grace window.
    return attendance_service.mark_attendance(2, 1, now=datetime(2025, 3, 10, 12, 3)).record


def test_approve_pays_snapshot_salary_and_logs(approval_service, attendance_repo, pending, clock):
    record = approval_service.approve(pending.attendance_id, admin_user_id=1, admin_note="traffic")

    assert record.status == AttendanceStatus.APPROVED
    assert record.slot_salary == Decimal("200")
    assert record.warning_message == ""
    assert record.admin_note == "traffic"
    assert record.reviewed_by == 1
    assert record.reviewed_at == clock.now()

    logs = attendance_repo.logs_for(pending.attendance_id)
    assert [(log.action, log.amount, log.created_by) for log in logs] == [
        (SalaryAction.ADMIN_APPROVED, Decimal("200"), 1)
    ]


def test_approve_uses_snapshot_not_current_slot(approval_service, slot_service, pending):
    slot_service.update_slot(1, salary=500)
    assert approval_service.approve(pending.attendance_id, admin_user_id=1).slot_salary == Decimal("200")


def test_reject_zeroes_salary_without_log(approval_service, attendance_repo, pending):
    record = approval_service.reject(pending.attendance_id, admin_user_id=1)

    assert record.status == AttendanceStatus.REJECTED
    assert record.slot_salary == Decimal("0")
    assert record.admin_note == ""
    assert attendance_repo.logs == []


def test_decision_is_final(approval_service, pending):
    approval_service.approve(pending.attendance_id, admin_user_id=1)

    with pytest.raises(InvalidStateError, match="status APPROVED"):
        approval_service.approve(pending.attendance_id, admin_user_id=1)
    with pytest.raises(InvalidStateError):
        approval_service.reject(pending.attendance_id, admin_user_id=1)


def test_auto_rejected_mark_cannot_be_approved(approval_service, attendance_service):
    late = attendance_service.mark_attendance(2, 1, now=datetime(2025, 3, 10, 12, 30)).record

    with pytest.raises(InvalidStateError, match="Only PENDING"):
        approval_service.approve(late.attendance_id, admin_user_id=1)


def test_unknown_attendance(approval_service):
    with pytest.raises(NotFoundError):
        approval_service.approve(404, admin_user_id=1)
    with pytest.raises(NotFoundError):
        approval_service.reject(404, admin_user_id=1)


def test_lost_race_reports_invalid_state(approval_service, attendance_repo, pending):
    original = attendance_repo.decide_pending

    def decided_elsewhere(**kwargs):
        original(
            attendance_id=kwargs["attendance_id"],
            status=AttendanceStatus.REJECTED,
            reviewed_by=9,
            reviewed_at=kwargs["reviewed_at"],
        )
        return original(**kwargs)

    attendance_repo.decide_pending = decided_elsewhere

    with pytest.raises(InvalidStateError):
        approval_service.approve(pending.attendance_id, admin_user_id=1)
    assert attendance_repo.logs == []


def test_rejected_decision_is_final(approval_service, attendance_repo, pending):
    approval_service.reject(pending.attendance_id, admin_user_id=1)

    with pytest.raises(InvalidStateError, match="status REJECTED"):
        approval_service.approve(pending.attendance_id, admin_user_id=1)
    with pytest.raises(InvalidStateError, match="status REJECTED"):
        approval_service.reject(pending.attendance_id, admin_user_id=1)

    assert attendance_repo.get_by_id(pending.attendance_id).slot_salary == Decimal("0")
    assert attendance_repo.logs == []
