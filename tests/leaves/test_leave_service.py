from __future__ import annotations

from datetime import date

import pytest

from fakes import InMemoryEmployees, InMemoryLeaves, make_employee

from hr_dashboard.core.enums import LeaveStatus, LeaveType
from hr_dashboard.core.exceptions import NotFoundError, ValidationError
from hr_dashboard.leaves.service import LeaveService


@pytest.fixture
def svc():
    return LeaveService(InMemoryLeaves(InMemoryEmployees([make_employee("emp-1")])))


def _create(svc, **overrides):
    values = dict(
        employee_id="emp-1",
        leave_type="sick",
        start_date="2025-06-02",
        end_date="2025-06-04",
        reason="Flu",
    )
    values.update(overrides)
    return svc.create(**values)


def test_create_starts_pending_with_inclusive_day_count(svc):
    leave = _create(svc)

    assert leave.leave_status == LeaveStatus.PENDING
    assert leave.leave_type == LeaveType.SICK
    assert leave.num_days == 3
    assert leave.employee.full_name == "Ayesha Khan"


def test_create_keeps_explicit_day_count(svc):
    leave = _create(svc, num_days=1, partial_leave=True)

    assert leave.num_days == 1
    assert leave.partial_leave is True


def test_create_rejects_end_before_start(svc):
    with pytest.raises(ValidationError):
        _create(svc, start_date="2025-06-04", end_date="2025-06-02")


def test_create_rejects_bad_date(svc):
    with pytest.raises(ValidationError):
        _create(svc, start_date="next tuesday")


def test_update_recomputes_days_when_dates_change(svc):
    leave = _create(svc)

    updated = svc.update(leave.id, {"end_date": "2025-06-10"})

    assert updated.end_date == date(2025, 6, 10)
    assert updated.num_days == 9


def test_update_rejects_unknown_field(svc):
    leave = _create(svc)
    with pytest.raises(ValidationError):
        svc.update(leave.id, {"leave_status": "approved"})


def test_approve_stamps_decision(svc):
    leave = _create(svc)

    approved = svc.approve(leave.id)

    assert approved.leave_status == LeaveStatus.APPROVED
    assert approved.decided_at is not None


def test_decided_request_cannot_be_decided_again(svc):
    leave = _create(svc)
    svc.reject(leave.id)

    with pytest.raises(ValidationError):
        svc.approve(leave.id)
    assert svc.get(leave.id).leave_status == LeaveStatus.REJECTED


def test_list_filters_by_status(svc):
    first = _create(svc)
    _create(svc, reason="Dentist")
    svc.approve(first.id)

    page = svc.list(status="pending")

    assert [leave.reason for leave in page.items] == ["Dentist"]
    assert page.pagination.total_count == 1


def test_list_rejects_unknown_status(svc):
    with pytest.raises(ValidationError):
        svc.list(status="archived")


def test_delete_hides_request(svc):
    leave = _create(svc)
    svc.delete(leave.id)

    with pytest.raises(NotFoundError):
        svc.get(leave.id)
    with pytest.raises(NotFoundError):
        svc.delete(leave.id)
