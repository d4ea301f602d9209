from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import inclusive_day_count, parse_iso_date, utc_now
from ..common.pagination import Page, build_page, page_bounds
from ..common.validators import require_bool, require_date_order, require_enum, require_non_empty, require_positive_int
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import NotFoundError, ValidationError
from .model import UPDATABLE_FIELDS, LeaveRequest, NewLeaveRequest
from .repository import LeaveRepository


class LeaveService:
    """Use case: leave requests (pending -> approved | rejected, decided once)."""

    def __init__(self, leaves: LeaveRepository):
        self._leaves = leaves

    def list(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        search: Optional[str] = None,
    ) -> Page[LeaveRequest]:
        if status is not None:
            status = require_enum(LeaveStatus, status, "Leave status")
        offset, limit = page_bounds(page, page_size)
        rows, total = self._leaves.list_page(
            offset=offset,
            limit=limit,
            status=status,
            search=(search or "").strip() or None,
        )
        return build_page(list(rows), page=page, page_size=page_size, total_count=total)

    def get(self, request_id: str) -> LeaveRequest:
        leave = self._leaves.get_by_id(request_id)
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    def create(
        self,
        *,
        employee_id: str,
        leave_type,
        start_date,
        end_date,
        reason: str,
        partial_leave: bool = False,
        deadline_extended: bool = False,
        num_days: Optional[int] = None,
    ) -> LeaveRequest:
        request = NewLeaveRequest(
            employee_id=require_non_empty(employee_id, "Employee"),
            leave_type=require_enum(LeaveType, leave_type, "Leave type"),
            start_date=parse_iso_date(start_date),
            end_date=parse_iso_date(end_date),
            reason=require_non_empty(reason, "Reason"),
            partial_leave=require_bool(partial_leave, "Partial leave"),
            deadline_extended=require_bool(deadline_extended, "Deadline extended"),
            num_days=num_days,
        )
        require_date_order(request.start_date, request.end_date)

        days = (
            require_positive_int(num_days, "Number of days")
            if num_days is not None
            else inclusive_day_count(request.start_date, request.end_date)
        )
        request_id = self._leaves.create(request, num_days=days)
        return self.get(request_id)

    def update(self, request_id: str, updates: dict) -> LeaveRequest:
        unknown = set(updates) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown leave field(s): {', '.join(sorted(unknown))}")

        values = dict(updates)
        if "leave_type" in values:
            values["leave_type"] = require_enum(LeaveType, values["leave_type"], "Leave type")
        if "reason" in values:
            values["reason"] = require_non_empty(values["reason"], "Reason")
        for key in ("partial_leave", "deadline_extended"):
            if key in values:
                values[key] = require_bool(values[key], key.replace("_", " ").capitalize())
        if "num_days" in values:
            values["num_days"] = require_positive_int(values["num_days"], "Number of days")
        for key in ("start_date", "end_date"):
            if key in values:
                values[key] = parse_iso_date(values[key])

        if "start_date" in values or "end_date" in values:
            existing = self.get(request_id)
            start = values.get("start_date", existing.start_date)
            end = values.get("end_date", existing.end_date)
            require_date_order(start, end)
            values["num_days"] = inclusive_day_count(start, end)

        if not self._leaves.update(request_id, values):
            raise NotFoundError("Leave request not found")
        return self.get(request_id)

    def _decide(self, request_id: str, status: LeaveStatus) -> LeaveRequest:
        leave = self.get(request_id)
        if leave.leave_status != LeaveStatus.PENDING:
            raise ValidationError("Leave request has already been decided")
        if not self._leaves.decide(request_id, status=status, decided_at=utc_now()):
            raise ValidationError("Leave request has already been decided")
        return self.get(request_id)

    def approve(self, request_id: str) -> LeaveRequest:
        return self._decide(request_id, LeaveStatus.APPROVED)

    def reject(self, request_id: str) -> LeaveRequest:
        return self._decide(request_id, LeaveStatus.REJECTED)

    def delete(self, request_id: str) -> None:
        if not self._leaves.soft_delete(request_id):
            raise NotFoundError("Leave request not found")
