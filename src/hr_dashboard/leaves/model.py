from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType
from ..employees.model import EmployeeBrief


@dataclass(frozen=True)
class LeaveRequest:
    id: str
    employee_id: str
    leave_status: LeaveStatus
    leave_type: LeaveType
    start_date: date
    end_date: date
    num_days: int
    reason: Optional[str] = None
    partial_leave: bool = False
    deadline_extended: bool = False
    decided_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    employee: Optional[EmployeeBrief] = None


@dataclass(frozen=True)
class NewLeaveRequest:
    employee_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    partial_leave: bool = False
    deadline_extended: bool = False
    num_days: Optional[int] = None


UPDATABLE_FIELDS = (
    "employee_id",
    "leave_type",
    "start_date",
    "end_date",
    "reason",
    "partial_leave",
    "deadline_extended",
    "num_days",
)
