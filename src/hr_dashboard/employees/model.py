from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Optional

from ..core.enums import Designation, EmploymentStatus, JobType, UserType


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee record (pure data, no DB access)."""

    id: str
    full_name: str
    email: str
    designation: Designation
    job_type: JobType
    start_date: date
    employment_status: EmploymentStatus
    user_type: UserType = UserType.EMPLOYEE
    date_of_birth: Optional[date] = None
    end_date: Optional[date] = None
    contact_number: Optional[str] = None
    personal_email: Optional[str] = None
    home_address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    relation_to_emergency_contact: Optional[str] = None
    emergency_contact_number: Optional[str] = None
    personal_bank_name: Optional[str] = None
    bank_account_title: Optional[str] = None
    iban: Optional[str] = None
    swift_code: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class EmployeeBrief:
    """Read-model joined into listings of other entities."""

    id: str
    full_name: str
    email: str


# Columns an admin may write; id and timestamps are managed by the repository.
EDITABLE_FIELDS = tuple(
    f.name for f in fields(Employee) if f.name not in {"id", "created_at", "updated_at"}
)
DATE_FIELDS = ("date_of_birth", "start_date", "end_date")
