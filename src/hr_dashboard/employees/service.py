from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..common.pagination import Page, build_page, page_bounds
from ..common.validators import require_date_order, require_email, require_enum, require_non_empty
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import Designation, EmploymentStatus, JobType, UserType
from ..core.exceptions import NotFoundError, ValidationError
from ..documents.service import DocumentService
from .model import DATE_FIELDS, EDITABLE_FIELDS, Employee
from .repository import EmployeeRepository

_REQUIRED_ON_CREATE = ("full_name", "email", "designation", "job_type", "start_date", "employment_status")
_ENUM_FIELDS = {
    "designation": (Designation, "Designation"),
    "job_type": (JobType, "Job type"),
    "employment_status": (EmploymentStatus, "Employment status"),
    "user_type": (UserType, "User type"),
}


def _clean(values: dict, *, partial: bool) -> dict:
    unknown = set(values) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown employee field(s): {', '.join(sorted(unknown))}")

    if not partial:
        missing = [f for f in _REQUIRED_ON_CREATE if values.get(f) in (None, "")]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    out: dict = {}
    for key, value in values.items():
        if key == "full_name":
            out[key] = require_non_empty(value, "Full name")
        elif key == "email":
            out[key] = require_email(value, "Email")
        elif key in _ENUM_FIELDS:
            enum_cls, label = _ENUM_FIELDS[key]
            out[key] = require_enum(enum_cls, value, label)
        elif key in DATE_FIELDS:
            out[key] = parse_iso_date(value) if value not in (None, "") else None
        elif isinstance(value, str):
            out[key] = value.strip() or None
        else:
            out[key] = value

    if out.get("start_date") and out.get("end_date"):
        require_date_order(out["start_date"], out["end_date"], message="End date must be on or after start date")
    return out


class EmployeeService:
    """Use case: manage employee records (admin)."""

    def __init__(self, employees: EmployeeRepository, documents: Optional[DocumentService] = None):
        self._employees = employees
        self._documents = documents

    def create(self, values: dict, *, document_ids: Sequence[str] = ()) -> Employee:
        employee = self._employees.create(_clean(dict(values), partial=False))
        if document_ids and self._documents:
            self._documents.link_to_employee(employee.id, document_ids)
        return employee

    def list(self, *, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE, search: Optional[str] = None) -> Page[dict]:
        offset, limit = page_bounds(page, page_size)
        rows, total = self._employees.list_page(offset=offset, limit=limit, search=(search or "").strip() or None)
        return build_page(list(rows), page=page, page_size=page_size, total_count=total)

    def get(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def update(
        self,
        employee_id: str,
        values: dict,
        *,
        document_ids_to_link: Sequence[str] = (),
        deleted_document_ids: Sequence[str] = (),
    ) -> Employee:
        current = self.get(employee_id)
        changes = _clean(dict(values), partial=True)
        start = changes.get("start_date", current.start_date)
        end = changes.get("end_date", current.end_date)
        if start and end:
            require_date_order(start, end)

        employee = current
        if changes:
            employee = self._employees.update(employee_id, changes)
            if not employee:
                raise NotFoundError("Employee not found")

        if self._documents:
            self._documents.link_to_employee(employee_id, document_ids_to_link)
            self._documents.unlink(deleted_document_ids)
        return employee

    def delete(self, employee_id: str) -> None:
        if not self._employees.soft_delete(employee_id):
            raise NotFoundError("Employee not found")
