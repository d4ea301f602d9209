from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee, EmployeeBrief


class EmployeeRepository(Protocol):
    """Repository interface for employees.

    Services depend on this interface, not on a concrete database.
    Soft-deleted rows are invisible to every read.
    """

    def create(self, values: dict) -> Employee:
        raise NotImplementedError

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_brief(self, employee_id: str) -> Optional[EmployeeBrief]:
        raise NotImplementedError

    def list_page(self, *, offset: int, limit: int, search: Optional[str] = None) -> tuple[Sequence[dict], int]:
        """Return (UI rows, total count) ordered by newest first."""

        raise NotImplementedError

    def list_brief(self) -> Sequence[EmployeeBrief]:
        raise NotImplementedError

    def update(self, employee_id: str, values: dict) -> Optional[Employee]:
        raise NotImplementedError

    def soft_delete(self, employee_id: str) -> bool:
        raise NotImplementedError
