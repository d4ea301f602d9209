from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import MedicalCategory
from .model import EmployeeMedicalLimit, MedicalBenefitRecord, MedicalCategoryLimit, NewMedicalClaim


class MedicalRepository(Protocol):
    """Claims, category limits and the cached usage snapshot.

    Every read skips soft-deleted rows.
    """

    # Claims
    def list_records(
        self,
        *,
        offset: int,
        limit: int,
        employee_id: Optional[str] = None,
        year: Optional[int] = None,
        paid: Optional[bool] = None,
        category: Optional[MedicalCategory] = None,
    ) -> tuple[Sequence[MedicalBenefitRecord], int]:
        """Return (page of claims newest date first, total count)."""

        raise NotImplementedError

    def list_for_employee_year(
        self,
        *,
        employee_id: str,
        year: int,
        category: Optional[MedicalCategory] = None,
    ) -> Sequence[MedicalBenefitRecord]:
        raise NotImplementedError

    def get_record(self, record_id: str) -> Optional[MedicalBenefitRecord]:
        raise NotImplementedError

    def create_record(self, claim: NewMedicalClaim) -> str:
        raise NotImplementedError

    def update_record(self, record_id: str, values: dict) -> bool:
        raise NotImplementedError

    def soft_delete_record(self, record_id: str) -> bool:
        raise NotImplementedError

    # Category limits
    def list_category_limits(self) -> Sequence[MedicalCategoryLimit]:
        raise NotImplementedError

    def get_category_limit(self, category: MedicalCategory) -> Optional[MedicalCategoryLimit]:
        raise NotImplementedError

    def create_category_limit(self, category: MedicalCategory, limit: int) -> MedicalCategoryLimit:
        raise NotImplementedError

    def update_category_limit(self, limit_id: str, limit: int) -> Optional[MedicalCategoryLimit]:
        raise NotImplementedError

    def soft_delete_category_limit(self, category: MedicalCategory) -> bool:
        raise NotImplementedError

    # Usage snapshot
    def list_employee_limits(self, *, employee_id: str, year: int) -> Sequence[EmployeeMedicalLimit]:
        raise NotImplementedError

    def save_employee_limit(
        self,
        *,
        employee_id: str,
        year: int,
        category: MedicalCategory,
        limit: int,
        remaining: int,
    ) -> None:
        """Update the snapshot row for (employee, year, category), inserting it if absent."""

        raise NotImplementedError
