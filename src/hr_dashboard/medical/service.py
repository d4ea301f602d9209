from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..common.locks import KeyedLocks
from ..common.pagination import Page, build_page, page_bounds
from ..common.validators import (
    optional_text,
    require_bool,
    require_enum,
    require_non_empty,
    require_non_negative_int,
    require_positive_int,
)
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import Beneficiary, MedicalCategory, PaymentType
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from . import limits
from .limits import LimitPolicy
from .model import (
    UPDATABLE_FIELDS,
    EmployeeLimitSummary,
    EmployeeMedicalLimit,
    MedicalBenefitRecord,
    MedicalCategoryLimit,
    NewMedicalClaim,
)
from .repository import MedicalRepository

logger = logging.getLogger(__name__)


class MedicalBenefitsService:
    """Use case: medical claims, category limits and usage summaries.

    Limits are checked against totals read just before the write. Writes for
    the same employee are serialised within this process so two requests
    cannot both pass a check against the same stale total.
    """

    def __init__(
        self,
        medical: MedicalRepository,
        employees: EmployeeRepository,
        *,
        policy: Optional[LimitPolicy] = None,
        locks: Optional[KeyedLocks] = None,
    ):
        self._medical = medical
        self._employees = employees
        self._policy = policy or LimitPolicy()
        self._locks = locks or KeyedLocks()

    @property
    def policy(self) -> LimitPolicy:
        return self._policy

    # -------- Claims --------
    def list_records(
        self,
        *,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        employee_id: Optional[str] = None,
        year: Optional[int] = None,
        paid: Optional[bool] = None,
        category=None,
    ) -> Page[MedicalBenefitRecord]:
        offset, limit = page_bounds(page, page_size)
        if category is not None:
            category = require_enum(MedicalCategory, category, "Medical category")
        rows, total = self._medical.list_records(
            offset=offset,
            limit=limit,
            employee_id=employee_id or None,
            year=int(year) if year else None,
            paid=paid,
            category=category,
        )
        return build_page(list(rows), page=page, page_size=page_size, total_count=total)

    def get_record(self, record_id: str) -> MedicalBenefitRecord:
        record = self._medical.get_record(record_id)
        if not record:
            raise NotFoundError("Medical benefit record not found")
        return record

    def get_employee_annual_total(self, employee_id: str, year: int) -> int:
        return limits.total_cost(self._medical.list_for_employee_year(employee_id=employee_id, year=year))

    def get_employee_category_total(self, employee_id: str, year: int, category: MedicalCategory) -> int:
        records = self._medical.list_for_employee_year(employee_id=employee_id, year=year, category=category)
        return limits.total_cost(records)

    def _configured_limit(self, category: MedicalCategory) -> Optional[int]:
        configured = self._medical.get_category_limit(category)
        return configured.limit if configured else None

    def create_record(
        self,
        *,
        employee_id: str,
        date,
        beneficiary,
        medical_category,
        description: str,
        cost_pkr,
        receipt: str = "",
        payment_type=None,
        paid: bool = False,
    ) -> MedicalBenefitRecord:
        claim = NewMedicalClaim(
            employee_id=require_non_empty(employee_id, "Employee"),
            date=parse_iso_date(date),
            beneficiary=require_enum(Beneficiary, beneficiary, "Beneficiary"),
            medical_category=require_enum(MedicalCategory, medical_category, "Medical category"),
            description=require_non_empty(description, "Description"),
            cost_pkr=require_positive_int(cost_pkr, "Cost"),
            receipt=optional_text(receipt, "Receipt"),
            paid=require_bool(paid, "Paid"),
            payment_type=require_enum(PaymentType, payment_type or PaymentType.REIMBURSE, "Payment type"),
        )
        if not self._employees.get_brief(claim.employee_id):
            raise NotFoundError("Employee not found")

        year = claim.date.year
        with self._locks.hold(claim.employee_id):
            annual_used = self.get_employee_annual_total(claim.employee_id, year)
            category_limit = self._configured_limit(claim.medical_category)
            category_used = 0
            if category_limit is not None:
                category_used = self.get_employee_category_total(claim.employee_id, year, claim.medical_category)
            limits.check_new_claim(
                self._policy,
                amount=claim.cost_pkr,
                annual_used=annual_used,
                category=claim.medical_category,
                category_used=category_used,
                category_limit=category_limit,
            )

            record_id = self._medical.create_record(claim)
            logger.info("Created medical claim %s for employee %s (Rs. %s)", record_id, claim.employee_id, claim.cost_pkr)
            self._refresh_employee_limits(claim.employee_id, year)

        return self.get_record(record_id)

    @staticmethod
    def _clean_updates(updates: dict) -> dict:
        unknown = set(updates) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown claim field(s): {', '.join(sorted(unknown))}")

        out: dict = {}
        for key, value in updates.items():
            if key == "date":
                out[key] = parse_iso_date(value)
            elif key == "beneficiary":
                out[key] = require_enum(Beneficiary, value, "Beneficiary")
            elif key == "medical_category":
                if value in (None, ""):
                    continue
                out[key] = require_enum(MedicalCategory, value, "Medical category")
            elif key == "description":
                out[key] = require_non_empty(value, "Description")
            elif key == "cost_pkr":
                if value is None:
                    continue
                out[key] = require_positive_int(value, "Cost")
            elif key == "receipt":
                out[key] = optional_text(value, "Receipt")
            elif key == "paid":
                out[key] = require_bool(value, "Paid")
            elif key == "payment_type":
                out[key] = require_enum(PaymentType, value, "Payment type")
        return out

    def update_record(self, record_id: str, updates: dict) -> MedicalBenefitRecord:
        changes = self._clean_updates(dict(updates))
        employee_id = self.get_record(record_id).employee_id

        with self._locks.hold(employee_id):
            # Re-read under the lock; another edit of this claim may have landed meanwhile.
            record = self.get_record(record_id)
            # Usage year comes from the stored claim date, even when the edit moves the date.
            year = record.date.year

            if "cost_pkr" in changes or "medical_category" in changes:
                new_amount = changes.get("cost_pkr", record.cost_pkr)
                new_category = changes.get("medical_category", record.medical_category)

                annual_total = self.get_employee_annual_total(record.employee_id, year)
                category_limit = self._configured_limit(new_category)
                category_total = 0
                if category_limit is not None:
                    category_total = self.get_employee_category_total(record.employee_id, year, new_category)
                limits.check_updated_claim(
                    self._policy,
                    record=record,
                    amount=new_amount,
                    annual_total=annual_total,
                    category=new_category,
                    category_total=category_total,
                    category_limit=category_limit,
                    category_supplied="medical_category" in changes,
                )

            if changes and not self._medical.update_record(record_id, changes):
                raise NotFoundError("Medical benefit record not found")
            self._refresh_employee_limits(record.employee_id, year)

        return self.get_record(record_id)

    def update_payment_status(self, record_id: str, paid: bool) -> MedicalBenefitRecord:
        return self.update_record(record_id, {"paid": paid})

    def delete_record(self, record_id: str) -> None:
        employee_id = self.get_record(record_id).employee_id
        with self._locks.hold(employee_id):
            record = self.get_record(record_id)
            if not self._medical.soft_delete_record(record_id):
                raise NotFoundError("Medical benefit record not found")
            logger.info("Deleted medical claim %s for employee %s", record_id, record.employee_id)
            self._refresh_employee_limits(record.employee_id, record.date.year)

    # -------- Category limits --------
    def list_category_limits(self) -> Sequence[MedicalCategoryLimit]:
        return self._medical.list_category_limits()

    def get_category_limit(self, category) -> Optional[MedicalCategoryLimit]:
        return self._medical.get_category_limit(require_enum(MedicalCategory, category, "Medical category"))

    def upsert_category_limit(self, *, medical_category, limit) -> MedicalCategoryLimit:
        category = require_enum(MedicalCategory, medical_category, "Medical category")
        amount = require_non_negative_int(limit, "Limit")

        existing = self._medical.get_category_limit(category)
        if existing:
            updated = self._medical.update_category_limit(existing.id, amount)
            if not updated:
                raise NotFoundError("Category limit not found")
            return updated
        return self._medical.create_category_limit(category, amount)

    def delete_category_limit(self, medical_category) -> None:
        category = require_enum(MedicalCategory, medical_category, "Medical category")
        if not self._medical.soft_delete_category_limit(category):
            raise NotFoundError("Category limit not found")

    def _category_limit_map(self) -> dict:
        return {cl.medical_category: cl.limit for cl in self._medical.list_category_limits()}

    # -------- Usage snapshot --------
    def get_employee_limits(self, employee_id: str, year: int) -> Sequence[EmployeeMedicalLimit]:
        return self._medical.list_employee_limits(employee_id=employee_id, year=int(year))

    def recompute_employee_limits(self, employee_id: str, year: int) -> None:
        """Rewrite the cached snapshot for one employee/year from the claim rows."""
        category_limits = self._category_limit_map()
        records = self._medical.list_for_employee_year(employee_id=employee_id, year=year)
        cached = [row.medical_category for row in self._medical.list_employee_limits(employee_id=employee_id, year=year)]

        for category, limit, remaining in limits.snapshot_values(records, category_limits, cached_categories=cached):
            self._medical.save_employee_limit(
                employee_id=employee_id,
                year=year,
                category=category,
                limit=limit,
                remaining=remaining,
            )

    def _refresh_employee_limits(self, employee_id: str, year: int) -> None:
        # The claim write already succeeded; a stale snapshot is fixed by the next mutation.
        try:
            self.recompute_employee_limits(employee_id, year)
        except (DomainError, ValueError, KeyError):
            logger.exception("Error updating medical limits for employee %s (%s)", employee_id, year)

    # -------- Summaries --------
    def get_employee_limit_summary(self, employee_id: str, year: int) -> EmployeeLimitSummary:
        year = int(year)
        records = list(self._medical.list_for_employee_year(employee_id=employee_id, year=year))
        category_limits = self._category_limit_map()

        employee = records[0].employee if records and records[0].employee else None
        if employee is None:
            employee = self._employees.get_brief(employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")

        return limits.build_summary(
            self._policy,
            employee=employee,
            year=year,
            records=records,
            category_limits=category_limits,
        )

    def get_all_employee_limit_summaries(self, year: int) -> list[EmployeeLimitSummary]:
        summaries: list[EmployeeLimitSummary] = []
        for employee in self._employees.list_brief():
            try:
                summaries.append(self.get_employee_limit_summary(employee.id, year))
            except (DomainError, ValueError, KeyError) as e:
                logger.warning("Using empty medical summary for employee %s: %s", employee.id, e)
                summaries.append(limits.empty_summary(self._policy, employee=employee, year=int(year)))
        return summaries
