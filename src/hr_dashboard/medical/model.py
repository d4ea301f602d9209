from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..core.enums import Beneficiary, MedicalCategory, PaymentType
from ..employees.model import EmployeeBrief


@dataclass(frozen=True)
class MedicalBenefitRecord:
    """A claim: one medical expense for one employee, one category, one cost."""

    id: str
    employee_id: str
    date: date
    beneficiary: Beneficiary
    medical_category: MedicalCategory
    description: str
    cost_pkr: int
    receipt: str = ""
    paid: bool = False
    payment_type: PaymentType = PaymentType.REIMBURSE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    employee: Optional[EmployeeBrief] = None


@dataclass(frozen=True)
class NewMedicalClaim:
    employee_id: str
    date: date
    beneficiary: Beneficiary
    medical_category: MedicalCategory
    description: str
    cost_pkr: int
    receipt: str = ""
    paid: bool = False
    payment_type: PaymentType = PaymentType.REIMBURSE


@dataclass(frozen=True)
class MedicalCategoryLimit:
    """Global yearly ceiling for one medical category."""

    id: str
    medical_category: MedicalCategory
    limit: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class EmployeeMedicalLimit:
    """Cached usage snapshot per employee/year/category.

    Derived from the claim rows; never read back for limit checks.
    """

    id: int
    employee_id: str
    year: int
    medical_category: MedicalCategory
    limit: int
    remaining: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class CategoryUsage:
    category: MedicalCategory
    used: int
    limit: int
    remaining: int
    label: str = ""


@dataclass(frozen=True)
class EmployeeLimitSummary:
    employee_id: str
    employee_name: str
    year: int
    total_used: int
    total_limit: int
    remaining: int
    category_breakdown: List[CategoryUsage] = field(default_factory=list)


UPDATABLE_FIELDS = (
    "date",
    "beneficiary",
    "medical_category",
    "description",
    "cost_pkr",
    "receipt",
    "paid",
    "payment_type",
)
