"""Medical benefit limit accounting.

Pure functions: callers read the claim rows and configured limits, these
functions sum and compare. Two ceilings apply to every claim at once:

- the annual ceiling, one amount per employee per year across all categories;
- the category ceiling, configured per medical category. A category with no
  configured limit is not checked at all.

Usage is always recomputed from the non-deleted claim rows; the cached
EmployeeMedicalLimit snapshot is output only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional

from ..common.formatting import format_enum_value, format_pkr
from ..core.constants import DEFAULT_ANNUAL_MEDICAL_LIMIT_PKR
from ..core.enums import MedicalCategory
from ..core.exceptions import LimitExceededError
from ..employees.model import EmployeeBrief
from .model import CategoryUsage, EmployeeLimitSummary, MedicalBenefitRecord


@dataclass(frozen=True)
class LimitPolicy:
    annual_limit: int = DEFAULT_ANNUAL_MEDICAL_LIMIT_PKR


def total_cost(records: Iterable[MedicalBenefitRecord]) -> int:
    return sum(int(r.cost_pkr) for r in records)


def category_totals(records: Iterable[MedicalBenefitRecord]) -> Dict[MedicalCategory, int]:
    """Sum cost per category, in order of first appearance."""
    totals: Dict[MedicalCategory, int] = {}
    for r in records:
        totals[r.medical_category] = totals.get(r.medical_category, 0) + int(r.cost_pkr)
    return totals


def check_annual_limit(policy: LimitPolicy, *, amount: int, used: int, updating: bool = False) -> None:
    if used + amount <= policy.annual_limit:
        return
    if updating:
        message = (
            "Updated amount would exceed annual limit. "
            f"Employee has already used {format_pkr(used)} of {format_pkr(policy.annual_limit)} limit."
        )
    else:
        message = (
            f"Claim amount ({format_pkr(amount)}) would exceed annual limit. "
            f"Employee has already used {format_pkr(used)} of {format_pkr(policy.annual_limit)} limit."
        )
    raise LimitExceededError(message, amount=amount, used=used, limit=policy.annual_limit)


def check_category_limit(
    *,
    category: MedicalCategory,
    amount: int,
    used: int,
    limit: Optional[int],
    updating: bool = False,
) -> None:
    if limit is None or used + amount <= limit:
        return
    if updating:
        message = f"Updated amount would exceed category limit for {category.value}."
    else:
        message = (
            f"Claim amount ({format_pkr(amount)}) would exceed category limit. "
            f"Employee has already used {format_pkr(used)} of {format_pkr(limit)} limit for {category.value}."
        )
    raise LimitExceededError(message, amount=amount, used=used, limit=limit, category=category.value)


def annual_used_for_update(record: MedicalBenefitRecord, annual_total: int) -> int:
    """Annual usage with the edited claim's own prior cost taken out."""
    return annual_total - int(record.cost_pkr)


def category_used_for_update(record: MedicalBenefitRecord, category_total: int, *, category_supplied: bool) -> int:
    """Category usage for an edit.

    The prior cost only comes off when the edit does not supply a category.
    An edit that re-sends the same category therefore counts the claim
    against itself once. Kept as-is; see DESIGN.md.
    """
    return category_total - (0 if category_supplied else int(record.cost_pkr))


def check_new_claim(
    policy: LimitPolicy,
    *,
    amount: int,
    annual_used: int,
    category: MedicalCategory,
    category_used: int,
    category_limit: Optional[int],
) -> None:
    check_annual_limit(policy, amount=amount, used=annual_used)
    check_category_limit(category=category, amount=amount, used=category_used, limit=category_limit)


def check_updated_claim(
    policy: LimitPolicy,
    *,
    record: MedicalBenefitRecord,
    amount: int,
    annual_total: int,
    category: MedicalCategory,
    category_total: int,
    category_limit: Optional[int],
    category_supplied: bool,
) -> None:
    """Re-check both ceilings for an edit of ``record``.

    The totals passed in still include the record's stored cost.
    """
    check_annual_limit(policy, amount=amount, used=annual_used_for_update(record, annual_total), updating=True)
    check_category_limit(
        category=category,
        amount=amount,
        used=category_used_for_update(record, category_total, category_supplied=category_supplied),
        limit=category_limit,
        updating=True,
    )


def build_category_breakdown(
    records: Iterable[MedicalBenefitRecord],
    category_limits: Mapping[MedicalCategory, int],
) -> list[CategoryUsage]:
    out: list[CategoryUsage] = []
    for category, used in category_totals(records).items():
        limit = int(category_limits.get(category, 0))
        out.append(
            CategoryUsage(
                category=category,
                used=used,
                limit=limit,
                remaining=max(0, limit - used),
                label=format_enum_value(category.value),
            )
        )
    return out


def build_summary(
    policy: LimitPolicy,
    *,
    employee: EmployeeBrief,
    year: int,
    records: Iterable[MedicalBenefitRecord],
    category_limits: Mapping[MedicalCategory, int],
) -> EmployeeLimitSummary:
    records = list(records)
    used = total_cost(records)
    return EmployeeLimitSummary(
        employee_id=employee.id,
        employee_name=employee.full_name,
        year=int(year),
        total_used=used,
        total_limit=policy.annual_limit,
        remaining=max(0, policy.annual_limit - used),
        category_breakdown=build_category_breakdown(records, category_limits),
    )


def empty_summary(policy: LimitPolicy, *, employee: EmployeeBrief, year: int) -> EmployeeLimitSummary:
    return EmployeeLimitSummary(
        employee_id=employee.id,
        employee_name=employee.full_name,
        year=int(year),
        total_used=0,
        total_limit=policy.annual_limit,
        remaining=policy.annual_limit,
        category_breakdown=[],
    )


def snapshot_values(
    records: Iterable[MedicalBenefitRecord],
    category_limits: Mapping[MedicalCategory, int],
    *,
    cached_categories: Iterable[MedicalCategory] = (),
) -> list[tuple[MedicalCategory, int, int]]:
    """(category, limit, remaining) rows to write into the usage snapshot.

    Categories that already have a cached row but no remaining claims are
    rewritten with zero usage so a deleted claim does not leave a stale row.
    """
    totals = category_totals(records)
    for category in cached_categories:
        totals.setdefault(category, 0)

    rows = []
    for category, used in totals.items():
        limit = int(category_limits.get(category, 0))
        rows.append((category, limit, max(0, limit - used)))
    return rows
