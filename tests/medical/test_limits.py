from __future__ import annotations

from datetime import date

import pytest

from hr_dashboard.core.enums import Beneficiary, MedicalCategory
from hr_dashboard.core.exceptions import LimitExceededError
from hr_dashboard.employees.model import EmployeeBrief
from hr_dashboard.medical import limits
from hr_dashboard.medical.limits import LimitPolicy
from hr_dashboard.medical.model import MedicalBenefitRecord

POLICY = LimitPolicy(annual_limit=400_000)


def _record(rid: str, category: MedicalCategory, cost: int) -> MedicalBenefitRecord:
    return MedicalBenefitRecord(
        id=rid,
        employee_id="emp-1",
        date=date(2025, 4, 1),
        beneficiary=Beneficiary.SELF,
        medical_category=category,
        description="visit",
        cost_pkr=cost,
    )


def test_annual_check_allows_reaching_the_limit_exactly():
    limits.check_annual_limit(POLICY, amount=10_000, used=390_000)


def test_annual_check_message_cites_used_and_limit():
    with pytest.raises(LimitExceededError) as exc:
        limits.check_annual_limit(POLICY, amount=15_000, used=390_000)

    assert str(exc.value) == (
        "Claim amount (Rs. 15,000) would exceed annual limit. "
        "Employee has already used Rs. 390,000 of Rs. 400,000 limit."
    )
    assert (exc.value.amount, exc.value.used, exc.value.limit) == (15_000, 390_000, 400_000)


def test_category_check_skipped_without_configured_limit():
    limits.check_category_limit(category=MedicalCategory.DENTAL_CARE, amount=999_999, used=0, limit=None)


def test_category_check_rejects_over_limit():
    with pytest.raises(LimitExceededError) as exc:
        limits.check_category_limit(category=MedicalCategory.DENTAL_CARE, amount=3_000, used=48_000, limit=50_000)
    assert exc.value.category == "dental_care"
    assert "Rs. 48,000 of Rs. 50,000 limit for dental_care" in str(exc.value)


def test_new_claim_checks_annual_before_category():
    with pytest.raises(LimitExceededError) as exc:
        limits.check_new_claim(
            POLICY,
            amount=20_000,
            annual_used=390_000,
            category=MedicalCategory.DENTAL_CARE,
            category_used=48_000,
            category_limit=50_000,
        )
    assert exc.value.category is None
    assert "annual limit" in str(exc.value)


def test_updated_claim_subtracts_own_cost_from_annual_total():
    record = _record("r1", MedicalCategory.CONSULTATION, 50_000)
    # 400,000 used in total, 50,000 of it is this claim; raising it to 50,000 again is fine.
    limits.check_updated_claim(
        POLICY,
        record=record,
        amount=50_000,
        annual_total=400_000,
        category=MedicalCategory.CONSULTATION,
        category_total=50_000,
        category_limit=None,
        category_supplied=False,
    )


def test_updated_claim_with_category_supplied_counts_own_cost_twice():
    record = _record("r1", MedicalCategory.DENTAL_CARE, 30_000)
    with pytest.raises(LimitExceededError) as exc:
        limits.check_updated_claim(
            POLICY,
            record=record,
            amount=30_000,
            annual_total=30_000,
            category=MedicalCategory.DENTAL_CARE,
            category_total=30_000,
            category_limit=50_000,
            category_supplied=True,
        )
    assert str(exc.value) == "Updated amount would exceed category limit for dental_care."


def test_updated_claim_without_category_subtracts_own_cost():
    record = _record("r1", MedicalCategory.DENTAL_CARE, 30_000)
    limits.check_updated_claim(
        POLICY,
        record=record,
        amount=30_000,
        annual_total=30_000,
        category=MedicalCategory.DENTAL_CARE,
        category_total=30_000,
        category_limit=50_000,
        category_supplied=False,
    )


def test_build_summary_groups_by_category():
    records = [
        _record("r1", MedicalCategory.DENTAL_CARE, 20_000),
        _record("r2", MedicalCategory.CONSULTATION, 5_000),
        _record("r3", MedicalCategory.DENTAL_CARE, 40_000),
    ]
    summary = limits.build_summary(
        POLICY,
        employee=EmployeeBrief(id="emp-1", full_name="Ayesha Khan", email="ayesha@example.com"),
        year=2025,
        records=records,
        category_limits={MedicalCategory.DENTAL_CARE: 50_000},
    )

    assert summary.total_used == 65_000
    assert summary.remaining == 335_000
    by_category = {c.category: c for c in summary.category_breakdown}
    assert by_category[MedicalCategory.DENTAL_CARE].used == 60_000
    assert by_category[MedicalCategory.DENTAL_CARE].label == "Dental Care"
    # Over the category limit never shows negative remaining.
    assert by_category[MedicalCategory.DENTAL_CARE].remaining == 0
    assert by_category[MedicalCategory.CONSULTATION].limit == 0
    assert by_category[MedicalCategory.CONSULTATION].remaining == 0
    assert sum(c.used for c in summary.category_breakdown) == summary.total_used


def test_snapshot_values_zeroes_cached_categories_without_claims():
    rows = limits.snapshot_values(
        [_record("r1", MedicalCategory.CONSULTATION, 5_000)],
        {MedicalCategory.CONSULTATION: 20_000, MedicalCategory.DENTAL_CARE: 50_000},
        cached_categories=[MedicalCategory.DENTAL_CARE],
    )
    assert sorted(rows, key=lambda r: r[0].value) == [
        (MedicalCategory.CONSULTATION, 20_000, 15_000),
        (MedicalCategory.DENTAL_CARE, 50_000, 50_000),
    ]
