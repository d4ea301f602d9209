from __future__ import annotations

import logging
import threading
import time
from datetime import date

import pytest

from fakes import InMemoryEmployees, InMemoryMedical, make_employee

from hr_dashboard.core.enums import MedicalCategory, PaymentType
from hr_dashboard.core.exceptions import LimitExceededError, NotFoundError, ValidationError
from hr_dashboard.medical.limits import LimitPolicy
from hr_dashboard.medical.service import MedicalBenefitsService


@pytest.fixture
def employees():
    return InMemoryEmployees([make_employee("emp-1"), make_employee("emp-2", "Bilal Ahmed", "bilal@example.com")])


@pytest.fixture
def medical(employees):
    return InMemoryMedical(employees)


@pytest.fixture
def svc(medical, employees):
    return MedicalBenefitsService(medical, employees, policy=LimitPolicy(annual_limit=400_000))


def _claim(svc, *, cost, category="consultation", employee_id="emp-1", on=date(2025, 5, 10), **extra):
    return svc.create_record(
        employee_id=employee_id,
        date=on,
        beneficiary="self",
        medical_category=category,
        description="Clinic visit",
        cost_pkr=cost,
        **extra,
    )


def test_create_within_limits_defaults_to_reimburse(svc):
    record = _claim(svc, cost=20_000)

    assert record.cost_pkr == 20_000
    assert record.payment_type == PaymentType.REIMBURSE
    assert record.paid is False
    assert record.employee.full_name == "Ayesha Khan"


def test_create_rejects_claim_over_annual_limit(svc, medical):
    _claim(svc, cost=200_000, category="surgery_and_hospitalization")
    _claim(svc, cost=190_000, category="maternity_care")

    with pytest.raises(LimitExceededError) as exc:
        _claim(svc, cost=15_000)

    assert "Rs. 390,000 of Rs. 400,000" in str(exc.value)
    assert len(medical.records) == 2


def test_create_accepts_claim_that_fits_remaining_annual_amount(svc):
    _claim(svc, cost=390_000, category="surgery_and_hospitalization")

    record = _claim(svc, cost=9_000)

    assert svc.get_employee_annual_total("emp-1", 2025) == 399_000
    assert record.cost_pkr == 9_000


def test_create_rejects_claim_over_category_limit(svc, medical):
    svc.upsert_category_limit(medical_category="dental_care", limit=50_000)
    _claim(svc, cost=48_000, category="dental_care")

    with pytest.raises(LimitExceededError) as exc:
        _claim(svc, cost=3_000, category="dental_care")

    assert exc.value.category == "dental_care"
    assert len(medical.records) == 1


def test_category_without_configured_limit_is_only_capped_annually(svc):
    _claim(svc, cost=300_000, category="vision_care")
    _claim(svc, cost=100_000, category="vision_care")

    assert svc.get_employee_category_total("emp-1", 2025, MedicalCategory.VISION_CARE) == 400_000


def test_claims_in_other_years_do_not_count(svc):
    _claim(svc, cost=390_000, on=date(2024, 12, 31))

    record = _claim(svc, cost=390_000, on=date(2025, 1, 1))

    assert record.date == date(2025, 1, 1)


def test_annual_limit_comes_from_policy(medical, employees):
    svc = MedicalBenefitsService(medical, employees, policy=LimitPolicy(annual_limit=10_000))

    with pytest.raises(LimitExceededError) as exc:
        _claim(svc, cost=10_001)

    assert exc.value.limit == 10_000


@pytest.mark.parametrize("cost", [0, -5, 12.5, "abc", True])
def test_create_rejects_non_positive_or_fractional_cost(svc, cost):
    with pytest.raises(ValidationError):
        _claim(svc, cost=cost)


def test_create_rejects_unknown_category(svc):
    with pytest.raises(ValidationError):
        _claim(svc, cost=1_000, category="massage")


def test_create_for_unknown_employee_raises_not_found(svc):
    with pytest.raises(NotFoundError):
        _claim(svc, cost=1_000, employee_id="nobody")


def test_update_moving_claim_into_full_category_is_rejected(svc):
    svc.upsert_category_limit(medical_category="dental_care", limit=50_000)
    _claim(svc, cost=45_000, category="dental_care")
    record = _claim(svc, cost=10_000, category="consultation")

    with pytest.raises(LimitExceededError):
        svc.update_record(record.id, {"medical_category": "dental_care"})

    assert svc.get_record(record.id).medical_category == MedicalCategory.CONSULTATION


def test_update_moving_claim_into_category_with_room_is_accepted(svc):
    svc.upsert_category_limit(medical_category="dental_care", limit=50_000)
    _claim(svc, cost=30_000, category="dental_care")
    record = _claim(svc, cost=10_000, category="consultation")

    updated = svc.update_record(record.id, {"medical_category": "dental_care"})

    assert updated.medical_category == MedicalCategory.DENTAL_CARE
    assert svc.get_employee_category_total("emp-1", 2025, MedicalCategory.DENTAL_CARE) == 40_000


def test_update_cost_subtracts_prior_cost_from_annual_total(svc):
    _claim(svc, cost=300_000, category="surgery_and_hospitalization")
    record = _claim(svc, cost=100_000)

    updated = svc.update_record(record.id, {"cost_pkr": 100_000})
    assert updated.cost_pkr == 100_000

    with pytest.raises(LimitExceededError) as exc:
        svc.update_record(record.id, {"cost_pkr": 100_001})
    assert str(exc.value).startswith("Updated amount would exceed annual limit.")


def test_update_resending_same_category_counts_claim_against_itself(svc):
    svc.upsert_category_limit(medical_category="dental_care", limit=50_000)
    record = _claim(svc, cost=30_000, category="dental_care")

    # Without a category the claim's own cost is taken out of the category total.
    svc.update_record(record.id, {"cost_pkr": 30_000})

    # Re-sending the unchanged category leaves it in: 30,000 + 30,000 > 50,000.
    with pytest.raises(LimitExceededError):
        svc.update_record(record.id, {"cost_pkr": 30_000, "medical_category": "dental_care"})


def test_update_without_cost_or_category_skips_limit_checks(svc, medical):
    svc.upsert_category_limit(medical_category="dental_care", limit=50_000)
    record = _claim(svc, cost=40_000, category="dental_care")
    svc.upsert_category_limit(medical_category="dental_care", limit=10_000)

    updated = svc.update_record(record.id, {"description": "Root canal", "paid": True})

    assert updated.description == "Root canal"
    assert updated.paid is True


def test_update_rejects_unknown_field(svc):
    record = _claim(svc, cost=1_000)
    with pytest.raises(ValidationError):
        svc.update_record(record.id, {"employee_id": "emp-2"})


def test_update_payment_status(svc):
    record = _claim(svc, cost=1_000)

    assert svc.update_payment_status(record.id, True).paid is True


def test_update_missing_record_raises_not_found(svc):
    with pytest.raises(NotFoundError):
        svc.update_record("missing", {"paid": True})


def test_deleted_claim_no_longer_counts(svc):
    record = _claim(svc, cost=390_000)
    svc.delete_record(record.id)

    _claim(svc, cost=390_000)

    with pytest.raises(NotFoundError):
        svc.get_record(record.id)
    assert svc.get_employee_limit_summary("emp-1", 2025).total_used == 390_000


def test_delete_twice_raises_not_found(svc):
    record = _claim(svc, cost=1_000)
    svc.delete_record(record.id)

    with pytest.raises(NotFoundError):
        svc.delete_record(record.id)


def test_list_records_paginates_newest_first(svc):
    for day in range(1, 6):
        _claim(svc, cost=1_000, on=date(2025, 2, day))

    page = svc.list_records(page=2, page_size=2, employee_id="emp-1")

    assert [r.date.day for r in page.items] == [3, 2]
    assert page.pagination.total_count == 5
    assert page.pagination.total_pages == 3
    assert page.pagination.current_page == 2


def test_snapshot_tracks_claims(svc):
    svc.upsert_category_limit(medical_category="dental_care", limit=50_000)
    record = _claim(svc, cost=20_000, category="dental_care")

    [row] = svc.get_employee_limits("emp-1", 2025)
    assert (row.medical_category, row.limit, row.remaining) == (MedicalCategory.DENTAL_CARE, 50_000, 30_000)

    svc.delete_record(record.id)

    [row] = svc.get_employee_limits("emp-1", 2025)
    assert row.remaining == 50_000


def test_snapshot_failure_does_not_undo_claim(svc, medical, caplog):
    medical.fail_snapshot_writes = True

    with caplog.at_level(logging.ERROR, logger="hr_dashboard.medical.service"):
        record = _claim(svc, cost=5_000)

    assert svc.get_record(record.id).cost_pkr == 5_000
    assert medical.snapshot == {}
    assert "Error updating medical limits" in caplog.text


def test_summary_without_claims_reads_employee_name(svc):
    summary = svc.get_employee_limit_summary("emp-2", 2025)

    assert summary.employee_name == "Bilal Ahmed"
    assert summary.total_used == 0
    assert summary.remaining == 400_000
    assert summary.category_breakdown == []


def test_summary_for_unknown_employee_raises_not_found(svc):
    with pytest.raises(NotFoundError):
        svc.get_employee_limit_summary("nobody", 2025)


def test_summary_total_equals_sum_of_categories(svc):
    svc.upsert_category_limit(medical_category="dental_care", limit=50_000)
    _claim(svc, cost=12_000, category="dental_care")
    _claim(svc, cost=8_000, category="consultation")
    _claim(svc, cost=4_000, category="dental_care")

    summary = svc.get_employee_limit_summary("emp-1", 2025)

    assert summary.total_used == 24_000
    assert summary.total_used == sum(c.used for c in summary.category_breakdown)
    dental = next(c for c in summary.category_breakdown if c.category == MedicalCategory.DENTAL_CARE)
    assert (dental.used, dental.limit, dental.remaining) == (16_000, 50_000, 34_000)


def test_fleet_summaries_degrade_per_employee(svc, employees, caplog):
    _claim(svc, cost=10_000, employee_id="emp-1")
    employees.fail_on_get_brief.add("emp-2")

    with caplog.at_level(logging.WARNING, logger="hr_dashboard.medical.service"):
        summaries = svc.get_all_employee_limit_summaries(2025)

    by_id = {s.employee_id: s for s in summaries}
    assert by_id["emp-1"].total_used == 10_000
    assert by_id["emp-2"].total_used == 0
    assert by_id["emp-2"].remaining == 400_000
    assert "emp-2" in caplog.text


def test_category_limit_upsert_and_delete(svc):
    created = svc.upsert_category_limit(medical_category="vision_care", limit=25_000)
    updated = svc.upsert_category_limit(medical_category="vision_care", limit=30_000)

    assert updated.id == created.id
    assert svc.get_category_limit("vision_care").limit == 30_000

    svc.delete_category_limit("vision_care")
    assert svc.get_category_limit("vision_care") is None
    with pytest.raises(NotFoundError):
        svc.delete_category_limit("vision_care")


def test_category_limit_rejects_negative_amount(svc):
    with pytest.raises(ValidationError):
        svc.upsert_category_limit(medical_category="vision_care", limit=-1)


class InterleavingMedical(InMemoryMedical):
    """Runs ``on_next_read`` right after the next claim read returns its row."""

    def __init__(self, employees):
        super().__init__(employees)
        self.on_next_read = None
        self.years_read = []

    def get_record(self, record_id):
        record = super().get_record(record_id)
        hook, self.on_next_read = self.on_next_read, None
        if hook:
            hook()
        return record

    def list_for_employee_year(self, *, employee_id, year, category=None):
        self.years_read.append(year)
        return super().list_for_employee_year(employee_id=employee_id, year=year, category=category)


class SlowTotalsMedical(InMemoryMedical):
    def list_for_employee_year(self, **kwargs):
        rows = super().list_for_employee_year(**kwargs)
        time.sleep(0.05)
        return rows


def test_update_checks_against_claim_as_stored_when_lock_is_taken(employees):
    medical = InterleavingMedical(employees)
    svc = MedicalBenefitsService(medical, employees, policy=LimitPolicy(annual_limit=400_000))
    _claim(svc, cost=300_000, category="surgery_and_hospitalization")
    record = _claim(svc, cost=100_000)

    # A second edit lowers the claim between the first edit's read and its lock.
    medical.on_next_read = lambda: svc.update_record(record.id, {"cost_pkr": 10_000})

    with pytest.raises(LimitExceededError):
        svc.update_record(record.id, {"cost_pkr": 190_000})

    assert svc.get_record(record.id).cost_pkr == 10_000
    assert svc.get_employee_annual_total("emp-1", 2025) == 310_000


def test_delete_refreshes_usage_year_of_claim_as_stored(employees):
    medical = InterleavingMedical(employees)
    svc = MedicalBenefitsService(medical, employees)
    record = _claim(svc, cost=5_000, on=date(2025, 3, 1))

    # The claim is moved into 2024 after the delete first reads it.
    medical.on_next_read = lambda: svc.update_record(record.id, {"date": "2024-12-30"})
    medical.years_read.clear()
    svc.delete_record(record.id)

    assert medical.years_read[-1] == 2024
    assert svc.get_employee_annual_total("emp-1", 2024) == 0


def test_concurrent_claims_for_one_employee_respect_annual_limit(employees):
    medical = SlowTotalsMedical(employees)
    svc = MedicalBenefitsService(medical, employees, policy=LimitPolicy(annual_limit=400_000))
    created, rejected = [], []

    def submit():
        try:
            created.append(_claim(svc, cost=250_000))
        except LimitExceededError as e:
            rejected.append(e)

    threads = [threading.Thread(target=submit) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert len(created) == 1
    assert len(rejected) == 1
    assert svc.get_employee_annual_total("emp-1", 2025) == 250_000


def test_fleet_summaries_survive_unreadable_rows(employees, caplog):
    class BrokenRowsMedical(InMemoryMedical):
        def list_for_employee_year(self, *, employee_id, year, category=None):
            if employee_id == "emp-2":
                raise ValueError("'unknown_care' is not a valid MedicalCategory")
            return super().list_for_employee_year(employee_id=employee_id, year=year, category=category)

    svc = MedicalBenefitsService(BrokenRowsMedical(employees), employees)
    _claim(svc, cost=7_000)

    with caplog.at_level(logging.WARNING, logger="hr_dashboard.medical.service"):
        summaries = svc.get_all_employee_limit_summaries(2025)

    assert [(s.employee_id, s.total_used) for s in summaries] == [("emp-1", 7_000), ("emp-2", 0)]
    assert "unknown_care" in caplog.text


@pytest.mark.parametrize("paid", ["false", 0, None])
def test_paid_flag_must_be_boolean(svc, paid):
    record = _claim(svc, cost=1_000)

    with pytest.raises(ValidationError):
        svc.update_record(record.id, {"paid": paid})
    with pytest.raises(ValidationError):
        _claim(svc, cost=1_000, paid=paid)
    assert svc.get_record(record.id).paid is False


def test_receipt_must_be_text(svc):
    with pytest.raises(ValidationError):
        _claim(svc, cost=1_000, receipt=42)


def test_unreadable_snapshot_row_does_not_undo_claim(employees, caplog):
    class BrokenSnapshotMedical(InMemoryMedical):
        def list_employee_limits(self, *, employee_id, year):
            raise ValueError("'unknown_care' is not a valid MedicalCategory")

    medical = BrokenSnapshotMedical(employees)
    svc = MedicalBenefitsService(medical, employees)

    with caplog.at_level(logging.ERROR, logger="hr_dashboard.medical.service"):
        record = _claim(svc, cost=3_000)

    assert medical.get_record(record.id).cost_pkr == 3_000
    assert "Error updating medical limits" in caplog.text
