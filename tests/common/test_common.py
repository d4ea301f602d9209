from __future__ import annotations

from datetime import date

import pytest

from hr_dashboard.common.formatting import format_enum_value, format_pkr
from hr_dashboard.common.pagination import build_page, page_bounds
from hr_dashboard.common.search import build_search_clause, escape_like
from hr_dashboard.common.serialization import to_jsonable
from hr_dashboard.common.validators import optional_text, require_bool, require_non_empty, require_positive_int
from hr_dashboard.core.enums import MedicalCategory
from hr_dashboard.core.exceptions import ValidationError
from hr_dashboard.database.bootstrap import split_statements
from hr_dashboard.medical.model import CategoryUsage


def test_page_bounds_and_total_pages():
    assert page_bounds(3, 10) == (20, 10)

    page = build_page([], page=1, page_size=10, total_count=21)
    assert page.pagination.total_pages == 3
    assert page.pagination.to_dict() == {"currentPage": 1, "totalPages": 3, "totalCount": 21, "pageSize": 10}


@pytest.mark.parametrize("page,page_size", [(0, 10), (1, 0), (1, 10_001)])
def test_page_bounds_rejects_out_of_range(page, page_size):
    with pytest.raises(ValidationError):
        page_bounds(page, page_size)


def test_escape_like_makes_wildcards_literal():
    assert escape_like("50%_off") == "50\\%\\_off"


def test_build_search_clause():
    clause, params = build_search_clause(["e.full_name", "e.email"], "ali")

    assert clause == "(e.full_name LIKE %s OR e.email LIKE %s)"
    assert params == ["%ali%", "%ali%"]


def test_formatting():
    assert format_enum_value("dental_care") == "Dental Care"
    assert format_pkr(390000) == "Rs. 390,000"


def test_require_positive_int_accepts_numeric_strings():
    assert require_positive_int("1500", "Cost") == 1500
    assert require_positive_int(1500.0, "Cost") == 1500


def test_to_jsonable_flattens_domain_values():
    usage = CategoryUsage(category=MedicalCategory.VISION_CARE, used=1, limit=2, remaining=1, label="Vision Care")

    assert to_jsonable({"on": date(2025, 1, 31), "usage": [usage]}) == {
        "on": "2025-01-31",
        "usage": [{"category": "vision_care", "used": 1, "limit": 2, "remaining": 1, "label": "Vision Care"}],
    }


def test_split_statements_skips_database_statements_and_quoted_semicolons():
    sql = (
        "CREATE DATABASE IF NOT EXISTS hr_dashboard;\n"
        "USE hr_dashboard;\n"
        "-- employees\n"
        "CREATE TABLE a (note VARCHAR(10) DEFAULT 'x;y');\n"
        "CREATE TABLE b (id INT)\n"
    )

    assert list(split_statements(sql)) == [
        "CREATE TABLE a (note VARCHAR(10) DEFAULT 'x;y')",
        "CREATE TABLE b (id INT)",
    ]


@pytest.mark.parametrize("value", [5, ["a"], {"a": 1}])
def test_require_non_empty_rejects_non_text(value):
    with pytest.raises(ValidationError, match="must be text"):
        require_non_empty(value, "Description")


def test_require_non_empty_strips_and_requires_content():
    assert require_non_empty("  Clinic  ", "Description") == "Clinic"
    with pytest.raises(ValidationError, match="is required"):
        require_non_empty("   ", "Description")


@pytest.mark.parametrize("value", ["false", "true", 0, 1, None])
def test_require_bool_rejects_non_booleans(value):
    with pytest.raises(ValidationError):
        require_bool(value, "Paid")


def test_optional_text():
    assert optional_text(None, "Receipt") == ""
    assert optional_text(" r.pdf ", "Receipt") == "r.pdf"
    with pytest.raises(ValidationError):
        optional_text(12, "Receipt")
