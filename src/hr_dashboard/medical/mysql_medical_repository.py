from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..common.datetime_utils import utc_now, year_bounds
from ..core.enums import Beneficiary, MedicalCategory, PaymentType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone, gateway_errors
from ..employees.model import EmployeeBrief
from .model import (
    UPDATABLE_FIELDS,
    EmployeeMedicalLimit,
    MedicalBenefitRecord,
    MedicalCategoryLimit,
    NewMedicalClaim,
)
from .repository import MedicalRepository

_RECORD_SELECT = """
    SELECT m.id, m.employee_id, m.`date`, m.beneficiary, m.medical_category, m.description,
           m.cost_pkr, m.receipt, m.paid, m.payment_type, m.created_at, m.updated_at,
           e.full_name AS employee_full_name, e.email AS employee_email
    FROM medical_benefit_records m
    LEFT JOIN employees e ON e.id = m.employee_id
"""

# `date` is a reserved word in MySQL
_COLUMN_SQL = {"date": "`date`"}


def _row_to_record(r: dict) -> MedicalBenefitRecord:
    employee = None
    if r.get("employee_full_name") is not None:
        employee = EmployeeBrief(id=r["employee_id"], full_name=r["employee_full_name"], email=r["employee_email"])
    return MedicalBenefitRecord(
        id=r["id"],
        employee_id=r["employee_id"],
        date=as_date(r["date"]),
        beneficiary=Beneficiary(r["beneficiary"]),
        medical_category=MedicalCategory(r["medical_category"]),
        description=r["description"],
        cost_pkr=int(r["cost_pkr"]),
        receipt=r.get("receipt") or "",
        paid=bool(r.get("paid")),
        payment_type=PaymentType(r.get("payment_type") or PaymentType.REIMBURSE.value),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        employee=employee,
    )


def _row_to_category_limit(r: dict) -> MedicalCategoryLimit:
    return MedicalCategoryLimit(
        id=r["id"],
        medical_category=MedicalCategory(r["medical_category"]),
        limit=int(r["limit"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _row_to_employee_limit(r: dict) -> EmployeeMedicalLimit:
    return EmployeeMedicalLimit(
        id=int(r["id"]),
        employee_id=r["employee_id"],
        year=int(r["year"]),
        medical_category=MedicalCategory(r["medical_category"]),
        limit=int(r["limit"]),
        remaining=int(r["remaining"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLMedicalRepository(MedicalRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Claims --------
    @staticmethod
    def _record_filters(
        *,
        employee_id: Optional[str],
        year: Optional[int],
        paid: Optional[bool],
        category: Optional[MedicalCategory],
    ) -> tuple[str, list[object]]:
        clauses = ["m.deleted_at IS NULL"]
        params: list[object] = []
        if employee_id:
            clauses.append("m.employee_id=%s")
            params.append(employee_id)
        if year:
            start, end = year_bounds(year)
            clauses.append("m.`date` BETWEEN %s AND %s")
            params.extend([start, end])
        if paid is not None:
            clauses.append("m.paid=%s")
            params.append(int(paid))
        if category is not None:
            clauses.append("m.medical_category=%s")
            params.append(category.value)
        return " AND ".join(clauses), params

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
        where, params = self._record_filters(employee_id=employee_id, year=year, paid=paid, category=category)
        with gateway_errors("fetch records"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"SELECT COUNT(*) AS total FROM medical_benefit_records m WHERE {where}", tuple(params))
                total = int(fetchone(cur)["total"])
                cur.execute(
                    _RECORD_SELECT + f" WHERE {where} ORDER BY m.`date` DESC LIMIT %s OFFSET %s",
                    tuple(params + [int(limit), int(offset)]),
                )
                rows = fetchall(cur)
        return [_row_to_record(r) for r in rows], total

    def list_for_employee_year(
        self,
        *,
        employee_id: str,
        year: int,
        category: Optional[MedicalCategory] = None,
    ) -> Sequence[MedicalBenefitRecord]:
        where, params = self._record_filters(employee_id=employee_id, year=year, paid=None, category=category)
        with gateway_errors("fetch records"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(_RECORD_SELECT + f" WHERE {where} ORDER BY m.`date` DESC", tuple(params))
                return [_row_to_record(r) for r in fetchall(cur)]

    def get_record(self, record_id: str) -> Optional[MedicalBenefitRecord]:
        with gateway_errors("fetch record"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(_RECORD_SELECT + " WHERE m.id=%s AND m.deleted_at IS NULL", (record_id,))
                row = fetchone(cur)
        return _row_to_record(row) if row else None

    def create_record(self, claim: NewMedicalClaim) -> str:
        record_id = str(uuid.uuid4())
        now = utc_now()
        with gateway_errors("create record"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO medical_benefit_records(
                        id, employee_id, `date`, beneficiary, medical_category, description,
                        cost_pkr, receipt, paid, payment_type, created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record_id,
                        claim.employee_id,
                        claim.date,
                        claim.beneficiary.value,
                        claim.medical_category.value,
                        claim.description,
                        int(claim.cost_pkr),
                        claim.receipt,
                        int(claim.paid),
                        claim.payment_type.value,
                        now,
                        now,
                    ),
                )
        return record_id

    def update_record(self, record_id: str, values: dict) -> bool:
        columns = [c for c in UPDATABLE_FIELDS if c in values]
        params: list[object] = []
        for c in columns:
            v = values[c]
            if isinstance(v, bool):
                v = int(v)
            params.append(v.value if hasattr(v, "value") else v)
        assignments = ", ".join(f"{_COLUMN_SQL.get(c, c)}=%s" for c in columns + ["updated_at"])
        with gateway_errors("update record"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE medical_benefit_records SET {assignments} WHERE id=%s AND deleted_at IS NULL",
                    tuple(params + [utc_now(), record_id]),
                )
                return cur.rowcount > 0

    def soft_delete_record(self, record_id: str) -> bool:
        with gateway_errors("delete record"):
            with db_cursor(self._conn_factory) as (_, cur):
                now = utc_now()
                cur.execute(
                    "UPDATE medical_benefit_records SET deleted_at=%s, updated_at=%s WHERE id=%s AND deleted_at IS NULL",
                    (now, now, record_id),
                )
                return cur.rowcount > 0

    # -------- Category limits --------
    def list_category_limits(self) -> Sequence[MedicalCategoryLimit]:
        with gateway_errors("fetch category limits"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT id, medical_category, `limit`, created_at, updated_at
                    FROM medical_category_limits
                    WHERE deleted_at IS NULL
                    ORDER BY medical_category
                    """
                )
                return [_row_to_category_limit(r) for r in fetchall(cur)]

    def get_category_limit(self, category: MedicalCategory) -> Optional[MedicalCategoryLimit]:
        with gateway_errors("fetch category limit"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT id, medical_category, `limit`, created_at, updated_at
                    FROM medical_category_limits
                    WHERE medical_category=%s AND deleted_at IS NULL
                    ORDER BY created_at DESC
                    LIMIT 1
                    """,
                    (category.value,),
                )
                row = fetchone(cur)
        return _row_to_category_limit(row) if row else None

    def create_category_limit(self, category: MedicalCategory, limit: int) -> MedicalCategoryLimit:
        limit_id = str(uuid.uuid4())
        now = utc_now()
        with gateway_errors("create category limit"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO medical_category_limits(id, medical_category, `limit`, created_at, updated_at)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (limit_id, category.value, int(limit), now, now),
                )
        return MedicalCategoryLimit(id=limit_id, medical_category=category, limit=int(limit), created_at=now, updated_at=now)

    def update_category_limit(self, limit_id: str, limit: int) -> Optional[MedicalCategoryLimit]:
        with gateway_errors("update category limit"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE medical_category_limits SET `limit`=%s, updated_at=%s WHERE id=%s AND deleted_at IS NULL",
                    (int(limit), utc_now(), limit_id),
                )
                cur.execute(
                    "SELECT id, medical_category, `limit`, created_at, updated_at FROM medical_category_limits WHERE id=%s",
                    (limit_id,),
                )
                row = fetchone(cur)
        return _row_to_category_limit(row) if row else None

    def soft_delete_category_limit(self, category: MedicalCategory) -> bool:
        with gateway_errors("delete category limit"):
            with db_cursor(self._conn_factory) as (_, cur):
                now = utc_now()
                cur.execute(
                    """
                    UPDATE medical_category_limits SET deleted_at=%s, updated_at=%s
                    WHERE medical_category=%s AND deleted_at IS NULL
                    """,
                    (now, now, category.value),
                )
                return cur.rowcount > 0

    # -------- Usage snapshot --------
    def list_employee_limits(self, *, employee_id: str, year: int) -> Sequence[EmployeeMedicalLimit]:
        with gateway_errors("fetch employee limits"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT id, employee_id, `year`, medical_category, `limit`, remaining, created_at, updated_at
                    FROM employee_medical_limits
                    WHERE employee_id=%s AND `year`=%s AND deleted_at IS NULL
                    ORDER BY medical_category
                    """,
                    (employee_id, int(year)),
                )
                return [_row_to_employee_limit(r) for r in fetchall(cur)]

    def save_employee_limit(
        self,
        *,
        employee_id: str,
        year: int,
        category: MedicalCategory,
        limit: int,
        remaining: int,
    ) -> None:
        now = utc_now()
        with gateway_errors("save employee limit"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT id FROM employee_medical_limits
                    WHERE employee_id=%s AND `year`=%s AND medical_category=%s AND deleted_at IS NULL
                    LIMIT 1
                    """,
                    (employee_id, int(year), category.value),
                )
                existing = fetchone(cur)
                if existing:
                    cur.execute(
                        "UPDATE employee_medical_limits SET `limit`=%s, remaining=%s, updated_at=%s WHERE id=%s",
                        (int(limit), int(remaining), now, int(existing["id"])),
                    )
                else:
                    cur.execute(
                        """
                        INSERT INTO employee_medical_limits(
                            employee_id, `year`, medical_category, `limit`, remaining, created_at, updated_at
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s)
                        """,
                        (employee_id, int(year), category.value, int(limit), int(remaining), now, now),
                    )
