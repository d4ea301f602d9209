from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..common.search import build_search_clause
from ..core.enums import Designation, EmploymentStatus, JobType, UserType
from ..core.exceptions import GatewayError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone, gateway_errors
from .model import EDITABLE_FIELDS, Employee, EmployeeBrief
from .repository import EmployeeRepository

_SELECT_COLUMNS = ", ".join(("id",) + EDITABLE_FIELDS + ("created_at", "updated_at"))
_SEARCH_COLUMNS = ("full_name", "email", "contact_number", "designation")


def _db_value(value):
    return value.value if hasattr(value, "value") else value


def _row_to_employee(row: dict) -> Employee:
    return Employee(
        id=row["id"],
        full_name=row["full_name"],
        email=row["email"],
        designation=Designation(row["designation"]),
        job_type=JobType(row["job_type"]),
        start_date=as_date(row["start_date"]),
        employment_status=EmploymentStatus(row["employment_status"]),
        user_type=UserType(row.get("user_type") or UserType.EMPLOYEE.value),
        date_of_birth=as_date(row.get("date_of_birth")),
        end_date=as_date(row.get("end_date")),
        contact_number=row.get("contact_number"),
        personal_email=row.get("personal_email"),
        home_address=row.get("home_address"),
        emergency_contact_name=row.get("emergency_contact_name"),
        relation_to_emergency_contact=row.get("relation_to_emergency_contact"),
        emergency_contact_number=row.get("emergency_contact_number"),
        personal_bank_name=row.get("personal_bank_name"),
        bank_account_title=row.get("bank_account_title"),
        iban=row.get("iban"),
        swift_code=row.get("swift_code"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, values: dict) -> Employee:
        employee_id = str(uuid.uuid4())
        now = utc_now()
        columns = [c for c in EDITABLE_FIELDS if c in values]
        params = [employee_id] + [_db_value(values[c]) for c in columns] + [now, now]
        with gateway_errors("create employee"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO employees(id, {", ".join(columns)}, created_at, updated_at)
                    VALUES({", ".join(["%s"] * len(params))})
                    """,
                    tuple(params),
                )
        created = self.get_by_id(employee_id)
        if created is None:
            raise GatewayError("Failed to create employee: inserted row not found")
        return created

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with gateway_errors("fetch employee"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM employees WHERE id=%s AND deleted_at IS NULL",
                    (employee_id,),
                )
                row = fetchone(cur)
        return _row_to_employee(row) if row else None

    def get_brief(self, employee_id: str) -> Optional[EmployeeBrief]:
        with gateway_errors("fetch employee"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "SELECT id, full_name, email FROM employees WHERE id=%s AND deleted_at IS NULL",
                    (employee_id,),
                )
                row = fetchone(cur)
        if not row:
            return None
        return EmployeeBrief(id=row["id"], full_name=row["full_name"], email=row["email"])

    def list_page(self, *, offset: int, limit: int, search: Optional[str] = None) -> tuple[Sequence[dict], int]:
        clauses = ["deleted_at IS NULL"]
        params: list[object] = []
        if search:
            clause, values = build_search_clause(_SEARCH_COLUMNS, search)
            clauses.append(clause)
            params.extend(values)
        where = " AND ".join(clauses)

        with gateway_errors("fetch employees"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"SELECT COUNT(*) AS total FROM employees WHERE {where}", tuple(params))
                total = int(fetchone(cur)["total"])
                cur.execute(
                    f"""
                    SELECT id, full_name, email, contact_number, designation, job_type,
                           start_date, employment_status
                    FROM employees
                    WHERE {where}
                    ORDER BY created_at DESC
                    LIMIT %s OFFSET %s
                    """,
                    tuple(params + [int(limit), int(offset)]),
                )
                rows = fetchall(cur)

        out: list[dict] = []
        for r in rows:
            out.append(
                {
                    "id": r["id"],
                    "full_name": r["full_name"],
                    "email": r["email"],
                    "contact_number": r.get("contact_number"),
                    "designation": r["designation"],
                    "job_type": r["job_type"],
                    "start_date": as_date(r["start_date"]).isoformat(),
                    "employment_status": r["employment_status"],
                }
            )
        return out, total

    def list_brief(self) -> Sequence[EmployeeBrief]:
        with gateway_errors("fetch employees"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT id, full_name, email FROM employees WHERE deleted_at IS NULL ORDER BY full_name")
                rows = fetchall(cur)
        return [EmployeeBrief(id=r["id"], full_name=r["full_name"], email=r["email"]) for r in rows]

    def update(self, employee_id: str, values: dict) -> Optional[Employee]:
        columns = [c for c in EDITABLE_FIELDS if c in values]
        assignments = ", ".join(f"{c}=%s" for c in columns + ["updated_at"])
        params = [_db_value(values[c]) for c in columns] + [utc_now(), employee_id]
        with gateway_errors("update employee"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE employees SET {assignments} WHERE id=%s AND deleted_at IS NULL",
                    tuple(params),
                )
        return self.get_by_id(employee_id)

    def soft_delete(self, employee_id: str) -> bool:
        with gateway_errors("delete employee"):
            with db_cursor(self._conn_factory) as (_, cur):
                now = utc_now()
                cur.execute(
                    "UPDATE employees SET deleted_at=%s, updated_at=%s WHERE id=%s AND deleted_at IS NULL",
                    (now, now, employee_id),
                )
                return cur.rowcount > 0
