from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..common.search import build_search_clause
from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone, gateway_errors
from ..employees.model import EmployeeBrief
from .model import UPDATABLE_FIELDS, LeaveRequest, NewLeaveRequest
from .repository import LeaveRepository

_SELECT = """
    SELECT r.id, r.employee_id, r.leave_status, r.leave_type, r.start_date, r.end_date,
           r.reason, r.num_days, r.partial_leave, r.deadline_extended, r.decided_at,
           r.created_at, r.updated_at,
           e.full_name AS employee_full_name, e.email AS employee_email
    FROM leave_requests r
    LEFT JOIN employees e ON e.id = r.employee_id
"""


def _row_to_leave(r: dict) -> LeaveRequest:
    employee = None
    if r.get("employee_full_name") is not None:
        employee = EmployeeBrief(id=r["employee_id"], full_name=r["employee_full_name"], email=r["employee_email"])
    return LeaveRequest(
        id=r["id"],
        employee_id=r["employee_id"],
        leave_status=LeaveStatus(r["leave_status"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=as_date(r["start_date"]),
        end_date=as_date(r["end_date"]),
        num_days=int(r["num_days"]),
        reason=r.get("reason"),
        partial_leave=bool(r.get("partial_leave")),
        deadline_extended=bool(r.get("deadline_extended")),
        decided_at=r.get("decided_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        employee=employee,
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, request: NewLeaveRequest, *, num_days: int) -> str:
        request_id = str(uuid.uuid4())
        now = utc_now()
        with gateway_errors("create leave request"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO leave_requests(
                        id, employee_id, leave_status, leave_type, start_date, end_date, reason,
                        num_days, partial_leave, deadline_extended, created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        request_id,
                        request.employee_id,
                        LeaveStatus.PENDING.value,
                        request.leave_type.value,
                        request.start_date,
                        request.end_date,
                        request.reason,
                        int(num_days),
                        int(request.partial_leave),
                        int(request.deadline_extended),
                        now,
                        now,
                    ),
                )
        return request_id

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        with gateway_errors("fetch leave request"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(_SELECT + " WHERE r.id=%s AND r.deleted_at IS NULL", (request_id,))
                row = fetchone(cur)
        return _row_to_leave(row) if row else None

    def list_page(
        self,
        *,
        offset: int,
        limit: int,
        status: Optional[LeaveStatus] = None,
        search: Optional[str] = None,
    ) -> tuple[Sequence[LeaveRequest], int]:
        clauses = ["r.deleted_at IS NULL"]
        params: list[object] = []
        if status is not None:
            clauses.append("r.leave_status=%s")
            params.append(status.value)
        if search:
            clause, values = build_search_clause(("r.reason", "e.full_name"), search)
            clauses.append(clause)
            params.extend(values)
        where = " AND ".join(clauses)

        with gateway_errors("fetch leave requests"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    SELECT COUNT(*) AS total
                    FROM leave_requests r
                    LEFT JOIN employees e ON e.id = r.employee_id
                    WHERE {where}
                    """,
                    tuple(params),
                )
                total = int(fetchone(cur)["total"])
                cur.execute(
                    _SELECT + f" WHERE {where} ORDER BY r.created_at DESC LIMIT %s OFFSET %s",
                    tuple(params + [int(limit), int(offset)]),
                )
                rows = fetchall(cur)
        return [_row_to_leave(r) for r in rows], total

    def update(self, request_id: str, values: dict) -> bool:
        columns = [c for c in UPDATABLE_FIELDS if c in values]
        params: list[object] = []
        for c in columns:
            v = values[c]
            if isinstance(v, bool):
                v = int(v)
            params.append(v.value if hasattr(v, "value") else v)
        assignments = ", ".join(f"{c}=%s" for c in columns + ["updated_at"])
        with gateway_errors("update leave request"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE leave_requests SET {assignments} WHERE id=%s AND deleted_at IS NULL",
                    tuple(params + [utc_now(), request_id]),
                )
                return cur.rowcount > 0

    def decide(self, request_id: str, *, status: LeaveStatus, decided_at: datetime) -> bool:
        action = "approve leave request" if status == LeaveStatus.APPROVED else "reject leave request"
        with gateway_errors(action):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE leave_requests
                    SET leave_status=%s, decided_at=%s, updated_at=%s
                    WHERE id=%s AND leave_status=%s AND deleted_at IS NULL
                    """,
                    (status.value, decided_at, decided_at, request_id, LeaveStatus.PENDING.value),
                )
                return cur.rowcount > 0

    def soft_delete(self, request_id: str) -> bool:
        with gateway_errors("delete leave request"):
            with db_cursor(self._conn_factory) as (_, cur):
                now = utc_now()
                cur.execute(
                    "UPDATE leave_requests SET deleted_at=%s, updated_at=%s WHERE id=%s AND deleted_at IS NULL",
                    (now, now, request_id),
                )
                return cur.rowcount > 0
