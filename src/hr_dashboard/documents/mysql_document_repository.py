from __future__ import annotations

import json
import uuid
from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_json, db_cursor, fetchall, fetchone, gateway_errors, in_clause
from .model import EmployeeDocument
from .repository import DocumentRepository

_COLUMNS = "id, employee_id, file_path, name, meta_data, created_at, updated_at"


def _row_to_document(row: dict) -> EmployeeDocument:
    return EmployeeDocument(
        id=row["id"],
        employee_id=row.get("employee_id"),
        file_path=row["file_path"],
        name=row["name"],
        meta_data=as_json(row.get("meta_data")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLDocumentRepository(DocumentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get(self, document_id: str) -> Optional[EmployeeDocument]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employee_documents WHERE id=%s AND deleted_at IS NULL", (document_id,))
            row = fetchone(cur)
        return _row_to_document(row) if row else None

    def create(self, *, file_path: str, name: str, meta_data: Optional[dict]) -> EmployeeDocument:
        document_id = str(uuid.uuid4())
        now = utc_now()
        with gateway_errors("create document record"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO employee_documents(id, employee_id, file_path, name, meta_data, created_at, updated_at)
                    VALUES(%s, NULL, %s, %s, %s, %s, %s)
                    """,
                    (document_id, file_path, name, json.dumps(meta_data) if meta_data is not None else None, now, now),
                )
            return EmployeeDocument(
                id=document_id,
                file_path=file_path,
                name=name,
                meta_data=meta_data,
                created_at=now,
                updated_at=now,
            )

    def set_file_path(self, document_id: str, file_path: str) -> Optional[EmployeeDocument]:
        with gateway_errors("update document record"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE employee_documents SET file_path=%s, updated_at=%s WHERE id=%s",
                    (file_path, utc_now(), document_id),
                )
            return self._get(document_id)

    def hard_delete(self, document_id: str) -> None:
        with gateway_errors("clean up document record"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("DELETE FROM employee_documents WHERE id=%s", (document_id,))

    def set_employee(self, document_ids: Sequence[str], employee_id: Optional[str]) -> None:
        action = "link documents" if employee_id else "unlink documents"
        with gateway_errors(action):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    UPDATE employee_documents
                    SET employee_id=%s, updated_at=%s
                    WHERE id IN ({in_clause(document_ids)}) AND deleted_at IS NULL
                    """,
                    tuple([employee_id, utc_now()] + list(document_ids)),
                )

    def list_for_employee(self, employee_id: str) -> Sequence[EmployeeDocument]:
        with gateway_errors("fetch documents"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM employee_documents
                    WHERE employee_id=%s AND deleted_at IS NULL
                    ORDER BY created_at DESC
                    """,
                    (employee_id,),
                )
                return [_row_to_document(r) for r in fetchall(cur)]

    def list_by_ids(self, document_ids: Sequence[str]) -> Sequence[EmployeeDocument]:
        with gateway_errors("fetch documents"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"SELECT {_COLUMNS} FROM employee_documents WHERE id IN ({in_clause(document_ids)}) AND deleted_at IS NULL",
                    tuple(document_ids),
                )
                return [_row_to_document(r) for r in fetchall(cur)]

    def soft_delete(self, document_ids: Sequence[str]) -> None:
        with gateway_errors("soft delete documents"):
            with db_cursor(self._conn_factory) as (_, cur):
                now = utc_now()
                cur.execute(
                    f"UPDATE employee_documents SET deleted_at=%s, updated_at=%s WHERE id IN ({in_clause(document_ids)})",
                    tuple([now, now] + list(document_ids)),
                )
