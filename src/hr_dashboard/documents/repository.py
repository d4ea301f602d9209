from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import EmployeeDocument


class DocumentRepository(Protocol):
    def create(self, *, file_path: str, name: str, meta_data: Optional[dict]) -> EmployeeDocument:
        raise NotImplementedError

    def set_file_path(self, document_id: str, file_path: str) -> Optional[EmployeeDocument]:
        raise NotImplementedError

    def hard_delete(self, document_id: str) -> None:
        """Drop a half-created row whose upload never completed."""

        raise NotImplementedError

    def set_employee(self, document_ids: Sequence[str], employee_id: Optional[str]) -> None:
        raise NotImplementedError

    def list_for_employee(self, employee_id: str) -> Sequence[EmployeeDocument]:
        raise NotImplementedError

    def list_by_ids(self, document_ids: Sequence[str]) -> Sequence[EmployeeDocument]:
        raise NotImplementedError

    def soft_delete(self, document_ids: Sequence[str]) -> None:
        raise NotImplementedError
