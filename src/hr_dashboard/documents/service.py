from __future__ import annotations

import logging
import uuid
from pathlib import PurePosixPath
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.constants import STORAGE_DOCUMENTS_PREFIX, STORAGE_DOCUMENTS_TEMP_PREFIX
from ..core.exceptions import DomainError, GatewayError, StorageError
from ..storage.base import ObjectStorage
from .model import EmployeeDocument
from .repository import DocumentRepository

logger = logging.getLogger(__name__)


def file_extension(file_name: str) -> str:
    """'scan.final.PDF' -> '.PDF'; no extension -> ''."""
    return PurePosixPath(file_name or "").suffix


class DocumentService:
    """Use case: upload, link and retire employee documents."""

    def __init__(self, documents: DocumentRepository, storage: ObjectStorage):
        self._documents = documents
        self._storage = storage

    def upload(
        self,
        *,
        content: bytes,
        file_name: str,
        name: str,
        mime_type: Optional[str] = None,
    ) -> EmployeeDocument:
        """Create the record first so the stored file can be named after its id.

        The row starts with a temporary path. A storage failure removes the
        row again; a failure to record the final path removes the stored file.
        """
        name = require_non_empty(name, "Document name")
        ext = file_extension(file_name)
        temp_path = f"{STORAGE_DOCUMENTS_TEMP_PREFIX}/{uuid.uuid4()}{ext}"
        meta = {"originalFileName": file_name, "fileSize": len(content), "mimeType": mime_type}

        doc = self._documents.create(file_path=temp_path, name=name, meta_data=meta)
        file_path = f"{STORAGE_DOCUMENTS_PREFIX}/{doc.id}{ext}"

        try:
            stored_path = self._storage.upload(file_path, content, upsert=False)
        except StorageError as e:
            logger.error("Error uploading document %s: %s", doc.id, e)
            try:
                self._documents.hard_delete(doc.id)
            except DomainError:
                logger.exception("Error cleaning up document record %s", doc.id)
            raise

        try:
            updated = self._documents.set_file_path(doc.id, stored_path)
        except GatewayError:
            try:
                self._storage.remove([stored_path])
            except StorageError:
                logger.exception("Error cleaning up uploaded file %s", stored_path)
            raise
        if updated is None:
            raise GatewayError(f"Failed to update document record: {doc.id} not found")
        return updated

    def link_to_employee(self, employee_id: str, document_ids: Sequence[str]) -> None:
        if not document_ids:
            return
        self._documents.set_employee(list(document_ids), employee_id)

    def unlink(self, document_ids: Sequence[str]) -> None:
        if not document_ids:
            return
        self._documents.set_employee(list(document_ids), None)

    def list_for_employee(self, employee_id: str) -> Sequence[EmployeeDocument]:
        return self._documents.list_for_employee(employee_id)

    def public_url(self, file_path: str) -> str:
        return self._storage.public_url(file_path)

    def soft_delete(self, document_ids: Sequence[str]) -> None:
        if not document_ids:
            return

        docs = self._documents.list_by_ids(list(document_ids))
        paths = [d.file_path for d in docs if d.file_path]
        if paths:
            try:
                self._storage.remove(paths)
            except StorageError as e:
                # The record is still retired; the file stays orphaned in storage.
                logger.warning("Error deleting files from storage: %s", e)

        self._documents.soft_delete(list(document_ids))
