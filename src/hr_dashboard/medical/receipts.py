from __future__ import annotations

import uuid

from ..core.constants import STORAGE_RECEIPTS_PREFIX
from ..core.exceptions import ValidationError
from ..documents.service import file_extension
from ..storage.base import ObjectStorage


class MedicalReceiptService:
    """Receipt files for medical claims; the claim keeps only the stored path."""

    def __init__(self, storage: ObjectStorage):
        self._storage = storage

    def upload_receipt(self, *, content: bytes, file_name: str) -> str:
        if not content:
            raise ValidationError("Receipt file is empty")
        path = f"{STORAGE_RECEIPTS_PREFIX}/{uuid.uuid4()}{file_extension(file_name)}"
        return self._storage.upload(path, content, upsert=False)

    def public_url(self, file_path: str) -> str:
        return self._storage.public_url(file_path)

    def delete_receipt(self, file_path: str) -> None:
        self._storage.remove([file_path])
