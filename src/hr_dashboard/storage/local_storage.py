from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Sequence

from werkzeug.utils import secure_filename

from ..core.exceptions import StorageError
from .base import ObjectStorage

logger = logging.getLogger(__name__)


class LocalObjectStorage(ObjectStorage):
    """Stores objects under a bucket directory on the local filesystem."""

    def __init__(self, root: str | Path, *, public_base_url: str):
        self._root = Path(root)
        self._public_base_url = public_base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        parts = [secure_filename(p) for p in PurePosixPath(path).parts]
        parts = [p for p in parts if p]
        if not parts:
            raise StorageError(f"Invalid storage path: {path!r}")
        return self._root.joinpath(*parts)

    def _key(self, target: Path) -> str:
        return target.relative_to(self._root).as_posix()

    def upload(self, path: str, content: bytes, *, upsert: bool = False) -> str:
        target = self._resolve(path)
        if target.exists() and not upsert:
            raise StorageError(f"Failed to upload file: {path} already exists")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as fh:
                fh.write(content)
        except OSError as e:
            raise StorageError(f"Failed to upload file: {e}") from e
        return self._key(target)

    def remove(self, paths: Sequence[str]) -> None:
        errors: list[str] = []
        for path in paths:
            target = self._resolve(path)
            try:
                target.unlink(missing_ok=True)
            except OSError as e:
                logger.error("Error deleting %s from storage: %s", path, e)
                errors.append(path)
        if errors:
            raise StorageError(f"Failed to delete file(s): {', '.join(errors)}")

    def public_url(self, path: str) -> str:
        return f"{self._public_base_url}/{self._key(self._resolve(path))}"
