from __future__ import annotations

from typing import Protocol, Sequence


class ObjectStorage(Protocol):
    """Bucket-style file store used for employee documents and receipts."""

    def upload(self, path: str, content: bytes, *, upsert: bool = False) -> str:
        """Store `content` at `path` and return the stored path."""

        raise NotImplementedError

    def remove(self, paths: Sequence[str]) -> None:
        raise NotImplementedError

    def public_url(self, path: str) -> str:
        raise NotImplementedError
