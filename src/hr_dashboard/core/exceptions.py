from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class LimitExceededError(ValidationError):
    """Raised when a medical claim would push usage over a configured ceiling."""

    def __init__(self, message: str, *, amount: int, used: int, limit: int, category: Optional[str] = None):
        super().__init__(message)
        self.amount = amount
        self.used = used
        self.limit = limit
        self.category = category


class NotFoundError(DomainError):
    """Raised when a row does not exist or is soft-deleted."""


class GatewayError(DomainError):
    """Raised when the database rejects or fails an operation."""


class StorageError(DomainError):
    """Raised when the object storage cannot complete an operation."""
