from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveRequest, NewLeaveRequest


class LeaveRepository(Protocol):
    def create(self, request: NewLeaveRequest, *, num_days: int) -> str:
        raise NotImplementedError

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        """Return the request joined with its employee, or None if missing/deleted."""

        raise NotImplementedError

    def list_page(
        self,
        *,
        offset: int,
        limit: int,
        status: Optional[LeaveStatus] = None,
        search: Optional[str] = None,
    ) -> tuple[Sequence[LeaveRequest], int]:
        raise NotImplementedError

    def update(self, request_id: str, values: dict) -> bool:
        raise NotImplementedError

    def decide(self, request_id: str, *, status: LeaveStatus, decided_at: datetime) -> bool:
        """Move a pending request to `status`; False if it was not pending."""

        raise NotImplementedError

    def soft_delete(self, request_id: str) -> bool:
        raise NotImplementedError
