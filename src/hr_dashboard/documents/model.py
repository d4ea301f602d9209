from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class EmployeeDocument:
    """Domain entity: a file attached (or waiting to be attached) to an employee."""

    id: str
    file_path: str
    name: str
    employee_id: Optional[str] = None
    meta_data: Optional[dict] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
