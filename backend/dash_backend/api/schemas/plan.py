"""Schemas for stored plan records."""
from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class PlanResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str]
    duration_weeks: Optional[int]
    current_week: int
    import_source: Optional[str]
    import_date: Optional[date]
    request_id: str
