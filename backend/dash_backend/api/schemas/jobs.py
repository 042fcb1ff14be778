"""Schemas for job operations endpoints."""
from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel


class JobRunRequest(BaseModel):
    job: Literal["week_progression"] = "week_progression"
    today: Optional[date] = None


class JobRunResponse(BaseModel):
    job: str
    plans_checked: int
    plans_advanced: int
    domains_updated: int
    request_id: str
