"""Schemas for the plan import API."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from dash_backend.services.import_types import (
    MAX_DURATION_WEEKS,
    MAX_PLAN_DESCRIPTION_LENGTH,
    MAX_PLAN_NAME_LENGTH,
    MAX_PLAYBOOK_NAME_LENGTH,
    MAX_TASK_DESCRIPTION_LENGTH,
    MAX_TASK_DURATION,
    MAX_TASK_TITLE_LENGTH,
    MIN_DURATION_WEEKS,
    MIN_TASK_DURATION,
    TRIGGER_TIME_PATTERN,
    VALID_DAYS,
)

DomainTypeLiteral = Literal["morning", "exercise", "evening"]
DayLiteral = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


class ImportValidateRequest(BaseModel):
    text: str = Field(..., max_length=200_000)

    @field_validator("text")
    @classmethod
    def reject_blank_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please paste your plan export")
        return value


class ValidationIssuePayload(BaseModel):
    severity: Literal["error", "warning", "info"]
    field: str
    message: str
    auto_fixed: bool = False
    original_value: Any = None
    fixed_value: Any = None


class ParsedTaskPayload(BaseModel):
    title: str = Field(..., min_length=1, max_length=MAX_TASK_TITLE_LENGTH)
    description: Optional[str] = Field(default=None, max_length=MAX_TASK_DESCRIPTION_LENGTH)
    duration_minutes: int = Field(..., ge=MIN_TASK_DURATION, le=MAX_TASK_DURATION)


class ParsedPlaybookPayload(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_PLAYBOOK_NAME_LENGTH)
    week_start: Optional[int] = Field(default=None, ge=1)
    week_end: Optional[int] = Field(default=None, ge=1)
    active_days: Optional[List[DayLiteral]] = None
    tasks: List[ParsedTaskPayload] = Field(..., min_length=1)

    @field_validator("active_days")
    @classmethod
    def collapse_all_days(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if not value:
            return None
        unique = list(dict.fromkeys(value))
        return None if len(unique) == len(VALID_DAYS) else unique


class ParsedDomainPayload(BaseModel):
    type: DomainTypeLiteral
    trigger_time: str = Field(..., pattern=TRIGGER_TIME_PATTERN)
    playbooks: List[ParsedPlaybookPayload] = Field(..., min_length=1)

    @field_validator("trigger_time")
    @classmethod
    def zero_pad_hour(cls, value: str) -> str:
        hours, minutes = value.split(":")
        return f"{hours.zfill(2)}:{minutes}"


class ParsedPlanPayload(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_PLAN_NAME_LENGTH)
    description: Optional[str] = Field(default=None, max_length=MAX_PLAN_DESCRIPTION_LENGTH)
    created_date: str
    duration_weeks: Optional[int] = Field(default=None, ge=MIN_DURATION_WEEKS, le=MAX_DURATION_WEEKS)
    domains: List[ParsedDomainPayload] = Field(..., min_length=1)


class ImportValidateResponse(BaseModel):
    success: bool
    plan: Optional[ParsedPlanPayload]
    issues: List[ValidationIssuePayload]
    issue_counts: Dict[str, int]
    error_message: Optional[str]
    request_id: str


class ConflictCheckRequest(BaseModel):
    plan: ParsedPlanPayload


class ConflictPayload(BaseModel):
    domain_type: DomainTypeLiteral
    existing_playbook_name: Optional[str]
    existing_playbook_count: int
    new_playbook_count: int


class ConflictCheckResponse(BaseModel):
    conflicts: List[ConflictPayload]
    request_id: str


class ImportSaveRequest(BaseModel):
    plan: ParsedPlanPayload
    resolutions: Dict[DomainTypeLiteral, Literal["replace", "skip"]] = Field(default_factory=dict)


class NotificationPayload(BaseModel):
    domain_type: Optional[str]
    status: str
    reason: str


class ImportSaveResponse(BaseModel):
    success: bool
    plan_id: Optional[UUID]
    domains_created: int
    playbooks_created: int
    tasks_created: int
    error: Optional[str]
    notifications: List[NotificationPayload] = Field(default_factory=list)
    request_id: str


class PlanSuggestionPayload(BaseModel):
    title: str
    description: str
    prompt: str


class ImportPromptResponse(BaseModel):
    context: Literal["fresh", "existing", "quick"]
    prompt: str
    suggestions: List[PlanSuggestionPayload]
    request_id: str
