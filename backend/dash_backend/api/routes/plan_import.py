"""Plan import API routes."""
from __future__ import annotations

from collections import Counter
from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from dash_backend.api.schemas.plan_import import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    ConflictPayload,
    ImportPromptResponse,
    ImportSaveRequest,
    ImportSaveResponse,
    ImportValidateRequest,
    ImportValidateResponse,
    NotificationPayload,
    ParsedPlanPayload,
    PlanSuggestionPayload,
    ValidationIssuePayload,
)
from dash_backend.db.deps import get_db
from dash_backend.services import import_prompts, plan_importer
from dash_backend.services.import_types import ParsedDomain, ParsedPlan, ParsedPlaybook, ParsedTask
from dash_backend.services.notifications.hooks import reschedule_imported_domains

router = APIRouter()


@router.post("/imports/validate", response_model=ImportValidateResponse, tags=["imports"])
def validate_import_endpoint(payload: ImportValidateRequest, http_request: Request) -> ImportValidateResponse:
    """Parse pasted plan text and return a preview plus every schema issue."""
    request_id = getattr(http_request.state, "request_id", None)
    result = plan_importer.import_from_yaml(payload.text, request_id=request_id)
    counts = Counter(issue.severity for issue in result.issues)

    return ImportValidateResponse(
        success=result.success,
        plan=ParsedPlanPayload.model_validate(asdict(result.plan)) if result.plan else None,
        issues=[ValidationIssuePayload(**asdict(issue)) for issue in result.issues],
        issue_counts={severity: counts.get(severity, 0) for severity in ("error", "warning", "info")},
        error_message=result.error_message,
        request_id=request_id or "",
    )


@router.post("/imports/conflicts", response_model=ConflictCheckResponse, tags=["imports"])
def check_conflicts_endpoint(
    payload: ConflictCheckRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> ConflictCheckResponse:
    """List domains whose current playbooks the import would replace."""
    request_id = getattr(http_request.state, "request_id", None)
    conflicts = plan_importer.check_conflicts(db, plan_from_payload(payload.plan), request_id=request_id)
    return ConflictCheckResponse(
        conflicts=[ConflictPayload(**asdict(conflict)) for conflict in conflicts],
        request_id=request_id or "",
    )


@router.post("/imports/save", response_model=ImportSaveResponse, tags=["imports"])
def save_import_endpoint(
    payload: ImportSaveRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> ImportSaveResponse:
    """Persist a reviewed plan. Failures are reported in the body, with partial counts."""
    request_id = getattr(http_request.state, "request_id", None)
    result = plan_importer.save_import(
        db,
        plan_from_payload(payload.plan),
        dict(payload.resolutions),
        request_id=request_id,
    )

    notifications = []
    if result.success:
        notifications = [
            NotificationPayload(domain_type=outcome.domain_type, status=outcome.status, reason=outcome.reason)
            for outcome in reschedule_imported_domains(db, result.saved_domain_types, request_id)
        ]

    return ImportSaveResponse(
        success=result.success,
        plan_id=result.plan_id,
        domains_created=result.domains_created,
        playbooks_created=result.playbooks_created,
        tasks_created=result.tasks_created,
        error=result.error,
        notifications=notifications,
        request_id=request_id or "",
    )


@router.get("/imports/prompts", response_model=ImportPromptResponse, tags=["imports"])
def import_prompt_endpoint(
    http_request: Request,
    context: Literal["fresh", "existing", "quick"] = Query("fresh"),
    goal: Optional[str] = Query(default=None, max_length=2000),
) -> ImportPromptResponse:
    """Return the prompt to copy into a chat, with example goals."""
    request_id = getattr(http_request.state, "request_id", None)
    if context == "quick":
        prompt = import_prompts.QUICK_EXPORT_PROMPT
    elif context == "fresh" and goal:
        prompt = import_prompts.build_fresh_start_prompt(goal)
    else:
        prompt = import_prompts.get_prompt_for_context(context == "existing")

    return ImportPromptResponse(
        context=context,
        prompt=prompt,
        suggestions=[PlanSuggestionPayload(**asdict(item)) for item in import_prompts.PLAN_SUGGESTIONS],
        request_id=request_id or "",
    )


def plan_from_payload(payload: ParsedPlanPayload) -> ParsedPlan:
    return ParsedPlan(
        name=payload.name,
        description=payload.description,
        created_date=payload.created_date,
        duration_weeks=payload.duration_weeks,
        domains=[
            ParsedDomain(
                type=domain.type,
                trigger_time=domain.trigger_time,
                playbooks=[
                    ParsedPlaybook(
                        name=playbook.name,
                        week_start=playbook.week_start,
                        week_end=playbook.week_end,
                        active_days=list(playbook.active_days) if playbook.active_days else None,
                        tasks=[
                            ParsedTask(
                                title=task.title,
                                description=task.description,
                                duration_minutes=task.duration_minutes,
                            )
                            for task in playbook.tasks
                        ],
                    )
                    for playbook in domain.playbooks
                ],
            )
            for domain in payload.domains
        ],
    )
