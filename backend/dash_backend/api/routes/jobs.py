"""Operational endpoints for scheduler jobs."""
from __future__ import annotations

from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from dash_backend.api.schemas.jobs import JobRunRequest, JobRunResponse
from dash_backend.core.config import settings
from dash_backend.db.deps import get_db
from dash_backend.observability.metrics import log_metric
from dash_backend.observability.tracing import trace
from dash_backend.services.week_progression import advance_plan_weeks

router = APIRouter()


@router.get("/jobs", tags=["jobs"])
def get_jobs_config(request: Request) -> dict:
    request_id = getattr(request.state, "request_id", None)
    return {
        "scheduler_enabled": settings.scheduler_enabled,
        "schedule": {
            "timezone": settings.scheduler_timezone,
            "week_progression_day": settings.week_progression_day,
            "week_progression_time": f"{settings.week_progression_hour:02d}:{settings.week_progression_minute:02d}",
        },
        "request_id": request_id or "",
    }


@router.post("/jobs/week-progression", response_model=JobRunResponse, tags=["jobs"])
def run_week_progression_now(
    request: Request,
    payload: JobRunRequest,
    db: Session = Depends(get_db),
) -> JobRunResponse:
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Run-now only allowed in debug mode")

    request_id = getattr(request.state, "request_id", None)
    start = perf_counter()
    with trace("jobs.week_progression", metadata={"job": payload.job}, request_id=request_id):
        result = advance_plan_weeks(db, today=payload.today)

    log_metric("jobs.week_progression.plans_advanced", result.plans_advanced)
    log_metric("jobs.week_progression.latency_ms", (perf_counter() - start) * 1000)

    return JobRunResponse(
        job=payload.job,
        plans_checked=result.plans_checked,
        plans_advanced=result.plans_advanced,
        domains_updated=result.domains_updated,
        request_id=request_id or "",
    )
