"""Read access to imported plan records."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from dash_backend.api.schemas.plan import PlanResponse
from dash_backend.db.deps import get_db
from dash_backend.observability.tracing import trace
from dash_backend.services.plan_store import get_plan_by_id

router = APIRouter()


@router.get("/plans/{plan_id}", response_model=PlanResponse, tags=["plans"])
def get_plan_endpoint(plan_id: UUID, http_request: Request, db: Session = Depends(get_db)) -> PlanResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("plans.get", metadata={"plan_id": str(plan_id)}, request_id=request_id):
        plan = get_plan_by_id(db, plan_id)
    if not plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")

    return PlanResponse(
        id=plan.id,
        name=plan.name,
        description=plan.description,
        duration_weeks=plan.duration_weeks,
        current_week=plan.current_week,
        import_source=plan.import_source,
        import_date=plan.import_date,
        request_id=request_id or "",
    )
