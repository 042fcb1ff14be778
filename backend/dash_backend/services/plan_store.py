"""Provenance records for imported plans."""
from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from dash_backend.db.models.plan import Plan


def create_plan(
    db: Session,
    *,
    name: str,
    description: Optional[str],
    duration_weeks: Optional[int],
    import_source: Optional[str] = "chatgpt",
    import_date: Optional[date] = None,
) -> Plan:
    plan = Plan(
        name=name,
        description=description,
        duration_weeks=duration_weeks,
        current_week=1,
        import_source=import_source,
        import_date=import_date or date.today(),
    )
    db.add(plan)
    db.flush()
    return plan


def get_plan_by_id(db: Session, plan_id: UUID) -> Optional[Plan]:
    return db.get(Plan, plan_id)


def update_plan_current_week(db: Session, plan_id: UUID, week: int) -> None:
    plan = db.get(Plan, plan_id)
    if plan is None:
        raise ValueError(f"Plan {plan_id} not found")
    plan.current_week = week
    db.flush()


def list_progressing_plans(db: Session) -> List[Plan]:
    """Plans with a fixed length; only these have weeks to advance."""
    return (
        db.query(Plan)
        .filter(Plan.duration_weeks.isnot(None))
        .order_by(Plan.created_at.asc())
        .all()
    )
