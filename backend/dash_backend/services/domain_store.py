"""Domain, playbook and task queries used by the import pipeline."""
from __future__ import annotations

from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from dash_backend.db.models.domain import Domain
from dash_backend.db.models.playbook import Playbook
from dash_backend.db.models.task import Task


def get_domain_by_type(db: Session, domain_type: str) -> Optional[Domain]:
    return (
        db.query(Domain)
        .filter(Domain.type == domain_type)
        .order_by(Domain.created_at.asc())
        .first()
    )


def get_domain_by_id(db: Session, domain_id: UUID) -> Optional[Domain]:
    return db.get(Domain, domain_id)


def create_domain(db: Session, domain_type: str, trigger_time: str) -> Domain:
    domain = Domain(type=domain_type, trigger_time=trigger_time, active_playbook_id=None)
    db.add(domain)
    db.flush()
    return domain


def update_domain_trigger_time(db: Session, domain_id: UUID, trigger_time: str) -> None:
    domain = db.get(Domain, domain_id)
    if domain is None:
        raise ValueError(f"Domain {domain_id} not found")
    domain.trigger_time = trigger_time
    db.flush()


def update_domain_active_playbook(db: Session, domain_id: UUID, playbook_id: Optional[UUID]) -> None:
    domain = db.get(Domain, domain_id)
    if domain is None:
        raise ValueError(f"Domain {domain_id} not found")
    domain.active_playbook_id = playbook_id
    db.flush()


def get_playbook_by_id(db: Session, playbook_id: UUID) -> Optional[Playbook]:
    return db.get(Playbook, playbook_id)


def count_playbooks_for_domain(db: Session, domain_id: UUID) -> int:
    return db.query(func.count(Playbook.id)).filter(Playbook.domain_id == domain_id).scalar() or 0


def list_playbooks_for_domain(db: Session, domain_id: UUID, plan_id: Optional[UUID] = None) -> List[Playbook]:
    query = db.query(Playbook).filter(Playbook.domain_id == domain_id)
    if plan_id is not None:
        query = query.filter(Playbook.plan_id == plan_id)
    return query.order_by(Playbook.sort_order.asc(), Playbook.created_at.asc()).all()


def delete_playbooks_for_domain(db: Session, domain_id: UUID) -> int:
    """Delete every playbook of a domain along with its tasks."""
    playbooks = db.query(Playbook).filter(Playbook.domain_id == domain_id).all()
    for playbook in playbooks:
        db.delete(playbook)
    if playbooks:
        db.flush()
    return len(playbooks)


def create_playbook(
    db: Session,
    *,
    domain_id: UUID,
    name: str,
    plan_id: Optional[UUID],
    week_start: Optional[int],
    week_end: Optional[int],
    active_days: Optional[Sequence[str]],
    import_source: Optional[str],
    sort_order: int = 0,
) -> Playbook:
    playbook = Playbook(
        domain_id=domain_id,
        name=name,
        is_template=False,
        plan_id=plan_id,
        week_start=week_start,
        week_end=week_end,
        active_days=list(active_days) if active_days else None,
        import_source=import_source,
        sort_order=sort_order,
    )
    db.add(playbook)
    db.flush()
    return playbook


def create_task(
    db: Session,
    *,
    playbook_id: UUID,
    title: str,
    description: Optional[str],
    duration_minutes: int,
    sort_order: int,
) -> Task:
    task = Task(
        playbook_id=playbook_id,
        title=title,
        description=description,
        duration_minutes=duration_minutes,
        sort_order=sort_order,
    )
    db.add(task)
    db.flush()
    return task
