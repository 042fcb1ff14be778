"""Write a parsed plan into domains, playbooks and tasks."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from dash_backend.core.context import import_scope
from dash_backend.services import domain_store, plan_store
from dash_backend.services.import_types import ParsedDomain, ParsedPlan, ParsedPlaybook, SaveResult

logger = logging.getLogger(__name__)

ALL_SKIPPED_MESSAGE = "All domains were skipped. Nothing to import."


@dataclass
class _DomainOutcome:
    created: bool
    playbooks_created: int
    tasks_created: int


def save_parsed_plan(
    db: Session,
    plan: ParsedPlan,
    resolutions: Mapping[str, str] | None = None,
    *,
    import_source: Optional[str] = "chatgpt",
) -> SaveResult:
    """Persist ``plan`` and report how much of it was committed.

    Domains resolved as ``skip`` are dropped before anything is written; any
    other domain replaces the stored playbooks of its type. The plan record is
    committed first, then each domain in its own commit, so a failure leaves
    earlier domains in place and the returned counts describe exactly those.
    This function does not raise: failures come back as ``success=False``.
    """
    resolutions = resolutions or {}
    domains = [domain for domain in plan.domains if resolutions.get(domain.type) != "skip"]
    if not domains:
        logger.info("Import of %r aborted: every domain was skipped", plan.name)
        return SaveResult(success=False, error=ALL_SKIPPED_MESSAGE)

    result = SaveResult(success=False)
    try:
        plan_record = plan_store.create_plan(
            db,
            name=plan.name,
            description=plan.description,
            duration_weeks=plan.duration_weeks,
            import_source=import_source,
        )
        db.commit()
        result.plan_id = plan_record.id

        with import_scope(str(plan_record.id)):
            for parsed_domain in domains:
                outcome = _save_domain(db, parsed_domain, plan_record.id, import_source)
                db.commit()
                if outcome.created:
                    result.domains_created += 1
                result.playbooks_created += outcome.playbooks_created
                result.tasks_created += outcome.tasks_created
                if parsed_domain.type not in result.saved_domain_types:
                    result.saved_domain_types.append(parsed_domain.type)
                logger.info(
                    "Imported %s domain: %d playbook(s), %d task(s)",
                    parsed_domain.type,
                    outcome.playbooks_created,
                    outcome.tasks_created,
                )
    except Exception as exc:
        db.rollback()
        logger.exception("Failed to save imported plan %r", plan.name)
        result.error = str(exc) or "Unknown error saving plan"
        return result

    result.success = True
    return result


def _save_domain(
    db: Session,
    parsed_domain: ParsedDomain,
    plan_id: UUID,
    import_source: Optional[str],
) -> _DomainOutcome:
    created = False
    domain = domain_store.get_domain_by_type(db, parsed_domain.type)
    if domain is not None:
        domain_store.update_domain_trigger_time(db, domain.id, parsed_domain.trigger_time)
        # The stored pointer would dangle once the playbooks below are gone.
        domain_store.update_domain_active_playbook(db, domain.id, None)
        removed = domain_store.delete_playbooks_for_domain(db, domain.id)
        if removed:
            logger.info("Replaced %d existing %s playbook(s)", removed, parsed_domain.type)
    else:
        domain = domain_store.create_domain(db, parsed_domain.type, parsed_domain.trigger_time)
        created = True

    playbook_ids: List[UUID] = []
    tasks_created = 0
    for position, parsed_playbook in enumerate(parsed_domain.playbooks):
        playbook_id, task_count = _save_playbook(db, parsed_playbook, position, domain.id, plan_id, import_source)
        playbook_ids.append(playbook_id)
        tasks_created += task_count

    # Week/day targeting is left to week progression; document order decides here.
    if playbook_ids:
        domain_store.update_domain_active_playbook(db, domain.id, playbook_ids[0])

    return _DomainOutcome(created=created, playbooks_created=len(playbook_ids), tasks_created=tasks_created)


def _save_playbook(
    db: Session,
    parsed_playbook: ParsedPlaybook,
    position: int,
    domain_id: UUID,
    plan_id: UUID,
    import_source: Optional[str],
) -> tuple[UUID, int]:
    playbook = domain_store.create_playbook(
        db,
        domain_id=domain_id,
        name=parsed_playbook.name,
        plan_id=plan_id,
        week_start=parsed_playbook.week_start,
        week_end=parsed_playbook.week_end,
        active_days=parsed_playbook.active_days,
        import_source=import_source,
        sort_order=position,
    )
    for sort_order, parsed_task in enumerate(parsed_playbook.tasks):
        domain_store.create_task(
            db,
            playbook_id=playbook.id,
            title=parsed_task.title,
            description=parsed_task.description,
            duration_minutes=parsed_task.duration_minutes,
            sort_order=sort_order,
        )
    return playbook.id, len(parsed_playbook.tasks)
