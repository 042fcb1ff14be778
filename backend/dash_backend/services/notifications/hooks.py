"""Reschedule domain reminders after an import is saved."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import List, Sequence

from sqlalchemy.orm import Session

from dash_backend.core.config import settings
from dash_backend.db.models.domain import Domain
from dash_backend.observability.metrics import log_metric
from dash_backend.observability.tracing import trace
from dash_backend.services import domain_store
from dash_backend.services.notifications.base import NotificationResult
from dash_backend.services.notifications.factory import get_notification_service

logger = logging.getLogger(__name__)


def reschedule_imported_domains(
    db: Session,
    domain_types: Sequence[str],
    request_id: str | None,
) -> List[NotificationResult]:
    """Replace reminders for each imported domain with one for its new active playbook."""
    if not settings.notifications_enabled:
        log_metric("notifications.skipped", len(domain_types), metadata={"reason": "disabled"})
        return [
            NotificationResult(status="skipped", reason="notifications disabled", domain_type=domain_type)
            for domain_type in domain_types
        ]

    service = get_notification_service()
    results: List[NotificationResult] = []
    start = perf_counter()
    with trace(
        "notifications.reschedule",
        metadata={"domain_types": list(domain_types), "provider": settings.notifications_provider},
        request_id=request_id,
    ):
        for domain_type in domain_types:
            domain = domain_store.get_domain_by_type(db, domain_type)
            if domain is None:
                results.append(NotificationResult(status="skipped", reason="domain missing", domain_type=domain_type))
                continue
            results.append(_reschedule(db, service, domain, request_id))

    log_metric("notifications.duration_ms", (perf_counter() - start) * 1000)
    log_metric(
        "notifications.sent",
        sum(1 for result in results if result.status != "skipped"),
        metadata={"provider": settings.notifications_provider},
    )
    return results


def _reschedule(db: Session, service, domain: Domain, request_id: str | None) -> NotificationResult:
    service.cancel_domain_reminders(domain_id=domain.id, domain_type=domain.type, request_id=request_id)
    if not domain.notifications_enabled:
        return NotificationResult(status="skipped", reason="domain notifications off", domain_type=domain.type)

    first_task_title = None
    if domain.active_playbook_id is not None:
        playbook = domain_store.get_playbook_by_id(db, domain.active_playbook_id)
        if playbook is not None and playbook.tasks:
            first_task_title = playbook.tasks[0].title

    logger.debug("Scheduling %s reminder at %s", domain.type, domain.trigger_time)
    return service.schedule_domain_reminder(
        domain_id=domain.id,
        domain_type=domain.type,
        trigger_time=domain.trigger_time,
        first_task_title=first_task_title,
        request_id=request_id,
    )
