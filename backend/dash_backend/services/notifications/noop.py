"""No-op notification provider (logs only)."""
from __future__ import annotations

import logging
from uuid import UUID

from dash_backend.services.notifications.base import NotificationResult, NotificationService


logger = logging.getLogger(__name__)


class NoopNotificationService(NotificationService):
    def schedule_domain_reminder(
        self,
        *,
        domain_id: UUID,
        domain_type: str,
        trigger_time: str,
        first_task_title: str | None,
        request_id: str | None,
    ) -> NotificationResult:
        logger.info(
            "Reminder scheduled (noop) domain=%s type=%s at=%s first_task=%r",
            domain_id,
            domain_type,
            trigger_time,
            first_task_title,
        )
        return NotificationResult(status="noop", reason="notification provider is noop", domain_type=domain_type)

    def cancel_domain_reminders(
        self,
        *,
        domain_id: UUID,
        domain_type: str,
        request_id: str | None,
    ) -> NotificationResult:
        logger.info("Reminders cancelled (noop) domain=%s type=%s", domain_id, domain_type)
        return NotificationResult(status="noop", reason="notification provider is noop", domain_type=domain_type)
