"""Notification service interface."""
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass
class NotificationResult:
    status: str
    reason: str
    domain_type: str | None = None


class NotificationService:
    """Base interface for reminder providers."""

    def schedule_domain_reminder(
        self,
        *,
        domain_id: UUID,
        domain_type: str,
        trigger_time: str,
        first_task_title: str | None,
        request_id: str | None,
    ) -> NotificationResult:
        raise NotImplementedError

    def cancel_domain_reminders(
        self,
        *,
        domain_id: UUID,
        domain_type: str,
        request_id: str | None,
    ) -> NotificationResult:
        raise NotImplementedError
