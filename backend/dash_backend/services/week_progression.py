"""Advance multi-week plans and repoint each domain at the right playbook."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from dash_backend.db.models.domain import Domain
from dash_backend.db.models.playbook import Playbook
from dash_backend.services import domain_store, plan_store
from dash_backend.services.import_types import VALID_DAYS

logger = logging.getLogger(__name__)


@dataclass
class WeekProgressionResult:
    plans_checked: int
    plans_advanced: int
    domains_updated: int


def day_code(day: date) -> str:
    return VALID_DAYS[day.weekday()]


def week_start(day: date) -> date:
    """Monday of the calendar week containing ``day``."""
    return day - timedelta(days=day.weekday())


def find_best_playbook(playbooks: Sequence[Playbook], current_week: int, today_code: str) -> Optional[Playbook]:
    """Pick the playbook for ``current_week`` and ``today_code``.

    Week windows are inclusive; a missing start means every week and a missing
    end means the start week only. Day matches win over week-only matches, and
    among candidates the one with the latest ``week_start`` is the most specific.
    """
    if not playbooks:
        return None

    week_matches = [playbook for playbook in playbooks if _in_week(playbook, current_week)]
    day_matches = [
        playbook for playbook in week_matches if not playbook.active_days or today_code in playbook.active_days
    ]
    candidates = day_matches or week_matches
    if not candidates:
        return playbooks[0]

    best = candidates[0]
    for candidate in candidates[1:]:
        if (candidate.week_start or 0) > (best.week_start or 0):
            best = candidate
    return best


def _in_week(playbook: Playbook, current_week: int) -> bool:
    if playbook.week_start is None:
        return True
    last_week = playbook.week_end or playbook.week_start
    return playbook.week_start <= current_week <= last_week


def refresh_active_playbooks_for_plan(db: Session, plan_id: UUID, current_week: int, today: date) -> int:
    """Point every domain holding this plan's playbooks at its best match."""
    domain_ids = [
        row[0]
        for row in db.query(Playbook.domain_id).filter(Playbook.plan_id == plan_id).distinct().all()
    ]
    updated = 0
    for domain_id in domain_ids:
        playbooks = domain_store.list_playbooks_for_domain(db, domain_id, plan_id=plan_id)
        best = find_best_playbook(playbooks, current_week, day_code(today))
        domain = db.get(Domain, domain_id)
        if best is None or domain is None or domain.active_playbook_id == best.id:
            continue
        domain_store.update_domain_active_playbook(db, domain_id, best.id)
        updated += 1
        logger.info("Domain %s now uses playbook %r (week %d)", domain.type, best.name, current_week)
    return updated


def advance_plan_weeks(db: Session, today: Optional[date] = None) -> WeekProgressionResult:
    """Move each unfinished multi-week plan forward by at most one week per calendar week."""
    today = today or date.today()
    this_week = week_start(today)
    plans = plan_store.list_progressing_plans(db)
    advanced = 0
    domains_updated = 0

    for plan in plans:
        if plan.week_advanced_on is None:
            # First run after import: the import week is week 1.
            plan.week_advanced_on = week_start(plan.import_date or today)
        if week_start(plan.week_advanced_on) >= this_week:
            continue
        if plan.current_week >= (plan.duration_weeks or 0):
            continue

        plan_store.update_plan_current_week(db, plan.id, plan.current_week + 1)
        plan.week_advanced_on = today
        advanced += 1
        logger.info("Plan %r advanced to week %d", plan.name, plan.current_week)
        domains_updated += refresh_active_playbooks_for_plan(db, plan.id, plan.current_week, today)

    db.commit()
    return WeekProgressionResult(plans_checked=len(plans), plans_advanced=advanced, domains_updated=domains_updated)
