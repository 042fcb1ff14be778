"""Convert a validated plan document into bounded, default-filled dataclasses.

Every helper here re-applies its bounds, so ``normalize_plan`` stays safe even
when called on a tree that never went through the validator.
"""
from __future__ import annotations

import math
import re
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from dash_backend.services.import_types import (
    DEFAULT_TASK_DURATION,
    DEFAULT_TRIGGER_TIMES,
    DOMAIN_TYPES,
    FALLBACK_TRIGGER_TIME,
    MAX_DURATION_WEEKS,
    MAX_PLAN_DESCRIPTION_LENGTH,
    MAX_PLAN_NAME_LENGTH,
    MAX_PLAYBOOK_NAME_LENGTH,
    MAX_TASK_DESCRIPTION_LENGTH,
    MAX_TASK_DURATION,
    MAX_TASK_TITLE_LENGTH,
    MIN_DURATION_WEEKS,
    MIN_TASK_DURATION,
    TRIGGER_TIME_PATTERN,
    VALID_DAYS,
    ParsedDomain,
    ParsedPlan,
    ParsedPlaybook,
    ParsedTask,
)

_TRIGGER_TIME_RE = re.compile(TRIGGER_TIME_PATTERN)


def coerce_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it is not numeric."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def default_trigger_time(domain_type: Any) -> str:
    if not isinstance(domain_type, str):
        return FALLBACK_TRIGGER_TIME
    return DEFAULT_TRIGGER_TIMES.get(domain_type, FALLBACK_TRIGGER_TIME)


def normalize_trigger_time(value: Any, domain_type: str) -> str:
    """Zero-pad a valid ``H:MM``/``HH:MM`` time, else use the domain default."""
    if not isinstance(value, str):
        return default_trigger_time(domain_type)
    match = _TRIGGER_TIME_RE.match(value)
    if not match:
        return default_trigger_time(domain_type)
    return f"{match.group(1).zfill(2)}:{match.group(2)}"


def normalize_duration(value: Any) -> int:
    """Round half up and clamp to [1, 120]; missing or non-numeric means the default."""
    number = coerce_number(value)
    if number is None:
        return DEFAULT_TASK_DURATION
    if number < MIN_TASK_DURATION:
        return MIN_TASK_DURATION
    if number > MAX_TASK_DURATION:
        return MAX_TASK_DURATION
    return int(math.floor(number + 0.5))


def normalize_duration_weeks(value: Any) -> Optional[int]:
    number = coerce_number(value)
    if number is None or number < MIN_DURATION_WEEKS or number > MAX_DURATION_WEEKS:
        return None
    return int(math.floor(number))


def normalize_week_number(value: Any) -> Optional[int]:
    number = coerce_number(value)
    if number is None or number < 1 or math.isinf(number):
        return None
    return int(math.floor(number))


def normalize_days(value: Any) -> Optional[List[str]]:
    """Keep valid day codes in document order; none or all seven means no restriction."""
    if not isinstance(value, list):
        return None
    days: List[str] = []
    for entry in value:
        code = str(entry).strip().lower()
        if code in VALID_DAYS and code not in days:
            days.append(code)
    if not days or len(days) == len(VALID_DAYS):
        return None
    return days


def placeholder_playbook_name(index: int) -> str:
    return f"Playbook {index + 1}"


def normalize_playbook_name(value: Any, index: int) -> str:
    if not isinstance(value, str) or not value.strip():
        return placeholder_playbook_name(index)
    return value[:MAX_PLAYBOOK_NAME_LENGTH]


def _optional_text(value: Any, limit: int) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text[:limit] if text else None


def _created_date(value: Any, today: date) -> str:
    if isinstance(value, date):
        return value.isoformat()[:10]
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()).isoformat()
        except ValueError:
            return today.isoformat()
    return today.isoformat()


def normalize_task(task: Mapping[str, Any]) -> ParsedTask:
    title = task.get("title")
    if not isinstance(title, str) or not title.strip():
        title = "Untitled Task"
    return ParsedTask(
        title=title[:MAX_TASK_TITLE_LENGTH],
        description=_optional_text(task.get("description"), MAX_TASK_DESCRIPTION_LENGTH),
        duration_minutes=normalize_duration(task.get("duration")),
    )


def normalize_playbook(playbook: Mapping[str, Any], index: int) -> ParsedPlaybook:
    tasks = playbook.get("tasks")
    return ParsedPlaybook(
        name=normalize_playbook_name(playbook.get("name"), index),
        week_start=normalize_week_number(playbook.get("week_start")),
        week_end=normalize_week_number(playbook.get("week_end")),
        active_days=normalize_days(playbook.get("days")),
        tasks=[normalize_task(task) for task in _mappings(tasks)],
    )


def normalize_domain(domain: Mapping[str, Any]) -> ParsedDomain:
    domain_type = domain["type"]
    return ParsedDomain(
        type=domain_type,
        trigger_time=normalize_trigger_time(domain.get("trigger_time"), domain_type),
        playbooks=[
            normalize_playbook(playbook, index)
            for index, playbook in enumerate(domain.get("playbooks") or [])
            if isinstance(playbook, Mapping)
        ],
    )


def normalize_plan(data: Mapping[str, Any], *, today: date | None = None) -> ParsedPlan:
    """Build the ParsedPlan for a document that already passed validation."""
    plan: Mapping[str, Any] = data.get("plan") if isinstance(data.get("plan"), Mapping) else {}
    name = plan.get("name")
    if not isinstance(name, str) or not name.strip():
        name = "Imported Plan"

    domains = [
        normalize_domain(domain)
        for domain in _mappings(data.get("domains"))
        if domain.get("type") in DOMAIN_TYPES
    ]
    return ParsedPlan(
        name=name[:MAX_PLAN_NAME_LENGTH],
        description=_optional_text(plan.get("description"), MAX_PLAN_DESCRIPTION_LENGTH),
        created_date=_created_date(plan.get("created"), today or date.today()),
        duration_weeks=normalize_duration_weeks(plan.get("duration_weeks")),
        domains=domains,
    )


def _mappings(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]
