"""Types and constants shared by the plan import pipeline."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

DomainType = Literal["morning", "exercise", "evening"]
Severity = Literal["error", "warning", "info"]
Resolution = Literal["replace", "skip"]

SUPPORTED_DASH_VERSION = 1

DOMAIN_TYPES: tuple[str, ...] = ("morning", "exercise", "evening")
VALID_DAYS: tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

DEFAULT_TRIGGER_TIMES: Dict[str, str] = {
    "morning": "07:00",
    "exercise": "17:00",
    "evening": "21:00",
}
FALLBACK_TRIGGER_TIME = "07:00"

DEFAULT_TASK_DURATION = 5
MIN_TASK_DURATION = 1
MAX_TASK_DURATION = 120

MAX_PLAN_NAME_LENGTH = 100
MAX_PLAN_DESCRIPTION_LENGTH = 500
MAX_PLAYBOOK_NAME_LENGTH = 50
MAX_TASK_TITLE_LENGTH = 200
MAX_TASK_DESCRIPTION_LENGTH = 500
MIN_DURATION_WEEKS = 1
MAX_DURATION_WEEKS = 52

MAX_TASKS_PER_PLAYBOOK_WARNING = 10
MAX_DAILY_MINUTES_WARNING = 120

TRIGGER_TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$"


@dataclass
class ValidationIssue:
    """One deviation between the pasted document and the expected schema."""

    severity: Severity
    field: str
    message: str
    auto_fixed: bool = False
    original_value: Any = None
    fixed_value: Any = None

    def __post_init__(self) -> None:
        self.original_value = json_safe(self.original_value)
        self.fixed_value = json_safe(self.fixed_value)


def json_safe(value: Any) -> Any:
    """Reduce a loaded YAML value to types every JSON encoder accepts.

    Scalars without a JSON form, such as ``!!binary`` bytes, become their ``repr``.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(item) for item in value]
    return repr(value)


@dataclass
class ValidationResult:
    is_valid: bool
    issues: List[ValidationIssue]
    data: Optional[Dict[str, Any]]


@dataclass
class ParsedTask:
    title: str
    description: Optional[str]
    duration_minutes: int


@dataclass
class ParsedPlaybook:
    name: str
    week_start: Optional[int]
    week_end: Optional[int]
    active_days: Optional[List[str]]  # None means every day
    tasks: List[ParsedTask]


@dataclass
class ParsedDomain:
    type: str
    trigger_time: str
    playbooks: List[ParsedPlaybook]


@dataclass
class ParsedPlan:
    name: str
    description: Optional[str]
    created_date: str
    duration_weeks: Optional[int]
    domains: List[ParsedDomain]


@dataclass
class ImportResult:
    success: bool
    plan: Optional[ParsedPlan]
    issues: List[ValidationIssue]
    error_message: Optional[str]


@dataclass
class ConflictInfo:
    domain_type: str
    existing_playbook_name: Optional[str]
    existing_playbook_count: int
    new_playbook_count: int


@dataclass
class SaveResult:
    success: bool
    plan_id: Optional[UUID] = None
    domains_created: int = 0
    playbooks_created: int = 0
    tasks_created: int = 0
    error: Optional[str] = None
    saved_domain_types: List[str] = field(default_factory=list)
