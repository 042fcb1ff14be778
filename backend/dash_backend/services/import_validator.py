"""Schema checks for pasted plan documents.

Each ``_validate_*`` helper returns its own list of issues and the caller
concatenates them, so every level can be exercised on its own. Any issue with
severity ``error`` rejects the whole document; warnings and infos describe
repairs that ``normalize_plan`` will apply.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional

from dash_backend.services.import_normalizer import (
    coerce_number,
    default_trigger_time,
    normalize_days,
    normalize_duration,
    placeholder_playbook_name,
)
from dash_backend.services.import_types import (
    DEFAULT_TASK_DURATION,
    DOMAIN_TYPES,
    MAX_DAILY_MINUTES_WARNING,
    MAX_DURATION_WEEKS,
    MAX_PLAN_NAME_LENGTH,
    MAX_TASK_DURATION,
    MAX_TASK_TITLE_LENGTH,
    MAX_TASKS_PER_PLAYBOOK_WARNING,
    MIN_DURATION_WEEKS,
    MIN_TASK_DURATION,
    SUPPORTED_DASH_VERSION,
    TRIGGER_TIME_PATTERN,
    VALID_DAYS,
    ValidationIssue,
    ValidationResult,
)

_TRIGGER_TIME_RE = re.compile(TRIGGER_TIME_PATTERN)
_DOMAIN_CHOICES = ", ".join(DOMAIN_TYPES)
_DAY_CHOICES = ", ".join(VALID_DAYS)


def validate_import(
    tree: Any,
    *,
    max_tasks_warning: int = MAX_TASKS_PER_PLAYBOOK_WARNING,
    max_daily_minutes_warning: int = MAX_DAILY_MINUTES_WARNING,
) -> ValidationResult:
    """Walk a loaded document and report every deviation from the plan schema."""
    if not isinstance(tree, Mapping):
        return ValidationResult(
            is_valid=False,
            issues=[_error("root", "Import must be a valid YAML object.")],
            data=None,
        )

    issues: List[ValidationIssue] = []
    issues += _validate_version(tree)
    issues += _validate_plan_section(tree.get("plan"))
    issues += _validate_domains(
        tree.get("domains"),
        max_tasks_warning=max_tasks_warning,
        max_daily_minutes_warning=max_daily_minutes_warning,
    )

    if any(issue.severity == "error" for issue in issues):
        return ValidationResult(is_valid=False, issues=issues, data=None)
    return ValidationResult(is_valid=True, issues=issues, data=dict(tree))


def _validate_version(tree: Mapping[str, Any]) -> List[ValidationIssue]:
    version = tree.get("dash_version")
    if version is None:
        return [
            _error(
                "dash_version",
                f'Missing dash_version field. Make sure the export starts with "dash_version: {SUPPORTED_DASH_VERSION}".',
            )
        ]
    if isinstance(version, bool) or not isinstance(version, (int, float)) or version != SUPPORTED_DASH_VERSION:
        return [
            _error(
                "dash_version",
                f"Unsupported version: {version}. DASH currently supports version {SUPPORTED_DASH_VERSION}.",
            )
        ]
    return []


def _validate_plan_section(plan: Any) -> List[ValidationIssue]:
    if not isinstance(plan, Mapping):
        return [_error("plan", 'Missing plan section. The export needs a "plan:" section with name and details.')]

    issues: List[ValidationIssue] = []
    name = plan.get("name")
    if not isinstance(name, str) or not name.strip():
        issues.append(_error("plan.name", "Plan must have a name."))
    elif len(name) > MAX_PLAN_NAME_LENGTH:
        issues.append(
            ValidationIssue(
                severity="warning",
                field="plan.name",
                message=f"Plan name is very long. It will be truncated to {MAX_PLAN_NAME_LENGTH} characters.",
                auto_fixed=True,
                original_value=name,
                fixed_value=name[:MAX_PLAN_NAME_LENGTH],
            )
        )

    weeks = plan.get("duration_weeks")
    if weeks is not None:
        number = coerce_number(weeks)
        if number is None or number < MIN_DURATION_WEEKS or number > MAX_DURATION_WEEKS:
            issues.append(
                ValidationIssue(
                    severity="warning",
                    field="plan.duration_weeks",
                    message=f"Duration must be {MIN_DURATION_WEEKS}-{MAX_DURATION_WEEKS} weeks. Ignoring invalid value.",
                    auto_fixed=True,
                    original_value=weeks,
                    fixed_value=None,
                )
            )
    return issues


def _validate_domains(
    domains: Any,
    *,
    max_tasks_warning: int,
    max_daily_minutes_warning: int,
) -> List[ValidationIssue]:
    if not isinstance(domains, list):
        return [
            _error(
                "domains",
                'Missing domains array. The export needs a "domains:" section with at least one domain.',
            )
        ]
    if not domains:
        return [_error("domains", f"Domains array is empty. Add at least one domain ({_DOMAIN_CHOICES}).")]

    issues: List[ValidationIssue] = []
    seen_types: Dict[str, int] = {}
    for index, domain in enumerate(domains):
        issues += _validate_domain(
            domain,
            index,
            max_tasks_warning=max_tasks_warning,
            max_daily_minutes_warning=max_daily_minutes_warning,
        )
        domain_type = domain.get("type") if isinstance(domain, Mapping) else None
        if domain_type in DOMAIN_TYPES:
            if domain_type in seen_types:
                issues.append(
                    ValidationIssue(
                        severity="warning",
                        field=f"domains[{index}].type",
                        message=(
                            f'Domain "{domain_type}" already appears at domains[{seen_types[domain_type]}]. '
                            "The last entry of a type replaces earlier ones when saving."
                        ),
                    )
                )
            seen_types.setdefault(domain_type, index)
    return issues


def _validate_domain(
    domain: Any,
    index: int,
    *,
    max_tasks_warning: int,
    max_daily_minutes_warning: int,
) -> List[ValidationIssue]:
    prefix = f"domains[{index}]"
    if not isinstance(domain, Mapping):
        return [_error(prefix, f"Domain at index {index} is not a valid object.")]

    issues: List[ValidationIssue] = []
    domain_type = domain.get("type")
    if domain_type not in DOMAIN_TYPES:
        issues.append(
            _error(f"{prefix}.type", f'Invalid domain type: "{domain_type}". Must be one of: {_DOMAIN_CHOICES}.')
        )

    trigger_time = domain.get("trigger_time")
    if trigger_time is not None and (not isinstance(trigger_time, str) or not _TRIGGER_TIME_RE.match(trigger_time)):
        issues.append(
            ValidationIssue(
                severity="warning",
                field=f"{prefix}.trigger_time",
                message=f'Invalid time format: "{trigger_time}". Using default time instead.',
                auto_fixed=True,
                original_value=trigger_time,
                fixed_value=default_trigger_time(domain_type),
            )
        )

    playbooks = domain.get("playbooks")
    if not isinstance(playbooks, list):
        issues.append(_error(f"{prefix}.playbooks", f'Domain "{domain_type}" is missing playbooks array.'))
    elif not playbooks:
        issues.append(
            _error(
                f"{prefix}.playbooks",
                f'Domain "{domain_type}" has no playbooks. Add at least one playbook with tasks.',
            )
        )
    else:
        for playbook_index, playbook in enumerate(playbooks):
            issues += _validate_playbook(
                playbook,
                f"{prefix}.playbooks[{playbook_index}]",
                playbook_index,
                domain_type,
                max_tasks_warning=max_tasks_warning,
                max_daily_minutes_warning=max_daily_minutes_warning,
            )
    return issues


def _validate_playbook(
    playbook: Any,
    prefix: str,
    index: int,
    domain_type: Any,
    *,
    max_tasks_warning: int,
    max_daily_minutes_warning: int,
) -> List[ValidationIssue]:
    if not isinstance(playbook, Mapping):
        return [_error(prefix, f"Playbook at index {index} in {domain_type} is not valid.")]

    issues: List[ValidationIssue] = []
    name = playbook.get("name")
    has_name = isinstance(name, str) and bool(name.strip())
    label = name if has_name else placeholder_playbook_name(index)
    if not has_name:
        issues.append(
            ValidationIssue(
                severity="warning",
                field=f"{prefix}.name",
                message=f'Playbook is missing a name. Using "{label}".',
                auto_fixed=True,
                original_value=name,
                fixed_value=label,
            )
        )

    issues += _validate_days(playbook.get("days"), f"{prefix}.days")

    tasks = playbook.get("tasks")
    if not isinstance(tasks, list):
        issues.append(_error(f"{prefix}.tasks", f'Playbook "{label}" has no tasks array.'))
        return issues
    if not tasks:
        issues.append(
            _error(f"{prefix}.tasks", f'Playbook "{label}" has no tasks. Each playbook needs at least one task.')
        )
        return issues

    if len(tasks) > max_tasks_warning:
        issues.append(
            ValidationIssue(
                severity="warning",
                field=f"{prefix}.tasks",
                message=(
                    f'Playbook "{label}" has {len(tasks)} tasks. '
                    "Consider breaking it into smaller chunks for better follow-through."
                ),
            )
        )

    total_minutes = 0
    for task_index, task in enumerate(tasks):
        issues += _validate_task(task, f"{prefix}.tasks[{task_index}]", task_index)
        if isinstance(task, Mapping):
            total_minutes += normalize_duration(task.get("duration"))

    if total_minutes > max_daily_minutes_warning:
        hours = round(total_minutes / 60, 1)
        issues.append(
            ValidationIssue(
                severity="warning",
                field=prefix,
                message=(
                    f'Playbook "{label}" takes {total_minutes} minutes ({hours} hours). '
                    "That's ambitious! You can always edit it later."
                ),
            )
        )
    return issues


def _validate_days(days: Any, field: str) -> List[ValidationIssue]:
    if days is None:
        return []
    if not isinstance(days, list):
        return [
            ValidationIssue(
                severity="warning",
                field=field,
                message="Invalid days format. Ignoring and using all days.",
                auto_fixed=True,
                original_value=days,
                fixed_value=None,
            )
        ]

    invalid = [entry for entry in days if not isinstance(entry, str) or entry.strip().lower() not in VALID_DAYS]
    if not invalid:
        return []
    return [
        ValidationIssue(
            severity="warning",
            field=field,
            message=f"Invalid day names: {', '.join(str(entry) for entry in invalid)}. Valid values: {_DAY_CHOICES}.",
            auto_fixed=True,
            original_value=days,
            fixed_value=normalize_days(days),
        )
    ]


def _validate_task(task: Any, prefix: str, index: int) -> List[ValidationIssue]:
    if not isinstance(task, Mapping):
        return [_error(prefix, f"Task at index {index} is not valid.")]

    issues: List[ValidationIssue] = []
    title = task.get("title")
    if not isinstance(title, str) or not title.strip():
        issues.append(_error(f"{prefix}.title", "Task is missing a title. Every task needs a clear instruction."))
    elif len(title) > MAX_TASK_TITLE_LENGTH:
        issues.append(
            ValidationIssue(
                severity="warning",
                field=f"{prefix}.title",
                message="Task title is very long. It will be truncated.",
                auto_fixed=True,
                original_value=title,
                fixed_value=title[:MAX_TASK_TITLE_LENGTH],
            )
        )

    duration_issue = _validate_duration(task.get("duration"), f"{prefix}.duration")
    if duration_issue:
        issues.append(duration_issue)
    return issues


def _validate_duration(duration: Any, field: str) -> Optional[ValidationIssue]:
    if duration is None:
        return None
    number = coerce_number(duration)
    if number is None:
        return ValidationIssue(
            severity="info",
            field=field,
            message=f"Invalid duration. Using default of {DEFAULT_TASK_DURATION} minutes.",
            auto_fixed=True,
            original_value=duration,
            fixed_value=DEFAULT_TASK_DURATION,
        )
    if number < MIN_TASK_DURATION:
        return ValidationIssue(
            severity="info",
            field=field,
            message=f"Duration is below the minimum. Using {MIN_TASK_DURATION} minute.",
            auto_fixed=True,
            original_value=duration,
            fixed_value=MIN_TASK_DURATION,
        )
    if number > MAX_TASK_DURATION:
        return ValidationIssue(
            severity="warning",
            field=field,
            message=f"Duration of {duration} minutes exceeds maximum. Capping at {MAX_TASK_DURATION} minutes.",
            auto_fixed=True,
            original_value=duration,
            fixed_value=MAX_TASK_DURATION,
        )
    return None


def _error(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(severity="error", field=field, message=message)
