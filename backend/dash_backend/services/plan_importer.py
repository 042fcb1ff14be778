"""Entry points for the plan import flow.

The flow spans three calls so the client can pause for review between them:
``import_from_yaml`` (load, validate, normalize), ``check_conflicts`` and
``save_import``. No state is kept between calls; the caller carries the
ParsedPlan from one step to the next.
"""
from __future__ import annotations

import logging
from datetime import date
from time import perf_counter
from typing import List, Mapping, Optional

from sqlalchemy.orm import Session

from dash_backend.core.config import settings
from dash_backend.observability.metrics import log_issue_metrics, log_metric
from dash_backend.observability.tracing import trace
from dash_backend.services.import_conflicts import detect_conflicts
from dash_backend.services.import_loader import load_document
from dash_backend.services.import_normalizer import normalize_plan
from dash_backend.services.import_types import ConflictInfo, ImportResult, ParsedPlan, SaveResult
from dash_backend.services.import_validator import validate_import
from dash_backend.services.import_writer import save_parsed_plan

logger = logging.getLogger(__name__)

VALIDATION_FAILED_MESSAGE = "Plan has validation errors. Please check the issues below."


def import_from_yaml(
    text: str,
    *,
    request_id: Optional[str] = None,
    today: Optional[date] = None,
) -> ImportResult:
    """Parse, validate and normalize pasted plan text."""
    start = perf_counter()
    with trace("import.validate", metadata={"text_length": len(text)}, request_id=request_id) as span:
        result = _run_import(text, today=today)
        if span:
            try:
                span.update(metadata={"success": result.success, "issue_count": len(result.issues)})
            except Exception:  # pragma: no cover - best-effort
                pass

    log_metric("import.validate.success", 1 if result.success else 0)
    log_issue_metrics(issue.severity for issue in result.issues)
    log_metric("import.validate.latency_ms", (perf_counter() - start) * 1000)
    return result


def _run_import(text: str, *, today: Optional[date]) -> ImportResult:
    loaded = load_document(text)
    if loaded.error is not None:
        return ImportResult(
            success=False,
            plan=None,
            issues=[],
            error_message=f"Could not parse YAML: {loaded.error}",
        )

    validation = validate_import(
        loaded.tree,
        max_tasks_warning=settings.import_max_tasks_warning,
        max_daily_minutes_warning=settings.import_max_daily_minutes_warning,
    )
    if not validation.is_valid or validation.data is None:
        logger.info("Import rejected with %d issue(s)", len(validation.issues))
        return ImportResult(
            success=False,
            plan=None,
            issues=validation.issues,
            error_message=VALIDATION_FAILED_MESSAGE,
        )

    plan = normalize_plan(validation.data, today=today)
    logger.info(
        "Import validated: %r with %d domain(s), %d issue(s)",
        plan.name,
        len(plan.domains),
        len(validation.issues),
    )
    return ImportResult(success=True, plan=plan, issues=validation.issues, error_message=None)


def check_conflicts(db: Session, plan: ParsedPlan, *, request_id: Optional[str] = None) -> List[ConflictInfo]:
    """Compare a reviewed plan with stored domains. Never writes."""
    with trace("import.conflicts", metadata={"domain_count": len(plan.domains)}, request_id=request_id):
        conflicts = detect_conflicts(db, plan)
    log_metric("import.conflicts.count", len(conflicts))
    return conflicts


def save_import(
    db: Session,
    plan: ParsedPlan,
    resolutions: Mapping[str, str] | None = None,
    *,
    request_id: Optional[str] = None,
) -> SaveResult:
    """Write the plan, honouring replace/skip choices per domain type."""
    start = perf_counter()
    with trace("import.save", metadata={"plan_name": plan.name}, request_id=request_id) as span:
        result = save_parsed_plan(db, plan, resolutions, import_source=settings.import_source)
        if span:
            try:
                span.update(
                    metadata={
                        "success": result.success,
                        "plan_id": str(result.plan_id) if result.plan_id else None,
                        "tasks_created": result.tasks_created,
                    }
                )
            except Exception:  # pragma: no cover - best-effort
                pass

    log_metric("import.save.success", 1 if result.success else 0)
    log_metric("import.save.tasks_created", result.tasks_created)
    log_metric("import.save.latency_ms", (perf_counter() - start) * 1000)
    return result
