"""Lightweight metrics helpers."""
from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, Iterable, Optional

from dash_backend.observability import client as opik_client

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record a metric as a short Opik trace if tracing is enabled."""
    client = opik_client.get_opik_client()
    if not client:
        return

    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)

    try:
        metric_trace = client.trace(name=f"metric:{name}", metadata=payload)
        metric_trace.end()
    except Exception as exc:  # pragma: no cover - remote client failure
        logger.debug("Unable to record metric %s: %s", name, exc)


def log_issue_metrics(severities: Iterable[str], metadata: Optional[Dict[str, Any]] = None) -> None:
    """Emit one ``import.validate.issues`` metric per severity seen."""
    for severity, count in sorted(Counter(severities).items()):
        log_metric("import.validate.issues", count, metadata={**(metadata or {}), "severity": severity})
