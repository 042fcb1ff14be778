"""Read-only comparison of a parsed plan against stored domains."""
from __future__ import annotations

import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from dash_backend.services import domain_store
from dash_backend.services.import_types import ConflictInfo, ParsedDomain, ParsedPlan

logger = logging.getLogger(__name__)


def detect_conflicts(db: Session, plan: ParsedPlan) -> List[ConflictInfo]:
    """Report domains whose active playbook an import would replace.

    A stored domain without an active playbook is not a conflict. Repeated
    domain types in the plan are reported once, using the last entry, because
    that entry is the one a save keeps.
    """
    latest_by_type: Dict[str, ParsedDomain] = {}
    for parsed_domain in plan.domains:
        latest_by_type[parsed_domain.type] = parsed_domain

    conflicts: List[ConflictInfo] = []
    for domain_type, parsed_domain in latest_by_type.items():
        domain = domain_store.get_domain_by_type(db, domain_type)
        if domain is None or domain.active_playbook_id is None:
            continue

        existing_count = domain_store.count_playbooks_for_domain(db, domain.id)
        if existing_count == 0:
            continue

        active_playbook = domain_store.get_playbook_by_id(db, domain.active_playbook_id)
        conflicts.append(
            ConflictInfo(
                domain_type=domain_type,
                existing_playbook_name=active_playbook.name if active_playbook else None,
                existing_playbook_count=existing_count,
                new_playbook_count=len(parsed_domain.playbooks),
            )
        )

    logger.debug("Conflict check found %d conflicting domain(s)", len(conflicts))
    return conflicts
