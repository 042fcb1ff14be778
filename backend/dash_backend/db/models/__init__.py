"""ORM models exposed for metadata discovery."""
from dash_backend.db.models.domain import Domain
from dash_backend.db.models.plan import Plan
from dash_backend.db.models.playbook import Playbook
from dash_backend.db.models.task import Task

__all__ = [
    "Domain",
    "Plan",
    "Playbook",
    "Task",
]
