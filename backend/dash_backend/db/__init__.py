"""Database utilities and models."""

from dash_backend.db.base import Base
from dash_backend.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
