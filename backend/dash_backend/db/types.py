"""Database column type helpers."""
from __future__ import annotations

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON, TypeDecorator


class JSONBCompat(TypeDecorator):
    """JSONB that falls back to native JSON on dialects like SQLite (for tests).

    With ``none_as_null`` a Python None is stored as SQL NULL rather than JSON ``null``.
    """

    impl = JSONB
    cache_ok = True

    def __init__(self, none_as_null: bool = False):
        super().__init__(none_as_null=none_as_null)
        self.none_as_null = none_as_null

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":  # pragma: no cover - dialect specific
            return dialect.type_descriptor(JSON(none_as_null=self.none_as_null))
        return dialect.type_descriptor(JSONB(none_as_null=self.none_as_null))
