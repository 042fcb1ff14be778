"""Imported plan provenance model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, Integer, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from dash_backend.db.base import Base


class Plan(Base):
    __tablename__ = "plans"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    duration_weeks = Column(Integer, nullable=True)
    current_week = Column(Integer, nullable=False, default=1, server_default=sa_text("1"))
    import_source = Column(Text, nullable=True)
    import_date = Column(Date, nullable=True)
    week_advanced_on = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
