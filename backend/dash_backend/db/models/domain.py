"""Domain ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, String, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from dash_backend.db.base import Base


class Domain(Base):
    __tablename__ = "domains"
    __table_args__ = (
        CheckConstraint("type IN ('morning', 'exercise', 'evening')", name="ck_domains_type"),
        Index("ix_domains_type", "type"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    type = Column(String(length=20), nullable=False)
    trigger_time = Column(String(length=5), nullable=False)
    # Plain pointer, not a foreign key: playbooks reference domains already.
    active_playbook_id = Column(UUID(as_uuid=True), nullable=True)
    notifications_enabled = Column(Boolean, nullable=False, default=True, server_default=sa_text("true"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    playbooks = relationship(
        "Playbook",
        back_populates="domain",
        cascade="all, delete-orphan",
    )
