"""Playbook ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from dash_backend.db.base import Base
from dash_backend.db.types import JSONBCompat


class Playbook(Base):
    __tablename__ = "playbooks"
    __table_args__ = (
        Index("ix_playbooks_domain_id", "domain_id"),
        Index("ix_playbooks_plan_id", "plan_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    domain_id = Column(UUID(as_uuid=True), ForeignKey("domains.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    is_template = Column(Boolean, nullable=False, default=False, server_default=sa_text("false"))
    plan_id = Column(UUID(as_uuid=True), ForeignKey("plans.id", ondelete="SET NULL"), nullable=True)
    week_start = Column(Integer, nullable=True)
    week_end = Column(Integer, nullable=True)
    active_days = Column(JSONBCompat(none_as_null=True), nullable=True)
    import_source = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0, server_default=sa_text("0"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    domain = relationship("Domain", back_populates="playbooks")
    tasks = relationship(
        "Task",
        back_populates="playbook",
        cascade="all, delete-orphan",
        order_by="Task.sort_order",
    )
