"""Audit log model - append-only record of mutating actions."""

from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Text, Index
from sqlalchemy.sql import func

from sewadar_api.core.database import Base
from sewadar_api.models.user import _new_id


class AuditLog(Base):
    """Immutable audit records.

    actor_id is not a foreign key; rows are never rewritten when users
    are updated or removed.
    """

    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=_new_id)
    action = Column(String(32), nullable=False, index=True)
    actor_id = Column(String(36), nullable=False, index=True)
    entity_type = Column(String(32), nullable=False, index=True)
    entity_id = Column(String(36), nullable=True)
    detail = Column(Text, nullable=True)
    ip_address = Column(String(64), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_audit_logs_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<AuditLog(id='{self.id}', action='{self.action}', actor_id='{self.actor_id}')>"
