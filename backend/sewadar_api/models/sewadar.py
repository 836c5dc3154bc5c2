"""Sewadar (volunteer) record model"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from sewadar_api.core.database import Base
from sewadar_api.models.user import _new_id


class Sewadar(Base):
    """Volunteer record, attributed to the user who created it"""

    __tablename__ = "sewadars"

    id = Column(String(36), primary_key=True, default=_new_id)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    age = Column(Integer, nullable=True)
    badge_id = Column(String(20), nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    creator = relationship("User", back_populates="sewadars")

    __table_args__ = (
        Index('idx_sewadars_created_by', 'created_by'),
        CheckConstraint('age IS NULL OR (age >= 1 AND age <= 120)', name='chk_sewadar_age'),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<Sewadar(id='{self.id}', name='{self.full_name}')>"
