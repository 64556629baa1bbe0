"""Observation model - append-only health check history."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.clock import utcnow

STATUS_UP = "UP"
STATUS_DOWN = "DOWN"


class Observation(Base):
    """One recorded outcome of a health probe."""

    __tablename__ = "health_checks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    target_id = Column(Integer, ForeignKey("targets.id"), nullable=False, index=True)
    status = Column(String, nullable=False)  # UP, DOWN
    response_time = Column(Integer, nullable=True)  # ms
    checked_at = Column(DateTime, default=utcnow, index=True)

    # Relationships
    target = relationship("Target", back_populates="observations")
