"""Recipient model - email addresses notified for a target."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.clock import utcnow


class Recipient(Base):
    """An alert email recipient attached to one target."""

    __tablename__ = "alert_recipients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    target_id = Column(Integer, ForeignKey("targets.id"), nullable=False, index=True)
    email = Column(String, nullable=False)
    name = Column(String, nullable=True)
    enabled = Column(Integer, default=1)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    target = relationship("Target", back_populates="recipients")
