"""Target model - HTTP endpoints being monitored."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.clock import utcnow

DEFAULT_ALERT_INTERVAL_MINUTES = 15


class Target(Base):
    """A monitored API endpoint with its own alerting configuration."""

    __tablename__ = "targets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    url = Column(String, nullable=False)
    description = Column(String, nullable=True)
    category = Column(String, nullable=True)
    environment = Column(String, nullable=True)  # production, staging, ...
    headers = Column(String, nullable=True)  # JSON object of custom request headers
    expected_response_time = Column(Integer, nullable=True)  # ms
    alert_threshold = Column(Integer, nullable=True)  # ms, NULL/0 = not configured
    alert_interval = Column(Integer, default=DEFAULT_ALERT_INTERVAL_MINUTES)  # minutes
    active = Column(Integer, default=1)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    observations = relationship("Observation", back_populates="target")
    alerts = relationship("Alert", back_populates="target")
    recipients = relationship("Recipient", back_populates="target")
