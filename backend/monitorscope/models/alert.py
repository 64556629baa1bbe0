"""Alert model - one incident record per outage."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.clock import utcnow

ALERT_ACTIVE = "active"
ALERT_RESOLVED = "resolved"


class Alert(Base):
    """Open or resolved incident for a target.

    At most one row per target may be active; the partial unique index
    rejects a second active row.
    """

    __tablename__ = "alerts"
    __table_args__ = (
        Index(
            "uq_alerts_one_active_per_target",
            "target_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    target_id = Column(Integer, ForeignKey("targets.id"), nullable=False, index=True)
    message = Column(String, nullable=False)
    status = Column(String, nullable=False, default=ALERT_ACTIVE)  # active, resolved
    triggered_at = Column(DateTime, default=utcnow)
    resolved_at = Column(DateTime, nullable=True)
    last_alert_sent = Column(DateTime, nullable=True)
    alert_count = Column(Integer, nullable=False, default=1)

    # Relationships
    target = relationship("Target", back_populates="alerts")
