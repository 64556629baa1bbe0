"""Alert schemas for API."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AlertResponse(BaseModel):
    """Alert with the name and url of its target."""
    id: int
    target_id: int
    target_name: Optional[str] = None
    target_url: Optional[str] = None
    message: str
    status: str  # active, resolved
    triggered_at: datetime
    resolved_at: Optional[datetime] = None
    last_alert_sent: Optional[datetime] = None
    alert_count: int


class AlertStats(BaseModel):
    total_alerts: int
    active_alerts: int
    resolved_alerts: int
    avg_alert_count: float


class ResolveRequest(BaseModel):
    target_id: int


class ResolveResponse(BaseModel):
    resolved: bool
    message: str
