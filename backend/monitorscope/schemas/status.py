"""Status overview schemas for dashboard."""
from typing import List, Optional

from pydantic import BaseModel


class TargetSummary(BaseModel):
    """Latest known state of one target."""
    id: int
    name: str
    url: str
    status: Optional[str] = None  # UP, DOWN, None when never checked
    label: str  # Healthy, Degraded, Unhealthy, No Data
    response_time: Optional[int] = None
    alert_threshold: Optional[int] = None
    last_check: Optional[str] = None
    active_alert: bool = False


class StatusOverview(BaseModel):
    """Dashboard overview data."""
    total_targets: int
    healthy: int
    degraded: int
    unhealthy: int
    no_data: int
    active_alerts: int
    targets: List[TargetSummary]
