"""Health check schemas for API."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class HealthCheckRecord(BaseModel):
    """A stored observation."""
    id: int
    target_id: int
    status: str  # UP, DOWN
    response_time: Optional[int] = None
    checked_at: datetime

    class Config:
        from_attributes = True


class CheckRequest(BaseModel):
    """Trigger a check for one target, or all active targets when omitted."""
    target_id: Optional[int] = None


class CheckOutcomeResponse(BaseModel):
    """Result of checking one target."""
    target_id: int
    target_name: Optional[str] = None
    status: Optional[str] = None
    response_time_ms: Optional[int] = None
    error_message: Optional[str] = None
    alert_action: Optional[str] = None
    alert_count: Optional[int] = None
    notified: bool = False
    error: Optional[str] = None

    class Config:
        from_attributes = True


class CheckRunResponse(BaseModel):
    """Response from a triggered check run."""
    success: bool
    message: str
    results: List[CheckOutcomeResponse] = []
