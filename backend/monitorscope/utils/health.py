"""Presentation labels derived from stored check results."""
from typing import Optional

from ..models.observation import STATUS_DOWN, STATUS_UP

LABEL_HEALTHY = "Healthy"
LABEL_DEGRADED = "Degraded"
LABEL_UNHEALTHY = "Unhealthy"
LABEL_NO_DATA = "No Data"


def health_label(
    status: Optional[str],
    response_time: Optional[int] = None,
    alert_threshold: Optional[int] = None,
) -> str:
    """Map a stored status to the label shown on dashboards.

    Precedence: No Data, then Degraded (response time above a configured
    threshold), then Unhealthy for DOWN, then Healthy for UP.
    """
    if status is None:
        return LABEL_NO_DATA
    if alert_threshold and response_time is not None and response_time > alert_threshold:
        return LABEL_DEGRADED
    if status == STATUS_DOWN:
        return LABEL_UNHEALTHY
    if status == STATUS_UP:
        return LABEL_HEALTHY
    return LABEL_NO_DATA
