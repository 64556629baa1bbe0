"""Alert API - listing, statistics and manual resolution."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..models import Alert
from ..schemas.alert import AlertResponse, AlertStats, ResolveRequest, ResolveResponse
from ..stores import AlertStore
from .deps import get_alert_store, require_admin

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


def _alert_response(alert: Alert) -> AlertResponse:
    return AlertResponse(
        id=alert.id,
        target_id=alert.target_id,
        target_name=alert.target.name if alert.target else None,
        target_url=alert.target.url if alert.target else None,
        message=alert.message,
        status=alert.status,
        triggered_at=alert.triggered_at,
        resolved_at=alert.resolved_at,
        last_alert_sent=alert.last_alert_sent,
        alert_count=alert.alert_count,
    )


@router.get("", response_model=List[AlertResponse])
async def list_alerts(
    target_id: Optional[int] = Query(None),
    unresolved: bool = Query(False),
    limit: int = Query(50, ge=1, le=500),
    alerts: AlertStore = Depends(get_alert_store),
):
    """List alerts for one target, only active alerts, or the most recent alerts."""
    if unresolved:
        rows = await alerts.list_active_alerts(target_id, limit)
    else:
        rows = await alerts.list_alerts(target_id, limit)
    return [_alert_response(a) for a in rows]


@router.get("/stats", response_model=AlertStats)
async def get_alert_stats(alerts: AlertStore = Depends(get_alert_store)):
    return AlertStats(**await alerts.alert_stats())


@router.put("", response_model=ResolveResponse, dependencies=[Depends(require_admin)])
async def resolve_alert(
    payload: ResolveRequest,
    alerts: AlertStore = Depends(get_alert_store),
):
    """Manually resolve the active alert of a target."""
    resolved = await alerts.resolve_alert(payload.target_id)
    if resolved:
        return ResolveResponse(resolved=True, message="Alert resolved successfully")
    return ResolveResponse(resolved=False, message="No active alert found for this API")
