"""Status overview API for dashboard."""
from fastapi import APIRouter, Depends

from ..schemas.status import StatusOverview, TargetSummary
from ..stores import AlertStore, HistoryStore, TargetStore
from ..utils.health import (
    LABEL_DEGRADED,
    LABEL_HEALTHY,
    LABEL_NO_DATA,
    LABEL_UNHEALTHY,
    health_label,
)
from .deps import get_alert_store, get_history_store, get_target_store

router = APIRouter(prefix="/api/status", tags=["status"])


@router.get("/overview", response_model=StatusOverview)
async def get_status_overview(
    targets: TargetStore = Depends(get_target_store),
    history: HistoryStore = Depends(get_history_store),
    alerts: AlertStore = Depends(get_alert_store),
):
    """Latest status of every active target with its dashboard label."""
    active_targets = await targets.list_active_targets()
    alerting = {a.target_id for a in await alerts.list_active_alerts()}

    counts = {LABEL_HEALTHY: 0, LABEL_DEGRADED: 0, LABEL_UNHEALTHY: 0, LABEL_NO_DATA: 0}
    summaries = []

    for target in active_targets:
        latest = await history.latest_observation(target.id)
        status = latest.status if latest else None
        response_time = latest.response_time if latest else None
        label = health_label(status, response_time, target.alert_threshold)
        counts[label] += 1

        summaries.append(TargetSummary(
            id=target.id,
            name=target.name,
            url=target.url,
            status=status,
            label=label,
            response_time=response_time,
            alert_threshold=target.alert_threshold,
            last_check=latest.checked_at.isoformat() if latest else None,
            active_alert=target.id in alerting,
        ))

    return StatusOverview(
        total_targets=len(active_targets),
        healthy=counts[LABEL_HEALTHY],
        degraded=counts[LABEL_DEGRADED],
        unhealthy=counts[LABEL_UNHEALTHY],
        no_data=counts[LABEL_NO_DATA],
        active_alerts=len(alerting),
        targets=summaries,
    )
