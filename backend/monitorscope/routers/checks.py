"""Health check API - history listing and the check trigger."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..exceptions import TargetNotFoundError
from ..schemas.check import (
    CheckOutcomeResponse,
    CheckRequest,
    CheckRunResponse,
    HealthCheckRecord,
)
from ..services.orchestrator import CheckOrchestrator
from ..stores import HistoryStore
from .deps import get_history_store, get_orchestrator, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health-checks", tags=["health-checks"])


@router.get("", response_model=List[HealthCheckRecord])
async def list_health_checks(
    target_id: Optional[int] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    history: HistoryStore = Depends(get_history_store),
):
    """List recorded health checks, newest first."""
    return await history.list_observations(target_id, limit)


@router.post("/check", response_model=CheckRunResponse, dependencies=[Depends(require_admin)])
async def trigger_check(
    payload: Optional[CheckRequest] = None,
    orchestrator: CheckOrchestrator = Depends(get_orchestrator),
):
    """Run the check for one target, or for every active target."""
    target_id = payload.target_id if payload else None

    if target_id is not None:
        try:
            outcome = await orchestrator.run_check(target_id)
        except TargetNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return CheckRunResponse(
            success=True,
            message=f"Health check completed for API {target_id}",
            results=[CheckOutcomeResponse.model_validate(outcome, from_attributes=True)],
        )

    outcomes = await orchestrator.run_all_checks()
    return CheckRunResponse(
        success=all(o.error is None for o in outcomes),
        message="Health checks completed for all active APIs",
        results=[CheckOutcomeResponse.model_validate(o, from_attributes=True) for o in outcomes],
    )
