"""Check orchestrator - runs probe, record, alert and notify per target.

Targets are checked in parallel up to ``max_concurrent_checks``. Work for a
single target is serialized through a SingleFlight registry so the
read-modify-write on its active alert never interleaves. The registry must
be shared by every orchestrator that can run at the same time (scheduled
runs and on-demand requests).
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..config import Settings
from ..exceptions import TargetNotFoundError
from ..models import Target
from ..stores import AlertStore, HistoryStore, TargetStore
from .alert_manager import AlertManager
from .email_sender import EmailConfig
from .notifier import MailTransport, Notifier
from .probe import ProbeService
from .recorder import ResultRecorder

logger = logging.getLogger(__name__)

MAX_CONCURRENT_CHECKS = 10


class SingleFlight:
    """One asyncio lock per target id."""

    def __init__(self):
        self._locks: Dict[int, asyncio.Lock] = {}

    def lock(self, key: int) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock


@dataclass
class CheckOutcome:
    """Summary of one target's check."""
    target_id: int
    target_name: Optional[str] = None
    status: Optional[str] = None
    response_time_ms: Optional[int] = None
    error_message: Optional[str] = None
    observation_id: Optional[int] = None
    alert_action: Optional[str] = None
    alert_count: Optional[int] = None
    notified: bool = False
    error: Optional[str] = None  # set when processing the target failed


class CheckOrchestrator:
    """Runs the health check pipeline for one or all active targets."""

    def __init__(
        self,
        targets: TargetStore,
        probe: ProbeService,
        recorder: ResultRecorder,
        alert_manager: AlertManager,
        notifier: Notifier,
        single_flight: Optional[SingleFlight] = None,
        max_concurrent_checks: int = MAX_CONCURRENT_CHECKS,
    ):
        self.targets = targets
        self.probe = probe
        self.recorder = recorder
        self.alert_manager = alert_manager
        self.notifier = notifier
        self.single_flight = single_flight or SingleFlight()
        self.max_concurrent_checks = max(max_concurrent_checks, 1)

    async def run_check(self, target_id: int) -> CheckOutcome:
        """Check one active target.

        Raises:
            TargetNotFoundError: the target does not exist or is inactive
        """
        target = await self.targets.get_target(target_id)
        if target is None or not target.active:
            raise TargetNotFoundError(target_id)
        return await self._check_target(target)

    async def run_all_checks(self) -> List[CheckOutcome]:
        """Check every active target; one target's failure never stops the rest."""
        targets = await self.targets.list_active_targets()
        logger.info(f"Checking {len(targets)} active APIs...")

        semaphore = asyncio.Semaphore(self.max_concurrent_checks)

        async def check_with_limit(target: Target) -> CheckOutcome:
            async with semaphore:
                try:
                    return await self._check_target(target)
                except Exception as e:
                    logger.error(f"Error checking API {target.id} ({target.name}): {type(e).__name__}: {e}")
                    return CheckOutcome(
                        target_id=target.id,
                        target_name=target.name,
                        error=str(e) or type(e).__name__,
                    )

        outcomes = await asyncio.gather(*[check_with_limit(t) for t in targets])

        failed = sum(1 for o in outcomes if o.error)
        logger.info(f"Health check cycle completed: {len(outcomes)} checked, {failed} failed")
        return list(outcomes)

    async def _check_target(self, target: Target) -> CheckOutcome:
        async with self.single_flight.lock(target.id):
            result = await self.probe.probe(target)

            # History is written before alert logic; a failed write returns None
            observation_id = await self.recorder.record(target.id, result)

            decision = await self.alert_manager.evaluate(target, result)

            notified = False
            if decision.should_notify:
                recipients = await self.targets.list_enabled_recipients(target.id)
                notified = await self.notifier.send_alert(target, result, recipients)

        summary = f"{target.name} ({target.url}): {result.status} ({result.response_time_ms}ms)"
        if result.error_message:
            summary += f" - {result.error_message}"
        logger.info(summary)

        return CheckOutcome(
            target_id=target.id,
            target_name=target.name,
            status=result.status,
            response_time_ms=result.response_time_ms,
            error_message=result.error_message,
            observation_id=observation_id,
            alert_action=decision.action,
            alert_count=decision.alert_count,
            notified=notified,
        )


def build_orchestrator(
    session_factory: async_sessionmaker,
    settings: Settings,
    single_flight: SingleFlight,
    probe_transport: Optional[httpx.AsyncBaseTransport] = None,
    mail_transport: Optional[MailTransport] = None,
) -> CheckOrchestrator:
    """Wire an orchestrator from a session factory and settings."""
    return CheckOrchestrator(
        targets=TargetStore(session_factory),
        probe=ProbeService(timeout=settings.probe_timeout_seconds, transport=probe_transport),
        recorder=ResultRecorder(HistoryStore(session_factory)),
        alert_manager=AlertManager(AlertStore(session_factory)),
        notifier=Notifier(EmailConfig.from_settings(settings), transport=mail_transport),
        single_flight=single_flight,
        max_concurrent_checks=settings.max_concurrent_checks,
    )
