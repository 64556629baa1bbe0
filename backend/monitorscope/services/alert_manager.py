"""Alert lifecycle manager - opens, updates and resolves incidents.

Each target is either without an active alert or has exactly one. A DOWN
result opens an alert or keeps the open one current; an UP result resolves
it. Re-notification is rate limited per target by ``alert_interval``:

- message and alert_count change on every failing check
- last_alert_sent changes only when a notification is due

so the count tracks failure frequency while last_alert_sent tracks
notification cadence.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..exceptions import DuplicateActiveAlertError
from ..models import Target
from ..models.target import DEFAULT_ALERT_INTERVAL_MINUTES
from ..stores import AlertStore
from ..utils.clock import utcnow
from .probe import ProbeResult

logger = logging.getLogger(__name__)

ACTION_CREATED = "created"
ACTION_UPDATED = "updated"
ACTION_RESOLVED = "resolved"
ACTION_NONE = "none"

MIN_ALERT_INTERVAL_MINUTES = 1


@dataclass
class AlertDecision:
    """What the manager did with a result and whether to notify."""
    action: str  # created, updated, resolved, none
    alert_id: Optional[int] = None
    alert_count: Optional[int] = None
    should_notify: bool = False


def build_alert_message(target: Target, result: ProbeResult) -> str:
    return f"API {target.name} is DOWN: {result.error_message or 'Unknown error'}"


def effective_interval(alert_interval: Optional[int]) -> int:
    """Re-notify interval in minutes, defaulted and clamped to the minimum."""
    return max(alert_interval or DEFAULT_ALERT_INTERVAL_MINUTES, MIN_ALERT_INTERVAL_MINUTES)


def renotify_due(
    last_alert_sent: Optional[datetime],
    interval_minutes: int,
    now: datetime,
) -> bool:
    """True when no notification was sent yet or the interval has elapsed."""
    if last_alert_sent is None:
        return True
    minutes_since = (now - last_alert_sent).total_seconds() / 60
    return minutes_since >= interval_minutes


class AlertManager:
    """Applies one probe result to a target's alert state."""

    def __init__(self, alerts: AlertStore, clock: Callable[[], datetime] = utcnow):
        self.alerts = alerts
        self._clock = clock

    async def evaluate(self, target: Target, result: ProbeResult) -> AlertDecision:
        if result.is_up:
            return await self._handle_up(target)
        return await self._handle_down(target, result)

    async def _handle_up(self, target: Target) -> AlertDecision:
        resolved = await self.alerts.resolve_alert(target.id, self._clock())
        if resolved:
            logger.info(f"Alert resolved for {target.name}")
            return AlertDecision(action=ACTION_RESOLVED)
        return AlertDecision(action=ACTION_NONE)

    async def _handle_down(self, target: Target, result: ProbeResult) -> AlertDecision:
        now = self._clock()
        message = build_alert_message(target, result)

        active = await self.alerts.get_active_alert(target.id)
        if active is None:
            try:
                alert_id = await self.alerts.create_alert(target.id, message, now)
                logger.info(f"Alert opened for {target.name}: {message}")
                return AlertDecision(
                    action=ACTION_CREATED,
                    alert_id=alert_id,
                    alert_count=1,
                    should_notify=True,
                )
            except DuplicateActiveAlertError:
                # Another writer opened the alert first; update that one instead
                logger.warning(f"Active alert for {target.name} created concurrently, updating it")
                active = await self.alerts.get_active_alert(target.id)
                if active is None:
                    raise

        interval = effective_interval(target.alert_interval)
        due = renotify_due(active.last_alert_sent, interval, now)
        alert_count = await self.alerts.touch_alert(
            active.id,
            message,
            sent_at=now if due else None,
        )

        if due:
            logger.info(f"Re-notifying for {target.name} (interval: {interval}min, count: {alert_count})")
        else:
            logger.info(f"Alert skipped for {target.name} (interval: {interval}min, count: {alert_count})")

        return AlertDecision(
            action=ACTION_UPDATED,
            alert_id=active.id,
            alert_count=alert_count,
            should_notify=due,
        )
