"""Alert store - active/resolved incident records."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update, func, case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import selectinload

from ..exceptions import DuplicateActiveAlertError
from ..models import Alert
from ..models.alert import ALERT_ACTIVE, ALERT_RESOLVED
from ..utils.clock import utcnow
from ..utils.db_utils import retry_on_lock

logger = logging.getLogger(__name__)


class AlertStore:
    """Alert rows with the one-active-alert-per-target rule."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def get_active_alert(self, target_id: int) -> Optional[Alert]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Alert)
                .where(Alert.target_id == target_id, Alert.status == ALERT_ACTIVE)
                .order_by(Alert.triggered_at.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def create_alert(
        self,
        target_id: int,
        message: str,
        now: Optional[datetime] = None,
    ) -> int:
        """Open a new active alert and return its id.

        Raises:
            DuplicateActiveAlertError: the target already has an active alert
        """
        now = now or utcnow()
        alert = Alert(
            target_id=target_id,
            message=message,
            status=ALERT_ACTIVE,
            triggered_at=now,
            last_alert_sent=now,
            alert_count=1,
        )
        async with self._session_factory() as session:
            session.add(alert)
            try:
                await retry_on_lock(session.commit)
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateActiveAlertError(target_id) from e
            return alert.id

    async def touch_alert(
        self,
        alert_id: int,
        message: str,
        sent_at: Optional[datetime] = None,
    ) -> int:
        """Replace the message and bump the count of an alert.

        last_alert_sent is only refreshed when sent_at is given. Returns the
        new alert_count.
        """
        values = {"message": message, "alert_count": Alert.alert_count + 1}
        if sent_at is not None:
            values["last_alert_sent"] = sent_at

        async with self._session_factory() as session:
            await session.execute(
                update(Alert).where(Alert.id == alert_id).values(**values)
            )
            await retry_on_lock(session.commit)
            result = await session.execute(
                select(Alert.alert_count).where(Alert.id == alert_id)
            )
            return result.scalar_one()

    async def resolve_alert(self, target_id: int, now: Optional[datetime] = None) -> bool:
        """Resolve the target's active alert. Returns False when none was active."""
        async with self._session_factory() as session:
            result = await session.execute(
                update(Alert)
                .where(Alert.target_id == target_id, Alert.status == ALERT_ACTIVE)
                .values(status=ALERT_RESOLVED, resolved_at=now or utcnow())
            )
            await retry_on_lock(session.commit)
            return (result.rowcount or 0) > 0

    async def list_alerts(
        self,
        target_id: Optional[int] = None,
        limit: int = 50,
    ) -> List[Alert]:
        """Most recent alerts first, with their target loaded."""
        query = (
            select(Alert)
            .options(selectinload(Alert.target))
            .order_by(Alert.triggered_at.desc(), Alert.id.desc())
            .limit(limit)
        )
        if target_id is not None:
            query = query.where(Alert.target_id == target_id)
        async with self._session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def list_active_alerts(
        self,
        target_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Alert]:
        query = (
            select(Alert)
            .options(selectinload(Alert.target))
            .where(Alert.status == ALERT_ACTIVE)
            .order_by(Alert.triggered_at.desc(), Alert.id.desc())
        )
        if target_id is not None:
            query = query.where(Alert.target_id == target_id)
        if limit is not None:
            query = query.limit(limit)
        async with self._session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def alert_stats(self) -> dict:
        async with self._session_factory() as session:
            result = await session.execute(
                select(
                    func.count(Alert.id),
                    func.sum(case((Alert.status == ALERT_ACTIVE, 1), else_=0)),
                    func.sum(case((Alert.status == ALERT_RESOLVED, 1), else_=0)),
                    func.avg(Alert.alert_count),
                )
            )
            total, active, resolved, avg_count = result.one()
        return {
            "total_alerts": total or 0,
            "active_alerts": active or 0,
            "resolved_alerts": resolved or 0,
            "avg_alert_count": float(avg_count) if avg_count is not None else 0.0,
        }
