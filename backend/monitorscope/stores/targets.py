"""Configuration store - targets and their alert recipients."""
import json
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..models import Target, Recipient
from ..models.target import DEFAULT_ALERT_INTERVAL_MINUTES
from ..utils.db_utils import retry_on_lock

logger = logging.getLogger(__name__)


class TargetStore:
    """Read access to monitored targets plus the writes used for seeding."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def list_active_targets(self) -> List[Target]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Target).where(Target.active == 1).order_by(Target.id)
            )
            return list(result.scalars().all())

    async def get_target(self, target_id: int) -> Optional[Target]:
        async with self._session_factory() as session:
            result = await session.execute(select(Target).where(Target.id == target_id))
            return result.scalar_one_or_none()

    async def list_enabled_recipients(self, target_id: int) -> List[Recipient]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Recipient)
                .where(Recipient.target_id == target_id, Recipient.enabled == 1)
                .order_by(Recipient.id)
            )
            return list(result.scalars().all())

    async def create_target(
        self,
        name: str,
        url: str,
        headers: Optional[dict] = None,
        alert_threshold: Optional[int] = None,
        alert_interval: int = DEFAULT_ALERT_INTERVAL_MINUTES,
        expected_response_time: Optional[int] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
        environment: Optional[str] = None,
        active: bool = True,
    ) -> Target:
        """Create a target. Headers are stored as a JSON object."""
        target = Target(
            name=name,
            url=url,
            headers=json.dumps(headers) if headers else None,
            alert_threshold=alert_threshold,
            alert_interval=alert_interval,
            expected_response_time=expected_response_time,
            description=description,
            category=category,
            environment=environment,
            active=1 if active else 0,
        )
        async with self._session_factory() as session:
            session.add(target)
            await retry_on_lock(session.commit)
            await session.refresh(target)
        logger.info(f"Created API target {target.id}: {target.name}")
        return target

    async def add_recipient(
        self,
        target_id: int,
        email: str,
        name: Optional[str] = None,
        enabled: bool = True,
    ) -> Recipient:
        recipient = Recipient(
            target_id=target_id,
            email=email,
            name=name,
            enabled=1 if enabled else 0,
        )
        async with self._session_factory() as session:
            session.add(recipient)
            await retry_on_lock(session.commit)
            await session.refresh(recipient)
        return recipient
