"""History store - append-only health check observations."""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..models import Observation
from ..utils.clock import utcnow
from ..utils.db_utils import retry_on_lock


class HistoryStore:
    """Observation rows keyed by target."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def append_observation(
        self,
        target_id: int,
        status: str,
        response_time: Optional[int],
        checked_at: Optional[datetime] = None,
    ) -> int:
        """Insert one observation and return its id."""
        observation = Observation(
            target_id=target_id,
            status=status,
            response_time=response_time,
            checked_at=checked_at or utcnow(),
        )
        async with self._session_factory() as session:
            session.add(observation)
            await retry_on_lock(session.commit)
            return observation.id

    async def list_observations(
        self,
        target_id: Optional[int] = None,
        limit: int = 100,
    ) -> List[Observation]:
        """Most recent observations first, optionally for one target."""
        query = select(Observation).order_by(
            Observation.checked_at.desc(), Observation.id.desc()
        )
        if target_id is not None:
            query = query.where(Observation.target_id == target_id)
        async with self._session_factory() as session:
            result = await session.execute(query.limit(limit))
            return list(result.scalars().all())

    async def latest_observation(self, target_id: int) -> Optional[Observation]:
        observations = await self.list_observations(target_id, limit=1)
        return observations[0] if observations else None

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete observations checked before cutoff; returns rows removed."""
        async with self._session_factory() as session:
            result = await session.execute(
                delete(Observation).where(Observation.checked_at < cutoff)
            )
            await retry_on_lock(session.commit)
            return result.rowcount or 0
