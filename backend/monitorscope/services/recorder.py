"""Result recorder - persists one observation per probe."""
import logging
from typing import Optional

from ..stores import HistoryStore
from .probe import ProbeResult

logger = logging.getLogger(__name__)


class ResultRecorder:
    """Best-effort writer for check history."""

    def __init__(self, history: HistoryStore):
        self.history = history

    async def record(self, target_id: int, result: ProbeResult) -> Optional[int]:
        """Save the result; a failed save is logged and returns None."""
        try:
            return await self.history.append_observation(
                target_id, result.status, result.response_time_ms
            )
        except Exception as e:
            logger.error(f"Failed to save health check for API {target_id}: {type(e).__name__}: {e}")
            return None
