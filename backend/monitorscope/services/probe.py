"""Probe service - performs the HTTP GET health check for a target."""
import asyncio
import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import httpx

from ..models import Target
from ..models.observation import STATUS_UP, STATUS_DOWN

logger = logging.getLogger(__name__)

USER_AGENT = "MonitorScope/1.0"

DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
    "Connection": "close",
}

# Hard limit for the whole request, connect through body
PROBE_TIMEOUT_SECONDS = 30

# RFC 9110 token
HEADER_NAME_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


@dataclass
class ProbeResult:
    """Classified outcome of one probe."""
    status: str  # UP, DOWN
    response_time_ms: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def is_up(self) -> bool:
        return self.status == STATUS_UP


def parse_custom_headers(raw: Optional[str], target_id: Optional[int] = None) -> Dict[str, str]:
    """Parse a target's stored header JSON.

    Anything other than a JSON object of token names and ASCII scalar
    values is rejected with a warning and an empty mapping.
    """
    if not raw:
        return {}

    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid headers JSON for API {target_id}: {e}")
        return {}

    if not isinstance(parsed, dict):
        logger.warning(f"Invalid headers JSON for API {target_id}: expected an object")
        return {}

    headers = {}
    for key, value in parsed.items():
        if not HEADER_NAME_RE.fullmatch(key):
            logger.warning(f"Invalid headers JSON for API {target_id}: bad header name {key!r}")
            return {}
        if value is None or isinstance(value, (dict, list)):
            logger.warning(f"Invalid headers JSON for API {target_id}: bad value for '{key}'")
            return {}
        value = value if isinstance(value, str) else json.dumps(value)
        if not value.isascii() or "\r" in value or "\n" in value:
            logger.warning(f"Invalid headers JSON for API {target_id}: bad value for '{key}'")
            return {}
        headers[key] = value
    return headers


def build_request_headers(raw: Optional[str], target_id: Optional[int] = None) -> Dict[str, str]:
    """Default headers overlaid with the target's custom headers.

    Header names compare case-insensitively; a custom header replaces the
    default of the same name.
    """
    custom = parse_custom_headers(raw, target_id)
    overridden = {key.lower() for key in custom}
    headers = {k: v for k, v in DEFAULT_HEADERS.items() if k.lower() not in overridden}
    headers.update(custom)
    return headers


class ProbeService:
    """Performs exactly one GET per target and classifies the result."""

    def __init__(
        self,
        timeout: float = PROBE_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.timeout = timeout
        self._transport = transport
        self._clock = clock

    def _elapsed_ms(self, start: float) -> int:
        return int(round((self._clock() - start) * 1000))

    async def probe(self, target: Target) -> ProbeResult:
        """Check a target.

        Classification, first match wins:
        1. Transport error or timeout - DOWN
        2. Non-2xx HTTP status - DOWN
        3. 2xx slower than the alert threshold - DOWN
        4. Otherwise UP

        Network problems never raise; they become DOWN results.
        """
        headers = build_request_headers(target.headers, target.id)

        start = self._clock()
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.timeout,
                follow_redirects=True,
            ) as client:
                response = await asyncio.wait_for(
                    client.get(target.url, headers=headers),
                    timeout=self.timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return ProbeResult(
                status=STATUS_DOWN,
                response_time_ms=self._elapsed_ms(start),
                error_message=f"Request timeout ({self.timeout:g}s)",
            )
        except Exception as e:
            return ProbeResult(
                status=STATUS_DOWN,
                response_time_ms=self._elapsed_ms(start),
                error_message=str(e) or type(e).__name__,
            )

        response_time = self._elapsed_ms(start)

        if not response.is_success:
            return ProbeResult(
                status=STATUS_DOWN,
                response_time_ms=response_time,
                error_message=f"HTTP {response.status_code}: {response.reason_phrase}",
            )

        threshold = target.alert_threshold
        if threshold and response_time > threshold:
            return ProbeResult(
                status=STATUS_DOWN,
                response_time_ms=response_time,
                error_message=f"Response time {response_time}ms exceeds threshold of {threshold}ms",
            )

        return ProbeResult(status=STATUS_UP, response_time_ms=response_time)
