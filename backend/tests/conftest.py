from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

import httpx
import pytest
import pytest_asyncio

from monitorscope.database import build_engine, build_session_factory, close_db, init_db
from monitorscope.services.email_sender import EmailConfig
from monitorscope.stores import AlertStore, HistoryStore, TargetStore


class FakeClock:
    """Settable naive-UTC wall clock."""

    def __init__(self, start: datetime = datetime(2026, 1, 5, 12, 0, 0)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0) -> None:
        self.now += timedelta(minutes=minutes, seconds=seconds)


class SteppingClock:
    """Monotonic clock that moves forward by ``step`` seconds on every read.

    The probe reads it once before and once after a request, so every probe
    measures exactly ``step`` seconds.
    """

    def __init__(self, step: float) -> None:
        self.step = step
        self.value = 1000.0

    def __call__(self) -> float:
        current = self.value
        self.value += self.step
        return current


class FakeMailTransport:
    """Records messages instead of talking to an SMTP relay."""

    def __init__(self, fail: bool = False, verify_result=(True, "Email configuration is valid")) -> None:
        self.fail = fail
        self.verify_result = verify_result
        self.sent: list[dict] = []
        self.verify_calls = 0

    async def send(self, to: str, subject: str, html: str, text: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})
        return not self.fail

    async def verify(self):
        self.verify_calls += 1
        return self.verify_result


def status_transport(status_code: int = 200, on_request: Optional[Callable] = None) -> httpx.MockTransport:
    """Mock transport answering every request with ``status_code``."""

    def handler(request: httpx.Request) -> httpx.Response:
        if on_request is not None:
            on_request(request)
        return httpx.Response(status_code, json={"ok": status_code < 400})

    return httpx.MockTransport(handler)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'monitorscope-test.db'}")
    await init_db(engine)
    yield engine
    await close_db(engine)


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
def target_store(session_factory) -> TargetStore:
    return TargetStore(session_factory)


@pytest.fixture
def history_store(session_factory) -> HistoryStore:
    return HistoryStore(session_factory)


@pytest.fixture
def alert_store(session_factory) -> AlertStore:
    return AlertStore(session_factory)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mail_transport() -> FakeMailTransport:
    return FakeMailTransport()


@pytest.fixture
def email_config() -> EmailConfig:
    return EmailConfig(
        host="smtp.example.com",
        port=587,
        username="alerts@example.com",
        password="app-password",
        use_tls=True,
        from_address="alerts@example.com",
        from_name="MonitorScope Alerts",
        enabled=True,
    )
