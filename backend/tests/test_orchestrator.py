from __future__ import annotations

import asyncio

import httpx
import pytest

from conftest import FakeMailTransport, SteppingClock, status_transport
from monitorscope.exceptions import TargetNotFoundError
from monitorscope.services.alert_manager import AlertManager
from monitorscope.services.notifier import Notifier
from monitorscope.services.orchestrator import CheckOrchestrator, SingleFlight
from monitorscope.services.probe import ProbeService
from monitorscope.services.recorder import ResultRecorder
from monitorscope.stores import AlertStore, HistoryStore, TargetStore


def make_orchestrator(
    session_factory,
    email_config,
    transport: httpx.AsyncBaseTransport,
    clock,
    mail_transport,
    probe_clock=None,
    history=None,
    single_flight=None,
) -> CheckOrchestrator:
    return CheckOrchestrator(
        targets=TargetStore(session_factory),
        probe=ProbeService(transport=transport, clock=probe_clock or SteppingClock(0.05)),
        recorder=ResultRecorder(history or HistoryStore(session_factory)),
        alert_manager=AlertManager(AlertStore(session_factory), clock=clock),
        notifier=Notifier(email_config, transport=mail_transport),
        single_flight=single_flight,
    )


@pytest.mark.asyncio
async def test_slow_target_alert_lifecycle(
    session_factory, target_store, alert_store, history_store, email_config, mail_transport, clock
) -> None:
    target = await target_store.create_target(
        name="Checkout API",
        url="https://checkout.example.com/health",
        alert_threshold=2000,
        alert_interval=15,
    )
    await target_store.add_recipient(target.id, "oncall@example.com", name="On call")
    orchestrator = make_orchestrator(
        session_factory, email_config, status_transport(200), clock, mail_transport,
        probe_clock=SteppingClock(2.5),
    )

    first = await orchestrator.run_check(target.id)

    assert first.status == "DOWN"
    assert first.response_time_ms == 2500
    assert first.error_message == "Response time 2500ms exceeds threshold of 2000ms"
    assert first.alert_count == 1
    assert first.notified is True
    assert len(mail_transport.sent) == 1

    clock.advance(minutes=10)
    second = await orchestrator.run_check(target.id)

    assert second.alert_count == 2
    assert second.notified is False
    assert len(mail_transport.sent) == 1

    clock.advance(minutes=10)
    third = await orchestrator.run_check(target.id)

    assert third.alert_count == 3
    assert third.notified is True
    assert len(mail_transport.sent) == 2

    active = await alert_store.get_active_alert(target.id)
    assert active.alert_count == 3
    assert active.message == "API Checkout API is DOWN: Response time 2500ms exceeds threshold of 2000ms"

    observations = await history_store.list_observations(target_id=target.id)
    assert len(observations) == 3
    assert all(o.status == "DOWN" and o.response_time == 2500 for o in observations)


@pytest.mark.asyncio
async def test_recovery_resolves_alert(
    session_factory, target_store, alert_store, email_config, mail_transport, clock
) -> None:
    codes = iter([500, 500, 200])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(next(codes))

    target = await target_store.create_target(name="Users API", url="https://users.example.com")
    orchestrator = make_orchestrator(
        session_factory, email_config, httpx.MockTransport(handler), clock, mail_transport
    )

    outcomes = [await orchestrator.run_check(target.id) for _ in range(3)]

    assert [o.alert_action for o in outcomes] == ["created", "updated", "resolved"]
    assert await alert_store.get_active_alert(target.id) is None


@pytest.mark.asyncio
async def test_one_failing_target_does_not_stop_the_rest(
    session_factory, target_store, history_store, email_config, mail_transport, clock
) -> None:
    class BrokenForOneProbe(ProbeService):
        async def probe(self, target):
            if target.name == "Broken API":
                raise RuntimeError("probe crashed")
            return await super().probe(target)

    broken = await target_store.create_target(name="Broken API", url="https://broken.example.com")
    healthy = await target_store.create_target(name="Healthy API", url="https://healthy.example.com")
    orchestrator = make_orchestrator(
        session_factory, email_config, status_transport(200), clock, mail_transport
    )
    orchestrator.probe = BrokenForOneProbe(transport=status_transport(200), clock=SteppingClock(0.05))

    outcomes = {o.target_id: o for o in await orchestrator.run_all_checks()}

    assert outcomes[broken.id].error == "probe crashed"
    assert outcomes[healthy.id].error is None
    assert outcomes[healthy.id].status == "UP"
    assert len(await history_store.list_observations(target_id=healthy.id)) == 1


@pytest.mark.asyncio
async def test_run_all_skips_inactive_targets(
    session_factory, target_store, email_config, mail_transport, clock
) -> None:
    active = await target_store.create_target(name="Active API", url="https://a.example.com")
    await target_store.create_target(name="Paused API", url="https://p.example.com", active=False)
    orchestrator = make_orchestrator(
        session_factory, email_config, status_transport(200), clock, mail_transport
    )

    outcomes = await orchestrator.run_all_checks()

    assert [o.target_id for o in outcomes] == [active.id]


@pytest.mark.asyncio
async def test_history_write_failure_does_not_block_alerting(
    session_factory, target_store, alert_store, email_config, mail_transport, clock
) -> None:
    class FailingHistoryStore(HistoryStore):
        async def append_observation(self, *args, **kwargs):
            raise RuntimeError("disk full")

    target = await target_store.create_target(name="Search API", url="https://search.example.com")
    orchestrator = make_orchestrator(
        session_factory, email_config, status_transport(503), clock, mail_transport,
        history=FailingHistoryStore(session_factory),
    )

    outcome = await orchestrator.run_check(target.id)

    assert outcome.observation_id is None
    assert outcome.alert_action == "created"
    assert await alert_store.get_active_alert(target.id) is not None


@pytest.mark.asyncio
async def test_notification_failure_keeps_alert_state(
    session_factory, target_store, alert_store, email_config, clock
) -> None:
    target = await target_store.create_target(name="Search API", url="https://search.example.com")
    await target_store.add_recipient(target.id, "oncall@example.com")
    failing = FakeMailTransport(fail=True)
    orchestrator = make_orchestrator(
        session_factory, email_config, status_transport(500), clock, failing
    )

    outcome = await orchestrator.run_check(target.id)

    assert outcome.notified is False
    active = await alert_store.get_active_alert(target.id)
    assert active.alert_count == 1
    assert active.last_alert_sent == clock.now


@pytest.mark.asyncio
async def test_alert_without_recipients_sends_nothing(
    session_factory, target_store, alert_store, email_config, mail_transport, clock
) -> None:
    target = await target_store.create_target(name="Quiet API", url="https://quiet.example.com")
    await target_store.add_recipient(target.id, "muted@example.com", enabled=False)
    orchestrator = make_orchestrator(
        session_factory, email_config, status_transport(500), clock, mail_transport
    )

    outcome = await orchestrator.run_check(target.id)

    assert outcome.alert_action == "created"
    assert outcome.notified is False
    assert mail_transport.sent == []


@pytest.mark.asyncio
async def test_concurrent_checks_of_one_target_are_serialized(
    session_factory, target_store, alert_store, email_config, mail_transport, clock
) -> None:
    async def slow_failure(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0.01)
        return httpx.Response(500)

    target = await target_store.create_target(name="Race API", url="https://race.example.com")
    single_flight = SingleFlight()
    scheduled = make_orchestrator(
        session_factory, email_config, httpx.MockTransport(slow_failure), clock, mail_transport,
        single_flight=single_flight,
    )
    on_demand = make_orchestrator(
        session_factory, email_config, httpx.MockTransport(slow_failure), clock, mail_transport,
        single_flight=single_flight,
    )

    await asyncio.gather(scheduled.run_check(target.id), on_demand.run_check(target.id))

    alerts = await alert_store.list_alerts(target_id=target.id)
    assert len(alerts) == 1
    assert alerts[0].alert_count == 2


@pytest.mark.asyncio
async def test_unknown_target_is_rejected(session_factory, email_config, mail_transport, clock) -> None:
    orchestrator = make_orchestrator(
        session_factory, email_config, status_transport(200), clock, mail_transport
    )

    with pytest.raises(TargetNotFoundError) as excinfo:
        await orchestrator.run_check(999)

    assert str(excinfo.value) == "API 999 not found or inactive"


@pytest.mark.asyncio
async def test_inactive_target_is_rejected(
    session_factory, target_store, email_config, mail_transport, clock
) -> None:
    target = await target_store.create_target(name="Paused API", url="https://p.example.com", active=False)
    orchestrator = make_orchestrator(
        session_factory, email_config, status_transport(200), clock, mail_transport
    )

    with pytest.raises(TargetNotFoundError):
        await orchestrator.run_check(target.id)


def test_single_flight_reuses_lock_per_key() -> None:
    single_flight = SingleFlight()

    assert single_flight.lock(1) is single_flight.lock(1)
    assert single_flight.lock(1) is not single_flight.lock(2)
