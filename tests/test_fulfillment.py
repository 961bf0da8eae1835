import asyncio
import io

import pytest

from dashbot.bot.fulfillment import ACK_TEXT, BUSY_TEXT, COMPLETE_TEXT, IMAGE_FILENAME, FulfillmentOrchestrator
from dashbot.catalog.renderer import ViewRenderer
from dashbot.catalog.session import SessionManager
from dashbot.integrations.contracts.bi_server import FulfillmentState, SelectionRequest
from dashbot.utils.admission import AdmissionGate
from fakes import FakeBIClient, status_error


def _request(render_key: str = "Sales/Q1SalesReport") -> SelectionRequest:
    return SelectionRequest(render_key=render_key, delivery_target="C123", response_url="https://hooks.slack.test/r/1")


async def _orchestrator(client, chat, gate=None) -> FulfillmentOrchestrator:
    sessions = SessionManager(client)
    await sessions.authenticate("svc", "secret")
    return FulfillmentOrchestrator(sessions, ViewRenderer(client), chat, gate or AdmissionGate(4, 8))


class BlockingRenderer:
    def __init__(self):
        self.release = asyncio.Event()
        self.started = 0
        self.running = 0
        self.max_running = 0

    async def render(self, session, render_key):
        self.started += 1
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            await self.release.wait()
        finally:
            self.running -= 1
        return io.BytesIO(b"png")


@pytest.mark.asyncio
async def test_successful_selection_sends_ack_then_completion(fake_chat):
    orchestrator = await _orchestrator(FakeBIClient(image=b"png-bytes"), fake_chat)

    task = await orchestrator.submit(_request())
    outcome = await task

    assert outcome.state == FulfillmentState.COMPLETED
    assert [r["text"] for r in fake_chat.responses] == [ACK_TEXT, COMPLETE_TEXT]
    assert all(r["replace_original"] for r in fake_chat.responses)
    assert fake_chat.uploads == [{"channel": "C123", "filename": IMAGE_FILENAME, "content": b"png-bytes"}]


@pytest.mark.asyncio
async def test_fetch_failure_reports_once_and_never_uploads(fake_chat):
    client = FakeBIClient(render_errors=[status_error(500)])
    orchestrator = await _orchestrator(client, fake_chat)

    outcome = await (await orchestrator.submit(_request()))

    assert outcome.state == FulfillmentState.FAILED
    assert "status 500" in outcome.error
    texts = [r["text"] for r in fake_chat.responses]
    assert texts[0] == ACK_TEXT
    assert len(texts) == 2
    assert "couldn't fetch" in texts[1]
    assert fake_chat.uploads == []


@pytest.mark.asyncio
async def test_delivery_failure_is_reported_to_response_url(delivery_failing_chat):
    orchestrator = await _orchestrator(FakeBIClient(), delivery_failing_chat)

    outcome = await (await orchestrator.submit(_request()))

    assert outcome.state == FulfillmentState.FAILED
    texts = [r["text"] for r in delivery_failing_chat.responses]
    assert texts[0] == ACK_TEXT
    assert "couldn't upload" in texts[1]
    assert COMPLETE_TEXT not in texts


@pytest.mark.asyncio
async def test_ack_is_sent_before_submit_returns(fake_chat):
    orchestrator = await _orchestrator(FakeBIClient(), fake_chat)
    renderer = BlockingRenderer()
    orchestrator.renderer = renderer

    task = await orchestrator.submit(_request())

    assert [r["text"] for r in fake_chat.responses] == [ACK_TEXT]
    assert orchestrator.in_flight == 1
    assert list(orchestrator.states().values()) == [FulfillmentState.ACCEPTED]
    await asyncio.sleep(0)
    assert list(orchestrator.states().values()) == [FulfillmentState.FETCHING]

    renderer.release.set()
    await task
    assert [r["text"] for r in fake_chat.responses] == [ACK_TEXT, COMPLETE_TEXT]
    assert orchestrator.in_flight == 0
    assert orchestrator.states() == {}
    assert orchestrator.outcome_counts == {"COMPLETED": 1}


@pytest.mark.asyncio
async def test_selections_beyond_pending_capacity_are_rejected(fake_chat):
    gate = AdmissionGate(max_concurrent=1, max_pending=2)
    orchestrator = await _orchestrator(FakeBIClient(), fake_chat, gate=gate)
    renderer = BlockingRenderer()
    orchestrator.renderer = renderer

    first = await orchestrator.submit(_request("a"))
    second = await orchestrator.submit(_request("b"))
    third = await orchestrator.submit(_request("c"))

    assert first is not None and second is not None
    assert third is None
    assert fake_chat.responses[-1]["text"] == BUSY_TEXT
    assert gate.get_stats()["rejected"] == 1
    assert orchestrator.outcome_counts["REJECTED"] == 1

    renderer.release.set()
    await orchestrator.drain()
    assert renderer.max_running == 1
    assert renderer.started == 2
    assert gate.get_stats()["pending"] == 0


@pytest.mark.asyncio
async def test_failures_do_not_affect_other_selections(fake_chat):
    client = FakeBIClient(render_errors=[status_error(404)])
    orchestrator = await _orchestrator(client, fake_chat)

    failing = await orchestrator.submit(_request("missing"))
    ok = await orchestrator.submit(_request("present"))
    outcomes = await asyncio.gather(failing, ok)

    assert sorted(o.state.value for o in outcomes) == ["COMPLETED", "FAILED"]
    assert len(fake_chat.uploads) == 1


@pytest.mark.asyncio
async def test_failed_selection_is_counted_as_failed(fake_chat):
    orchestrator = await _orchestrator(FakeBIClient(render_errors=[status_error(500)]), fake_chat)

    await (await orchestrator.submit(_request()))

    assert orchestrator.outcome_counts == {"FAILED": 1}
    assert orchestrator.states() == {}
