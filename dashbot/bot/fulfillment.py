"""
Fulfillment of dashboard selections.

Each selection moves through ACCEPTED -> FETCHING -> DELIVERING -> COMPLETED,
or ends in FAILED from FETCHING/DELIVERING. The acknowledgment is posted
before `submit` returns so the interaction's HTTP response is never held up
by the BI server; the rest runs as a tracked asyncio task whose outcome is
always reported back to the response_url.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Dict, Optional, Set

from dashbot.error_handler import ErrorHandler
from dashbot.integrations.contracts.bi_server import FulfillmentOutcome, FulfillmentState, SelectionRequest
from dashbot.utils.admission import AdmissionGate

logger = logging.getLogger(__name__)

ACK_TEXT = "On it... fetching your dashboard :hourglass_flowing_sand:"
COMPLETE_TEXT = "Complete!"
BUSY_TEXT = "I'm busy rendering other dashboards right now. Please pick it again in a minute."
IMAGE_FILENAME = "Dashboard.png"


class FulfillmentOrchestrator:
    def __init__(self, sessions, renderer, chat, gate: AdmissionGate, error_handler: Optional[ErrorHandler] = None):
        self.sessions = sessions
        self.renderer = renderer
        self.chat = chat
        self.gate = gate
        self.error_handler = error_handler or ErrorHandler()
        self._tasks: Set[asyncio.Task] = set()
        self._states: Dict[str, FulfillmentState] = {}
        # Terminal outcomes by state, including REJECTED admissions.
        self.outcome_counts: Counter = Counter()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def states(self) -> Dict[str, FulfillmentState]:
        """Current state of every admitted, unfinished selection keyed by request id."""
        return dict(self._states)

    async def submit(self, request: SelectionRequest) -> Optional[asyncio.Task]:
        """
        Accept a selection: acknowledge it, then spawn its background task.

        Returns None when the admission gate refuses the request; the user is
        told to retry, a REJECTED outcome is recorded and nothing is fetched.
        """
        if not self.gate.try_admit():
            self._record(FulfillmentOutcome(request=request, state=FulfillmentState.REJECTED))
            await self._notify(request, BUSY_TEXT)
            return None

        self._states[request.request_id] = FulfillmentState.ACCEPTED
        try:
            await self._notify(request, ACK_TEXT)
        except BaseException:
            self._states.pop(request.request_id, None)
            self.gate.release()
            raise

        task = asyncio.create_task(self._run(request), name=f"fulfillment-{request.request_id}")
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        logger.info("Accepted selection %s (render_key=%s)", request.request_id, request.render_key)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight fulfillment to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, request: SelectionRequest) -> FulfillmentOutcome:
        try:
            return await self._fulfill(request)
        finally:
            self._states.pop(request.request_id, None)

    async def _fulfill(self, request: SelectionRequest) -> FulfillmentOutcome:
        state = FulfillmentState.FETCHING
        try:
            async with self.gate:
                self._states[request.request_id] = state
                image = await self.renderer.render(self.sessions.current, request.render_key)
                state = FulfillmentState.DELIVERING
                self._states[request.request_id] = state
                await asyncio.to_thread(self.chat.upload_file, request.delivery_target, IMAGE_FILENAME, image)
        except Exception as e:
            # Per-request failures stop here; they never reach other requests.
            return await self._fail(request, state, e)
        finally:
            self.gate.release()

        await self._notify(request, COMPLETE_TEXT)
        return FulfillmentOutcome(request=request, state=FulfillmentState.COMPLETED)

    async def _fail(self, request: SelectionRequest, state: FulfillmentState, exc: Exception) -> FulfillmentOutcome:
        failure = self.error_handler.handle_exception(
            exc,
            context={"request_id": request.request_id, "render_key": request.render_key, "state": state.value},
        )
        await self._notify(request, failure["message"])
        return FulfillmentOutcome(request=request, state=FulfillmentState.FAILED, error=str(exc))

    async def _notify(self, request: SelectionRequest, text: str) -> bool:
        return await asyncio.to_thread(self.chat.respond, request.response_url, text)

    def _record(self, outcome: FulfillmentOutcome) -> None:
        self.outcome_counts[outcome.state.value] += 1
        logger.info(
            "Selection %s finished: %s%s",
            outcome.request.request_id,
            outcome.state.value,
            f" ({outcome.error})" if outcome.error else "",
        )

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Fulfillment task %s was cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Fulfillment task %s crashed", task.get_name(), exc_info=exc)
            return
        self._record(task.result())
