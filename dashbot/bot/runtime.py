"""Application runtime: wires the BI client, catalog, Slack service and fulfillment together."""

import asyncio
import logging
from typing import Any, Dict, Optional

from slack_sdk.errors import SlackClientError

from dashbot.bot.commands import FindCommandHandler, parse_find_query
from dashbot.bot.dependencies import verify_token
from dashbot.bot.fulfillment import FulfillmentOrchestrator
from dashbot.catalog import CatalogLoader, CatalogStore, SessionManager, ViewRenderer
from dashbot.integrations.contracts.bi_server import SelectionRequest
from dashbot.integrations.contracts.slack import ACTION_CANCEL, ACTION_SELECT, EventCallback, InteractionPayload
from dashbot.integrations.slack.slack_chat_service import SlackChatService
from dashbot.utils.admission import AdmissionGate
from dashbot.utils.config_loader import BotConfig

logger = logging.getLogger(__name__)

# A mention in a channel also arrives as an app_mention event; only the
# message copy is answered so each command gets one reply.
HANDLED_EVENT_TYPE = "message"
CANCELLED_TEXT = "Cancelled."


def create_bi_client(config: BotConfig):
    if config.integrations_mode == "mock":
        from dashbot.integrations.clients.mocks.bi_server import MockBIServerClient

        logger.warning("INTEGRATIONS_MODE=mock: serving the in-memory BI catalog")
        return MockBIServerClient()

    from dashbot.integrations.clients.real_http.bi_server import BIServerClient

    return BIServerClient.from_config(config.bi)


class BotRuntime:
    """Process-wide state of the bot."""

    def __init__(self, config: BotConfig, bi_client=None, chat: Optional[SlackChatService] = None):
        self.config = config
        self.bi_client = bi_client or create_bi_client(config)
        self.chat = chat or SlackChatService(config.slack.bot_token)

        self.sessions = SessionManager(self.bi_client)
        self.loader = CatalogLoader(self.bi_client, page_size=config.bi.page_size)
        self.store = CatalogStore()
        self.renderer = ViewRenderer(
            self.bi_client,
            self.sessions,
            reauthenticate_on_expiry=config.fulfillment.reauthenticate_on_expiry,
        )
        self.gate = AdmissionGate(config.fulfillment.max_concurrent, config.fulfillment.max_pending)
        self.orchestrator = FulfillmentOrchestrator(self.sessions, self.renderer, self.chat, self.gate)
        self.finder = FindCommandHandler(self.store, self.chat, config.search_limit)

    async def startup(self) -> None:
        """Authenticate and load the catalog. Raises AuthError / CatalogLoadError."""
        session = await self.sessions.authenticate(self.config.bi.login, self.config.bi.password)
        catalog = await self.loader.load_all(session)
        self.store.swap(catalog)

    async def shutdown(self) -> None:
        await self.orchestrator.drain()
        await self.bi_client.aclose()

    async def handle_event(self, callback: EventCallback) -> Dict[str, Any]:
        verify_token(callback.token, self.config.slack.verification_token)

        event = callback.event
        if event is None or event.type != HANDLED_EVENT_TYPE or event.bot_id:
            return {"ok": True, "ignored": True}

        channel_id = self.config.slack.channel_id
        if channel_id and event.channel != channel_id:
            logger.debug("Ignoring message from channel %s", event.channel)
            return {"ok": True, "ignored": True}

        query = parse_find_query(event.text, self.config.slack.bot_id)
        if query is None:
            logger.debug("Ignoring message that is not a find command")
            return {"ok": True, "ignored": True}

        logger.info("Finding views for user %s", event.user)
        try:
            result = await asyncio.to_thread(self.finder.find_views_and_respond, event.channel, query)
        except SlackClientError as e:
            logger.error("Failed to post search results to %s: %s", event.channel, e)
            return {"ok": False}
        return {"ok": True, "matches": len(result.matches), "truncated": result.truncated}

    async def handle_interaction(self, interaction: InteractionPayload) -> Dict[str, Any]:
        verify_token(interaction.token, self.config.slack.verification_token)

        if not interaction.actions:
            return {"ok": True, "ignored": True}
        action = interaction.actions[0]

        if action.name == ACTION_CANCEL:
            await asyncio.to_thread(
                self.chat.respond, interaction.response_url, CANCELLED_TEXT, False, True
            )
            return {"ok": True, "cancelled": True}

        if action.name != ACTION_SELECT or not action.selected_options:
            return {"ok": True, "ignored": True}

        request = SelectionRequest(
            render_key=action.selected_options[0].value,
            delivery_target=interaction.channel.id or interaction.channel.name,
            response_url=interaction.response_url,
            user_id=interaction.user.id or None,
        )
        task = await self.orchestrator.submit(request)
        return {"ok": True, "accepted": task is not None, "request_id": request.request_id}

    def status(self) -> Dict[str, Any]:
        catalog = self.store.current
        return {
            "session": "established" if self.sessions.is_authenticated else "missing",
            "catalog": {"views": len(catalog), "loaded_at": catalog.loaded_at.isoformat()},
            "fulfillment": {
                "in_flight": self.orchestrator.in_flight,
                "outcomes": dict(self.orchestrator.outcome_counts),
                **self.gate.get_stats(),
            },
        }
