import io
import logging
from typing import Callable, Iterable, List, Optional, Union

from slack_sdk import WebClient
from slack_sdk.errors import SlackClientError
from slack_sdk.webhook import WebhookClient

from dashbot.error_handler import DeliveryError
from dashbot.integrations.contracts.bi_server import CatalogEntry
from dashbot.integrations.contracts.slack import ACTION_CANCEL, ACTION_SELECT, ResponseMessage

logger = logging.getLogger(__name__)

VIEW_LIST_CALLBACK_ID = "viewRequest"
VIEW_LIST_COLOR = "#f9a41b"
# Slack truncates select option labels past this length.
OPTION_TEXT_MAX = 75


class SlackChatService:
    def __init__(
        self,
        token: str,
        client: WebClient = None,
        webhook_factory: Optional[Callable[[str], WebhookClient]] = None,
    ):
        self.client = client or WebClient(token=token)
        self._webhook_factory = webhook_factory or WebhookClient

    def post_message(self, channel: str, text: str) -> dict:
        response = self.client.chat_postMessage(channel=channel, text=text)
        return response.data

    def post_view_list_message(self, channel: str, text: str, entries: Iterable[CatalogEntry]) -> dict:
        attachment = {
            "text": text,
            "fallback": text,
            "color": VIEW_LIST_COLOR,
            "callback_id": VIEW_LIST_CALLBACK_ID,
            "actions": [
                {
                    "name": ACTION_SELECT,
                    "type": "select",
                    "options": self._entries_to_options(entries),
                },
                {
                    "name": ACTION_CANCEL,
                    "text": "Cancel",
                    "type": "button",
                    "style": "danger",
                },
            ],
        }
        logger.debug("Posting view list to channel %s", channel)
        response = self.client.chat_postMessage(channel=channel, text=text, attachments=[attachment])
        return response.data

    def upload_file(self, channel: str, filename: str, content: Union[bytes, io.BytesIO]) -> dict:
        data = content.getvalue() if isinstance(content, io.BytesIO) else content
        try:
            response = self.client.files_upload_v2(channel=channel, filename=filename, title=filename, file=data)
        except SlackClientError as e:
            raise DeliveryError(f"Slack upload failed: {self._extract_slack_error(e)}", cause=e) from e
        except OSError as e:
            raise DeliveryError(f"Slack upload failed: {e}", cause=e) from e
        return response.data

    def respond(self, response_url: str, text: str, replace_original: bool = True, delete_original: bool = False) -> bool:
        """
        Post a status update to an interaction's response_url.
        Returns False (and logs) when Slack does not accept it.
        """
        message = ResponseMessage(text=text, replace_original=replace_original, delete_original=delete_original)
        try:
            response = self._webhook_factory(response_url).send(**message.model_dump())
        except (SlackClientError, OSError) as e:
            logger.error("Failed to post to response_url: %s", e)
            return False
        if response.status_code != 200:
            logger.error("response_url rejected message: status=%s body=%s", response.status_code, response.body)
            return False
        return True

    @staticmethod
    def _entries_to_options(entries: Iterable[CatalogEntry]) -> List[dict]:
        return [{"text": entry.display_name[:OPTION_TEXT_MAX], "value": entry.render_key} for entry in entries]

    @staticmethod
    def _extract_slack_error(exc: Exception) -> str:
        response = getattr(exc, "response", None)
        if isinstance(response, dict):
            return str(response.get("error", "unknown_error"))
        try:
            return str(response["error"])  # type: ignore[index]
        except Exception:
            return str(exc)
