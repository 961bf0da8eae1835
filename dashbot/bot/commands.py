"""
Chat command handling: `find <query...>` searches the catalog and offers the
matches as a select menu.
"""

import logging
import re
from typing import Optional

from dashbot.catalog.search import search
from dashbot.integrations.contracts.bi_server import SearchResult

logger = logging.getLogger(__name__)

FIND_COMMAND = "find"
_MENTION = re.compile(r"^<@([A-Z0-9]+)(\|[^>]*)?>$", re.IGNORECASE)

NO_RESULTS_TEXT = "Sorry, I didn't find any dashboard with those terms"
FOUND_TEXT = "Here are the dashboards I found. The one you want should be in the list below"
TRUNCATED_TEXT = (
    "I found too many dashboards and had to limit to {limit} results.\n"
    "If the one you want is not in the list, try searching again with more words."
)


def parse_find_query(text: str, bot_id: str) -> Optional[str]:
    """
    Return the query of a `find` command addressed to the bot, or None.

    Only messages starting with a mention of `bot_id` (`<@UBOT> find sales`)
    are commands; plain text and mentions of other users are not.
    """
    tokens = (text or "").split()
    if not tokens:
        return None
    mention = _MENTION.match(tokens[0])
    if mention is None or mention.group(1) != bot_id:
        return None
    tokens = tokens[1:]
    if len(tokens) < 2 or tokens[0].lower() != FIND_COMMAND:
        return None
    return " ".join(tokens[1:])


class FindCommandHandler:
    def __init__(self, store, chat, limit: int):
        self.store = store
        self.chat = chat
        self.limit = limit

    def find_views_and_respond(self, channel: str, query: str) -> SearchResult:
        result = search(self.store.current, query, self.limit)
        logger.info("find %r: %d match(es), truncated=%s", query, len(result.matches), result.truncated)

        if not result.matches:
            self.chat.post_message(channel, NO_RESULTS_TEXT)
            return result

        text = TRUNCATED_TEXT.format(limit=self.limit) if result.truncated else FOUND_TEXT
        self.chat.post_view_list_message(channel, text, result.matches)
        return result
