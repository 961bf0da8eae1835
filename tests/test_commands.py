import pytest

from dashbot.bot.commands import (
    FOUND_TEXT,
    NO_RESULTS_TEXT,
    FindCommandHandler,
    parse_find_query,
)
from dashbot.catalog.loader import CatalogStore
from dashbot.integrations.contracts.bi_server import Catalog
from fakes import FakeChatService, make_entries


@pytest.mark.parametrize(
    "text, expected",
    [
        ("<@UBOT> find sales", "sales"),
        ("<@UBOT> FIND q1 sales report", "q1 sales report"),
        ("<@UBOT> find   sales   q1", "sales q1"),
        ("<@UBOT|dashbot> find orders", "orders"),
        ("<@UBOT> find", None),
        ("<@UBOT> hello there", None),
        ("<@UBOT> findsales", None),
        ("find sales", None),
        ("<@UOTHER> find sales", None),
        ("hey <@UBOT> find sales", None),
        ("", None),
    ],
)
def test_parse_find_query(text, expected):
    assert parse_find_query(text, "UBOT") == expected


def _handler(names, limit=3):
    store = CatalogStore(Catalog(entries=tuple(make_entries(names))))
    chat = FakeChatService()
    return FindCommandHandler(store, chat, limit), chat


def test_no_match_posts_apology_and_no_menu():
    handler, chat = _handler(["Finance"])

    result = handler.find_views_and_respond("C1", "marketing")

    assert result.matches == ()
    assert chat.messages == [{"channel": "C1", "text": NO_RESULTS_TEXT}]
    assert chat.view_lists == []


def test_matches_are_offered_as_view_list():
    handler, chat = _handler(["Q1 Sales", "Inventory", "Q2 Sales"])

    handler.find_views_and_respond("C1", "sales")

    assert chat.messages == []
    assert chat.view_lists[0]["text"] == FOUND_TEXT
    assert [e.display_name for e in chat.view_lists[0]["entries"]] == ["Q1 Sales", "Q2 Sales"]


def test_truncated_search_tells_user_to_refine():
    handler, chat = _handler([f"sales {i}" for i in range(5)], limit=3)

    result = handler.find_views_and_respond("C1", "sales")

    assert result.truncated is True
    assert len(chat.view_lists[0]["entries"]) == 3
    assert "limit to 3 results" in chat.view_lists[0]["text"]
