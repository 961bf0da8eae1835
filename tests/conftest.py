"""Pytest fixtures for catalog, fulfillment and API tests."""

import pytest

from dashbot.error_handler import DeliveryError
from dashbot.utils.config_loader import BotConfig
from fakes import FakeChatService


@pytest.fixture
def bot_config() -> BotConfig:
    return BotConfig(
        port=3000,
        search_limit=20,
        bi={"host": "bi.test", "login": "svc", "password": "secret"},
        slack={"bot_token": "xoxb-test", "bot_id": "UBOT", "verification_token": "verify-me"},
        fulfillment={"max_concurrent": 2, "max_pending": 4},
    )


@pytest.fixture
def fake_chat() -> FakeChatService:
    return FakeChatService()


@pytest.fixture
def delivery_failing_chat() -> FakeChatService:
    return FakeChatService(upload_error=DeliveryError("Slack upload failed: not_in_channel"))
