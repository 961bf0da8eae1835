"""
Configuration loader for the dashboard bot
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "bot_config.yml"

# Environment variable -> path inside the config document.
ENV_OVERRIDES: Dict[str, Tuple[str, ...]] = {
    "PORT": ("port",),
    "BOT_CONFIG_LIMIT": ("search_limit",),
    "INTEGRATIONS_MODE": ("integrations_mode",),
    "BOT_TOKEN": ("slack", "bot_token"),
    "BOT_ID": ("slack", "bot_id"),
    "VERIFICATION_TOKEN": ("slack", "verification_token"),
    "CHANNEL_ID": ("slack", "channel_id"),
    "TABLEAU_HOST": ("bi", "host"),
    "TABLEAU_SCHEME": ("bi", "scheme"),
    "TABLEAU_API_VERSION": ("bi", "api_version"),
    "TABLEAU_SITE": ("bi", "site_content_url"),
    "TABLEAU_LOGIN": ("bi", "login"),
    "TABLEAU_PASSWORD": ("bi", "password"),
    "FULFILLMENT_MAX_CONCURRENT": ("fulfillment", "max_concurrent"),
    "FULFILLMENT_MAX_PENDING": ("fulfillment", "max_pending"),
    "REAUTHENTICATE_ON_EXPIRY": ("fulfillment", "reauthenticate_on_expiry"),
}


class BIServerConfig(BaseModel):
    """BI server connection settings"""

    host: str
    scheme: Literal["http", "https"] = "https"
    api_version: str = "3.0"
    site_content_url: str = ""
    login: str
    password: str
    page_size: int = Field(default=1000, ge=1, le=1000)
    request_timeout: float = Field(default=120.0, gt=0)

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}"


class SlackConfig(BaseModel):
    """Slack app credentials"""

    bot_token: str
    bot_id: str
    verification_token: str
    channel_id: Optional[str] = None


class FulfillmentConfig(BaseModel):
    max_concurrent: int = Field(default=8, ge=1, le=256)
    max_pending: int = Field(default=64, ge=1, le=4096)
    reauthenticate_on_expiry: bool = False


class BotConfig(BaseModel):
    """Complete bot configuration"""

    port: int = Field(default=3000, ge=1, le=65535)
    # Slack select menus accept at most 100 options.
    search_limit: int = Field(default=20, ge=1, le=100)
    integrations_mode: Literal["real", "mock"] = "real"
    bi: BIServerConfig
    slack: SlackConfig
    fulfillment: FulfillmentConfig = Field(default_factory=FulfillmentConfig)


def _apply_env_overrides(data: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    for var, path in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value is None or value == "":
            continue
        node = data
        for key in path[:-1]:
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]
        node[path[-1]] = value
    return data


def load_bot_config(config_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> BotConfig:
    """
    Load and validate bot configuration

    Values come from an optional YAML file and are overridden by environment
    variables (a local .env file is loaded first).

    Args:
        config_path: Path to config file. Defaults to $DASHBOT_CONFIG, then config/bot_config.yml
        environ: Environment mapping. Defaults to os.environ

    Returns:
        Validated BotConfig object

    Raises:
        FileNotFoundError: If an explicitly requested config file doesn't exist
        ValidationError: If the merged config doesn't match schema
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    explicit = config_path is not None or bool(environ.get("DASHBOT_CONFIG"))
    if config_path is None:
        config_path = Path(environ["DASHBOT_CONFIG"]) if environ.get("DASHBOT_CONFIG") else DEFAULT_CONFIG_PATH

    data: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {config_path}")

    data = _apply_env_overrides(data, environ)

    try:
        config = BotConfig(**data)
        logger.info("Loaded bot config (bi host=%s, mode=%s)", config.bi.host, config.integrations_mode)
        return config
    except ValidationError as e:
        logger.error(f"Config validation failed: {e}")
        raise
