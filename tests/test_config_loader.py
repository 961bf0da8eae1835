import pytest
from pydantic import ValidationError

from dashbot.utils.config_loader import load_bot_config

REQUIRED_ENV = {
    "BOT_TOKEN": "xoxb-1",
    "BOT_ID": "UBOT",
    "VERIFICATION_TOKEN": "verify-me",
    "TABLEAU_HOST": "bi.example.com",
    "TABLEAU_LOGIN": "svc",
    "TABLEAU_PASSWORD": "secret",
}

YAML_CONFIG = """
port: 4000
search_limit: 10
bi:
  host: yaml-host
  scheme: http
  login: yaml-user
  password: yaml-pass
slack:
  bot_token: xoxb-yaml
  bot_id: UYAML
  verification_token: yaml-token
fulfillment:
  max_concurrent: 3
"""


def _write(tmp_path, text):
    path = tmp_path / "bot_config.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_environment_supplies_required_settings(tmp_path):
    cfg = load_bot_config(_write(tmp_path, ""), environ=REQUIRED_ENV)

    assert cfg.bi.host == "bi.example.com"
    assert cfg.bi.base_url == "https://bi.example.com"
    assert cfg.slack.verification_token == "verify-me"
    assert cfg.port == 3000
    assert cfg.search_limit == 20
    assert cfg.fulfillment.max_concurrent == 8
    assert cfg.fulfillment.reauthenticate_on_expiry is False


def test_yaml_values_are_loaded(tmp_path):
    cfg = load_bot_config(_write(tmp_path, YAML_CONFIG), environ={})

    assert cfg.port == 4000
    assert cfg.bi.base_url == "http://yaml-host"
    assert cfg.slack.bot_id == "UYAML"
    assert cfg.fulfillment.max_concurrent == 3
    assert cfg.fulfillment.max_pending == 64


def test_environment_overrides_yaml(tmp_path):
    env = {
        "TABLEAU_HOST": "env-host",
        "BOT_CONFIG_LIMIT": "50",
        "PORT": "8080",
        "REAUTHENTICATE_ON_EXPIRY": "true",
        "FULFILLMENT_MAX_PENDING": "",
    }

    cfg = load_bot_config(_write(tmp_path, YAML_CONFIG), environ=env)

    assert cfg.bi.host == "env-host"
    assert cfg.bi.login == "yaml-user"
    assert cfg.search_limit == 50
    assert cfg.port == 8080
    assert cfg.fulfillment.reauthenticate_on_expiry is True
    assert cfg.fulfillment.max_pending == 64


def test_config_path_from_environment(tmp_path):
    path = _write(tmp_path, YAML_CONFIG)

    cfg = load_bot_config(environ={"DASHBOT_CONFIG": str(path)})

    assert cfg.bi.host == "yaml-host"


def test_missing_explicit_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_bot_config(tmp_path / "nope.yml", environ=REQUIRED_ENV)


def test_missing_required_setting_fails_validation(tmp_path):
    env = {k: v for k, v in REQUIRED_ENV.items() if k != "TABLEAU_PASSWORD"}

    with pytest.raises(ValidationError):
        load_bot_config(_write(tmp_path, ""), environ=env)


@pytest.mark.parametrize("limit", ["0", "101", "many"])
def test_search_limit_bounds(tmp_path, limit):
    with pytest.raises(ValidationError):
        load_bot_config(_write(tmp_path, ""), environ={**REQUIRED_ENV, "BOT_CONFIG_LIMIT": limit})
