"""
Gateway Configuration Tests

Environment loading and startup validation.
"""

import pytest

from infra.config import ConfigurationError, GatewayConfig, get_config

ENV_VARS = [
    "LINE_CHANNEL_SECRET",
    "LINE_CHANNEL_TOKEN",
    "SLACK_BOT_TOKEN",
    "SLACK_RTM_ENABLED",
    "EXECUTOR_WORKERS",
    "WEBHOOK_AWAIT_DISPATCH_START",
    "REPLY_TIMEOUT_SECONDS",
    "RTM_PING_INTERVAL_SECONDS",
    "PORT",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestFromEnv:

    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("LINE_CHANNEL_SECRET", "secret")

        config = GatewayConfig.from_env()

        assert config.line_channel_secret == "secret"
        assert config.slack_rtm_enabled is False
        assert config.executor_workers == 4
        assert config.webhook_await_dispatch_start is False
        assert config.reply_timeout_seconds == 10.0
        assert config.rtm_ping_interval_seconds == 30.0
        assert config.port == 8000

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("LINE_CHANNEL_SECRET", "secret")
        monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-1")
        monkeypatch.setenv("SLACK_RTM_ENABLED", "true")
        monkeypatch.setenv("EXECUTOR_WORKERS", "8")
        monkeypatch.setenv("WEBHOOK_AWAIT_DISPATCH_START", "1")
        monkeypatch.setenv("REPLY_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = get_config()

        assert config.slack_rtm_enabled is True
        assert config.slack_bot_token == "xoxb-1"
        assert config.executor_workers == 8
        assert config.webhook_await_dispatch_start is True
        assert config.reply_timeout_seconds == 2.5
        assert config.log_level == "DEBUG"

    def test_non_numeric_value(self, monkeypatch):
        monkeypatch.setenv("EXECUTOR_WORKERS", "many")
        with pytest.raises(ConfigurationError, match="EXECUTOR_WORKERS"):
            GatewayConfig.from_env()


class TestValidate:

    def test_valid_config(self, config):
        config.validate()

    def test_missing_channel_secret(self):
        with pytest.raises(ConfigurationError, match="LINE_CHANNEL_SECRET"):
            get_config()

    def test_unvalidated_load_is_allowed(self):
        assert get_config(validate=False).line_channel_secret == ""

    def test_rtm_requires_bot_token(self, config_factory):
        config = config_factory(slack_rtm_enabled=True, slack_bot_token="")
        with pytest.raises(ConfigurationError, match="SLACK_BOT_TOKEN"):
            config.validate()

    def test_unknown_log_level(self, config_factory):
        with pytest.raises(ConfigurationError, match="LOG_LEVEL"):
            config_factory(log_level="CHATTY").validate()

    def test_every_problem_is_reported(self, config_factory):
        config = config_factory(
            line_channel_secret="",
            executor_workers=0,
            reply_timeout_seconds=0,
        )
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()

        message = str(exc_info.value)
        assert "LINE_CHANNEL_SECRET" in message
        assert "EXECUTOR_WORKERS" in message
        assert "REPLY_TIMEOUT_SECONDS" in message
