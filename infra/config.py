"""
Gateway configuration system.

Environment-based settings with sensible defaults.
Loads a .env file from the project root first (python-dotenv).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


class ConfigurationError(Exception):
    """Required configuration missing or invalid. The gateway must not start."""
    pass


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


@dataclass
class GatewayConfig:
    """Gateway configuration from environment."""

    # LINE (webhook)
    line_channel_secret: str
    line_channel_token: str

    # Slack (RTM)
    slack_bot_token: str
    slack_rtm_enabled: bool

    # Executor
    executor_workers: int
    webhook_await_dispatch_start: bool

    # Egress / keep-alive / reconnect
    reply_timeout_seconds: float = 10.0
    rtm_ping_interval_seconds: float = 30.0
    rtm_ping_initial_delay_seconds: float = 1.0
    rtm_backoff_base_seconds: float = 1.0
    rtm_backoff_max_seconds: float = 60.0

    # Process
    log_level: str = "INFO"
    port: int = 8000
    environment: str = "development"

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        """
        Load configuration from environment variables.

        Defaults:
        - RTM adapter disabled
        - 4 executor workers, fire-and-return webhook
        - 10s reply timeout, 30s keep-alive
        """
        return cls(
            # LINE Configuration
            line_channel_secret=os.getenv("LINE_CHANNEL_SECRET", ""),
            line_channel_token=os.getenv("LINE_CHANNEL_TOKEN", ""),

            # Slack Configuration
            slack_bot_token=os.getenv("SLACK_BOT_TOKEN", ""),
            slack_rtm_enabled=_env_bool("SLACK_RTM_ENABLED", "false"),

            # Executor Configuration
            executor_workers=_env_number("EXECUTOR_WORKERS", "4", int),
            webhook_await_dispatch_start=_env_bool("WEBHOOK_AWAIT_DISPATCH_START", "false"),

            # Timing
            reply_timeout_seconds=_env_number("REPLY_TIMEOUT_SECONDS", "10", float),
            rtm_ping_interval_seconds=_env_number("RTM_PING_INTERVAL_SECONDS", "30", float),
            rtm_ping_initial_delay_seconds=_env_number("RTM_PING_INITIAL_DELAY_SECONDS", "1", float),
            rtm_backoff_base_seconds=_env_number("RTM_BACKOFF_BASE_SECONDS", "1", float),
            rtm_backoff_max_seconds=_env_number("RTM_BACKOFF_MAX_SECONDS", "60", float),

            # Process
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=_env_number("PORT", "8000", int),
            environment=os.getenv("ENVIRONMENT", "development"),
        )

    def validate(self) -> None:
        """
        Check required settings.

        Raises:
            ConfigurationError: Listing every missing or invalid setting
        """
        problems = []

        if not self.line_channel_secret:
            problems.append("LINE_CHANNEL_SECRET is required")
        if self.slack_rtm_enabled and not self.slack_bot_token:
            problems.append("SLACK_BOT_TOKEN is required when SLACK_RTM_ENABLED=true")
        if self.executor_workers < 1:
            problems.append("EXECUTOR_WORKERS must be >= 1")
        if self.reply_timeout_seconds <= 0:
            problems.append("REPLY_TIMEOUT_SECONDS must be > 0")
        if self.rtm_ping_interval_seconds <= 0:
            problems.append("RTM_PING_INTERVAL_SECONDS must be > 0")
        if not isinstance(logging.getLevelName(self.log_level), int):
            problems.append(f"LOG_LEVEL {self.log_level!r} is not a logging level")

        if problems:
            raise ConfigurationError("; ".join(problems))


def get_config(validate: bool = True) -> GatewayConfig:
    """Load (and by default validate) configuration from the environment."""
    config = GatewayConfig.from_env()
    if validate:
        config.validate()
    return config
