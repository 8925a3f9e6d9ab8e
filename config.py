import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

load_dotenv()  # Load env vars from .env

TOKEN_ENV = "SLACK_BOT_TOKEN"
CHANNEL_ENV = "SLACK_CHANNEL_ID"

# Pages of conversations.history to read; 0 means all of them
DEFAULT_FETCH_LIMIT = 1

HISTORY_PAGE_SIZE = 100
REPLIES_PAGE_SIZE = 100

# Seconds to wait between conversations.replies pages
THREAD_PAGE_DELAY = 1

# Used when a 429 arrives without a usable Retry-After header
DEFAULT_RETRY_AFTER = 1

PERMALINK_TEMPLATE = "https://slack.com/archives/{channel}/p{ts}"


class ConfigError(Exception):
    """Required configuration is missing."""


@dataclass(frozen=True)
class Settings:
    token: str
    channel_id: str


def _require(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "")
    if not value:
        raise ConfigError(f"{name} is not set.")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read the bot token and channel id, raising ConfigError for the first one missing."""
    if environ is None:
        environ = os.environ
    return Settings(
        token=_require(environ, TOKEN_ENV),
        channel_id=_require(environ, CHANNEL_ENV),
    )
