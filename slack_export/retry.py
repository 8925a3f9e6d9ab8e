"""
Rate-limit retry for Slack Web API calls.

Slack answers HTTP 429 with a Retry-After header (seconds). A call wrapped
by RetryPolicy.call sleeps for that long and re-issues the identical request.
The default policy never gives up; pass max_attempts to bound it.
"""
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from slack_sdk.errors import SlackApiError

from config import DEFAULT_RETRY_AFTER
from utils import setup_logger

logger = setup_logger("RetryPolicy")

T = TypeVar("T")


def honor_retry_after(attempt: int, retry_after: float) -> float:
    """Wait exactly what the server asked for, every time."""
    return retry_after


def is_rate_limited(error: SlackApiError) -> bool:
    # The response is a plain dict when slack_sdk could not decode the body
    return getattr(error.response, "status_code", None) == 429


def retry_after_seconds(error: SlackApiError, default: float = DEFAULT_RETRY_AFTER) -> float:
    headers = getattr(error.response, "headers", None) or {}
    for name, value in headers.items():
        if name.lower() != "retry-after":
            continue
        if isinstance(value, list):
            value = value[0] if value else ""
        try:
            seconds = int(value)
        except (TypeError, ValueError):
            break
        if seconds >= 0:
            return float(seconds)
        break
    return float(default)


@dataclass
class RetryPolicy:
    max_attempts: Optional[int] = None
    backoff: Callable[[int, float], float] = honor_retry_after
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def call(self, request: Callable[[], T], description: str = "request") -> T:
        """Run request, sleeping and repeating it for as long as Slack returns 429.

        Any other SlackApiError, and any transport error, propagates on the
        first occurrence. max_attempts counts every call including the first.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return request()
            except SlackApiError as e:
                if not is_rate_limited(e):
                    raise
                if self.max_attempts is not None and attempt >= self.max_attempts:
                    logger.error(f"Rate limited on {description}, giving up after {attempt} attempts")
                    raise
                wait = self.backoff(attempt, retry_after_seconds(e))
                logger.warning(f"Rate limited on {description}. Waiting {wait:g} seconds...")
                self.sleep(wait)
