import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackClientError

from config import HISTORY_PAGE_SIZE, REPLIES_PAGE_SIZE, THREAD_PAGE_DELAY
from slack_export.retry import RetryPolicy
from utils import setup_logger

# What a failed page fetch can raise: API and decode errors from slack_sdk,
# connection errors (urllib.error.URLError) from the transport.
FETCH_ERRORS = (SlackClientError, OSError)

logger = setup_logger("SlackFetcher")


@dataclass(frozen=True)
class Message:
    ts: str
    text: str
    thread_ts: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            ts=data.get("ts") or "",
            text=data.get("text") or "",
            thread_ts=data.get("thread_ts") or "",
        )


@dataclass(frozen=True)
class Page:
    messages: List[Message]
    has_more: bool
    next_cursor: str

    @classmethod
    def from_response(cls, response) -> "Page":
        """Build a page from a conversations.history / conversations.replies response."""
        metadata = response.get("response_metadata") or {}
        return cls(
            messages=[Message.from_dict(m) for m in response.get("messages") or []],
            has_more=bool(response.get("has_more", False)),
            next_cursor=metadata.get("next_cursor") or "",
        )

    @property
    def is_last(self) -> bool:
        return not self.has_more or not self.next_cursor


def is_top_level(message: Message) -> bool:
    """A message is top-level unless it replies to some other message's thread."""
    return not message.thread_ts or message.thread_ts == message.ts


class SlackFetcher:
    def __init__(
            self,
            client: WebClient,
            retry_policy: Optional[RetryPolicy] = None,
            sleep: Callable[[float], None] = time.sleep,
            thread_page_delay: float = THREAD_PAGE_DELAY
    ):
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy(sleep=sleep)
        self.sleep = sleep
        self.thread_page_delay = thread_page_delay

    def fetch_history_page(self, channel_id: str, cursor: Optional[str] = None) -> Page:
        response = self.retry_policy.call(
            lambda: self.client.conversations_history(
                channel=channel_id,
                limit=HISTORY_PAGE_SIZE,
                cursor=cursor or None
            ),
            description="conversations.history"
        )
        return Page.from_response(response)

    def fetch_replies_page(self, channel_id: str, thread_ts: str, cursor: Optional[str] = None) -> Page:
        response = self.retry_policy.call(
            lambda: self.client.conversations_replies(
                channel=channel_id,
                ts=thread_ts,
                limit=REPLIES_PAGE_SIZE,
                cursor=cursor or None
            ),
            description=f"conversations.replies ({thread_ts})"
        )
        return Page.from_response(response)

    def fetch_top_level_messages(self, channel_id: str, fetch_pages: int = 1) -> List[Message]:
        """
        Collect top-level messages from a channel's history.

        Args:
            channel_id: Slack channel ID
            fetch_pages: Maximum number of history pages to read, 0 for no limit

        Returns:
            Unsorted list of messages that are not thread replies
        """
        logger.info(f"Fetching top-level messages from {channel_id}")
        messages = []
        cursor = None
        pages_fetched = 0

        while True:
            if fetch_pages > 0 and pages_fetched >= fetch_pages:
                break

            page = self.fetch_history_page(channel_id, cursor)
            pages_fetched += 1
            kept = [m for m in page.messages if is_top_level(m)]
            messages.extend(kept)
            logger.debug(
                f"History page {pages_fetched}: kept {len(kept)} of {len(page.messages)} messages"
            )

            if page.is_last:
                break
            cursor = page.next_cursor

        logger.info(f"Collected {len(messages)} top-level messages from {pages_fetched} page(s)")
        return messages

    def fetch_thread_replies(self, channel_id: str, thread_ts: str) -> List[Message]:
        """
        Fetch every message of a thread, the root included, in page order.

        There is no page cap. Pages are spaced by thread_page_delay seconds
        on top of any rate-limit wait.
        """
        logger.debug(f"Fetching replies for thread_ts={thread_ts}")
        replies = []
        cursor = None

        while True:
            page = self.fetch_replies_page(channel_id, thread_ts, cursor)
            replies.extend(page.messages)

            if page.is_last:
                break
            cursor = page.next_cursor

            self.sleep(self.thread_page_delay)

        return replies
