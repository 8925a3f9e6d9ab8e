import sys
from typing import Iterable, TextIO

from config import DEFAULT_FETCH_LIMIT, PERMALINK_TEMPLATE
from slack_export.fetcher import FETCH_ERRORS, Message, SlackFetcher
from utils import setup_logger

logger = setup_logger("Report")


class OutputError(Exception):
    """The report could not be written to its output stream."""


def format_slack_ts(ts: str) -> str:
    return ts.replace(".", "")


def build_permalink(channel_id: str, ts: str) -> str:
    """Archive URL of a message, e.g. C123 + 1690000000.000100 -> .../C123/p1690000000000100"""
    return PERMALINK_TEMPLATE.format(channel=channel_id, ts=format_slack_ts(ts))


def write_thread(out: TextIO, channel_id: str, root: Message, replies: Iterable[Message]) -> None:
    try:
        print("# Thread", file=out)
        print(build_permalink(channel_id, root.ts), file=out)
        for reply in replies:
            print("## Message", file=out)
            print(reply.text, file=out)
    except OSError as e:
        raise OutputError(e) from e


def export_threads(
        fetcher: SlackFetcher,
        channel_id: str,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        out: TextIO = None
) -> int:
    """
    Print every thread of the channel, oldest first.

    Errors while reading history propagate, write failures raise OutputError.
    A thread whose replies cannot be fetched is logged and skipped.

    Returns:
        Number of threads written
    """
    out = out or sys.stdout
    messages = sorted(fetcher.fetch_top_level_messages(channel_id, fetch_limit), key=lambda m: m.ts)

    written = 0
    for message in messages:
        try:
            replies = fetcher.fetch_thread_replies(channel_id, message.ts)
        except FETCH_ERRORS as e:
            logger.warning(f"Error fetching thread {message.ts}: {e}")
            continue

        write_thread(out, channel_id, message, replies)
        written += 1

    logger.info(f"Exported {written} of {len(messages)} threads from {channel_id}")
    return written
