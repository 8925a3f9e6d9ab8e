"""
Slack thread export: pages a channel's history and prints every thread.
"""

# Re-export the pieces main.py and the tests wire together
from .client import SlackClient
from .fetcher import FETCH_ERRORS, Message, Page, SlackFetcher, is_top_level
from .report import OutputError, build_permalink, export_threads
from .retry import RetryPolicy

__all__ = [
    'SlackClient',
    'SlackFetcher',
    'Message',
    'Page',
    'RetryPolicy',
    'FETCH_ERRORS',
    'is_top_level',
    'build_permalink',
    'export_threads',
    'OutputError',
]
