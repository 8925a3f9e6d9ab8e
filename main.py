import argparse
import sys
from typing import List, Optional

from config import ConfigError, DEFAULT_FETCH_LIMIT, load_settings
from slack_export import FETCH_ERRORS, OutputError, SlackClient, SlackFetcher, export_threads
from utils import LOG_LEVELS, setup_logger, set_log_level

logger = setup_logger("main")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print every thread of a Slack channel as plain text."
    )
    parser.add_argument(
        "--fetch-limit",
        type=int,
        default=DEFAULT_FETCH_LIMIT,
        help="Number of pages (100 messages per page) to fetch from conversations.history, 0 for all"
    )
    parser.add_argument(
        "--output",
        help="Write the report to this file instead of stdout"
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level, overrides LOG_LEVEL"
    )
    args = parser.parse_args(argv)
    if args.fetch_limit < 0:
        parser.error("--fetch-limit must be 0 or greater")
    return args


def main(argv: Optional[List[str]] = None, fetcher: Optional[SlackFetcher] = None) -> int:
    args = parse_args(argv)
    if args.log_level:
        set_log_level(args.log_level)

    try:
        settings = load_settings()
    except ConfigError as e:
        print(e)
        return 1

    if fetcher is None:
        fetcher = SlackFetcher(SlackClient(settings.token).get_client())

    out = sys.stdout
    if args.output:
        try:
            out = open(args.output, "w", encoding="utf-8")
        except OSError as e:
            logger.error(f"Cannot open output file {args.output}: {e}")
            return 1

    try:
        export_threads(fetcher, settings.channel_id, args.fetch_limit, out=out)
    except OutputError as e:
        logger.error(f"Error writing report: {e}")
        return 1
    except FETCH_ERRORS as e:
        logger.error(f"Error fetching top-level messages: {e}")
        return 1
    finally:
        if out is not sys.stdout:
            out.close()

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
