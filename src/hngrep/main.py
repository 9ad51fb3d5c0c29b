"""Command line entry point for hngrep."""

import argparse
import asyncio
import sys
from contextlib import ExitStack

from pydantic import ValidationError

from hngrep import __version__
from hngrep.clients.hackernews import HackerNewsClient, TopStoriesFetchError
from hngrep.config import Settings
from hngrep.services.match_log import LogWriteError, MatchLog
from hngrep.services.pipeline import Pipeline
from hngrep.services.report import RenderError, ReportService
from hngrep.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Options left unset fall back to HNGREP_* environment variables, then to
    the Settings defaults.
    """
    parser = argparse.ArgumentParser(
        prog="hngrep",
        description="Filter Hacker News top stories by keyword and domain.",
    )
    parser.add_argument(
        "--max-stories", type=int, help="Maximum number of stories to fetch (default: 250)"
    )
    parser.add_argument("--keywords", help="Comma-separated list of keywords to filter stories")
    parser.add_argument("--domain", help="Domain to filter stories by URL (optional)")
    parser.add_argument("--delay", help="Delay between requests, e.g. 100ms or 1.5s (default: 100ms)")
    parser.add_argument(
        "--html-file",
        help='Output HTML file for matched stories (default: grep.html, "" to disable)',
    )
    parser.add_argument("--log-file", help="Append matched stories to this log file")
    parser.add_argument("--api-base-url", help="Hacker News API root URL")
    parser.add_argument(
        "--timeout", dest="request_timeout", type=float, help="HTTP timeout in seconds"
    )
    parser.add_argument("--log-level", help="Logging level (default: INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Build Settings from parsed arguments, CLI values taking precedence."""
    overrides = {name: value for name, value in vars(args).items() if value is not None}
    return Settings(**overrides)


def _format_validation_error(error: ValidationError) -> str:
    messages = []
    for detail in error.errors():
        message = detail["msg"]
        if message.startswith("Value error, "):
            messages.append(message.removeprefix("Value error, "))
        else:
            option = "-".join(str(part) for part in detail["loc"]).replace("_", "-")
            messages.append(f"{option}: {message}" if option else message)
    return "; ".join(messages)


async def run(settings: Settings) -> int:
    """Run the pipeline with live clients and report the outcome.

    Returns:
        The process exit status.
    """
    with ExitStack() as stack:
        match_log = None
        if settings.log_file is not None:
            try:
                handle = stack.enter_context(settings.log_file.open("a+", encoding="utf-8"))
            except OSError as e:
                logger.error("Failed to open match log", path=str(settings.log_file), error=str(e))
                return EXIT_FAILURE
            match_log = MatchLog(handle)

        report = ReportService() if settings.html_file is not None else None

        async with HackerNewsClient(
            base_url=settings.api_base_url, timeout=settings.request_timeout
        ) as client:
            pipeline = Pipeline(client, settings, report=report, match_log=match_log)
            try:
                result = await pipeline.run()
            except TopStoriesFetchError as e:
                logger.error("Failed to get top stories", reason=e.reason)
                return EXIT_FAILURE
            except (RenderError, LogWriteError) as e:
                logger.error("Failed to write output", error=str(e))
                return EXIT_FAILURE

    logger.info(
        "Run finished",
        matched=result.stories_matched,
        html_file=str(settings.html_file) if result.html_written else None,
        log_file=str(settings.log_file) if result.log_sorted else None,
    )
    print(f"Matched {result.stories_matched} stories.")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, validate settings and run the pipeline."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as e:
        parser.error(_format_validation_error(e))

    setup_logging(settings.log_level)
    return asyncio.run(run(settings))


if __name__ == "__main__":
    sys.exit(main())
