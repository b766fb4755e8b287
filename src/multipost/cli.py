"""
Module: cli.py
Description: Command line entry point for multipost.

Reads a payload from a file or standard input and POSTs it to every
URL given on the command line, concurrently, retrying each one.

Usage:
    multipost [flags] url...
    echo hello | multipost -retries 5 -retrytime 10s http://a/hook http://b/hook
    multipost --input body.json --param "" --time-limit 2m http://a/hook

Exit codes:
    0   every target accepted the payload
    1   fatal error or at least one target failed after all retries
    64  usage error (bad flag or no URLs)
"""

import argparse
import asyncio
import os
import sys
import threading
import time
from typing import BinaryIO, Callable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from multipost.config.settings import Settings
from multipost.delivery.coordinator import run
from multipost.errors import DeadlineExceeded, DeliveryFailed, MultipostError, UsageError
from multipost.payload import prepare_payload, read_input
from multipost.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports errors as UsageError instead of exiting."""

    def error(self, message):
        raise UsageError(message)


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    """Build the argument parser; unset flags fall back to Settings."""
    parser = _ArgumentParser(
        prog=prog,
        usage="%(prog)s [flags] url...",
        description="POST a payload to several URLs concurrently, with retries"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=None,
        help="log every attempt, not only failures"
    )
    parser.add_argument(
        "-retries", "--retries",
        type=int,
        default=None,
        help="how many times to try each post (default: 3)"
    )
    parser.add_argument(
        "-retrytime", "--retry-time",
        dest="retry_time",
        default=None,
        help="how long to wait between retries, e.g. 30s (default: 30s)"
    )
    parser.add_argument(
        "-input", "--input",
        default=None,
        help="file from which to read the body, '-' for stdin (default: -)"
    )
    parser.add_argument(
        "-param", "--param",
        default=None,
        help="form parameter name; empty sends the raw body (default: payload)"
    )
    parser.add_argument(
        "-timeLimit", "--time-limit",
        dest="time_limit",
        default=None,
        help="maximum amount of time this process may run (default: 15m)"
    )
    parser.add_argument(
        "-timeout", "--request-timeout",
        dest="request_timeout",
        default=None,
        help="per-request HTTP timeout (default: none)"
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        default=None,
        help="log rendering (default: json)"
    )
    parser.add_argument("urls", nargs="*", metavar="url", help="destination URL")
    return parser


def parse_args(
    parser: argparse.ArgumentParser,
    argv: Optional[Sequence[str]] = None
) -> Tuple[Settings, List[str]]:
    """
    Parse flags into Settings and the list of target URLs.

    Raises:
        UsageError: On a bad flag value or when no URL is given
    """
    args = parser.parse_args(argv)

    overrides = {
        name: getattr(args, name)
        for name in (
            "verbose", "retries", "retry_time", "input", "param",
            "time_limit", "request_timeout", "log_format",
        )
        if getattr(args, name) is not None
    }

    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        raise UsageError(str(e)) from e

    if not args.urls:
        raise UsageError("at least one url is required")

    return settings, list(args.urls)


def _print_usage(parser: argparse.ArgumentParser, error: UsageError) -> None:
    sys.stderr.write(f"Usage: {parser.prog} [flags] url...\n")
    sys.stderr.write(f"{parser.prog}: error: {error}\n\n")
    parser.print_help(sys.stderr)


def arm_time_limit(seconds: float, abort: Callable[[int], None]) -> threading.Timer:
    """
    Start the process-wide time limit.

    Runs on its own thread so it fires even while the main thread is
    blocked reading input or waiting for the event loop to shut down.

    Args:
        seconds: Time until the limit is reached
        abort: Called with the exit code when the limit is reached

    Returns:
        The started timer; cancel it once the run is over
    """
    def expire():
        logger.critical(
            "Reached absolute time limit",
            error_type=DeadlineExceeded.__name__
        )
        abort(DeadlineExceeded.exit_code)

    timer = threading.Timer(max(seconds, 0.0), expire)
    timer.daemon = True
    timer.start()
    return timer


def main(
    argv: Optional[Sequence[str]] = None,
    stdin: Optional[BinaryIO] = None,
    abort: Optional[Callable[[int], None]] = None
) -> int:
    """
    Run the command line tool.

    Args:
        argv: Arguments without the program name (sys.argv[1:] by default)
        stdin: Binary stream used when the input is "-"
        abort: Called by the time limit; os._exit by default

    Returns:
        Process exit code
    """
    started = time.monotonic()
    parser = build_parser()

    try:
        settings, targets = parse_args(parser, argv)
    except UsageError as e:
        _print_usage(parser, e)
        return e.exit_code

    configure_logging(settings.log_level, settings.log_format)
    deadline = started + settings.time_limit
    timer = arm_time_limit(deadline - time.monotonic(), abort or os._exit)

    try:
        body = read_input(settings.input, stdin)
        payload, headers = prepare_payload(body, settings.param)

        result = asyncio.run(run(
            targets,
            payload,
            headers,
            settings.retry_policy(),
            deadline,
            verbose=settings.verbose,
            request_timeout=settings.request_timeout
        ))

        if not result.succeeded:
            raise DeliveryFailed(result)

    except DeliveryFailed as e:
        logger.critical(str(e), error_type=type(e).__name__, failed_targets=e.failed_targets)
        return e.exit_code
    except MultipostError as e:
        logger.critical(str(e), error_type=type(e).__name__)
        return e.exit_code
    finally:
        timer.cancel()

    return 0


def entrypoint() -> None:
    """Console script entry point."""
    sys.exit(main())
