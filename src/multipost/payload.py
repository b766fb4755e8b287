"""
Module: payload.py
Description: Payload acquisition and form encoding.

Reads the request body from a file or standard input and optionally
wraps it as a single application/x-www-form-urlencoded parameter.
Runs once, before fan-out; the result is shared read-only by all
delivery workers.
"""

import sys
from typing import BinaryIO, Optional, Tuple
from urllib.parse import quote_plus

from multipost.errors import InputError
from multipost.models.delivery import HeaderSet
from multipost.utils.logger import get_logger

logger = get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def read_input(source: str, stdin: Optional[BinaryIO] = None) -> bytes:
    """
    Read the whole payload.

    Args:
        source: File path, or "-" for standard input
        stdin: Binary stream used for "-" (defaults to sys.stdin.buffer)

    Returns:
        Payload bytes

    Raises:
        InputError: If the source cannot be read
    """
    try:
        if source == "-":
            stream = stdin if stdin is not None else sys.stdin.buffer
            data = stream.read()
        else:
            with open(source, "rb") as f:
                data = f.read()
    except OSError as e:
        raise InputError(f"Error acquiring input: {e}") from e

    logger.debug("Payload read", source=source, size=len(data))
    return data


def encode_form(body: bytes, param: str) -> bytes:
    """Encode body as the single form field param=<escaped body>."""
    return f"{param}={quote_plus(body)}".encode("utf-8")


def prepare_payload(
    body: bytes,
    param: str,
    headers: Optional[HeaderSet] = None
) -> Tuple[bytes, HeaderSet]:
    """
    Turn raw input into the request body and headers sent to every target.

    Args:
        body: Raw payload bytes
        param: Form parameter name; empty sends the raw bytes untouched
        headers: Base headers

    Returns:
        (body, headers) ready for fan-out
    """
    headers = headers or HeaderSet()
    if not param:
        return body, headers

    return (
        encode_form(body, param),
        headers.with_header("Content-Type", FORM_CONTENT_TYPE)
    )
