"""
Module: conftest.py
Description: Shared pytest fixtures for multipost tests.

Provides retry policies, header sets, recording sleep functions and
scripted httpx transports so delivery tests run instantly without
touching the network.
"""

from collections import defaultdict
from typing import Callable, Dict, List

import httpx
import pytest

from multipost.models.delivery import HeaderSet, RetryPolicy
from multipost.utils.logger import configure_logging


class RecordingSleep:
    """Async sleep stand-in that records requested delays and returns at once."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(float(seconds))


class ScriptedTransport:
    """
    Per-URL scripted responses for httpx.MockTransport.

    Each URL maps to a list of status codes or exceptions consumed in
    order; the last entry repeats once the list is exhausted.
    """

    def __init__(self, script: Dict[str, list]):
        self.script = script
        self.requests: List[httpx.Request] = []
        self.calls: Dict[str, int] = defaultdict(int)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(request)
        steps = self.script[url]
        step = steps[min(self.calls[url], len(steps) - 1)]
        self.calls[url] += 1
        if isinstance(step, Exception):
            raise step
        return httpx.Response(step)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def policy():
    """Three attempts, no backoff."""
    return RetryPolicy(max_attempts=3, backoff_interval=0)


@pytest.fixture
def form_headers():
    """Headers as sent when the payload is form encoded."""
    return HeaderSet.from_mapping(
        {"Content-Type": "application/x-www-form-urlencoded"}
    )


@pytest.fixture
def recording_sleep():
    """Provide a sleep function that records backoff waits."""
    return RecordingSleep()


@pytest.fixture
def scripted_transport() -> Callable[[Dict[str, list]], ScriptedTransport]:
    """Factory for scripted transports."""
    return ScriptedTransport


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore default logging after tests that reconfigure it."""
    yield
    configure_logging()
