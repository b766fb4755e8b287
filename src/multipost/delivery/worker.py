"""
Module: delivery/worker.py
Description: Retrying HTTP POST delivery to a single target.

Each DeliveryWorker call walks one target through
Pending -> Attempting -> {Succeeded | Attempting | Failed}
and yields exactly one DeliveryOutcome. Transport errors and
non-2xx responses are retried with a fixed backoff; a malformed
target is raised immediately and never retried.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from multipost.errors import AttemptFailed, RequestConstructionError
from multipost.models.delivery import DeliveryOutcome, HeaderSet, RetryPolicy
from multipost.utils.logger import get_logger

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


def build_request(
    client: httpx.AsyncClient,
    target: str,
    payload: bytes,
    headers: HeaderSet
) -> httpx.Request:
    """
    Build the POST request for one target.

    Raises:
        RequestConstructionError: If target is not an absolute http(s) URL
    """
    try:
        url = httpx.URL(target)
    except (httpx.InvalidURL, TypeError) as e:
        raise RequestConstructionError(target, str(e)) from e

    if url.scheme not in ("http", "https"):
        raise RequestConstructionError(target, "URL must use http or https")
    if not url.host:
        raise RequestConstructionError(target, "URL has no host")

    try:
        return client.build_request(
            "POST",
            url,
            content=payload,
            headers=list(headers.items())
        )
    except (httpx.InvalidURL, UnicodeEncodeError) as e:
        raise RequestConstructionError(target, str(e)) from e


class DeliveryWorker:
    """
    Delivers a payload to one target at a time with retries.

    The worker holds only read-only state, so one instance can serve
    any number of concurrent deliver() calls.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        policy: RetryPolicy,
        headers: Optional[HeaderSet] = None,
        verbose: bool = False,
        sleep: Optional[SleepFn] = None
    ):
        """
        Initialize delivery worker.

        Args:
            client: Shared HTTP client used for every attempt
            policy: Attempt limit and backoff interval
            headers: Headers added to every request
            verbose: Log every attempt, not only failures
            sleep: Coroutine used for backoff waits (asyncio.sleep by default)
        """
        self.client = client
        self.policy = policy
        self.headers = headers or HeaderSet()
        self.verbose = verbose
        self.sleep = sleep or asyncio.sleep

    async def _attempt(self, target: str, payload: bytes, attempt: int) -> None:
        """Run one attempt, raising AttemptFailed on a retryable failure."""
        if self.verbose:
            logger.info("Trying target", target=target, attempt=attempt)

        request = build_request(self.client, target, payload, self.headers)

        try:
            response = await self.client.send(request)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            reason = f"http error: {status} {e.response.reason_phrase}".rstrip()
            raise AttemptFailed(reason, status_code=status) from e
        except httpx.TransportError as e:
            raise AttemptFailed(str(e) or type(e).__name__) from e

        logger.debug(
            "Delivered",
            target=target,
            attempt=attempt,
            status_code=response.status_code
        )

    async def deliver(self, target: str, payload: bytes) -> DeliveryOutcome:
        """
        Deliver payload to target, retrying per the policy.

        Args:
            target: Destination URL
            payload: Request body, never modified

        Returns:
            DeliveryOutcome with error=None on success, or the last
            attempt's failure reason once attempts are exhausted

        Raises:
            RequestConstructionError: If the target is malformed
        """
        attempts = 0

        def log_failure(retry_state):
            exc = retry_state.outcome.exception()
            logger.warning(
                "Delivery attempt failed",
                target=target,
                attempt=retry_state.attempt_number,
                error=str(exc),
                status_code=exc.status_code
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=wait_fixed(self.policy.backoff_interval),
            retry=retry_if_exception_type(AttemptFailed),
            after=log_failure,
            sleep=self.sleep,
            reraise=True
        )

        try:
            async for attempt in retrying:
                attempts = attempt.retry_state.attempt_number
                with attempt:
                    await self._attempt(target, payload, attempts)
        except AttemptFailed as e:
            return DeliveryOutcome(target=target, error=e.reason, attempts=attempts)

        return DeliveryOutcome(target=target, error=None, attempts=attempts)


async def deliver(
    target: str,
    payload: bytes,
    headers: Optional[HeaderSet],
    policy: RetryPolicy,
    *,
    client: httpx.AsyncClient,
    verbose: bool = False,
    sleep: Optional[SleepFn] = None
) -> DeliveryOutcome:
    """Deliver payload to a single target; see DeliveryWorker.deliver()."""
    worker = DeliveryWorker(client, policy, headers, verbose=verbose, sleep=sleep)
    return await worker.deliver(target, payload)
