"""
Module: delivery/coordinator.py
Description: Concurrent fan-out of one payload to many targets.

Starts one delivery task per target, collects exactly one outcome per
task from a shared queue and races the collection against a global
deadline. A malformed target or an expired deadline cancels every
outstanding task and is raised to the caller; ordinary delivery
failures come back as data in the ProcessResult.

Key Components:
- run(): fan out, collect, aggregate
- Deadline handling as cancellation of all worker tasks

Dependencies: asyncio, httpx
Author: Multipost Team
"""

import asyncio
import time
from typing import List, Optional, Sequence, Tuple, Union

import httpx

from multipost.delivery.worker import DeliveryWorker, SleepFn
from multipost.errors import DeadlineExceeded, UsageError
from multipost.models.delivery import DeliveryOutcome, HeaderSet, ProcessResult, RetryPolicy
from multipost.utils.logger import get_logger

logger = get_logger(__name__)

_QueueItem = Union[DeliveryOutcome, Exception]


async def _produce(
    worker: DeliveryWorker,
    target: str,
    payload: bytes,
    queue: "asyncio.Queue[_QueueItem]"
) -> None:
    try:
        outcome = await worker.deliver(target, payload)
    except Exception as e:
        # Fatal to the whole run; raised once collection stops
        await queue.put(e)
        return
    await queue.put(outcome)


async def _collect(
    queue: "asyncio.Queue[_QueueItem]",
    expected: int
) -> Tuple[List[DeliveryOutcome], Optional[Exception]]:
    # A worker error is returned, not raised, so that only the deadline
    # can end wait_for with a timeout
    outcomes: List[DeliveryOutcome] = []
    while len(outcomes) < expected:
        item = await queue.get()
        if isinstance(item, Exception):
            return outcomes, item
        outcomes.append(item)
    return outcomes, None


async def _fan_out(
    client: httpx.AsyncClient,
    targets: Sequence[str],
    payload: bytes,
    headers: HeaderSet,
    policy: RetryPolicy,
    deadline: Optional[float],
    verbose: bool,
    sleep: Optional[SleepFn]
) -> List[DeliveryOutcome]:
    worker = DeliveryWorker(client, policy, headers, verbose=verbose, sleep=sleep)
    queue: "asyncio.Queue[_QueueItem]" = asyncio.Queue()

    tasks = [
        asyncio.create_task(_produce(worker, target, payload, queue))
        for target in targets
    ]

    timeout = None
    if deadline is not None:
        timeout = max(deadline - time.monotonic(), 0.0)

    try:
        outcomes, fatal = await asyncio.wait_for(_collect(queue, len(tasks)), timeout)
    except asyncio.TimeoutError:
        raise DeadlineExceeded() from None
    finally:
        pending = [t for t in tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    if fatal is not None:
        raise fatal
    return outcomes


async def run(
    targets: Sequence[str],
    payload: bytes,
    headers: Optional[HeaderSet],
    policy: RetryPolicy,
    deadline: Optional[float] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    verbose: bool = False,
    sleep: Optional[SleepFn] = None,
    request_timeout: Optional[float] = None
) -> ProcessResult:
    """
    Deliver payload to every target concurrently.

    Args:
        targets: Destination URLs; duplicates are delivered independently
        payload: Request body shared by all workers
        headers: Headers shared by all workers
        policy: Retry policy shared by all workers
        deadline: Absolute time.monotonic() instant bounding the whole run
        client: HTTP client to use; a client is created and closed if omitted
        verbose: Log every attempt
        sleep: Backoff sleep coroutine passed to the workers
        request_timeout: Per-request timeout for a created client

    Returns:
        ProcessResult with one outcome per target

    Raises:
        UsageError: If no targets are given
        RequestConstructionError: If any target is malformed
        DeadlineExceeded: If the deadline elapses before collection completes
    """
    if not targets:
        raise UsageError("no target URLs given")
    if deadline is not None and deadline <= time.monotonic():
        raise DeadlineExceeded()

    headers = headers or HeaderSet()

    logger.info("Starting fan-out", targets=len(targets), max_attempts=policy.max_attempts)

    if client is not None:
        outcomes = await _fan_out(
            client, targets, payload, headers, policy, deadline, verbose, sleep
        )
    else:
        async with httpx.AsyncClient(timeout=httpx.Timeout(request_timeout)) as owned:
            outcomes = await _fan_out(
                owned, targets, payload, headers, policy, deadline, verbose, sleep
            )

    result = ProcessResult(outcomes=tuple(outcomes))

    for outcome in result.failures:
        logger.error(
            "Delivery failed",
            target=outcome.target,
            error=outcome.error,
            attempts=outcome.attempts
        )

    logger.info(
        "Fan-out complete",
        delivered=len(result.outcomes) - result.failure_count,
        failed=result.failure_count
    )

    return result
