"""
Module: errors.py
Description: Error taxonomy for multipost.

Every condition that ends the process is a MultipostError subclass
carrying the exit code the command line should use. Per-attempt
delivery failures are AttemptFailed and never leave a delivery worker.
"""

from typing import Optional

from multipost.models.delivery import ProcessResult

EX_USAGE = 64


class MultipostError(Exception):
    """Base class for errors that terminate the process."""

    exit_code = 1


class UsageError(MultipostError):
    """Bad command line: unknown flag, bad value or no target URLs."""

    exit_code = EX_USAGE


class InputError(MultipostError):
    """The payload source could not be read."""


class RequestConstructionError(MultipostError):
    """A request could not be built for a target (malformed URL)."""

    def __init__(self, target: str, reason: str):
        super().__init__(f"Error creating request for {target}: {reason}")
        self.target = target
        self.reason = reason


class DeadlineExceeded(MultipostError):
    """The absolute time limit elapsed before all outcomes were collected."""

    def __init__(self, message: str = "Reached absolute time limit"):
        super().__init__(message)


class DeliveryFailed(MultipostError):
    """At least one target exhausted its retries."""

    def __init__(self, result: ProcessResult):
        super().__init__(f"There were {result.failure_count} errors")
        self.failure_count = result.failure_count
        self.result = result

    @property
    def failed_targets(self):
        return [o.target for o in self.result.failures]


class AttemptFailed(Exception):
    """A single delivery attempt failed and may be retried."""

    def __init__(self, reason: str, status_code: Optional[int] = None):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code
