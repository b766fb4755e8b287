"""
Module: models
Description: Package initialization for data models.

This package contains the immutable values passed between the
command line, the delivery workers and the fan-out coordinator:
- RetryPolicy: attempt count and backoff interval
- HeaderSet: read-only request headers
- DeliveryOutcome: final result for one target
- ProcessResult: aggregate result of a run
"""

from .delivery import DeliveryOutcome, HeaderSet, ProcessResult, RetryPolicy

__all__ = [
    "DeliveryOutcome",
    "HeaderSet",
    "ProcessResult",
    "RetryPolicy",
]
