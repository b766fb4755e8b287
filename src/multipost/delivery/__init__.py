"""
Package: delivery
Description: Concurrent retrying HTTP delivery.

Provides the per-target retrying worker and the coordinator that
fans a payload out to every target and aggregates the outcomes.
"""

from .coordinator import run
from .worker import DeliveryWorker, deliver

__all__ = ["DeliveryWorker", "deliver", "run"]
