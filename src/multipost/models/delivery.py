"""
Module: delivery.py
Description: Data models for the delivery fan-out.

Defines the immutable values shared by the delivery workers and the
fan-out coordinator. Nothing here is mutated once fan-out begins,
so workers share these objects without locking.

Key Components:
- RetryPolicy: attempt limit and fixed backoff interval
- HeaderSet: ordered, read-only request headers
- DeliveryOutcome: final result for one target
- ProcessResult: aggregate of all outcomes

Dependencies: pydantic, typing
Author: Multipost Team
"""

from typing import Iterator, Mapping, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class RetryPolicy(BaseModel):
    """
    Retry configuration applied to every target.

    Attributes:
        max_attempts: Total attempts per target, including the first
        backoff_interval: Seconds to wait between failed attempts
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(
        default=3,
        ge=1,
        description="Maximum delivery attempts per target"
    )
    backoff_interval: float = Field(
        default=30.0,
        ge=0,
        description="Seconds to wait between attempts"
    )


class HeaderSet(BaseModel):
    """
    Ordered collection of request headers.

    Built once before fan-out and handed to every worker. Use
    with_header() to derive a new set; instances never change.
    """

    model_config = ConfigDict(frozen=True)

    entries: Tuple[Tuple[str, str], ...] = Field(
        default=(),
        description="Header (name, value) pairs in send order"
    )

    @field_validator('entries')
    @classmethod
    def validate_entries(cls, v: Tuple[Tuple[str, str], ...]) -> Tuple[Tuple[str, str], ...]:
        """Reject empty header names."""
        for name, _ in v:
            if not name or not name.strip():
                raise ValueError("header names must be non-empty")
        return v

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, str]] = None) -> "HeaderSet":
        """Build a header set from a plain mapping, preserving its order."""
        return cls(entries=tuple((k, v) for k, v in (mapping or {}).items()))

    def with_header(self, name: str, value: str) -> "HeaderSet":
        """Return a copy with name set to value, replacing any existing entry."""
        kept = tuple(
            (k, v) for k, v in self.entries if k.lower() != name.lower()
        )
        return HeaderSet(entries=kept + ((name, value),))

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        for k, v in self.entries:
            if k.lower() == name.lower():
                return v
        return default

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)


class DeliveryOutcome(BaseModel):
    """
    Final result of delivering the payload to one target.

    Attributes:
        target: Destination URL
        error: Reason of the last failed attempt, None on success
        attempts: Number of attempts made
    """

    model_config = ConfigDict(frozen=True)

    target: str = Field(..., description="Destination URL")
    error: Optional[str] = Field(
        default=None,
        description="Failure reason of the final attempt"
    )
    attempts: int = Field(default=1, ge=1, description="Attempts made")

    @property
    def succeeded(self) -> bool:
        return self.error is None


class ProcessResult(BaseModel):
    """Aggregate of every outcome collected during one run."""

    model_config = ConfigDict(frozen=True)

    outcomes: Tuple[DeliveryOutcome, ...] = Field(
        default=(),
        description="One outcome per launched target, in collection order"
    )

    @property
    def failures(self) -> Tuple[DeliveryOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def succeeded(self) -> bool:
        return self.failure_count == 0
