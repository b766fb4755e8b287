"""
Module: test_delivery_models.py
Description: Unit tests for the delivery data models.

Tests validation and immutability of RetryPolicy, HeaderSet,
DeliveryOutcome and ProcessResult.
"""

import pytest
from pydantic import ValidationError

from multipost.models.delivery import DeliveryOutcome, HeaderSet, ProcessResult, RetryPolicy


class TestRetryPolicy:
    """Test cases for RetryPolicy validation."""

    def test_defaults(self):
        """Test default attempt count and backoff."""
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.backoff_interval == 30.0

    def test_requires_at_least_one_attempt(self):
        """Test max_attempts must be at least 1."""
        with pytest.raises(ValidationError):
            RetryPolicy(max_attempts=0)

    def test_rejects_negative_backoff(self):
        """Test backoff_interval cannot be negative."""
        with pytest.raises(ValidationError):
            RetryPolicy(backoff_interval=-1)

    def test_is_immutable(self):
        """Test policy fields cannot be reassigned."""
        policy = RetryPolicy()
        with pytest.raises(ValidationError):
            policy.max_attempts = 10


class TestHeaderSet:
    """Test cases for HeaderSet."""

    def test_from_mapping_preserves_order(self):
        """Test entries keep mapping order."""
        headers = HeaderSet.from_mapping({"X-B": "2", "X-A": "1"})
        assert list(headers.items()) == [("X-B", "2"), ("X-A", "1")]
        assert len(headers) == 2

    def test_empty(self):
        """Test an empty set is falsy."""
        assert not HeaderSet()
        assert HeaderSet.from_mapping(None).entries == ()

    def test_with_header_returns_new_set(self):
        """Test with_header leaves the original untouched."""
        original = HeaderSet.from_mapping({"Accept": "*/*"})
        updated = original.with_header("Content-Type", "text/plain")

        assert original.get("Content-Type") is None
        assert updated.get("content-type") == "text/plain"
        assert updated.get("Accept") == "*/*"

    def test_with_header_replaces_case_insensitively(self):
        """Test an existing header is replaced, not duplicated."""
        headers = HeaderSet.from_mapping({"content-type": "text/plain"})
        updated = headers.with_header("Content-Type", "application/json")

        assert list(updated.items()) == [("Content-Type", "application/json")]

    def test_rejects_empty_name(self):
        """Test header names must be non-empty."""
        with pytest.raises(ValidationError):
            HeaderSet(entries=(("", "x"),))

    def test_is_immutable(self):
        """Test entries cannot be reassigned."""
        headers = HeaderSet()
        with pytest.raises(ValidationError):
            headers.entries = (("X", "y"),)


class TestOutcomes:
    """Test cases for DeliveryOutcome and ProcessResult."""

    def test_outcome_success(self):
        """Test an outcome without error succeeded."""
        outcome = DeliveryOutcome(target="http://a.test/", attempts=1)
        assert outcome.succeeded

    def test_outcome_failure(self):
        """Test an outcome with error failed."""
        outcome = DeliveryOutcome(target="http://a.test/", error="boom", attempts=3)
        assert not outcome.succeeded

    def test_process_result_counts_failures(self):
        """Test aggregate failure counting."""
        result = ProcessResult(outcomes=(
            DeliveryOutcome(target="http://a.test/"),
            DeliveryOutcome(target="http://b.test/", error="http error: 500"),
            DeliveryOutcome(target="http://b.test/", error="http error: 503"),
        ))

        assert result.failure_count == 2
        assert not result.succeeded
        assert [o.error for o in result.failures] == ["http error: 500", "http error: 503"]

    def test_empty_result_succeeds(self):
        """Test zero failures is overall success."""
        result = ProcessResult(outcomes=(DeliveryOutcome(target="http://a.test/"),))
        assert result.succeeded
