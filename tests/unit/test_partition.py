"""Unit tests for partition (batch splitting)."""

import math

import pytest

from filestore.application.services.batched_fetcher import partition
from filestore.domain.exceptions import ValidationException


@pytest.mark.parametrize("n", [0, 1, 5, 24, 25, 26, 30, 50, 51, 101])
@pytest.mark.parametrize("limit", [1, 3, 25, 100])
def test_partition_covers_input_in_ceil_batches(n: int, limit: int) -> None:
    items = list(range(n))
    batches = partition(items, limit)
    assert len(batches) == math.ceil(n / limit)
    assert all(1 <= len(b) <= limit for b in batches)
    flattened = [x for b in batches for x in b]
    assert flattened == items
    assert len(set(flattened)) == n


def test_partition_last_batch_may_be_smaller() -> None:
    assert [len(b) for b in partition(list(range(30)), 25)] == [25, 5]


def test_partition_empty_input_yields_no_batches() -> None:
    assert partition([], 25) == []


@pytest.mark.parametrize("limit", [0, -1, 2.5, True, "25"])
def test_partition_rejects_non_positive_or_non_int_limit(limit) -> None:
    with pytest.raises(ValidationException) as exc_info:
        partition([1, 2, 3], limit)
    assert exc_info.value.error_code == "VALIDATION_ERROR"
    assert exc_info.value.details == {"field": "concurrency_limit"}
