"""Tests for parallel helpers."""

import pytest

from vav.parallel import ParallelProcessor, batched, parallel_map


def test_batched():
    assert batched(list(range(5)), 2) == [[0, 1], [2, 3], [4]]
    assert batched([], 3) == []
    with pytest.raises(ValueError):
        batched([1], 0)


@pytest.mark.parametrize("n_jobs", [1, 3])
def test_map_preserves_order(n_jobs):
    processor = ParallelProcessor(n_jobs=n_jobs)
    assert processor.map(lambda x: x * x, list(range(20))) == [x * x for x in range(20)]


def test_map_with_progress():
    assert parallel_map(str, [1, 2, 3], n_jobs=2, show_progress=True) == ["1", "2", "3"]


def test_all_cpus():
    assert ParallelProcessor(n_jobs=-1).n_jobs >= 1
