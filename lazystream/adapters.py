"""
Adapters for turning standard Python objects into pipelines.

This module provides the ergonomic entry points for building pipelines
from common Python data structures.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from .core import Pipeline
from .sources import IterateSource, RangeSource, to_source

T = TypeVar("T")


def stream[T](data: Iterable[T]) -> Pipeline[T]:
    """
    Build a pipeline over an in-memory collection.

    Sequences (lists, tuples, strings) and ranges are wrapped without
    copying; other finite iterables are snapshotted into a tuple.

    Args:
        data: Any finite iterable, or an existing source

    Returns:
        A pipeline with no stages

    Example:
        >>> from lazystream import stream
        >>> stream([1, 2, 3, 4]).filter(lambda x: x % 2 == 0).to_list()
        [2, 4]
    """
    return Pipeline(to_source(data))


def stream_of[T](*elements: T) -> Pipeline[T]:
    """Build a pipeline over the given arguments."""
    return Pipeline(to_source(elements))


def empty() -> Pipeline[Any]:
    """Build a pipeline that produces no elements."""
    return Pipeline(to_source(()))


def from_range(start: int, stop: int, step: int = 1) -> Pipeline[int]:
    """
    Build a pipeline over a range of integers.

    Args:
        start: Starting value (inclusive)
        stop: Ending value (exclusive)
        step: Step size (default 1)

    Example:
        >>> from lazystream import from_range
        >>> from_range(1, 101).parallel(chunks=4).reduce(lambda a, b: a + b, 0)
        5050
    """
    return Pipeline(RangeSource(start, stop, step))


def iterate[T](seed: T, step: Callable[[T], T]) -> Pipeline[T]:
    """
    Build an unbounded pipeline ``seed, step(seed), step(step(seed)), ...``.

    Terminal operations that must see every element never return unless a
    ``limit`` stage bounds the pipeline first.

    Example:
        >>> from lazystream import iterate
        >>> iterate(1, lambda n: n + 1).map(lambda n: n * n).limit(5).to_list()
        [1, 4, 9, 16, 25]
    """
    return Pipeline(IterateSource(seed, step))
