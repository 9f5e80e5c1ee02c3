"""
Source implementations for common data structures.

Sources adapt in-memory collections into pull-based cursors. Indexed
sources can additionally split themselves into contiguous, disjoint
ranges for parallel reduction.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any, TypeVar

from .protocols import Source, UnboundedSource

T = TypeVar("T")


class RangeSource:
    """
    Source for integer ranges.

    Ranges are split arithmetically, without materializing elements.
    """

    def __init__(self, start: int, stop: int, step: int = 1):
        """
        Create a range source.

        Args:
            start: Starting value (inclusive)
            stop: Ending value (exclusive)
            step: Step size (default 1)
        """
        if step == 0:
            raise ValueError("Range step cannot be zero")

        self.start = start
        self.stop = stop
        self.step = step
        self._length = len(range(start, stop, step))

    def __len__(self) -> int:
        """Return the number of elements in this range."""
        return self._length

    def split_at(self, index: int) -> tuple[RangeSource, RangeSource]:
        """
        Split this range at the given index.

        Args:
            index: Split position (0 < index < len(self))

        Returns:
            Tuple of (left_range, right_range)
        """
        if index <= 0 or index >= self._length:
            raise ValueError(f"Invalid split index: {index}")

        mid_value = self.start + (index * self.step)

        left = RangeSource(self.start, mid_value, self.step)
        right = RangeSource(mid_value, self.stop, self.step)

        return left, right

    def into_iter(self) -> Iterator[int]:
        """Open a cursor over this range."""
        return iter(range(self.start, self.stop, self.step))

    def __repr__(self) -> str:
        return f"RangeSource({self.start}, {self.stop}, {self.step})"


class SequenceSource[T]:
    """
    Source for list-like sequences.

    This wraps lists, tuples, strings and other sequences. A split only
    narrows the ``[start, end)`` window; the backing sequence is shared
    read-only between the halves and is never copied or mutated.
    """

    def __init__(
        self, data: Sequence[T], start: int = 0, end: int | None = None
    ):
        """
        Create a sequence source.

        Args:
            data: The sequence to iterate over
            start: Starting index (inclusive)
            end: Ending index (exclusive), or None for end of sequence
        """
        self.data = data
        self.start = start
        self.end = end if end is not None else len(data)

        if self.start < 0 or self.start > len(data):
            raise ValueError(f"Invalid start index: {self.start}")
        if self.end < 0 or self.end > len(data):
            raise ValueError(f"Invalid end index: {self.end}")
        if self.start > self.end:
            raise ValueError(f"Start index {self.start} > end index {self.end}")

    def __len__(self) -> int:
        """Return the number of elements in this window."""
        return self.end - self.start

    def split_at(self, index: int) -> tuple[SequenceSource[T], SequenceSource[T]]:
        """
        Split this window at the given index.

        Args:
            index: Split position relative to start (0 < index < len(self))

        Returns:
            Tuple of (left_source, right_source)
        """
        length = self.end - self.start
        if index <= 0 or index >= length:
            raise ValueError(f"Invalid split index: {index}")

        mid = self.start + index

        left = SequenceSource(self.data, self.start, mid)
        right = SequenceSource(self.data, mid, self.end)

        return left, right

    def into_iter(self) -> Iterator[T]:
        """Open a cursor over this window without copying it."""
        if self.start == 0 and self.end == len(self.data):
            return iter(self.data)
        data = self.data
        return (data[i] for i in range(self.start, self.end))

    def __repr__(self) -> str:
        return f"SequenceSource(<{type(self.data).__name__}>, {self.start}, {self.end})"


class IterateSource[T]:
    """
    Unbounded source producing ``seed, step(seed), step(step(seed)), ...``.

    It has no length and cannot be split; a downstream ``limit`` is what
    makes a pipeline over it terminate.
    """

    def __init__(self, seed: T, step: Callable[[T], T]):
        self.seed = seed
        self.step = step

    def into_iter(self) -> Iterator[T]:
        """Open a cursor that recomputes the sequence from the seed."""
        value = self.seed
        step = self.step
        while True:
            yield value
            value = step(value)

    def __repr__(self) -> str:
        return f"IterateSource({self.seed!r})"


def is_indexed(source: Source[Any] | UnboundedSource[Any]) -> bool:
    """Return True if the source supports ``len`` and ``split_at``."""
    return hasattr(source, "split_at") and hasattr(source, "__len__")


def to_source(data: Any) -> Source[Any] | UnboundedSource[Any]:
    """
    Adapt data into a source.

    Ranges and sequences are wrapped without copying. Anything that is
    already a source is returned unchanged. Other finite iterables (sets,
    dict views, generators) are materialized into a tuple once, so later
    cursors see the same snapshot.

    Raises:
        TypeError: If the data is not iterable
    """
    if isinstance(data, (RangeSource, SequenceSource, IterateSource)):
        return data
    if isinstance(data, range):
        return RangeSource(data.start, data.stop, data.step)
    if isinstance(data, Sequence):
        return SequenceSource(data)
    if hasattr(data, "into_iter"):
        return data
    if not isinstance(data, Iterable):
        raise TypeError(f"Cannot build a source from {type(data).__name__}")
    return SequenceSource(tuple(data))
