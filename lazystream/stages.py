"""
Stage implementations for lazy pipelines.

Each stage is an immutable description of one transformation. ``apply``
wraps the upstream cursor in a lazy iterator, so chaining stages chains
iterators: pulling one element from the last stage pulls it through every
stage before the next element is requested.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from enum import Enum
from itertools import chain, islice
from typing import Any, TypeVar

from .comparators import Comparator
from .protocols import Stage

T = TypeVar("T")
U = TypeVar("U")


class StageKind(Enum):
    FILTER = "filter"
    MAP = "map"
    FLAT_MAP = "flat_map"
    DISTINCT = "distinct"
    SORTED = "sorted"
    LIMIT = "limit"
    SKIP = "skip"
    INSPECT = "inspect"


class FilterStage[T]:
    """Stage that drops elements failing a predicate."""

    kind = StageKind.FILTER
    stateless = True

    def __init__(self, predicate: Callable[[T], bool]):
        self.predicate = predicate

    def apply(self, upstream: Iterator[T]) -> Iterator[T]:
        return filter(self.predicate, upstream)

    def __repr__(self) -> str:
        return "filter"


class MapStage[T, U]:
    """Stage producing exactly one output per input."""

    kind = StageKind.MAP
    stateless = True

    def __init__(self, transform: Callable[[T], U]):
        self.transform = transform

    def apply(self, upstream: Iterator[T]) -> Iterator[U]:
        return map(self.transform, upstream)

    def __repr__(self) -> str:
        return "map"


class FlatMapStage[T, U]:
    """
    Stage producing zero or more outputs per input.

    The iterable returned for each input is flattened in place, preserving
    both input order and the order within each group.
    """

    kind = StageKind.FLAT_MAP
    stateless = True

    def __init__(self, transform: Callable[[T], Iterable[U]]):
        self.transform = transform

    def apply(self, upstream: Iterator[T]) -> Iterator[U]:
        return chain.from_iterable(map(self.transform, upstream))

    def __repr__(self) -> str:
        return "flat_map"


class InspectStage[T]:
    """Stage invoking a side effect on each element as it is pulled."""

    kind = StageKind.INSPECT
    stateless = True

    def __init__(self, action: Callable[[T], Any]):
        self.action = action

    def apply(self, upstream: Iterator[T]) -> Iterator[T]:
        action = self.action
        for item in upstream:
            action(item)
            yield item

    def __repr__(self) -> str:
        return "inspect"


class DistinctStage[T]:
    """
    Stage removing elements equal to one already produced.

    The first occurrence wins. The seen-set lives inside the generator, so
    it is scoped to a single evaluation. Unhashable elements are tracked in
    a list and compared by equality.
    """

    kind = StageKind.DISTINCT
    stateless = False

    def apply(self, upstream: Iterator[T]) -> Iterator[T]:
        seen: set[Any] = set()
        seen_unhashable: list[Any] = []
        for item in upstream:
            try:
                if item in seen:
                    continue
                seen.add(item)
            except TypeError:
                if item in seen_unhashable:
                    continue
                seen_unhashable.append(item)
            yield item

    def __repr__(self) -> str:
        return "distinct"


class SortedStage[T]:
    """
    Stage ordering all upstream elements.

    Sorting needs the complete input, so the first pull drains the whole
    upstream before anything is produced. Elements that compare equal keep
    their encounter order.
    """

    kind = StageKind.SORTED
    stateless = False

    def __init__(
        self,
        comparator: Comparator[T] | None = None,
        key: Callable[[T], Any] | None = None,
        reverse: bool = False,
    ):
        if comparator is not None and key is not None:
            raise ValueError("Pass either a comparator or a key, not both")
        self.comparator = comparator
        self.key = key
        self.reverse = reverse

    def sort_key(self) -> Callable[[T], Any] | None:
        if self.comparator is not None:
            return self.comparator.as_key()
        return self.key

    def apply(self, upstream: Iterator[T]) -> Iterator[T]:
        yield from sorted(upstream, key=self.sort_key(), reverse=self.reverse)

    def __repr__(self) -> str:
        return "sorted"


class LimitStage[T]:
    """
    Stage yielding at most ``n`` elements.

    After the n-th element is produced the stage returns without asking
    upstream for another element.
    """

    kind = StageKind.LIMIT
    stateless = False

    def __init__(self, n: int):
        if n < 0:
            raise ValueError(f"limit must be non-negative, got {n}")
        self.n = n

    def apply(self, upstream: Iterator[T]) -> Iterator[T]:
        if self.n == 0:
            return
        produced = 0
        for item in upstream:
            yield item
            produced += 1
            if produced >= self.n:
                return

    def __repr__(self) -> str:
        return f"limit({self.n})"


class SkipStage[T]:
    """Stage discarding the first ``n`` elements."""

    kind = StageKind.SKIP
    stateless = False

    def __init__(self, n: int):
        if n < 0:
            raise ValueError(f"skip must be non-negative, got {n}")
        self.n = n

    def apply(self, upstream: Iterator[T]) -> Iterator[T]:
        return islice(upstream, self.n, None)

    def __repr__(self) -> str:
        return f"skip({self.n})"


def apply_stages(
    iterator: Iterator[Any], stages: Iterable[Stage[Any, Any]]
) -> Iterator[Any]:
    """Chain every stage onto the cursor, first stage innermost."""
    for stage in stages:
        iterator = stage.apply(iterator)
    return iterator


def split_at_last_barrier(
    stages: tuple[Stage[Any, Any], ...],
) -> tuple[tuple[Stage[Any, Any], ...], tuple[Stage[Any, Any], ...]]:
    """
    Split stages into (prefix, suffix) where the suffix is stateless.

    The prefix ends with the last stage that cannot run per chunk and is
    empty when every stage is stateless.
    """
    for index in range(len(stages) - 1, -1, -1):
        if not stages[index].stateless:
            return stages[: index + 1], stages[index + 1 :]
    return (), stages
