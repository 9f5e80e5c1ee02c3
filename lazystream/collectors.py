"""
Collector implementations for ``Pipeline.collect``.

A collector is four plain functions: ``supplier`` creates an empty
partial result, ``accumulator(partial, element)`` folds one element in and
returns the partial, ``finisher(partial)`` turns the final partial into the
result, and the optional ``combiner(left, right)`` merges partials built
over neighbouring chunks. Nesting (a "downstream" collector) is composition
of those functions.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

from .errors import DuplicateKeyError

T = TypeVar("T")
A = TypeVar("A")
R = TypeVar("R")
K = TypeVar("K")
V = TypeVar("V")


def _identity(value: Any) -> Any:
    return value


class Collector[T, A, R]:
    """
    A pluggable accumulation strategy.

    ``finisher`` is applied exactly once, after every element has been
    folded into a single partial. Collectors are reusable; each evaluation
    gets its own partial from ``supplier``.
    """

    __slots__ = ("supplier", "accumulator", "finisher", "combiner")

    def __init__(
        self,
        supplier: Callable[[], A],
        accumulator: Callable[[A, T], A],
        finisher: Callable[[A], R] | None = None,
        combiner: Callable[[A, A], A] | None = None,
    ):
        self.supplier = supplier
        self.accumulator = accumulator
        self.finisher = finisher or _identity
        self.combiner = combiner

    @property
    def parallel_safe(self) -> bool:
        """True when partials from separate chunks can be combined."""
        return self.combiner is not None

    def fold(self, iterator: Iterator[T]) -> A:
        """Fold every element of the cursor into a fresh partial."""
        accumulator = self.accumulator
        partial = self.supplier()
        for item in iterator:
            partial = accumulator(partial, item)
        return partial

    def finish(self, partial: A) -> R:
        return self.finisher(partial)

    def collect_iter(self, iterator: Iterator[T]) -> R:
        """Fold the cursor and finish the partial."""
        return self.finish(self.fold(iterator))


# Containers


def _append(items: list[Any], item: Any) -> list[Any]:
    items.append(item)
    return items


def _extend(left: list[Any], right: list[Any]) -> list[Any]:
    left.extend(right)
    return left


def to_list() -> Collector[T, list[T], list[T]]:
    """Collect elements into a list in encounter order."""
    return Collector(list, _append, combiner=_extend)


def to_set() -> Collector[T, set[T], set[T]]:
    """Collect elements into a set."""

    def add(items: set[T], item: T) -> set[T]:
        items.add(item)
        return items

    def union(left: set[T], right: set[T]) -> set[T]:
        left |= right
        return left

    return Collector(set, add, combiner=union)


def to_collection(factory: Callable[[list[T]], R]) -> Collector[T, list[T], R]:
    """
    Collect into any container built from a list, e.g. ``tuple`` or
    ``collections.deque``.
    """
    return Collector(list, _append, factory, _extend)


def to_sorted_set(
    key: Callable[[T], Any] | None = None,
) -> Collector[T, tuple[list[Any], list[T]], list[T]]:
    """
    Collect unique elements in ascending order.

    Each insertion is a binary search over the keys collected so far.
    Two elements with equal keys count as duplicates and the first one
    is kept.

    Args:
        key: Optional key function defining both order and uniqueness

    Returns:
        A collector producing an ascending list without duplicates
    """
    key_of = key or _identity

    def supplier() -> tuple[list[Any], list[T]]:
        return [], []

    def insert(state: tuple[list[Any], list[T]], item: T) -> tuple[list[Any], list[T]]:
        keys, values = state
        item_key = key_of(item)
        index = bisect_left(keys, item_key)
        if index < len(keys) and keys[index] == item_key:
            return state
        keys.insert(index, item_key)
        values.insert(index, item)
        return state

    def merge(
        left: tuple[list[Any], list[T]], right: tuple[list[Any], list[T]]
    ) -> tuple[list[Any], list[T]]:
        for item in right[1]:
            insert(left, item)
        return left

    def finish(state: tuple[list[Any], list[T]]) -> list[T]:
        return state[1]

    return Collector(supplier, insert, finish, merge)


# Scalars


def counting() -> Collector[Any, int, int]:
    """Count elements, whatever their type."""
    return Collector(
        lambda: 0,
        lambda count, _: count + 1,
        combiner=lambda left, right: left + right,
    )


def summing(
    extractor: Callable[[T], Any] | None = None, start: Any = 0
) -> Collector[T, Any, Any]:
    """
    Sum a numeric projection of each element.

    Values are added one by one in encounter order, so float results match
    a plain left-to-right loop. ``start`` seeds every partial sum and must
    be neutral for ``+`` (``0``, ``0.0``, ``timedelta(0)``).
    """
    extract = extractor or _identity
    return Collector(
        lambda: start,
        lambda total, item: total + extract(item),
        combiner=lambda left, right: left + right,
    )


def averaging(
    extractor: Callable[[T], Any] | None = None, default: Any = 0.0
) -> Collector[T, list[Any], Any]:
    """Arithmetic mean of a numeric projection; ``default`` for no elements."""
    extract = extractor or _identity

    def add(state: list[Any], item: T) -> list[Any]:
        state[0] += extract(item)
        state[1] += 1
        return state

    def merge(left: list[Any], right: list[Any]) -> list[Any]:
        left[0] += right[0]
        left[1] += right[1]
        return left

    def finish(state: list[Any]) -> Any:
        total, count = state
        return total / count if count else default

    return Collector(lambda: [0, 0], add, finish, merge)


def joining(delimiter: str = "", prefix: str = "", suffix: str = "") -> Collector[Any, list[str], str]:
    """
    Concatenate ``str()`` of each element with a delimiter.

    An empty input gives ``prefix + suffix``.
    """
    return Collector(
        list,
        lambda parts, item: _append(parts, str(item)),
        lambda parts: prefix + delimiter.join(parts) + suffix,
        _extend,
    )


def reducing(accumulator: Callable[[T, T], T], identity: T) -> Collector[T, T, T]:
    """Fold elements with an associative operator, starting at ``identity``."""
    return Collector(lambda: identity, accumulator, combiner=accumulator)


# Adapters


def mapping(
    transform: Callable[[T], V], downstream: Collector[V, A, R]
) -> Collector[T, A, R]:
    """Apply ``transform`` to each element before handing it to ``downstream``."""
    accumulate = downstream.accumulator
    return Collector(
        downstream.supplier,
        lambda partial, item: accumulate(partial, transform(item)),
        downstream.finisher,
        downstream.combiner,
    )


def filtering(
    predicate: Callable[[T], bool], downstream: Collector[T, A, R]
) -> Collector[T, A, R]:
    """
    Only hand elements matching ``predicate`` to ``downstream``.

    Unlike filtering the pipeline, groups whose elements are all rejected
    still appear (with an empty downstream result) under ``grouping_by``.
    """
    accumulate = downstream.accumulator
    return Collector(
        downstream.supplier,
        lambda partial, item: accumulate(partial, item) if predicate(item) else partial,
        downstream.finisher,
        downstream.combiner,
    )


def collecting_and_then(
    downstream: Collector[T, A, R], finisher: Callable[[R], V]
) -> Collector[T, A, V]:
    """Post-process the result of ``downstream``."""
    finish = downstream.finisher
    return Collector(
        downstream.supplier,
        downstream.accumulator,
        lambda partial: finisher(finish(partial)),
        downstream.combiner,
    )


# Maps


def grouping_by(
    key_fn: Callable[[T], K],
    downstream: Collector[T, Any, Any] | None = None,
) -> Collector[T, dict[K, Any], dict[K, Any]]:
    """
    Group elements by a derived key.

    Keys are compared by equality and appear in first-seen order. Each
    group is accumulated with ``downstream`` (a list by default), which
    may itself be another ``grouping_by``.

    Args:
        key_fn: Computes the group key of an element
        downstream: Collector applied within each group

    Returns:
        A collector producing ``{key: downstream result}``
    """
    downstream = downstream or to_list()
    supply = downstream.supplier
    accumulate = downstream.accumulator
    finish = downstream.finisher
    merge_partials = downstream.combiner

    def add(groups: dict[K, Any], item: T) -> dict[K, Any]:
        key = key_fn(item)
        partial = groups[key] if key in groups else supply()
        groups[key] = accumulate(partial, item)
        return groups

    def finish_groups(groups: dict[K, Any]) -> dict[K, Any]:
        return {key: finish(partial) for key, partial in groups.items()}

    combiner = None
    if merge_partials is not None:

        def combiner(left: dict[K, Any], right: dict[K, Any]) -> dict[K, Any]:
            for key, partial in right.items():
                left[key] = merge_partials(left[key], partial) if key in left else partial
            return left

    return Collector(dict, add, finish_groups, combiner)


def partitioning_by(
    predicate: Callable[[T], bool],
    downstream: Collector[T, Any, Any] | None = None,
) -> Collector[T, dict[bool, Any], dict[bool, Any]]:
    """
    Split elements into exactly two groups, ``False`` and ``True``.

    Both keys are present in the result even when a group is empty, in
    which case it holds the downstream result for no elements.
    """
    downstream = downstream or to_list()
    supply = downstream.supplier
    accumulate = downstream.accumulator
    finish = downstream.finisher
    merge_partials = downstream.combiner

    def supplier() -> dict[bool, Any]:
        return {False: supply(), True: supply()}

    def add(parts: dict[bool, Any], item: T) -> dict[bool, Any]:
        side = bool(predicate(item))
        parts[side] = accumulate(parts[side], item)
        return parts

    def finish_parts(parts: dict[bool, Any]) -> dict[bool, Any]:
        return {False: finish(parts[False]), True: finish(parts[True])}

    combiner = None
    if merge_partials is not None:

        def combiner(left: dict[bool, Any], right: dict[bool, Any]) -> dict[bool, Any]:
            return {
                False: merge_partials(left[False], right[False]),
                True: merge_partials(left[True], right[True]),
            }

    return Collector(supplier, add, finish_parts, combiner)


def to_ordered_map(
    key_fn: Callable[[T], K],
    value_fn: Callable[[T], V],
    merge_fn: Callable[[V, V], V] | None = None,
) -> Collector[T, dict[K, V], dict[K, V]]:
    """
    Build a dict keyed in first-insertion order.

    A key produced again is folded into the value already stored with
    ``merge_fn(previous, incoming)``; its position does not move. Without
    ``merge_fn`` a repeated key raises ``DuplicateKeyError``.
    """

    def put(mapping_: dict[K, V], key: K, value: V) -> None:
        if key in mapping_:
            if merge_fn is None:
                raise DuplicateKeyError(key, mapping_[key], value)
            mapping_[key] = merge_fn(mapping_[key], value)
        else:
            mapping_[key] = value

    def add(mapping_: dict[K, V], item: T) -> dict[K, V]:
        put(mapping_, key_fn(item), value_fn(item))
        return mapping_

    def merge(left: dict[K, V], right: dict[K, V]) -> dict[K, V]:
        for key, value in right.items():
            put(left, key, value)
        return left

    return Collector(dict, add, combiner=merge)


def collect_all(collector: Collector[T, Any, R], elements: Iterable[T]) -> R:
    """Run a collector directly over an iterable, outside of a pipeline."""
    return collector.collect_iter(iter(elements))
