"""
Ready-made pipelines for common text, frequency and window tasks.

Every helper here is a plain composition of pipeline stages and
collectors; none of them iterate their input by hand.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from operator import itemgetter
from typing import Any, TypeVar

from .adapters import from_range, stream
from .collectors import (
    Collector,
    counting,
    grouping_by,
    partitioning_by,
    summing,
    to_ordered_map,
    to_sorted_set,
)
from .core import Pipeline
from .sources import SequenceSource

T = TypeVar("T")
K = TypeVar("K")

_WORD_SEPARATOR = re.compile(r"\W+")
_RECORD_ID = re.compile(r"[A-Z]-\d+")


def _identity(value: Any) -> Any:
    return value


def _is_blank(value: str) -> bool:
    return not value.strip()


def _top_n(counts: dict[K, Any], n: int) -> dict[K, Any]:
    # sorted() is stable, so equal counts keep first-seen order
    return (
        stream(list(counts.items()))
        .sorted(key=itemgetter(1), reverse=True)
        .limit(n)
        .collect(to_ordered_map(itemgetter(0), itemgetter(1)))
    )


def word_frequency_top_n(text: str, n: int) -> dict[str, int]:
    """
    Count words case-insensitively and keep the ``n`` most frequent.

    Words are runs of word characters. Equal counts are ordered by the
    position where the word first appears.

    Example:
        >>> word_frequency_top_n("a a b", 1)
        {'a': 2}
    """
    counts = (
        stream(_WORD_SEPARATOR.split(text.lower()))
        .filter(lambda word: not _is_blank(word))
        .collect(grouping_by(_identity, counting()))
    )
    return _top_n(counts, n)


def character_frequency(text: str, letters_only: bool = False) -> dict[str, int]:
    """
    Count characters in first-seen order.

    Args:
        text: Input text
        letters_only: Lowercase the text and count alphabetic characters only
    """
    pipeline = stream(text.lower() if letters_only else text)
    if letters_only:
        pipeline = pipeline.filter(str.isalpha)
    return pipeline.collect(grouping_by(_identity, counting()))


def normalize_unique_sorted(values: Iterable[str]) -> list[str]:
    """Trim and lowercase values, drop blanks, and return them unique and sorted."""
    return (
        stream(values)
        .map(lambda value: value.strip().lower())
        .filter(lambda value: value != "")
        .collect(to_sorted_set())
    )


def invalid_records(
    values: Iterable[str | None], pattern: str | re.Pattern[str] = _RECORD_ID
) -> list[str | None]:
    """
    Return the values that are missing, blank, or do not fully match ``pattern``.

    The default pattern accepts identifiers such as ``A-100``.
    """
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    return (
        stream(values)
        .filter(
            lambda value: value is None
            or _is_blank(value)
            or compiled.fullmatch(value) is None
        )
        .to_list()
    )


def pass_fail(scores: Iterable[float], threshold: float = 60) -> dict[bool, list[float]]:
    """Partition scores into passing (``True``) and failing (``False``)."""
    return stream(scores).collect(partitioning_by(lambda score: score >= threshold))


def running_totals(values: Sequence[float], window: int | None = None) -> list[float]:
    """
    Sum every prefix of ``values``, or every trailing window of ``window``
    elements when a window size is given.

    Example:
        >>> running_totals([5, 10, 3, 7, 2])
        [5, 15, 18, 25, 27]
        >>> running_totals([5, 10, 3, 7, 2], window=2)
        [5, 15, 13, 10, 9]
    """
    if window is None:
        return stream(values).collect(_prefix_sums())
    if window < 1:
        raise ValueError("Window size must be at least 1")

    def window_sum(end: int) -> float:
        return Pipeline(SequenceSource(values, max(0, end - window), end)).sum()

    return from_range(1, len(values) + 1).map(window_sum).to_list()


def _prefix_sums() -> Collector[float, list[float], list[float]]:
    def add(totals: list[float], value: float) -> list[float]:
        totals.append(totals[-1] + value if totals else value)
        return totals

    def merge(left: list[float], right: list[float]) -> list[float]:
        # right holds totals of its own chunk only
        if left:
            offset = left[-1]
            left.extend(offset + total for total in right)
            return left
        return right

    return Collector(list, add, combiner=merge)


def anagram_occurrences(source: str, target: str) -> list[tuple[int, str]]:
    """
    Find every window of ``source`` that is an anagram of ``target``.

    Returns:
        ``(position, window)`` pairs in position order
    """
    size = len(target)
    if size == 0 or size > len(source):
        return []
    signature = sorted(target)
    return (
        from_range(0, len(source) - size + 1)
        .map(lambda start: (start, source[start : start + size]))
        .filter(lambda match: sorted(match[1]) == signature)
        .to_list()
    )


def top_n_by_total(
    items: Iterable[T],
    key_fn: Callable[[T], K],
    value_fn: Callable[[T], Any],
    n: int,
    predicate: Callable[[T], bool] | None = None,
) -> dict[K, Any]:
    """
    Sum ``value_fn`` per ``key_fn`` group and keep the ``n`` largest totals.

    Args:
        items: Records to aggregate
        key_fn: Group key of a record
        value_fn: Numeric value of a record
        n: Number of groups to keep
        predicate: Optional filter applied before grouping

    Returns:
        An ordered dict from key to total, largest first
    """
    pipeline = stream(items)
    if predicate is not None:
        pipeline = pipeline.filter(predicate)
    totals = pipeline.collect(grouping_by(key_fn, summing(value_fn)))
    return _top_n(totals, n)
