"""
Composable comparators for sorted, min and max.

A Comparator wraps a three-way compare function ``(a, b) -> int`` and
chains tie-breakers with ``then_comparing``. The compare function must be
a consistent total order; that is not checked.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import cmp_to_key
from typing import Any, TypeVar

T = TypeVar("T")


def _natural(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


class Comparator[T]:
    """Three-way comparison with then-by chaining."""

    __slots__ = ("_compare",)

    def __init__(self, compare: Callable[[T, T], int]):
        self._compare = compare

    def __call__(self, a: T, b: T) -> int:
        return self._compare(a, b)

    def reversed(self) -> Comparator[T]:
        """Return a comparator imposing the opposite order."""
        compare = self._compare
        return Comparator(lambda a, b: compare(b, a))

    def then_comparing(
        self,
        other: Comparator[T] | Callable[[T], Any],
        *,
        reverse: bool = False,
    ) -> Comparator[T]:
        """
        Break ties of this comparator with a secondary order.

        Args:
            other: Either a Comparator, or a key function whose natural
                order is used
            reverse: Reverse the secondary order only

        Returns:
            A new chained comparator
        """
        secondary = other if isinstance(other, Comparator) else comparing(other)
        if reverse:
            secondary = secondary.reversed()
        primary = self._compare

        def compare(a: T, b: T) -> int:
            result = primary(a, b)
            if result != 0:
                return result
            return secondary(a, b)

        return Comparator(compare)

    def as_key(self) -> Callable[[T], Any]:
        """Adapt this comparator to a ``key=`` function for ``sorted``."""
        return cmp_to_key(self._compare)


def comparing(
    key: Callable[[T], Any],
    *,
    reverse: bool = False,
    comparator: Comparator[Any] | None = None,
) -> Comparator[T]:
    """
    Build a comparator ordering elements by an extracted key.

    Args:
        key: Key extractor
        reverse: Order keys descending
        comparator: Order keys with this comparator instead of their
            natural order

    Example:
        >>> by_name_then_age = comparing(lambda p: p.name).then_comparing(
        ...     lambda p: p.age
        ... )
    """
    key_compare = comparator if comparator is not None else _natural

    def compare(a: T, b: T) -> int:
        return key_compare(key(a), key(b))

    result = Comparator(compare)
    return result.reversed() if reverse else result


def natural_order() -> Comparator[Any]:
    """Comparator using the elements' own ``<`` and ``>``."""
    return Comparator(_natural)


def reverse_order() -> Comparator[Any]:
    """Comparator imposing the reverse of the natural order."""
    return Comparator(_natural).reversed()
