"""
Consumer implementations for parallel terminal operations.

Consumers fold the elements of one chunk into a partial result and
combine partials of neighbouring chunks, left before right.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from .collectors import Collector
from .protocols import Consumer
from .stages import apply_stages

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


class StagedConsumer[T, R]:
    """
    Consumer that runs stateless stages over a chunk before passing the
    elements to another consumer.
    """

    def __init__(self, base: Consumer[Any, R], stages: tuple[Any, ...]):
        self.base = base
        self.stages = stages

    def consume_iter(self, iterator: Iterator[T]) -> R:
        """Apply the stages to the chunk then consume with base."""
        return self.base.consume_iter(apply_stages(iterator, self.stages))

    def split(self) -> tuple[StagedConsumer[T, R], StagedConsumer[T, R]]:
        """Split by splitting the base consumer."""
        left_base, right_base = self.base.split()
        return (
            StagedConsumer(left_base, self.stages),
            StagedConsumer(right_base, self.stages),
        )

    def reduce(self, left: R, right: R) -> R:
        """Reduce by delegating to base consumer."""
        return self.base.reduce(left, right)

    def finish(self, partial: R) -> Any:
        return self.base.finish(partial)


class ReduceConsumer[T, R]:
    """
    Consumer folding each chunk from its own copy of ``identity``.

    The identity is applied once per chunk, so it must be neutral for
    ``combiner`` for the result to match a sequential fold.
    """

    def __init__(
        self,
        identity: R,
        accumulator: Callable[[R, T], R],
        combiner: Callable[[R, R], R],
    ):
        self.identity = identity
        self.accumulator = accumulator
        self.combiner = combiner

    def consume_iter(self, iterator: Iterator[T]) -> R:
        """Fold all elements of the chunk, left to right."""
        accumulated = self.identity
        for item in iterator:
            accumulated = self.accumulator(accumulated, item)
        return accumulated

    def split(self) -> tuple[ReduceConsumer[T, R], ReduceConsumer[T, R]]:
        """
        Split by creating two independent consumers with the same operations.
        """
        return (
            ReduceConsumer(self.identity, self.accumulator, self.combiner),
            ReduceConsumer(self.identity, self.accumulator, self.combiner),
        )

    def reduce(self, left: R, right: R) -> R:
        """Combine two chunk results."""
        return self.combiner(left, right)

    def finish(self, partial: R) -> R:
        return partial


class CollectConsumer[T, R]:
    """Consumer giving each chunk a fresh collector seed."""

    def __init__(self, collector: Collector[T, Any, R]):
        if collector.combiner is None:
            raise ValueError("Collector has no combiner and cannot run in parallel")
        self.collector = collector

    def consume_iter(self, iterator: Iterator[T]) -> Any:
        """Fold the chunk into a new partial (not finished yet)."""
        return self.collector.fold(iterator)

    def split(self) -> tuple[CollectConsumer[T, R], CollectConsumer[T, R]]:
        """Split by sharing the collector; seeds are created per chunk."""
        return (CollectConsumer(self.collector), CollectConsumer(self.collector))

    def reduce(self, left: Any, right: Any) -> Any:
        """Merge two partials with the collector's combiner."""
        return self.collector.combiner(left, right)

    def finish(self, partial: Any) -> R:
        """Finish exactly once, after every partial has been combined."""
        return self.collector.finish(partial)
