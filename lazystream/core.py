"""
Core pipeline implementation.

A Pipeline is an immutable value: one source plus an ordered tuple of
stages. Intermediate operations return new pipelines and never iterate.
Terminal operations drive the fused chain of stages exactly once.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

from .bridge import bridge, sequential_bridge
from .collectors import Collector, averaging, counting, to_list, to_set
from .comparators import Comparator, comparing, natural_order
from .config import ThreadPoolConfig
from .consumers import CollectConsumer, ReduceConsumer, StagedConsumer
from .errors import PipelineConsumedError
from .logger import logger
from .protocols import Consumer, Stage
from .sources import SequenceSource, is_indexed, to_source
from .stages import (
    DistinctStage,
    FilterStage,
    FlatMapStage,
    InspectStage,
    LimitStage,
    MapStage,
    SkipStage,
    SortedStage,
    apply_stages,
    split_at_last_barrier,
)

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")

_MISSING: Any = object()


class Pipeline[T]:
    """
    A lazily evaluated sequence of elements.

    Building a pipeline only records stages. A terminal operation (such as
    ``collect``, ``reduce`` or ``find_first``) pulls elements one at a time
    through every stage, stopping early when the result is already known.

    Each pipeline value can be driven once; a second terminal operation
    raises ``PipelineConsumedError``. Intermediate operations may branch
    from any pipeline value, and ``rebind`` runs the same stages over a
    fresh source.
    """

    def __init__(
        self,
        source: Any,
        stages: tuple[Stage[Any, Any], ...] = (),
        parallel: bool = False,
        chunks: int | None = None,
    ):
        self._source = source
        self._stages = stages
        self._parallel = parallel
        self._chunks = chunks
        self._consumed = False

    def __repr__(self) -> str:
        stages = ", ".join(repr(stage) for stage in self._stages)
        mode = f", parallel(chunks={self._chunks})" if self._parallel else ""
        return f"Pipeline({self._source!r}, [{stages}]{mode})"

    @property
    def source(self) -> Any:
        return self._source

    @property
    def stages(self) -> tuple[Stage[Any, Any], ...]:
        return self._stages

    @property
    def is_parallel(self) -> bool:
        return self._parallel

    @property
    def consumed(self) -> bool:
        return self._consumed

    def _with_stage(self, stage: Stage[Any, Any]) -> Pipeline[Any]:
        return Pipeline(
            self._source, self._stages + (stage,), self._parallel, self._chunks
        )

    # Intermediate operations

    def filter(self, predicate: Callable[[T], bool]) -> Pipeline[T]:
        """
        Keep only elements for which the predicate is true.

        Args:
            predicate: Pure function deciding whether to keep an element

        Returns:
            A new pipeline with the filter appended
        """
        return self._with_stage(FilterStage(predicate))

    def map(self, transform: Callable[[T], U]) -> Pipeline[U]:
        """
        Transform every element, one output per input.

        Args:
            transform: Function applied to each element

        Returns:
            A new pipeline of transformed elements
        """
        return self._with_stage(MapStage(transform))

    def flat_map(self, transform: Callable[[T], Iterable[U]]) -> Pipeline[U]:
        """
        Replace every element by the elements of an iterable.

        Args:
            transform: Function returning zero or more outputs per element

        Returns:
            A new pipeline over the flattened outputs
        """
        return self._with_stage(FlatMapStage(transform))

    def distinct(self) -> Pipeline[T]:
        """Drop elements equal to one already produced (first one wins)."""
        return self._with_stage(DistinctStage())

    def sorted(
        self,
        comparator: Comparator[T] | None = None,
        *,
        key: Callable[[T], Any] | None = None,
        reverse: bool = False,
    ) -> Pipeline[T]:
        """
        Order elements, keeping encounter order for equal elements.

        This stage is a barrier: the first element it produces is only
        available after every upstream element has been pulled.

        Args:
            comparator: Comparator defining the order
            key: Key function alternative to ``comparator``
            reverse: Produce the reverse order

        Returns:
            A new pipeline with the sort appended
        """
        return self._with_stage(SortedStage(comparator, key, reverse))

    def limit(self, n: int) -> Pipeline[T]:
        """
        Produce at most ``n`` elements.

        Once ``n`` elements have been produced no further upstream element
        is requested.

        Raises:
            ValueError: If n is negative
        """
        return self._with_stage(LimitStage(n))

    def skip(self, n: int) -> Pipeline[T]:
        """
        Discard the first ``n`` elements.

        Raises:
            ValueError: If n is negative
        """
        return self._with_stage(SkipStage(n))

    def inspect(self, action: Callable[[T], Any]) -> Pipeline[T]:
        """Call ``action`` on each element when it is pulled, unchanged."""
        return self._with_stage(InspectStage(action))

    # Execution mode

    def parallel(self, chunks: int | None = None) -> Pipeline[T]:
        """
        Allow ``reduce`` and ``collect`` to split the source into chunks.

        Only the reduction is parallel: stages up to the last barrier
        (distinct, sorted, limit, skip) run sequentially, the remaining
        stateless stages run per chunk. The result is the same for any
        chunk count as long as the accumulator and combiner are associative
        and the identity is neutral for the combiner.

        Args:
            chunks: Number of chunks, or None for the configured default

        Returns:
            A new pipeline marked for parallel reduction
        """
        if chunks is not None and chunks < 1:
            raise ValueError("Chunk count must be at least 1")
        return Pipeline(self._source, self._stages, True, chunks)

    def sequential(self) -> Pipeline[T]:
        """Return a copy of this pipeline that always evaluates sequentially."""
        return Pipeline(self._source, self._stages)

    def rebind(self, data: Any) -> Pipeline[T]:
        """
        Run the same stages over another source.

        Args:
            data: A source, or any finite iterable

        Returns:
            A fresh pipeline that has not been driven
        """
        return Pipeline(to_source(data), self._stages, self._parallel, self._chunks)

    # Driving

    def _mark_consumed(self) -> None:
        if self._consumed:
            logger.debug("Rejected second terminal operation on %r", self)
            raise PipelineConsumedError(repr(self))
        self._consumed = True

    def _drive(self) -> Iterator[T]:
        self._mark_consumed()
        return apply_stages(self._source.into_iter(), self._stages)

    def _drive_parallel(self, consumer: Consumer[Any, Any]) -> Any:
        self._mark_consumed()
        prefix, suffix = split_at_last_barrier(self._stages)
        source = self._source

        if prefix:
            source = SequenceSource(list(apply_stages(source.into_iter(), prefix)))
        if suffix:
            consumer = StagedConsumer(consumer, suffix)

        if not is_indexed(source):
            logger.debug("Source %r cannot be split; reducing sequentially", source)
            return sequential_bridge(source, consumer)

        chunks = ThreadPoolConfig.global_config().chunk_count(len(source), self._chunks)
        return bridge(source, consumer, chunks)

    def iterator(self) -> Iterator[T]:
        """
        Return the fused cursor itself.

        This counts as the terminal operation; elements are computed as
        the caller pulls them.
        """
        return self._drive()

    # Terminal operations

    def collect(self, collector: Collector[T, Any, R]) -> R:
        """
        Accumulate all elements with a collector.

        On a parallel pipeline, collectors with a combiner fold each chunk
        into its own seed and merge the partials in encounter order.

        Args:
            collector: The accumulation strategy

        Returns:
            The collector's finished result
        """
        if self._parallel:
            if collector.combiner is not None:
                return self._drive_parallel(CollectConsumer(collector))
            logger.debug("Collector has no combiner; collecting %r sequentially", self)
        return collector.collect_iter(self._drive())

    def to_list(self) -> list[T]:
        """Collect all elements into a list."""
        return self.collect(to_list())

    def to_set(self) -> set[T]:
        """Collect all elements into a set."""
        return self.collect(to_set())

    def reduce(
        self,
        accumulator: Callable[[Any, T], Any],
        identity: Any = _MISSING,
        combiner: Callable[[Any, Any], Any] | None = None,
        *,
        default: Any = None,
    ) -> Any:
        """
        Fold all elements left to right.

        Without ``identity`` the first element is the seed, a single
        element is returned as is, and an empty pipeline returns
        ``default``. With ``identity`` an empty pipeline returns
        ``identity``.

        On a parallel pipeline every chunk starts from ``identity`` and
        chunk results are merged with ``combiner`` (the accumulator when
        no combiner is given). Both functions must be associative and
        ``identity`` must leave any value unchanged under ``combiner``;
        a seed such as 100 for a sum is added once per chunk. Neither
        condition is checked.

        Args:
            accumulator: Folds an element into the running result
            identity: Starting value
            combiner: Merges two partial results
            default: Result for an empty pipeline without identity

        Returns:
            The reduced value
        """
        if identity is _MISSING:
            return self._reduce_without_identity(accumulator, default)

        if self._parallel:
            consumer = ReduceConsumer(identity, accumulator, combiner or accumulator)
            return self._drive_parallel(consumer)

        result = identity
        for item in self._drive():
            result = accumulator(result, item)
        return result

    def _reduce_without_identity(
        self, accumulator: Callable[[T, T], T], default: Any
    ) -> Any:
        if self._parallel:

            def accumulate(partial: Any, item: T) -> Any:
                return item if partial is _MISSING else accumulator(partial, item)

            def combine(left: Any, right: Any) -> Any:
                if left is _MISSING:
                    return right
                if right is _MISSING:
                    return left
                return accumulator(left, right)

            result = self._drive_parallel(ReduceConsumer(_MISSING, accumulate, combine))
        else:
            iterator = self._drive()
            result = next(iterator, _MISSING)
            if result is not _MISSING:
                for item in iterator:
                    result = accumulator(result, item)

        return default if result is _MISSING else result

    def any_match(self, predicate: Callable[[T], bool] | None = None) -> bool:
        """
        Check if any element matches the predicate.

        Stops at the first matching element.

        Args:
            predicate: Optional predicate function (defaults to bool)
        """
        if predicate is None:
            predicate = bool
        return any(map(predicate, self._drive()))

    def all_match(self, predicate: Callable[[T], bool] | None = None) -> bool:
        """
        Check if every element matches the predicate.

        Stops at the first element that does not match; true when empty.
        """
        if predicate is None:
            predicate = bool
        return all(map(predicate, self._drive()))

    def none_match(self, predicate: Callable[[T], bool] | None = None) -> bool:
        """
        Check that no element matches the predicate.

        Stops at the first matching element; true when empty.
        """
        return not self.any_match(predicate)

    def find_first(self, default: Any = None) -> T | Any:
        """
        Return the first element, pulling nothing beyond it.

        Args:
            default: Returned when the pipeline produces no element
        """
        return next(self._drive(), default)

    def min(
        self,
        comparator: Comparator[T] | None = None,
        *,
        key: Callable[[T], Any] | None = None,
        default: Any = None,
    ) -> T | Any:
        """
        Find the smallest element; the first one wins among equals.

        Consumes the whole pipeline.

        Args:
            comparator: Order to use (natural order by default)
            key: Key function alternative to ``comparator``
            default: Returned for an empty pipeline
        """
        return self._select(comparator, key, default, operator.lt)

    def max(
        self,
        comparator: Comparator[T] | None = None,
        *,
        key: Callable[[T], Any] | None = None,
        default: Any = None,
    ) -> T | Any:
        """
        Find the largest element; the first one wins among equals.

        Consumes the whole pipeline.
        """
        return self._select(comparator, key, default, operator.gt)

    def _select(
        self,
        comparator: Comparator[T] | None,
        key: Callable[[T], Any] | None,
        default: Any,
        better: Callable[[int, int], bool],
    ) -> Any:
        if comparator is not None and key is not None:
            raise ValueError("Pass either a comparator or a key, not both")
        if comparator is None:
            comparator = comparing(key) if key is not None else natural_order()

        iterator = self._drive()
        best = next(iterator, _MISSING)
        if best is _MISSING:
            return default
        for item in iterator:
            if better(comparator(item, best), 0):
                best = item
        return best

    def count(self) -> int:
        """
        Count the elements.

        A pipeline without stages over a sized source answers from the
        source length; otherwise every element is pulled so that side
        effects of earlier stages still happen.
        """
        if not self._stages and is_indexed(self._source):
            self._mark_consumed()
            return len(self._source)
        return self.collect(counting())

    def sum(self, start: Any = 0) -> Any:
        """
        Add all elements to ``start`` in encounter order.

        Sequentially this is the left fold ``((start + a) + b) + ...``, so
        ``start`` may be any type the elements add to (``timedelta(0)``,
        ``Decimal(0)``). A parallel pipeline sums each chunk from its first
        element and adds ``start`` to the combined total.
        """
        if not self._parallel:
            return self.reduce(operator.add, start)
        total = self._reduce_without_identity(operator.add, _MISSING)
        return start if total is _MISSING else start + total

    def average(self, default: Any = None) -> float | Any:
        """
        Arithmetic mean of the elements.

        Args:
            default: Returned for an empty pipeline
        """
        return self.collect(averaging(default=default))

    def for_each(self, action: Callable[[T], Any]) -> None:
        """Call ``action`` on every element, in encounter order."""
        for item in self._drive():
            action(item)
