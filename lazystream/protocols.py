"""
Core protocol definitions for lazy pipelines.

These protocols define the seams of the engine: sources that hand out
cursors (and, when indexed, split into contiguous ranges), stages that
transform a cursor into another cursor, and consumers that fold a cursor
into a partial result and combine partials from independent chunks.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterator
from typing import Protocol, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)  # Covariant for Source (output only)
T_contra = TypeVar(
    "T_contra", contravariant=True
)  # Contravariant for Consumer (input only)
U = TypeVar("U")
R = TypeVar("R")


class Source(Protocol[T_co]):
    """
    An indexed, finite data source.

    A source never re-orders or filters its elements. Every call to
    ``into_iter`` returns an independent cursor, so one source can back
    any number of evaluations.
    """

    @abstractmethod
    def __len__(self) -> int:
        """Return the number of elements this source will generate."""
        ...

    @abstractmethod
    def split_at(self, index: int) -> tuple[Source[T_co], Source[T_co]]:
        """
        Split this source at the given index.

        Args:
            index: The split point (0 < index < len(self))

        Returns:
            A tuple of (left_source, right_source) where left contains
            elements [0, index) and right contains elements [index, len)
        """
        ...

    @abstractmethod
    def into_iter(self) -> Iterator[T_co]:
        """
        Open a fresh single-pass cursor over the elements.

        Returns:
            An iterator that yields all elements in order
        """
        ...


class UnboundedSource(Protocol[T_co]):
    """
    A source whose length is unknown or infinite.

    Unbounded sources cannot be split, so pipelines over them always
    evaluate sequentially and rely on a ``limit`` stage to terminate.
    """

    @abstractmethod
    def into_iter(self) -> Iterator[T_co]:
        """Open a fresh single-pass cursor over the elements."""
        ...


class Stage(Protocol[T_contra, T_co]):
    """
    One immutable step of a pipeline.

    A stage describes a transformation and performs it only when the
    returned iterator is pulled.
    """

    @property
    @abstractmethod
    def stateless(self) -> bool:
        """
        True when the stage may be applied independently to each chunk
        of a split source without changing the overall result.
        """
        ...

    @abstractmethod
    def apply(self, upstream: Iterator[T_contra]) -> Iterator[T_co]:
        """
        Wrap the upstream cursor.

        Args:
            upstream: The cursor produced by the previous stage

        Returns:
            A lazy cursor over the transformed elements
        """
        ...


class Consumer(Protocol[T_contra, R]):
    """
    A consumer folds elements into a partial result.

    Consumers can be split to process chunks in parallel, and their
    partial results can be combined back together.
    """

    @abstractmethod
    def consume_iter(self, iterator: Iterator[T_contra]) -> R:
        """
        Consume all elements from the iterator and produce a partial result.

        Args:
            iterator: An iterator producing elements to consume

        Returns:
            The result of consuming all elements
        """
        ...

    @abstractmethod
    def split(self) -> tuple[Consumer[T_contra, R], Consumer[T_contra, R]]:
        """
        Split this consumer into two independent consumers.

        Returns:
            A tuple of (left_consumer, right_consumer)
        """
        ...

    @abstractmethod
    def reduce(self, left: R, right: R) -> R:
        """
        Combine partial results from two consumers.

        Args:
            left: Result from the left (earlier) chunk
            right: Result from the right (later) chunk

        Returns:
            The combined result
        """
        ...

    @abstractmethod
    def finish(self, partial: R) -> object:
        """Turn the fully combined partial into the terminal result."""
        ...
