"""
Bridge functions that connect sources and consumers.

The bridge implements split/accumulate/combine: the source is divided into
contiguous chunks, every chunk is folded by its own consumer on the thread
pool, and the partial results are combined in encounter order once all of
them are available.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, wait
from typing import Any, TypeVar

from .config import ThreadPoolConfig
from .logger import logger
from .protocols import Consumer, Source

T = TypeVar("T")
R = TypeVar("R")

# Marks threads that are currently folding a chunk
_worker_state = threading.local()


def plan_chunks(
    source: Source[T], consumer: Consumer[T, R], chunks: int
) -> list[tuple[Source[T], Consumer[T, R]]]:
    """
    Divide a source into ``chunks`` contiguous pieces, each paired with an
    independent consumer.

    The source and the consumer are halved recursively, so the chunks
    cover disjoint index ranges and are returned in encounter order.

    Args:
        source: The indexed source to divide
        consumer: The consumer to split alongside it
        chunks: Desired number of chunks (1 <= chunks <= len(source))

    Returns:
        A list of (source, consumer) pairs, one per chunk
    """
    length = len(source)
    if chunks <= 1 or length <= 1:
        return [(source, consumer)]

    left_chunks = chunks // 2
    mid = length * left_chunks // chunks
    if mid == 0 or mid >= length:
        # Can't split further
        return [(source, consumer)]

    left_source, right_source = source.split_at(mid)
    left_consumer, right_consumer = consumer.split()

    return plan_chunks(left_source, left_consumer, left_chunks) + plan_chunks(
        right_source, right_consumer, chunks - left_chunks
    )


def _consume_chunk(source: Source[T], consumer: Consumer[T, R]) -> R:
    _worker_state.active = True
    try:
        return consumer.consume_iter(source.into_iter())
    finally:
        _worker_state.active = False


def in_worker() -> bool:
    """Return True when called from a chunk running on the thread pool."""
    return getattr(_worker_state, "active", False)


def bridge(source: Source[T], consumer: Consumer[T, R], chunks: int) -> Any:
    """
    Bridge an indexed source with a consumer, executing chunks in parallel.

    1. Split the source and the consumer into ``chunks`` pieces
    2. Fold every piece on the thread pool, with no shared mutable state
    3. Wait for all pieces (the join barrier)
    4. Combine the partials left to right and finish once

    A bridge started from inside a chunk (a parallel pipeline driven by a
    stage of another one) runs sequentially on the calling worker: its
    chunks could otherwise wait for pool threads held by the outer chunks.

    Args:
        source: The source generating elements
        consumer: The consumer processing elements
        chunks: Number of chunks to split into

    Returns:
        The finished result from the consumer
    """
    if in_worker():
        logger.debug("Nested parallel reduction over %r; running sequentially", source)
        return sequential_bridge(source, consumer)

    pieces = plan_chunks(source, consumer, chunks)
    if len(pieces) == 1:
        return sequential_bridge(source, consumer)

    config = ThreadPoolConfig.global_config()
    logger.debug(
        "Splitting %d elements into %d chunks: %s",
        len(source),
        len(pieces),
        [len(piece) for piece, _ in pieces],
    )

    executor = config.get_executor()
    futures: list[Future[Any]] = [
        executor.submit(_consume_chunk, piece, piece_consumer)
        for piece, piece_consumer in pieces
    ]
    wait(futures)

    partial = futures[0].result()
    for future in futures[1:]:
        partial = consumer.reduce(partial, future.result())

    return consumer.finish(partial)


def sequential_bridge(source: Source[T], consumer: Consumer[T, R]) -> Any:
    """
    Bridge a source and consumer sequentially (no parallelism).

    Args:
        source: The source generating elements
        consumer: The consumer processing elements

    Returns:
        The finished result from the consumer
    """
    return consumer.finish(consumer.consume_iter(source.into_iter()))
