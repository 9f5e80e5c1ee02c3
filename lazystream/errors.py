"""
Exception types raised by the pipeline engine.

Argument errors use the built-in ``ValueError``; the classes here cover
failures that are specific to driving pipelines and collecting results.
"""


class StreamError(Exception):
    """Base class for all lazystream errors."""


class PipelineConsumedError(StreamError, RuntimeError):
    """
    Raised when a terminal operation is invoked on a pipeline that has
    already been driven.

    Pipelines are single-pass. Use ``Pipeline.rebind`` to run the same
    stages again over a fresh source.
    """

    def __init__(self, pipeline_repr: str):
        super().__init__(
            f"{pipeline_repr} has already been driven by a terminal operation; "
            "rebind it to a source to evaluate it again"
        )


class DuplicateKeyError(StreamError, ValueError):
    """Raised by ``to_ordered_map`` when two elements map to the same key
    and no merge function was supplied."""

    def __init__(self, key: object, existing: object, incoming: object):
        self.key = key
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"Duplicate key {key!r} (attempted merging values "
            f"{existing!r} and {incoming!r})"
        )
