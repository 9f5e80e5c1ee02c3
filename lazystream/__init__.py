"""
lazystream - Lazy, fused collection pipelines with parallel reduction

Build a pipeline from any finite in-memory collection, chain lazy stages
(filter, map, flat_map, distinct, sorted, limit, skip, inspect) and drive
it once with a terminal operation. Reductions and collections can split
the source into chunks folded on a thread pool.
"""

from . import collectors
from .adapters import empty, from_range, iterate, stream, stream_of
from .collectors import Collector
from .comparators import Comparator, comparing, natural_order, reverse_order
from .config import ThreadPoolConfig, get_num_threads, set_num_threads
from .core import Pipeline
from .errors import DuplicateKeyError, PipelineConsumedError, StreamError
from .logger import setup_logger
from .sources import IterateSource, RangeSource, SequenceSource
from .stages import StageKind

__version__ = "0.1.0"

__all__ = [
    "Pipeline",
    "stream",
    "stream_of",
    "empty",
    "from_range",
    "iterate",
    "collectors",
    "Collector",
    "Comparator",
    "comparing",
    "natural_order",
    "reverse_order",
    "StageKind",
    "RangeSource",
    "SequenceSource",
    "IterateSource",
    "StreamError",
    "PipelineConsumedError",
    "DuplicateKeyError",
    "ThreadPoolConfig",
    "set_num_threads",
    "get_num_threads",
    "setup_logger",
]
