"""
Configuration for the thread pool and parallel chunking.

This module manages the global thread pool configuration and the
settings that decide how many chunks a parallel reduction is split into.
"""

from __future__ import annotations

import os
import sys
import threading
from concurrent.futures import ThreadPoolExecutor

from .logger import logger


class ThreadPoolConfig:
    """
    Global configuration for parallel execution.

    This class manages the thread pool used for parallel reduction and
    provides settings for controlling how inputs are chunked.
    """

    _instance: ThreadPoolConfig | None = None
    _lock = threading.Lock()

    def __init__(self):
        self._num_threads: int | None = None
        self._executor: ThreadPoolExecutor | None = None
        # Default chunking never goes below this many elements per chunk
        self._min_chunk_size = 1024
        self._gil_notice_logged = False

    @classmethod
    def global_config(cls) -> ThreadPoolConfig:
        """Get the global thread pool configuration instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = ThreadPoolConfig()
        return cls._instance

    def get_num_threads(self) -> int:
        """
        Get the number of threads to use for parallel execution.

        Returns:
            Number of threads (defaults to CPU count)
        """
        if self._num_threads is None:
            env_threads = os.environ.get("LAZYSTREAM_NUM_THREADS")
            if env_threads:
                try:
                    self._num_threads = max(1, int(env_threads))
                except ValueError:
                    logger.warning(
                        "Ignoring non-integer LAZYSTREAM_NUM_THREADS=%r", env_threads
                    )

            if self._num_threads is None:
                self._num_threads = os.cpu_count() or 4

        return self._num_threads

    def set_num_threads(self, num_threads: int) -> None:
        """
        Set the number of threads to use for parallel execution.

        Args:
            num_threads: Number of threads (must be >= 1)

        Raises:
            ValueError: If num_threads < 1
        """
        if num_threads < 1:
            raise ValueError("Number of threads must be at least 1")

        with self._lock:
            self._num_threads = num_threads
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None

    def get_executor(self) -> ThreadPoolExecutor:
        """
        Get or create the global thread pool executor.

        Returns:
            The global ThreadPoolExecutor instance
        """
        if self._executor is None:
            with self._lock:
                if self._executor is None:
                    num_threads = self.get_num_threads()
                    logger.debug("Starting executor with %d threads", num_threads)
                    self._executor = ThreadPoolExecutor(
                        max_workers=num_threads,
                        thread_name_prefix="lazystream",
                    )
        if not self._gil_notice_logged and _gil_enabled():
            self._gil_notice_logged = True
            logger.debug(
                "Running parallel reduction with the GIL enabled; "
                "CPU-bound callbacks will not run concurrently"
            )
        return self._executor

    def shutdown(self) -> None:
        """Shutdown the thread pool executor."""
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

    @property
    def min_chunk_size(self) -> int:
        """
        Minimum number of elements per chunk under default chunking.

        Explicit chunk counts passed to ``Pipeline.parallel`` ignore this.
        """
        return self._min_chunk_size

    @min_chunk_size.setter
    def min_chunk_size(self, value: int) -> None:
        """Set minimum chunk size."""
        if value < 1:
            raise ValueError("Minimum chunk size must be at least 1")
        self._min_chunk_size = value

    def chunk_count(self, length: int, requested: int | None = None) -> int:
        """
        Decide how many contiguous chunks to split ``length`` elements into.

        Args:
            length: Number of elements in the source
            requested: Explicit chunk count, or None for the default policy

        Returns:
            A chunk count between 1 and max(1, length)
        """
        if length <= 1:
            return 1
        if requested is not None:
            return max(1, min(requested, length))
        by_size = max(1, length // self._min_chunk_size)
        return max(1, min(self.get_num_threads(), by_size))


def _gil_enabled() -> bool:
    check = getattr(sys, "_is_gil_enabled", None)
    return True if check is None else check()


# Global configuration instance
_global_config = ThreadPoolConfig.global_config()


def set_num_threads(num_threads: int) -> None:
    """
    Set the global number of threads for parallel execution.

    Args:
        num_threads: Number of threads to use

    Example:
        >>> from lazystream import set_num_threads
        >>> set_num_threads(8)
    """
    _global_config.set_num_threads(num_threads)


def get_num_threads() -> int:
    """
    Get the current number of threads for parallel execution.

    Returns:
        Current number of threads
    """
    return _global_config.get_num_threads()
