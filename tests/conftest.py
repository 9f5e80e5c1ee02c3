"""
Shared fixtures for lazystream tests.
"""

import pytest

from lazystream import ThreadPoolConfig, get_num_threads, set_num_threads


@pytest.fixture(autouse=True)
def restore_thread_config():
    """Put thread count and chunk size back after each test."""
    config = ThreadPoolConfig.global_config()
    threads = get_num_threads()
    min_chunk_size = config.min_chunk_size
    yield config
    set_num_threads(threads)
    config.min_chunk_size = min_chunk_size


@pytest.fixture
def pulled():
    """A list that inspect() stages append to, to observe upstream pulls."""
    return []


@pytest.fixture
def orders():
    """Sample order records as (order_id, customer_id, amount, status, items)."""
    return [
        ("O1", "C1", 150.50, "COMPLETED", ["Item1", "Item2"]),
        ("O2", "C2", 89.99, "PENDING", ["Item3"]),
        ("O3", "C1", 200.00, "COMPLETED", ["Item4"]),
        ("O4", "C3", 45.00, "CANCELLED", ["Item7"]),
        ("O5", "C2", 320.75, "COMPLETED", ["Item8"]),
    ]
