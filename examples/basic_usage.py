"""
Basic usage examples for lazystream.

This walks through the core pipeline operations on small in-memory data.
"""

from lazystream import comparing, from_range, iterate, stream
from lazystream import collectors as c
from lazystream.recipes import top_n_by_total, word_frequency_top_n

ORDERS = [
    ("O1", "C1", 150.50, "COMPLETED"),
    ("O2", "C2", 89.99, "PENDING"),
    ("O3", "C1", 200.00, "COMPLETED"),
    ("O4", "C3", 45.00, "CANCELLED"),
    ("O5", "C2", 320.75, "COMPLETED"),
]


def example_filter_map():
    """Example: Filtering and mapping."""
    print("=== Filter and Map Example ===")

    evens_times_ten = (
        from_range(1, 11).filter(lambda n: n % 2 == 0).map(lambda n: n * 10).to_list()
    )
    print(f"Even numbers times ten: {evens_times_ten}")

    squares = iterate(1, lambda n: n + 1).map(lambda n: n * n).limit(5).to_list()
    print(f"First five squares: {squares}")


def example_short_circuit():
    """Example: Lazy evaluation stops as soon as the answer is known."""
    print("\n=== Short-Circuit Example ===")

    pulled = []
    first_large = (
        stream([10, 20, 30, 150, 200, 300])
        .inspect(pulled.append)
        .filter(lambda n: n > 100)
        .find_first()
    )
    print(f"First element over 100: {first_large} (pulled {pulled})")


def example_collectors():
    """Example: Grouping, partitioning and joining."""
    print("\n=== Collector Example ===")

    by_status = stream(ORDERS).collect(c.grouping_by(lambda o: o[3], c.counting()))
    print(f"Orders per status: {by_status}")

    pass_fail = stream([95, 82, 67, 49, 73, 58]).collect(
        c.partitioning_by(lambda score: score >= 60)
    )
    print(f"Pass: {pass_fail[True]}, Fail: {pass_fail[False]}")

    joined = stream(["Hello", "World", "Java", "Streams"]).collect(c.joining(", "))
    print(f"Joined: {joined}")


def example_sorting():
    """Example: Multi-field sorting with comparators."""
    print("\n=== Sorting Example ===")

    order = comparing(lambda o: o[1]).then_comparing(lambda o: o[2], reverse=True)
    ids = stream(ORDERS).sorted(order).map(lambda o: o[0]).to_list()
    print(f"By customer, then amount descending: {ids}")


def example_parallel_reduce():
    """Example: Split/combine reduction."""
    print("\n=== Parallel Reduce Example ===")

    total = from_range(1, 101).parallel(chunks=4).reduce(lambda a, b: a + b, 0)
    print(f"Parallel sum 1-100: {total}")

    # A seed that is not neutral for addition is applied once per chunk
    skewed = from_range(1, 11).parallel(chunks=2).reduce(lambda a, b: a + b, 100)
    print(f"Sum 1-10 seeded with 100 over 2 chunks: {skewed}")


def example_recipes():
    """Example: Frequency analysis recipes."""
    print("\n=== Recipes Example ===")

    text = "Java streams make data processing with streams concise and readable"
    print(f"Top words: {word_frequency_top_n(text, 3)}")

    top_customers = top_n_by_total(
        ORDERS,
        key_fn=lambda o: o[1],
        value_fn=lambda o: o[2],
        n=2,
        predicate=lambda o: o[3] == "COMPLETED",
    )
    for customer, spent in top_customers.items():
        print(f"{customer}: ${spent:.2f}")


def main():
    example_filter_map()
    example_short_circuit()
    example_collectors()
    example_sorting()
    example_parallel_reduce()
    example_recipes()


if __name__ == "__main__":
    main()
