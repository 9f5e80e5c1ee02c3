"""
Tests for core pipeline functionality.
"""

from datetime import timedelta

import pytest

from lazystream import (
    PipelineConsumedError,
    Pipeline,
    empty,
    from_range,
    iterate,
    stream,
    stream_of,
)


class TestRangePipelines:
    """Tests for pipelines over integer ranges."""

    def test_sum(self):
        """Test sum operation."""
        assert from_range(0, 100).sum() == sum(range(100))

    def test_map(self):
        """Test map operation keeps encounter order."""
        result = from_range(0, 10).map(lambda x: x * 2).to_list()
        assert result == [x * 2 for x in range(10)]

    def test_filter(self):
        """Test filter operation."""
        result = from_range(0, 20).filter(lambda x: x % 2 == 0).to_list()
        assert result == [x for x in range(20) if x % 2 == 0]

    def test_filter_count(self):
        """Test filter and count."""
        result = from_range(0, 100).filter(lambda x: x % 5 == 0).count()
        assert result == 20

    def test_empty_range(self):
        """Test empty range."""
        assert from_range(0, 0).sum() == 0
        assert from_range(0, 0).count() == 0
        assert from_range(0, 0).to_list() == []

    def test_single_element(self):
        """Test single element range."""
        assert from_range(5, 6).to_list() == [5]


class TestSequencePipelines:
    """Tests for pipelines over lists, tuples, strings and other iterables."""

    def test_list(self):
        data = [1, 2, 3, 4, 5]
        assert stream(data).map(lambda x: x * 2).to_list() == [2, 4, 6, 8, 10]

    def test_tuple(self):
        assert stream((1, 2, 3)).sum() == 6

    def test_string_yields_characters(self):
        assert stream("abc").to_list() == ["a", "b", "c"]

    def test_set_is_snapshotted(self):
        data = {3, 1, 2}
        assert sorted(stream(data).to_list()) == [1, 2, 3]

    def test_generator_is_snapshotted(self):
        result = stream(x * x for x in range(4)).to_list()
        assert result == [0, 1, 4, 9]

    def test_stream_of(self):
        assert stream_of("a", "b").to_list() == ["a", "b"]

    def test_empty(self):
        assert empty().to_list() == []

    def test_source_is_not_mutated(self):
        data = [3, 1, 2]
        stream(data).sorted().map(lambda x: x + 1).to_list()
        assert data == [3, 1, 2]

    def test_not_iterable(self):
        with pytest.raises(TypeError):
            stream(42)


class TestLaziness:
    """Pipelines do nothing until a terminal operation pulls from them."""

    def test_building_does_not_iterate(self, pulled):
        """Test that no stage runs without a terminal operation."""
        stream([1, 2, 3]).inspect(pulled.append).filter(lambda x: x > 1).map(
            lambda x: x * 2
        )
        assert pulled == []

    def test_fusion_routes_each_element_through_every_stage(self):
        """Test that elements flow one at a time through the chain."""
        events = []

        def keep(x):
            events.append(("filter", x))
            return x > 8

        def double(x):
            events.append(("map", x))
            return x * 2

        result = stream([5, 10, 15]).filter(keep).map(double).to_list()

        assert result == [20, 30]
        assert events == [
            ("filter", 5),
            ("filter", 10),
            ("map", 10),
            ("filter", 15),
            ("map", 15),
        ]

    def test_limit_short_circuits_upstream(self, pulled):
        """Test that limit stops pulling once satisfied."""
        result = from_range(0, 100).inspect(pulled.append).limit(3).to_list()
        assert result == [0, 1, 2]
        assert pulled == [0, 1, 2]

    def test_find_first_short_circuits(self, pulled):
        result = (
            stream([10, 20, 30, 150, 200, 300])
            .inspect(pulled.append)
            .filter(lambda n: n > 100)
            .find_first()
        )
        assert result == 150
        assert pulled == [10, 20, 30, 150]

    def test_any_match_short_circuits(self, pulled):
        result = (
            stream([2, 4, 6, 7, 8, 10])
            .inspect(pulled.append)
            .any_match(lambda n: n % 7 == 0)
        )
        assert result is True
        assert pulled == [2, 4, 6, 7]

    def test_all_match_stops_at_first_failure(self, pulled):
        result = stream([1, 2, 30, 4]).inspect(pulled.append).all_match(lambda n: n < 10)
        assert result is False
        assert pulled == [1, 2, 30]

    def test_none_match_stops_at_first_match(self, pulled):
        result = stream([1, 2, 30, 4]).inspect(pulled.append).none_match(lambda n: n > 10)
        assert result is False
        assert pulled == [1, 2, 30]

    def test_sorted_is_a_barrier(self, pulled):
        """Test that sorted pulls everything before producing anything."""
        result = (
            stream([5, 3, 8, 1, 9]).inspect(pulled.append).sorted().limit(2).to_list()
        )
        assert result == [1, 3]
        assert pulled == [5, 3, 8, 1, 9]

    def test_unbounded_source_with_limit(self):
        result = iterate(1, lambda n: n + 1).map(lambda n: n * n).limit(5).to_list()
        assert result == [1, 4, 9, 16, 25]


class TestTerminalOperations:
    """Tests for terminal operations and their empty-input behavior."""

    def test_find_first_empty(self):
        assert stream([]).find_first() is None
        assert stream([]).find_first(default=-1) == -1

    def test_match_on_empty(self):
        assert stream([]).any_match(lambda x: True) is False
        assert stream([]).all_match(lambda x: False) is True
        assert stream([]).none_match(lambda x: True) is True

    def test_default_predicates(self):
        assert stream([0, 0, 1]).any_match() is True
        assert stream([1, 2, 0]).all_match() is False

    def test_min_max(self):
        numbers = [5, 12, 3, 18, 7, 25, 9, 2]
        assert stream(numbers).min() == 2
        assert stream(numbers).max() == 25

    def test_min_max_with_key(self):
        words = ["a", "abc", "ab", "abcde"]
        assert stream(words).min(key=len) == "a"
        assert stream(words).max(key=len) == "abcde"

    def test_min_max_empty(self):
        assert stream([]).min() is None
        assert stream([]).max(default=0) == 0

    def test_min_max_first_wins_among_equals(self):
        words = ["bb", "aa", "cc"]
        assert stream(words).min(key=len) == "bb"
        assert stream(words).max(key=len) == "bb"

    def test_min_rejects_comparator_and_key(self):
        from lazystream import natural_order

        with pytest.raises(ValueError):
            stream([1]).min(natural_order(), key=abs)

    def test_reduce_with_identity(self):
        assert stream([5, 12, 3, 18, 7, 25, 9, 2]).reduce(lambda a, b: a + b, 0) == 81
        assert stream([2, 3, 4, 5]).reduce(lambda a, b: a * b, 1) == 120

    def test_reduce_with_identity_on_empty(self):
        assert stream([]).reduce(lambda a, b: a + b, 0) == 0

    def test_reduce_without_identity(self):
        words = ["Hello", "World", "Java", "Streams"]
        longest = stream(words).reduce(lambda a, b: a if len(a) >= len(b) else b)
        assert longest == "Streams"

    def test_reduce_without_identity_single_element(self):
        assert stream([42]).reduce(lambda a, b: a + b) == 42

    def test_reduce_without_identity_empty(self):
        assert stream([]).reduce(lambda a, b: a + b) is None
        assert stream([]).reduce(lambda a, b: a + b, default="none") == "none"

    def test_count_without_stages_uses_length(self):
        assert stream([1, 2, 3]).count() == 3

    def test_count_keeps_side_effects(self, pulled):
        assert stream([1, 2, 3]).inspect(pulled.append).count() == 3
        assert pulled == [1, 2, 3]

    def test_sum_start(self):
        assert stream([1, 2, 3]).sum(start=10) == 16

    def test_sum_folds_from_start(self):
        values = [1.0] * 4
        expected = 1e16
        for value in values:
            expected += value
        assert stream(values).sum(start=1e16) == expected == 1e16

    def test_sum_start_of_other_type(self):
        days = [timedelta(days=1), timedelta(days=2)]
        assert stream(days).sum(start=timedelta(0)) == timedelta(days=3)
        assert stream([]).sum(start=timedelta(0)) == timedelta(0)

    def test_parallel_sum_start_of_other_type(self):
        days = [timedelta(days=n) for n in range(10)]
        total = stream(days).parallel(chunks=3).sum(start=timedelta(hours=1))
        assert total == timedelta(days=45, hours=1)
        assert stream([]).parallel(chunks=3).sum(start=timedelta(0)) == timedelta(0)

    def test_average(self):
        prices = [10.5, 20.0, 15.75, 8.25]
        assert stream(prices).average() == pytest.approx(13.625)
        assert stream([]).average() is None
        assert stream([]).average(default=0.0) == 0.0

    def test_for_each(self):
        seen = []
        stream([3, 1]).for_each(seen.append)
        assert seen == [3, 1]

    def test_iterator(self):
        iterator = stream([1, 2, 3]).map(lambda x: x + 1).iterator()
        assert next(iterator) == 2
        assert list(iterator) == [3, 4]

    def test_to_set(self):
        assert stream([1, 1, 2]).to_set() == {1, 2}


class TestPipelineValues:
    """Tests for immutability, single-pass driving and rebinding."""

    def test_stage_operations_return_new_pipelines(self):
        base = stream([1, 2, 3])
        evens = base.filter(lambda x: x % 2 == 0)
        doubled = base.map(lambda x: x * 2)

        assert base.stages == ()
        assert len(evens.stages) == 1
        assert evens.to_list() == [2]
        assert doubled.to_list() == [2, 4, 6]

    def test_second_terminal_operation_fails(self):
        pipeline = stream([1, 2, 3]).map(lambda x: x * 2)
        assert pipeline.to_list() == [2, 4, 6]
        assert pipeline.consumed

        with pytest.raises(PipelineConsumedError):
            pipeline.to_list()
        with pytest.raises(RuntimeError):
            pipeline.count()

    def test_count_shortcut_also_consumes(self):
        pipeline = stream([1, 2])
        pipeline.count()
        with pytest.raises(PipelineConsumedError):
            pipeline.count()

    def test_rebind(self):
        pipeline = stream([1, 2, 3]).map(lambda x: x * 2)
        pipeline.to_list()
        assert pipeline.rebind([10, 20]).to_list() == [20, 40]

    def test_rebuilding_gives_identical_results(self):
        """Two pipelines built from the same stages share no state."""

        def build():
            return (
                stream([4, 1, 4, 2, 1, 3])
                .distinct()
                .sorted()
                .skip(1)
                .map(lambda x: x * 10)
            )

        assert build().to_list() == build().to_list() == [20, 30, 40]

    def test_filter_never_grows_input(self):
        data = list(range(50))
        predicates = [lambda x: True, lambda x: False, lambda x: x % 3 == 0]
        for predicate in predicates:
            result = stream(data).filter(predicate).map(lambda x: -x).count()
            assert result <= len(data)

    def test_repr_lists_stages(self):
        pipeline = stream([1]).filter(bool).limit(2)
        assert "filter" in repr(pipeline)
        assert "limit(2)" in repr(pipeline)

    def test_pipeline_is_generic_constructor(self):
        from lazystream import SequenceSource

        assert Pipeline(SequenceSource([1, 2])).to_list() == [1, 2]


class TestComplexPipelines:
    """Tests for longer pipelines."""

    def test_long_pipeline(self):
        result = (
            from_range(0, 100)
            .map(lambda x: x + 1)
            .filter(lambda x: x % 2 == 0)
            .map(lambda x: x * 2)
            .filter(lambda x: x < 100)
            .map(lambda x: x - 1)
            .sum()
        )
        expected = sum(
            ((x + 1) * 2) - 1
            for x in range(100)
            if (x + 1) % 2 == 0 and (x + 1) * 2 < 100
        )
        assert result == expected

    def test_completed_revenue(self, orders):
        total = (
            stream(orders)
            .filter(lambda order: order[3] == "COMPLETED")
            .map(lambda order: order[2])
            .reduce(lambda a, b: a + b, 0.0)
        )
        assert total == pytest.approx(671.25)

    def test_flat_map_distinct_sorted(self, orders):
        items = (
            stream(orders)
            .flat_map(lambda order: order[4])
            .distinct()
            .sorted(reverse=True)
            .to_list()
        )
        assert items == ["Item8", "Item7", "Item4", "Item3", "Item2", "Item1"]
