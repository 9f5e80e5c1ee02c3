"""
Tests for individual stages.
"""

import pytest

from lazystream import StageKind, comparing, stream
from lazystream.stages import (
    DistinctStage,
    FilterStage,
    LimitStage,
    MapStage,
    SkipStage,
    SortedStage,
    split_at_last_barrier,
)


class TestFlatMap:
    """Tests for flat_map."""

    def test_flattens_nested_lists(self):
        nested = [[1, 2, 3], [4, 5], [6, 7, 8, 9]]
        assert stream(nested).flat_map(lambda inner: inner).to_list() == list(
            range(1, 10)
        )

    def test_zero_outputs_per_input(self):
        assert stream([[], [1], []]).flat_map(lambda inner: inner).to_list() == [1]

    def test_split_sentences(self):
        sentences = ["Java Streams are powerful", "Learn functional programming"]
        words = stream(sentences).flat_map(str.split).to_list()
        assert words == [
            "Java",
            "Streams",
            "are",
            "powerful",
            "Learn",
            "functional",
            "programming",
        ]

    def test_nested_flat_map(self):
        matrix = [[[1, 2], [3, 4]], [[5, 6], [7, 8]]]
        result = (
            stream(matrix).flat_map(lambda plane: plane).flat_map(lambda row: row).to_list()
        )
        assert result == [1, 2, 3, 4, 5, 6, 7, 8]

    def test_flat_map_is_lazy_per_group(self, pulled):
        result = (
            stream([[1, 2], [3, 4], [5, 6]])
            .inspect(pulled.append)
            .flat_map(lambda group: group)
            .limit(3)
            .to_list()
        )
        assert result == [1, 2, 3]
        assert pulled == [[1, 2], [3, 4]]


class TestDistinct:
    """Tests for distinct."""

    def test_first_occurrence_wins(self):
        assert stream([3, 1, 3, 2, 1]).distinct().to_list() == [3, 1, 2]

    def test_equality_not_identity(self):
        assert stream([1, 1.0, True]).distinct().to_list() == [1]

    def test_unhashable_elements(self):
        result = stream([[1], [2], [1], {"a": 1}, {"a": 1}]).distinct().to_list()
        assert result == [[1], [2], {"a": 1}]

    def test_seen_set_is_per_evaluation(self):
        stage = DistinctStage()
        assert list(stage.apply(iter([1, 1, 2]))) == [1, 2]
        assert list(stage.apply(iter([1, 2]))) == [1, 2]


class TestSorted:
    """Tests for sorted."""

    def test_natural_order(self):
        assert stream([5, 3, 8, 1, 9]).sorted().to_list() == [1, 3, 5, 8, 9]

    def test_key_and_reverse(self):
        words = ["ccc", "a", "bb"]
        assert stream(words).sorted(key=len, reverse=True).to_list() == ["ccc", "bb", "a"]

    def test_comparator(self):
        result = stream([3, -4, 1]).sorted(comparing(abs, reverse=True)).to_list()
        assert result == [-4, 3, 1]

    def test_stable_for_equal_keys(self):
        pairs = [("b", 1), ("a", 1), ("c", 0)]
        result = stream(pairs).sorted(key=lambda pair: pair[1]).to_list()
        assert result == [("c", 0), ("b", 1), ("a", 1)]

    def test_limit_before_sorted_sorts_only_the_prefix(self):
        assert stream([5, 3, 8, 1, 9]).limit(2).sorted().to_list() == [3, 5]

    def test_rejects_comparator_and_key(self):
        with pytest.raises(ValueError):
            SortedStage(comparing(abs), key=abs)

    def test_nothing_happens_until_pulled(self, pulled):
        iterator = stream([2, 1]).inspect(pulled.append).sorted().iterator()
        assert pulled == []
        assert next(iterator) == 1
        assert pulled == [2, 1]


class TestLimitSkip:
    """Tests for limit and skip."""

    def test_limit_zero_pulls_nothing(self, pulled):
        assert stream([1, 2]).inspect(pulled.append).limit(0).to_list() == []
        assert pulled == []

    def test_limit_larger_than_input(self):
        assert stream([1, 2]).limit(10).to_list() == [1, 2]

    def test_skip(self):
        assert stream([1, 2, 3, 4]).skip(2).to_list() == [3, 4]

    def test_skip_past_end(self):
        assert stream([1, 2]).skip(5).to_list() == []

    def test_paging(self):
        page = stream(range(1, 21)).skip(10).limit(5).to_list()
        assert page == [11, 12, 13, 14, 15]

    @pytest.mark.parametrize("factory", [LimitStage, SkipStage])
    def test_negative_rejected(self, factory):
        with pytest.raises(ValueError):
            factory(-1)

    def test_negative_rejected_at_build_time(self):
        with pytest.raises(ValueError):
            stream([1]).limit(-1)


class TestInspect:
    """Tests for inspect."""

    def test_does_not_alter_elements(self, pulled):
        result = stream([1, 2]).inspect(pulled.append).map(lambda x: x * 3).to_list()
        assert result == [3, 6]
        assert pulled == [1, 2]

    def test_only_fires_for_pulled_elements(self, pulled):
        stream([1, 2, 3]).inspect(pulled.append).find_first()
        assert pulled == [1]


class TestStageKinds:
    """Tests for stage tags and barrier classification."""

    def test_kinds(self):
        assert FilterStage(bool).kind is StageKind.FILTER
        assert MapStage(str).kind is StageKind.MAP
        assert SortedStage().kind is StageKind.SORTED

    def test_stateless_flags(self):
        assert FilterStage(bool).stateless
        assert MapStage(str).stateless
        assert not DistinctStage().stateless
        assert not LimitStage(1).stateless

    def test_split_at_last_barrier(self):
        stages = (MapStage(str), LimitStage(3), FilterStage(bool), MapStage(len))
        prefix, suffix = split_at_last_barrier(stages)
        assert prefix == stages[:2]
        assert suffix == stages[2:]

    def test_split_without_barrier(self):
        stages = (MapStage(str), FilterStage(bool))
        assert split_at_last_barrier(stages) == ((), stages)
