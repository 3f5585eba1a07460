"""
Tests for the public search entry points, on every execution policy.
"""
import bisect
import operator

import numpy as np
import pytest

from batched_search.binary_search import (
    binary_search,
    binary_search_batch,
    count,
    count_batch,
    equal_range,
    equal_range_batch,
    lower_bound,
    lower_bound_batch,
    upper_bound,
    upper_bound_batch,
)
from batched_search.comparators import key_order, reverse_order
from batched_search.execution import SequentialPolicy, ThreadPoolPolicy


# ═══════════════════════════════════════════════════════════════════
# Reference scenarios on [1, 3, 3, 3, 5, 7]
# ═══════════════════════════════════════════════════════════════════

class TestScenarios:

    @pytest.mark.parametrize("value, lower, upper, found", [
        (3, 1, 4, True),
        (4, 4, 4, False),
        (0, 0, 0, False),
        (8, 6, 6, False),
        (1, 0, 1, True),
        (7, 5, 6, True),
    ])
    def test_scalar(self, sorted_values, policy, value, lower, upper, found):
        assert lower_bound(sorted_values, value, policy=policy) == lower
        assert upper_bound(sorted_values, value, policy=policy) == upper
        assert binary_search(sorted_values, value, policy=policy) is found
        assert equal_range(sorted_values, value, policy=policy) == (lower, upper)
        assert count(sorted_values, value, policy=policy) == upper - lower

    def test_batch(self, sorted_values, policy):
        queries = [0, 3, 8]
        np.testing.assert_array_equal(lower_bound_batch(sorted_values, queries, policy=policy), [0, 1, 6])
        np.testing.assert_array_equal(upper_bound_batch(sorted_values, queries, policy=policy), [0, 4, 6])
        np.testing.assert_array_equal(binary_search_batch(sorted_values, queries, policy=policy),
                                      [False, True, False])

    def test_equal_range_batch(self, sorted_values, policy):
        first, last = equal_range_batch(sorted_values, [3, 4, 7], policy=policy)
        np.testing.assert_array_equal(first, [1, 4, 5])
        np.testing.assert_array_equal(last, [4, 4, 6])
        np.testing.assert_array_equal(count_batch(sorted_values, [3, 4, 7], policy=policy), [3, 0, 1])

    @pytest.mark.parametrize("value", [-5, 0, 5, 100])
    def test_empty_sequence(self, policy, value):
        assert lower_bound([], value, policy=policy) == 0
        assert upper_bound([], value, policy=policy) == 0
        assert binary_search([], value, policy=policy) is False
        np.testing.assert_array_equal(binary_search_batch([], [value, value], policy=policy), [False, False])


# ═══════════════════════════════════════════════════════════════════
# Result types and output buffers
# ═══════════════════════════════════════════════════════════════════

class TestResults:

    def test_scalar_result_types(self, sorted_values, policy):
        assert type(lower_bound(sorted_values, 3, policy=policy)) is int
        assert type(binary_search(sorted_values, 3, policy=policy)) is bool

    def test_batch_result_dtypes(self, sorted_values, policy):
        assert lower_bound_batch(sorted_values, [3], policy=policy).dtype == np.intp
        assert binary_search_batch(sorted_values, [3], policy=policy).dtype == np.bool_

    def test_caller_output_is_filled_and_returned(self, sorted_values, policy):
        output = np.full(5, -1, dtype=np.int64)
        result = lower_bound_batch(sorted_values, [0, 3, 8], output, policy=policy)
        assert result is output
        np.testing.assert_array_equal(output, [0, 1, 6, -1, -1])

    def test_list_output(self, sorted_values, policy):
        output = [None, None, None]
        upper_bound_batch(sorted_values, [0, 3, 8], output, policy=policy)
        assert [int(x) for x in output] == [0, 4, 6]

    def test_empty_batch_leaves_output_untouched(self, sorted_values, policy):
        output = np.full(3, -1)
        lower_bound_batch(sorted_values, [], output, policy=policy)
        np.testing.assert_array_equal(output, [-1, -1, -1])
        assert len(lower_bound_batch(sorted_values, [], policy=policy)) == 0

    def test_numpy_inputs(self, policy):
        sequence = np.array([0.5, 1.5, 1.5, 2.5])
        queries = np.array([1.5, 2.0, 3.0])
        np.testing.assert_array_equal(lower_bound_batch(sequence, queries, policy=policy), [1, 3, 4])
        assert lower_bound(sequence, np.float64(1.5), policy=policy) == 1


# ═══════════════════════════════════════════════════════════════════
# Comparators and sub-ranges
# ═══════════════════════════════════════════════════════════════════

class TestComparators:

    def test_descending_order(self, policy):
        comp = reverse_order(np.less if policy.vectorized else operator.lt)
        sequence = [9, 7, 7, 4, 1]
        assert lower_bound(sequence, 7, comp, policy=policy) == 1
        assert upper_bound(sequence, 7, comp, policy=policy) == 3
        assert binary_search(sequence, 5, comp, policy=policy) is False
        np.testing.assert_array_equal(lower_bound_batch(sequence, [10, 4, 0], comp=comp, policy=policy), [0, 3, 5])

    def test_equivalence_is_not_equality(self):
        # Under a comparator on the first field, ("b", 0) is equivalent to every "b" record.
        records = [("a", 1), ("b", 2), ("b", 9), ("c", 3)]
        comp = key_order(lambda r: r[0])
        assert binary_search(records, ("b", 0), comp) is True
        assert equal_range(records, ("b", 0), comp) == (1, 3)
        assert binary_search(records, ("bb", 0), comp) is False

    def test_tuple_queries_in_batch(self):
        records = [("a", 1), ("b", 2), ("b", 9), ("c", 3)]
        comp = key_order(lambda r: r[0])
        np.testing.assert_array_equal(lower_bound_batch(records, [("b", 0), ("z", 0)], comp=comp), [1, 4])

    def test_strings(self):
        words = ["apple", "banana", "banana", "cherry"]
        assert equal_range(words, "banana") == (1, 3)
        assert lower_bound(words, "blueberry") == 3


class TestSubRange:

    def test_positions_are_absolute(self, sorted_values, policy):
        # sorted_values[2:5] == [3, 3, 5]
        assert lower_bound(sorted_values, 3, lo=2, hi=5, policy=policy) == 2
        assert upper_bound(sorted_values, 3, lo=2, hi=5, policy=policy) == 4
        assert lower_bound(sorted_values, 0, lo=2, hi=5, policy=policy) == 2
        assert upper_bound(sorted_values, 9, lo=2, hi=5, policy=policy) == 5
        assert binary_search(sorted_values, 7, lo=2, hi=5, policy=policy) is False
        assert binary_search(sorted_values, 5, lo=2, hi=5, policy=policy) is True

    def test_empty_sub_range(self, sorted_values, policy):
        assert equal_range(sorted_values, 3, lo=3, hi=3, policy=policy) == (3, 3)
        assert binary_search(sorted_values, 3, lo=3, hi=3, policy=policy) is False

    @pytest.mark.parametrize("lo, hi", [(-1, None), (0, 7), (4, 2)])
    def test_invalid_bounds(self, sorted_values, lo, hi):
        with pytest.raises(ValueError):
            lower_bound(sorted_values, 3, lo=lo, hi=hi)
        with pytest.raises(ValueError):
            lower_bound_batch(sorted_values, [3], lo=lo, hi=hi)


# ═══════════════════════════════════════════════════════════════════
# Properties on random data
# ═══════════════════════════════════════════════════════════════════

class TestProperties:

    @pytest.fixture
    def data(self, rng):
        sequence = np.sort(rng.integers(0, 40, size=200)).tolist()
        queries = rng.integers(-5, 45, size=300).tolist()
        return sequence, queries

    def test_matches_bisect(self, data, policy):
        sequence, queries = data
        lower = lower_bound_batch(sequence, queries, policy=policy)
        upper = upper_bound_batch(sequence, queries, policy=policy)
        assert list(lower) == [bisect.bisect_left(sequence, q) for q in queries]
        assert list(upper) == [bisect.bisect_right(sequence, q) for q in queries]

    def test_bound_relations(self, data, policy):
        sequence, queries = data
        lower = lower_bound_batch(sequence, queries, policy=policy)
        upper = upper_bound_batch(sequence, queries, policy=policy)
        found = binary_search_batch(sequence, queries, policy=policy)
        assert np.all(lower <= upper)
        np.testing.assert_array_equal(found, lower != upper)
        np.testing.assert_array_equal(upper - lower, [sequence.count(q) for q in queries])

    def test_scalar_agrees_with_batch(self, data, policy):
        sequence, queries = data
        for q in queries[:25]:
            assert lower_bound(sequence, q, policy=policy) == lower_bound_batch(sequence, [q], policy=policy)[0]
            assert upper_bound(sequence, q, policy=policy) == upper_bound_batch(sequence, [q], policy=policy)[0]
            assert binary_search(sequence, q, policy=policy) == binary_search_batch(sequence, [q], policy=policy)[0]
            assert equal_range(sequence, q, policy=policy) == (
                lower_bound(sequence, q, policy=policy), upper_bound(sequence, q, policy=policy)
            )

    @pytest.mark.parametrize("value", [2 ** 70, -(2 ** 70), 2 ** 63])
    def test_scalar_agrees_with_batch_past_int64(self, policy, value):
        sequence = [1, 2, 3]
        assert lower_bound(sequence, value, policy=policy) == lower_bound_batch(sequence, [value], policy=policy)[0]
        assert upper_bound(sequence, value, policy=policy) == upper_bound_batch(sequence, [value], policy=policy)[0]
        assert binary_search(sequence, value, policy=policy) is False
        assert equal_range(sequence, value, policy=policy) == ((3, 3) if value > 0 else (0, 0))

    def test_order_preserved_under_permutation(self, data, policy, rng):
        sequence, queries = data
        permutation = rng.permutation(len(queries))
        shuffled = [queries[i] for i in permutation]
        lower = lower_bound_batch(sequence, queries, policy=policy)
        shuffled_lower = lower_bound_batch(sequence, shuffled, policy=policy)
        np.testing.assert_array_equal(shuffled_lower, lower[permutation])

    def test_idempotent(self, data, policy):
        sequence, queries = data
        first = binary_search_batch(sequence, queries, policy=policy)
        second = binary_search_batch(sequence, queries, policy=policy)
        np.testing.assert_array_equal(first, second)

    def test_sequence_not_modified(self, data, policy):
        sequence, queries = data
        snapshot = list(sequence)
        equal_range_batch(sequence, queries, policy=policy)
        assert sequence == snapshot


# ═══════════════════════════════════════════════════════════════════
# Query values reach the comparator unchanged
# ═══════════════════════════════════════════════════════════════════

@pytest.fixture(params=["sequential", "threads"])
def per_element_policy(request):
    if request.param == "threads":
        return ThreadPoolPolicy(max_workers=2, chunk_size=1)
    return SequentialPolicy()


class RecordingComparator:
    def __init__(self, comp=operator.lt):
        self.comp = comp
        self.arguments = []

    def __call__(self, a, b):
        self.arguments.extend([a, b])
        return self.comp(a, b)


class TestQueryValuesKeptIntact:

    @pytest.mark.parametrize("sequence, value", [
        ([b"a", b"a\x00", b"b"], b"a\x00"),
        ([b"a", b"a\x00", b"a\x00\x00"], b"a\x00\x00"),
        (["x", "x\x00", "y"], "x\x00"),
    ])
    def test_trailing_nul(self, per_element_policy, sequence, value):
        policy = per_element_policy
        lower, upper = bisect.bisect_left(sequence, value), bisect.bisect_right(sequence, value)
        assert lower_bound(sequence, value, policy=policy) == lower == lower_bound_batch(sequence, [value],
                                                                                          policy=policy)[0]
        assert upper_bound(sequence, value, policy=policy) == upper == upper_bound_batch(sequence, [value],
                                                                                          policy=policy)[0]
        assert binary_search(sequence, value, policy=policy) is True
        assert binary_search_batch(sequence, [value], policy=policy)[0]

    def test_single_nul_string(self, per_element_policy):
        assert binary_search(["x\x00"], "x\x00", policy=per_element_policy) is True
        assert binary_search(["x\x00"], "x", policy=per_element_policy) is False

    def test_key_with_big_int_arithmetic(self, per_element_policy):
        comp = key_order(lambda x: x * 10 ** 19)
        sequence = [1, 2, 3]
        assert lower_bound(sequence, 2, comp, policy=per_element_policy) == 1
        assert upper_bound(sequence, 2, comp, policy=per_element_policy) == 2
        assert lower_bound_batch(sequence, [2], comp=comp, policy=per_element_policy)[0] == 1
        assert binary_search(sequence, 2, comp, policy=per_element_policy) is True

    def test_comparator_sees_callers_object(self, per_element_policy):
        value = 2 ** 80 + 1
        comp = RecordingComparator()
        lower_bound([1, 2, 3, 2 ** 81], value, comp, policy=per_element_policy)
        queried = [arg for arg in comp.arguments if arg not in (1, 2, 3, 2 ** 81)]
        assert queried
        assert all(arg is value for arg in queried)
        assert all(type(arg) is int for arg in comp.arguments)

    def test_tuple_value_passed_as_is(self, per_element_policy):
        value = ("b", 0)
        comp = RecordingComparator(key_order(lambda r: r[0]))
        binary_search([("a", 1), ("b", 2), ("c", 3)], value, comp, policy=per_element_policy)
        assert any(arg is value for arg in comp.arguments)
