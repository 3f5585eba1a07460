import enum
from typing import Any, Callable, Sequence

import numpy as np

from batched_search.utils.binary_search import SearchMode, search, vectorized_search

ScalarEvaluator = Callable[[Sequence, int, int, Any, Callable], Any]
VectorizedEvaluator = Callable[[np.ndarray, int, int, np.ndarray, Callable], np.ndarray]


def lower_bound_position(sequence: Sequence, lo: int, hi: int, value: Any, comp: Callable) -> int:
    return search(sequence, lo, hi, value, comp, SearchMode.FIRST_NOT_BEFORE)


def upper_bound_position(sequence: Sequence, lo: int, hi: int, value: Any, comp: Callable) -> int:
    return search(sequence, lo, hi, value, comp, SearchMode.FIRST_AFTER)


def contains(sequence: Sequence, lo: int, hi: int, value: Any, comp: Callable) -> bool:
    position = lower_bound_position(sequence, lo, hi, value, comp)
    # Equivalence under comp, not ==: the lower bound already rules out comp(elem, value).
    return position != hi and not comp(value, sequence[position])


def lower_bound_positions(sequence: np.ndarray, lo: int, hi: int, values: np.ndarray, comp: Callable) -> np.ndarray:
    return vectorized_search(sequence, lo, hi, values, comp, SearchMode.FIRST_NOT_BEFORE)


def upper_bound_positions(sequence: np.ndarray, lo: int, hi: int, values: np.ndarray, comp: Callable) -> np.ndarray:
    return vectorized_search(sequence, lo, hi, values, comp, SearchMode.FIRST_AFTER)


def contains_all(sequence: np.ndarray, lo: int, hi: int, values: np.ndarray, comp: Callable) -> np.ndarray:
    if hi <= lo:
        return np.zeros(len(values), dtype=bool)
    positions = lower_bound_positions(sequence, lo, hi, values, comp)
    in_range = positions < hi
    elements = sequence[np.minimum(positions, hi - 1)]
    return in_range & ~np.asarray(comp(values, elements), dtype=bool)


class SearchOperation(enum.Enum):
    """
    The closed set of per-query search semantics.

    LOWER_BOUND: first position whose element is not ordered before the query.
    UPPER_BOUND: first position whose element is ordered after the query.
    MEMBERSHIP: whether some element is equivalent to the query, i.e. the lower and upper bounds differ.
    """
    LOWER_BOUND = "lower_bound"
    UPPER_BOUND = "upper_bound"
    MEMBERSHIP = "membership"

    @property
    def result_dtype(self) -> np.dtype:
        if self is SearchOperation.MEMBERSHIP:
            return np.dtype(np.bool_)
        return np.dtype(np.intp)

    def scalar_evaluator(self) -> ScalarEvaluator:
        return _SCALAR_EVALUATORS[self]

    def vectorized_evaluator(self) -> VectorizedEvaluator:
        return _VECTORIZED_EVALUATORS[self]

    def to_python(self, result):
        """Convert a raw buffer entry to the declared Python result type."""
        if self is SearchOperation.MEMBERSHIP:
            return bool(result)
        return int(result)


_SCALAR_EVALUATORS = {
    SearchOperation.LOWER_BOUND: lower_bound_position,
    SearchOperation.UPPER_BOUND: upper_bound_position,
    SearchOperation.MEMBERSHIP: contains,
}

_VECTORIZED_EVALUATORS = {
    SearchOperation.LOWER_BOUND: lower_bound_positions,
    SearchOperation.UPPER_BOUND: upper_bound_positions,
    SearchOperation.MEMBERSHIP: contains_all,
}
