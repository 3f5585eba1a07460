import enum
from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence, Tuple

import numpy as np


class SearchMode(enum.Enum):
    FIRST_NOT_BEFORE = 1
    FIRST_AFTER = 2


def search(sequence: Sequence, lo: int, hi: int, value: Any, comp: Callable[[Any, Any], bool],
           mode: SearchMode) -> int:
    """
    Single-position binary search over sequence[lo:hi].

    Parameters:
    :param sequence: A randomly addressable sequence, sorted with respect to comp.
    :param lo: First position of the searched range.
    :param hi: One past the last position of the searched range.
    :param value: The query value.
    :param comp: Strict weak ordering, comp(a, b) is True when a strictly precedes b.
    :param mode: FIRST_NOT_BEFORE finds the first element not ordered before value,
        FIRST_AFTER finds the first element ordered after value.

    Returns:
    The absolute position found, or hi if there is none.
    """
    if mode is SearchMode.FIRST_NOT_BEFORE:
        def before_target(elem):
            return comp(elem, value)
    else:
        def before_target(elem):
            return not comp(value, elem)

    while lo < hi:
        mid = (lo + hi) // 2
        if before_target(sequence[mid]):
            lo = mid + 1
        else:
            hi = mid
    return lo


class BinarySearchFunctor(ABC):
    @abstractmethod
    def __call__(self, mid: np.ndarray) -> np.ndarray:
        """
        Evaluate the search predicate at mid, one position per query.
        Returns True where the target position is at or before mid.
        """
        pass

    @abstractmethod
    def get_initial_bounds(self, size: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Generate the initial low and high bounds for the binary search.
        The answer for every query must lie in [low, high].
        """
        pass


def parallel_binary_search(functor: BinarySearchFunctor, size: int) -> np.ndarray:
    """
    Runs size independent integer binary searches in lock-step, one numpy step per halving.
    Queries whose interval has already closed keep their bounds, whatever the functor returns for them.
    """
    low, high = functor.get_initial_bounds(size)
    low = np.asarray(low, dtype=np.intp)
    high = np.asarray(high, dtype=np.intp)

    # Each step halves the widest open interval.
    num_iterations = int(np.max(high - low, initial=0)).bit_length()

    for _ in range(num_iterations):
        active = low < high
        mid = (low + high) // 2
        is_above_target = np.asarray(functor(mid), dtype=bool)
        low = np.where(active & ~is_above_target, mid + 1, low)
        high = np.where(active & is_above_target, mid, high)

    assert np.array_equal(low, high)
    return low


class BoundFunctor(BinarySearchFunctor):
    """
    Lower/upper bound predicate for a block of queries against sequence[lo:hi].
    The comparator must broadcast elementwise over numpy arrays.
    """

    def __init__(self, sequence: np.ndarray, lo: int, hi: int, values: np.ndarray,
                 comp: Callable[[Any, Any], Any], mode: SearchMode):
        assert lo < hi, "BoundFunctor needs a non-empty range"
        self.sequence = sequence
        self.lo = lo
        self.hi = hi
        self.values = values
        self.comp = comp
        self.mode = mode

    def get_initial_bounds(self, size: int) -> Tuple[np.ndarray, np.ndarray]:
        return np.full(size, self.lo, dtype=np.intp), np.full(size, self.hi, dtype=np.intp)

    def __call__(self, mid: np.ndarray) -> np.ndarray:
        # Closed intervals may sit at hi; clip so the lookup stays in range, their answer is ignored anyway.
        elements = self.sequence[np.minimum(mid, self.hi - 1)]
        if self.mode is SearchMode.FIRST_NOT_BEFORE:
            return ~np.asarray(self.comp(elements, self.values), dtype=bool)
        return np.asarray(self.comp(self.values, elements), dtype=bool)


def vectorized_search(sequence: np.ndarray, lo: int, hi: int, values: np.ndarray,
                      comp: Callable[[Any, Any], Any], mode: SearchMode) -> np.ndarray:
    """
    Vectorized counterpart of search: returns one absolute position per entry of values.
    """
    if hi <= lo:
        return np.full(len(values), lo, dtype=np.intp)
    functor = BoundFunctor(sequence, lo, hi, values, comp, mode)
    return parallel_binary_search(functor, len(values))
