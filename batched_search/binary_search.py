"""
Public search entry points over a sorted sequence.

Every function comes in a scalar form answering one query and a batch form answering many queries in one pass.
The scalar forms are the batch forms run on a batch of one, so both always agree.
Positions are absolute indices into the sequence; with lo/hi only sequence[lo:hi] is searched.
"""
from typing import Any, Callable, MutableSequence, Optional, Sequence, Tuple, Union

import numpy as np

from batched_search.comparators import resolve_comparator
from batched_search.dispatch import search_batch, search_scalar
from batched_search.execution import ExecutionPolicy, resolve_policy
from batched_search.operations import SearchOperation

PolicyLike = Union[None, str, ExecutionPolicy]


def _scalar(operation: SearchOperation, sequence: Sequence, value: Any, comp: Optional[Callable], lo: int,
            hi: Optional[int], policy: PolicyLike):
    policy = resolve_policy(policy)
    comp = resolve_comparator(comp, policy)
    return search_scalar(sequence, value, comp, operation, policy, lo=lo, hi=hi)


def _batch(operation: SearchOperation, sequence: Sequence, values: Sequence, output: Optional[MutableSequence],
           comp: Optional[Callable], lo: int, hi: Optional[int], policy: PolicyLike) -> MutableSequence:
    policy = resolve_policy(policy)
    comp = resolve_comparator(comp, policy)
    return search_batch(sequence, values, output, comp, operation, policy, lo=lo, hi=hi)


######################
#  Scalar Functions  #
######################

def lower_bound(sequence: Sequence, value: Any, comp: Optional[Callable] = None, *, lo: int = 0,
                hi: Optional[int] = None, policy: PolicyLike = None) -> int:
    """First position whose element is not ordered before value (hi if there is none)."""
    return _scalar(SearchOperation.LOWER_BOUND, sequence, value, comp, lo, hi, policy)


def upper_bound(sequence: Sequence, value: Any, comp: Optional[Callable] = None, *, lo: int = 0,
                hi: Optional[int] = None, policy: PolicyLike = None) -> int:
    """First position whose element is ordered after value (hi if there is none)."""
    return _scalar(SearchOperation.UPPER_BOUND, sequence, value, comp, lo, hi, policy)


def binary_search(sequence: Sequence, value: Any, comp: Optional[Callable] = None, *, lo: int = 0,
                  hi: Optional[int] = None, policy: PolicyLike = None) -> bool:
    """Whether the sequence holds an element equivalent to value under comp."""
    return _scalar(SearchOperation.MEMBERSHIP, sequence, value, comp, lo, hi, policy)


def equal_range(sequence: Sequence, value: Any, comp: Optional[Callable] = None, *, lo: int = 0,
                hi: Optional[int] = None, policy: PolicyLike = None) -> Tuple[int, int]:
    """
    The [first, last) span of elements equivalent to value.
    Runs two independent searches rather than one combined traversal.
    """
    policy = resolve_policy(policy)
    comp = resolve_comparator(comp, policy)
    first = search_scalar(sequence, value, comp, SearchOperation.LOWER_BOUND, policy, lo=lo, hi=hi)
    last = search_scalar(sequence, value, comp, SearchOperation.UPPER_BOUND, policy, lo=lo, hi=hi)
    return first, last


def count(sequence: Sequence, value: Any, comp: Optional[Callable] = None, *, lo: int = 0,
          hi: Optional[int] = None, policy: PolicyLike = None) -> int:
    """Number of elements equivalent to value under comp."""
    first, last = equal_range(sequence, value, comp, lo=lo, hi=hi, policy=policy)
    return last - first


######################
#  Batch Functions   #
######################

def lower_bound_batch(sequence: Sequence, values: Sequence, output: Optional[MutableSequence] = None,
                      comp: Optional[Callable] = None, *, lo: int = 0, hi: Optional[int] = None,
                      policy: PolicyLike = None) -> MutableSequence:
    """
    Lower bound of every query in values.
    Results go into output (allocated as an integer array when omitted), which is returned.
    """
    return _batch(SearchOperation.LOWER_BOUND, sequence, values, output, comp, lo, hi, policy)


def upper_bound_batch(sequence: Sequence, values: Sequence, output: Optional[MutableSequence] = None,
                      comp: Optional[Callable] = None, *, lo: int = 0, hi: Optional[int] = None,
                      policy: PolicyLike = None) -> MutableSequence:
    """Upper bound of every query in values, written into output."""
    return _batch(SearchOperation.UPPER_BOUND, sequence, values, output, comp, lo, hi, policy)


def binary_search_batch(sequence: Sequence, values: Sequence, output: Optional[MutableSequence] = None,
                        comp: Optional[Callable] = None, *, lo: int = 0, hi: Optional[int] = None,
                        policy: PolicyLike = None) -> MutableSequence:
    """Membership of every query in values, written into output (a boolean array when omitted)."""
    return _batch(SearchOperation.MEMBERSHIP, sequence, values, output, comp, lo, hi, policy)


def equal_range_batch(sequence: Sequence, values: Sequence, comp: Optional[Callable] = None, *, lo: int = 0,
                      hi: Optional[int] = None, policy: PolicyLike = None) -> Tuple[np.ndarray, np.ndarray]:
    """Arrays of first and last positions of the equal range of every query, from two batch passes."""
    policy = resolve_policy(policy)
    comp = resolve_comparator(comp, policy)
    first = search_batch(sequence, values, None, comp, SearchOperation.LOWER_BOUND, policy, lo=lo, hi=hi)
    last = search_batch(sequence, values, None, comp, SearchOperation.UPPER_BOUND, policy, lo=lo, hi=hi)
    return first, last


def count_batch(sequence: Sequence, values: Sequence, comp: Optional[Callable] = None, *, lo: int = 0,
                hi: Optional[int] = None, policy: PolicyLike = None) -> np.ndarray:
    """Number of elements equivalent to each query in values."""
    first, last = equal_range_batch(sequence, values, comp, lo=lo, hi=hi, policy=policy)
    return last - first
