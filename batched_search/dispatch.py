from typing import Any, Callable, MutableSequence, Optional, Sequence

import numpy as np

from batched_search.buffers import temporary_array
from batched_search.execution import ExecutionPolicy
from batched_search.operations import SearchOperation


class BinarySearchKernel:
    """
    One search operation closed over the searched range, the comparator and the query/output pair.
    Calling it with an index answers that query; apply_block answers a contiguous block at once.
    """

    def __init__(self, sequence: Sequence, lo: int, hi: int, comp: Callable, operation: SearchOperation,
                 values: Sequence, output: MutableSequence):
        self.sequence = sequence
        self.lo = lo
        self.hi = hi
        self.comp = comp
        self.operation = operation
        self.values = values
        self.output = output
        self._evaluate = operation.scalar_evaluator()
        self._evaluate_block = operation.vectorized_evaluator()

    def __call__(self, i: int):
        self.output[i] = self._evaluate(self.sequence, self.lo, self.hi, self.values[i], self.comp)

    def apply_block(self, start: int, stop: int):
        self.output[start:stop] = self._evaluate_block(
            self.sequence, self.lo, self.hi, self.values[start:stop], self.comp
        )


def check_bounds(sequence: Sequence, lo: int, hi: Optional[int]) -> int:
    """Validate a [lo, hi) sub-range the way bisect does and return the resolved hi."""
    if lo < 0:
        raise ValueError(f"lo must be non-negative, got {lo}")
    if hi is None:
        hi = len(sequence)
    elif hi > len(sequence):
        raise ValueError(f"hi={hi} is past the end of a sequence of length {len(sequence)}")
    if lo > hi:
        raise ValueError(f"lo={lo} is greater than hi={hi}")
    return hi


def search_batch(sequence: Sequence, values: Sequence, output: Optional[MutableSequence], comp: Callable,
                 operation: SearchOperation, policy: ExecutionPolicy, lo: int = 0,
                 hi: Optional[int] = None) -> MutableSequence:
    """
    Apply operation to every query in values, writing the result for values[i] into output[i].

    Parameters:
    :param sequence: The sorted sequence searched; never modified.
    :param values: The queries. Each one is answered independently of the others.
    :param output: Buffer with room for len(values) results, or None to allocate one of operation.result_dtype.
    :param comp: An already resolved comparator.
    :param operation: Which search semantics to apply.
    :param policy: The backend that runs the per-query work.
    :param lo: First position of the searched range.
    :param hi: One past the last position of the searched range (None for the end of the sequence).

    Returns:
    The output buffer.
    """
    hi = check_bounds(sequence, lo, hi)
    size = len(values)
    if output is None:
        output = np.empty(size, dtype=operation.result_dtype)
    if size == 0:
        return output

    if policy.vectorized:
        sequence = np.asarray(sequence)
        values = np.asarray(values)

    policy.log(f"Running {operation.value} on {size} queries over [{lo}, {hi}) with the {policy.name} policy")
    kernel = BinarySearchKernel(sequence, lo, hi, comp, operation, values, output)
    policy.for_each(size, kernel)
    return output


def search_scalar(sequence: Sequence, value: Any, comp: Callable, operation: SearchOperation,
                  policy: ExecutionPolicy, lo: int = 0, hi: Optional[int] = None):
    """
    Answer a single query by running it as a batch of one, so both paths share the same implementation.
    The value buffer holds the caller's object itself, so comparators see exactly what was passed in.
    """
    with temporary_array(policy.allocator, 1, object) as values, \
            temporary_array(policy.allocator, 1, operation.result_dtype) as output:
        values[0] = value
        search_batch(sequence, values, output, comp, operation, policy, lo=lo, hi=hi)
        return operation.to_python(output[0])
