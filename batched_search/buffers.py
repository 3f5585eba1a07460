from contextlib import contextmanager
from typing import Iterator

import numpy as np


class TemporaryAllocator:
    """
    Hands out short-lived numpy buffers and keeps count of the ones not yet released.
    One allocator belongs to one execution policy.
    """

    def __init__(self, verbose: int = 0):
        self.verbose = verbose
        self.outstanding = 0
        self.total_acquired = 0

    def log(self, msg: str):
        if self.verbose >= 2:
            print(msg)

    def acquire(self, capacity: int, dtype=None) -> np.ndarray:
        if capacity < 0:
            raise ValueError(f"Buffer capacity must be non-negative, got {capacity}")
        buffer = np.empty(capacity, dtype=dtype)
        self.outstanding += 1
        self.total_acquired += 1
        self.log(f"Acquired temporary buffer of {capacity} x {buffer.dtype}")
        return buffer

    def release(self, buffer: np.ndarray):
        assert self.outstanding > 0, "Released more buffers than were acquired"
        self.outstanding -= 1
        self.log(f"Released temporary buffer of {buffer.size} x {buffer.dtype}")


@contextmanager
def temporary_array(allocator: TemporaryAllocator, capacity: int, dtype=None) -> Iterator[np.ndarray]:
    """Scoped buffer: released when the block exits, however it exits."""
    buffer = allocator.acquire(capacity, dtype)
    try:
        yield buffer
    finally:
        allocator.release(buffer)
