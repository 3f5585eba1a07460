from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union

import tqdm

from batched_search.buffers import TemporaryAllocator


def chunk_ranges(size: int, chunk_size: int) -> Iterator[Tuple[int, int]]:
    """Split [0, size) into contiguous [start, stop) blocks of at most chunk_size indices."""
    for start in range(0, size, chunk_size):
        yield start, min(start + chunk_size, size)


class ExecutionPolicy(ABC):
    """
    Backend for the parallel-apply step: run a kernel once for every index of [0, size).
    No ordering is promised between indices, only that each one is handled exactly once.
    """
    verbose: int
    allocator: TemporaryAllocator
    vectorized: bool = False
    name: str = "policy"

    def log(self, msg: str):
        if self.verbose:
            print(msg)

    @abstractmethod
    def for_each(self, size: int, kernel) -> None:
        pass


@dataclass
class SequentialPolicy(ExecutionPolicy):
    verbose: int = 0
    allocator: TemporaryAllocator = field(default=None, repr=False)
    name = "sequential"

    def __post_init__(self):
        if self.allocator is None:
            self.allocator = TemporaryAllocator(verbose=self.verbose)

    def for_each(self, size: int, kernel) -> None:
        for i in tqdm.trange(size, desc="Sequential search", disable=self.verbose < 2):
            kernel(i)


@dataclass
class ThreadPoolPolicy(ExecutionPolicy):
    max_workers: Optional[int] = None
    chunk_size: int = 1024
    verbose: int = 0
    allocator: TemporaryAllocator = field(default=None, repr=False)
    name = "threads"

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")
        if self.allocator is None:
            self.allocator = TemporaryAllocator(verbose=self.verbose)

    def for_each(self, size: int, kernel) -> None:
        if size == 0:
            return

        def run_chunk(start: int, stop: int):
            for i in range(start, stop):
                kernel(i)

        chunks = list(chunk_ranges(size, self.chunk_size))
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(run_chunk, start, stop) for start, stop in chunks]
            for future in tqdm.tqdm(as_completed(futures), total=len(futures), desc="Threaded search",
                                    disable=self.verbose < 2):
                # Re-raises the first failure seen in a worker.
                future.result()


@dataclass
class VectorizedPolicy(ExecutionPolicy):
    """
    Lock-step evaluation of whole blocks of queries with numpy.
    Comparators used with this policy must broadcast elementwise over arrays.
    """
    chunk_size: Optional[int] = None
    verbose: int = 0
    allocator: TemporaryAllocator = field(default=None, repr=False)
    vectorized = True
    name = "vectorized"

    def __post_init__(self):
        if self.chunk_size is not None and self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.allocator is None:
            self.allocator = TemporaryAllocator(verbose=self.verbose)

    def for_each(self, size: int, kernel) -> None:
        if size == 0:
            return
        chunks = list(chunk_ranges(size, self.chunk_size or size))
        for start, stop in tqdm.tqdm(chunks, desc="Vectorized search", disable=self.verbose < 2):
            kernel.apply_block(start, stop)


_POLICY_NAMES = {
    "seq": SequentialPolicy,
    "sequential": SequentialPolicy,
    "par": ThreadPoolPolicy,
    "threads": ThreadPoolPolicy,
    "vec": VectorizedPolicy,
    "vectorized": VectorizedPolicy,
}


def resolve_policy(policy: Union[None, str, ExecutionPolicy]) -> ExecutionPolicy:
    """
    Turn the caller's policy argument into a policy instance.
    None and names build a fresh instance, so no state is shared between calls.
    """
    if policy is None:
        return SequentialPolicy()
    if isinstance(policy, ExecutionPolicy):
        return policy
    if isinstance(policy, str):
        try:
            return _POLICY_NAMES[policy.lower()]()
        except KeyError:
            raise ValueError(
                f"Unknown execution policy {policy!r}, expected one of {sorted(_POLICY_NAMES)}"
            ) from None
    raise ValueError(f"Expected an ExecutionPolicy, a policy name or None, got {type(policy).__name__}")
