import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

import numpy as np
import pandas as pd
import tqdm
from matplotlib import pyplot as plt
from matplotlib.axes import Axes
from memory_profiler import memory_usage

from batched_search.binary_search import lower_bound_batch
from batched_search.execution import resolve_policy


@dataclass
class ProfileResult:
    execution_time: float
    peak_memory_usage: Optional[float]


@dataclass
class BenchmarkConfig:
    sizes: List[int] = field(default_factory=lambda: [1_000, 10_000, 100_000])
    num_queries: int = 10_000
    policies: List[str] = field(default_factory=lambda: ["sequential", "threads", "vectorized"])
    track_memory: bool = False
    seed: int = 0
    output_dir: Optional[Path] = None
    verbose: int = 1

    def __post_init__(self):
        if self.num_queries < 0:
            raise ValueError(f"num_queries must be non-negative, got {self.num_queries}")
        if any(size < 0 for size in self.sizes):
            raise ValueError(f"Sequence sizes must be non-negative, got {self.sizes}")
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)


def profile_call(fn: Callable[[], Any], track_memory: bool = True) -> Tuple[Any, ProfileResult]:
    """
    Run fn once and measure its wall time, and optionally its peak memory usage in MiB.
    """
    start_time = time.time()
    if track_memory:
        peak_memory_usage, retval = memory_usage((fn,), max_usage=True, retval=True)
    else:
        peak_memory_usage, retval = None, fn()
    end_time = time.time()

    return retval, ProfileResult(execution_time=end_time - start_time, peak_memory_usage=peak_memory_usage)


def benchmark_policies(config: BenchmarkConfig) -> pd.DataFrame:
    """
    Time lower_bound_batch for every (sequence size, policy) pair on random sorted integers.
    Every policy's answer is checked against numpy.searchsorted before it is recorded.
    """
    rng = np.random.default_rng(config.seed)
    rows = []
    for size in tqdm.tqdm(config.sizes, desc="Benchmarking sequence sizes", disable=config.verbose < 2):
        sequence = np.sort(rng.integers(0, 4 * size + 1, size=size))
        values = rng.integers(-1, 4 * size + 2, size=config.num_queries)
        expected = np.searchsorted(sequence, values, side="left")

        for policy_name in config.policies:
            policy = resolve_policy(policy_name)
            output, profile = profile_call(
                lambda: lower_bound_batch(sequence, values, policy=policy), track_memory=config.track_memory
            )
            if not np.array_equal(np.asarray(output), expected):
                raise ValueError(f"The {policy_name} policy disagrees with numpy.searchsorted at size {size}")
            if config.verbose:
                print(f"{policy_name:>12} | n={size:<10} | {profile.execution_time:.4f}s")
            rows.append({
                "policy": policy_name,
                "size": size,
                "num_queries": config.num_queries,
                "execution_time": profile.execution_time,
                "peak_memory_usage": profile.peak_memory_usage,
            })

    df = pd.DataFrame(rows, columns=["policy", "size", "num_queries", "execution_time", "peak_memory_usage"])
    if config.output_dir is not None:
        config.output_dir.mkdir(parents=True, exist_ok=True)
        df.to_csv(config.output_dir / "benchmark.csv", index=False)
    return df


def plot_benchmark(df: pd.DataFrame) -> Axes:
    fig, ax = plt.subplots()
    ax.set_xscale("log")
    ax.set_yscale("log")
    ax.grid(True, which="both", linestyle='-', linewidth='0.5', color='grey')

    for policy_name, policy_rows in df.groupby("policy"):
        policy_rows = policy_rows.sort_values("size")
        ax.plot(policy_rows["size"], policy_rows["execution_time"], marker='o', label=policy_name)

    ax.set_xlabel('Sequence Length')
    ax.set_ylabel('Batch Search Time (s)')
    ax.legend()

    fig.tight_layout()
    plt.close(fig)

    return ax
