from pathlib import Path

from batched_search.profiling import BenchmarkConfig, benchmark_policies, plot_benchmark

CURRENT_DIR = Path(__file__).resolve().parent
base_dir = CURRENT_DIR / "results" / "policies"

config = BenchmarkConfig(
    sizes=[1_000, 10_000, 100_000, 1_000_000],
    num_queries=20_000,
    track_memory=True,
    output_dir=base_dir,
)
df = benchmark_policies(config)
print(df)

ax = plot_benchmark(df)
ax.set_title("lower_bound_batch by execution policy")
ax.figure.tight_layout()
ax.figure.savefig(base_dir / "policies.png")
