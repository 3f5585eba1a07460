import numpy as np
import pandas as pd

from batched_search.binary_search import count_batch, equal_range, lower_bound_batch
from batched_search.comparators import key_order
from batched_search.execution import VectorizedPolicy

# Bucket a day of event timestamps into hourly windows with one batched pass.
rng = np.random.default_rng(7)
timestamps = np.sort(rng.integers(0, 24 * 3600, size=50_000))
hour_starts = np.arange(0, 24 * 3600 + 1, 3600)

policy = VectorizedPolicy(verbose=1)
boundaries = lower_bound_batch(timestamps, hour_starts, policy=policy)
df = pd.DataFrame({"hour": np.arange(24), "events": np.diff(boundaries)})
print(df)

# Events stamped exactly on the hour.
exact = count_batch(timestamps, hour_starts[:-1], policy=policy)
print(f"Events on an exact hour boundary: {int(exact.sum())}")

# Records sorted by a key, searched with a key-based comparator on the sequential backend.
records = sorted([("b", 2), ("a", 1), ("c", 3), ("b", 5)], key=lambda r: r[0])
first, last = equal_range(records, ("b", None), key_order(lambda r: r[0]))
print(f"Records with key 'b': {records[first:last]}")
