import numpy as np
import pytest

from batched_search.execution import SequentialPolicy, ThreadPoolPolicy, VectorizedPolicy


@pytest.fixture
def sorted_values():
    return [1, 3, 3, 3, 5, 7]


def make_policies():
    return [
        SequentialPolicy(),
        ThreadPoolPolicy(max_workers=4, chunk_size=2),
        VectorizedPolicy(),
        VectorizedPolicy(chunk_size=2),
    ]


@pytest.fixture(params=range(len(make_policies())), ids=["sequential", "threads", "vectorized", "vectorized-chunked"])
def policy(request):
    return make_policies()[request.param]


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
