import numpy as np
import pytest

WORKED_MU = [-0.23626, -0.08108, -0.02205, 0.03059, 0.24482]
WORKED_SIGMASQ = 1.533e-3
WORKED_Z = [
    [1.19e-118, 2.81e-25, 5.87e-08, 9.99e-1, 1.86e-52],
    [2.03e-117, 9.19e-25, 1.02e-07, 9.99e-01, 1.92e-53],
    [1.00e0, 1.34e-23, 1.72e-50, 1.08e-82, 6.45e-295],
    [1.00e00, 1.39e-20, 2.51e-46, 1.67e-77, 1.47e-285],
    [8.86e-63, 1.21e-04, 9.99e-01, 1.89e-05, 7.93e-106],
    [7.59e-60, 7.76e-04, 9.99e-01, 3.60e-06, 1.75e-109],
    [0.00e0, 1.61e-147, 1.08e-98, 2.31e-63, 1.00e0],
    [0.00e0, 1.18e-147, 8.37e-99, 1.88e-63, 1.00e0],
    [3.51e-75, 9.79e-01, 4.55e-08, 2.06e-02, 2.14e-90],
    [7.07e-79, 8.58e-01, 3.96e-09, 1.41e-01, 6.42e-86],
]


def make_random_fit(seed: int, n: int = 50):
    """Random but internally consistent mixture fit."""
    rng = np.random.default_rng(seed)
    K = int(rng.integers(2, 8))
    return {
        "mu": rng.normal(0.0, 0.5, K),
        "pro": rng.dirichlet(np.ones(K)),
        "z": rng.dirichlet(np.ones(K), size=n),
        "groups": np.eye(K, dtype=int),
        "ngroups": K,
        "sigmasq": rng.uniform(0.001, 0.1, K),
    }


@pytest.fixture
def worked_fit():
    """Five-component fit with equal proportions and a common variance."""
    z = np.array(WORKED_Z)
    return {
        "mu": np.array(WORKED_MU),
        "pro": np.full(5, 0.2),
        "z": z / z.sum(axis=1, keepdims=True),
        "groups": np.eye(5, dtype=int),
        "ngroups": 5,
        "sigmasq": np.full(5, WORKED_SIGMASQ),
    }


@pytest.fixture(params=range(8))
def random_fit(request):
    return make_random_fit(request.param)
