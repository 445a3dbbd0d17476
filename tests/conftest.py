import numpy as np
import pytest

from tests.helpers import make_fit


@pytest.fixture
def rng():
    return np.random.default_rng(20240101)


@pytest.fixture
def linear_fit(rng):
    """Two well-mixed chains around Intercept=7, log_time=-0.7, sigma=0.1."""
    shape = (2, 1000)
    return make_fit(
        {
            "Intercept": rng.normal(7.0, 0.05, shape),
            "beta": np.stack([rng.normal(-0.7, 0.03, shape)], axis=-1),
            "sigma": np.abs(rng.normal(0.1, 0.01, shape)),
        },
        coef_names=["log_time"],
        sample_stats={"diverging": np.zeros(shape, dtype=bool)},
    )
