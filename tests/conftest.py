import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def uniform_points(rng):
    """100 points drawn uniformly from the unit cube in 5 dimensions."""
    return rng.random((100, 5))


@pytest.fixture
def outlier_points(rng):
    """100 uniform points plus one point displaced far outside the cube."""
    points = rng.random((101, 5))
    points[100] += 100.0
    return points
