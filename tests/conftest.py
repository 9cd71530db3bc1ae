import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest


@pytest.fixture
def sample_points():
    """Six 2-D points used by the sample queries."""
    return np.array([(2, 1), (2, 2), (4, 2), (6, 2), (3, 3), (5, 4)])


@pytest.fixture
def random_boxes():
    """Factory for random query boxes inside [low, high)."""
    def make(rng, count, dimension, low=0.0, high=1.0):
        corners = rng.uniform(low, high, size=(count, 2, dimension))
        return [(c.min(axis=0), c.max(axis=0)) for c in corners]
    return make
