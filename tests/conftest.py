import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest


@pytest.fixture
def step_image():
    """20x20 image, dark on the left half and bright on the right."""
    image = np.zeros((20, 20), dtype=float)
    image[:, 10:] = 1.0
    return image


@pytest.fixture
def random_costs():
    rng = np.random.default_rng(7)
    return rng.uniform(0.1, 5.0, size=(6, 7))
