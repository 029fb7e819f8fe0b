import logging

import numpy as np
import pytest

from clear_dense import Network


@pytest.fixture(autouse=True)
def setup_logging():
    """Keep test output readable."""
    logging.getLogger().setLevel(logging.WARNING)
    yield
    logging.getLogger().setLevel(logging.NOTSET)


@pytest.fixture
def fixed_params():
    """Hand-picked parameters for a 3 -> 4 -> 1 network."""
    w1 = np.array([
        [0.1, -0.2, 0.3, 0.05],
        [0.4, 0.1, -0.1, 0.2],
        [-0.3, 0.2, 0.1, 0.1],
    ])
    b1 = np.array([[0.01, -0.02, 0.03, 0.0]])
    w2 = np.array([[0.2], [-0.1], [0.3], [0.25]])
    b2 = np.array([[0.05]])
    return w1, b1, w2, b2


@pytest.fixture
def fixed_network(fixed_params):
    w1, b1, w2, b2 = fixed_params
    network = Network.from_layer_sizes(
        [3, 4, 1],
        activations=['sigmoid', 'sigmoid'],
        initial_layer_weights=[w1, w2],
        initial_layer_biases=[b1, b2],
    )
    network.init()
    return network


@pytest.fixture
def xor_data():
    X = np.array([[0, 0], [0, 1], [1, 0], [1, 1]], dtype=float)
    y = np.array([[0], [1], [1], [0]], dtype=float)
    return X, y
