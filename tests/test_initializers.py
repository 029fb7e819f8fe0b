import numpy as np
import pytest

from clear_dense.initializers import (
    UniformInitializer,
    XavierInitializer,
    get_initializer,
)


def test_uniform_shapes_and_bounds():
    init = UniformInitializer(low=-0.5, high=0.25, seed=3)
    weights = init.weights(5, 7)
    bias = init.bias(7)
    assert weights.shape == (5, 7)
    assert bias.shape == (1, 7)
    assert np.all(weights >= -0.5) and np.all(weights < 0.25)
    assert np.all(bias >= -0.5) and np.all(bias < 0.25)


def test_uniform_defaults_to_unit_interval():
    weights = UniformInitializer(seed=0).weights(20, 20)
    assert np.all(weights >= 0.0) and np.all(weights < 1.0)


def test_uniform_rejects_empty_interval():
    with pytest.raises(ValueError):
        UniformInitializer(low=1.0, high=1.0)


def test_same_seed_same_values():
    a = UniformInitializer(seed=42)
    b = UniformInitializer(seed=42)
    np.testing.assert_array_equal(a.weights(3, 4), b.weights(3, 4))
    np.testing.assert_array_equal(a.bias(4), b.bias(4))


def test_shared_generator():
    rng = np.random.default_rng(7)
    init = UniformInitializer(rng=rng)
    assert init.rng is rng


def test_xavier_limits_and_zero_bias():
    init = XavierInitializer(seed=1)
    weights = init.weights(6, 2)
    limit = np.sqrt(6.0 / 8)
    assert np.all(np.abs(weights) <= limit)
    np.testing.assert_array_equal(init.bias(2), np.zeros((1, 2)))


def test_get_initializer():
    init = get_initializer("Uniform", low=-1.0, high=1.0, seed=0)
    assert isinstance(init, UniformInitializer)
    assert (init.low, init.high) == (-1.0, 1.0)
    assert isinstance(get_initializer("xavier"), XavierInitializer)
    with pytest.raises(ValueError, match="Unknown initializer"):
        get_initializer("orthogonal")
