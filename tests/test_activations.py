import numpy as np
import pytest

from clear_dense.activations import (
    Activation,
    Linear,
    ReLU,
    Sigmoid,
    Tanh,
    get_activation,
    resolve_activation,
)


Z = np.array([[-3.0, -0.5, 0.0, 0.5, 3.0]])


@pytest.mark.parametrize("activation, expected", [
    (Sigmoid(), 1.0 / (1.0 + np.exp(-Z))),
    (Tanh(), np.tanh(Z)),
    (ReLU(), np.array([[0.0, 0.0, 0.0, 0.5, 3.0]])),
    (Linear(), Z),
])
def test_forward_values(activation, expected):
    np.testing.assert_allclose(activation.forward(Z), expected)


@pytest.mark.parametrize("activation", [Sigmoid(), Tanh(), ReLU(), Linear()])
def test_backward_from_output_matches_numerical_derivative(activation):
    # Avoid z == 0 where ReLU has no derivative
    z = np.array([[-2.0, -0.7, 0.3, 1.1, 2.5]])
    h = 1e-6
    numerical = (activation.forward(z + h) - activation.forward(z - h)) / (2 * h)
    analytic = activation.backward(activation.forward(z))
    np.testing.assert_allclose(analytic, numerical, rtol=1e-5, atol=1e-8)


def test_sigmoid_backward_uses_output_not_input():
    a = np.array([0.25, 0.5, 0.9])
    np.testing.assert_allclose(Sigmoid().backward(a), a * (1 - a))


def test_sigmoid_does_not_overflow():
    out = Sigmoid().forward(np.array([-1e4, 1e4]))
    assert np.all(np.isfinite(out))
    np.testing.assert_allclose(out, [0.0, 1.0], atol=1e-12)


def test_linear_backward_is_ones():
    a = np.array([[1.0, -2.0], [3.0, 4.0]])
    np.testing.assert_array_equal(Linear().backward(a), np.ones((2, 2)))


def test_base_class_is_abstract():
    with pytest.raises(NotImplementedError):
        Activation().forward(Z)
    with pytest.raises(NotImplementedError):
        Activation().backward(Z)


def test_get_activation_is_case_insensitive():
    assert isinstance(get_activation("Sigmoid"), Sigmoid)
    assert isinstance(get_activation("TANH"), Tanh)


def test_get_activation_unknown_name():
    with pytest.raises(ValueError, match="Unknown activation function 'softmax'"):
        get_activation("softmax")


def test_resolve_activation():
    sigmoid = Sigmoid()
    assert resolve_activation(sigmoid) is sigmoid
    assert isinstance(resolve_activation("relu"), ReLU)
    assert isinstance(resolve_activation(None), Linear)
    with pytest.raises(TypeError):
        resolve_activation(42)
