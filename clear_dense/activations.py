import numpy as np
from typing import Union


class Activation:
    """Base class for all activation functions.

    The derivative contract is expressed in terms of the activation's *output*:
    ``backward`` receives ``a = forward(z)`` and returns ``f'(z)`` computed from
    ``a`` alone. Layers therefore never store the pre-activation values.

    This limits the pluggable functions to those whose derivative can be written
    as a function of their own output (sigmoid, tanh, relu, linear). Supporting
    anything else (e.g. softplus, GELU) requires widening ``backward`` to also
    receive ``z``.
    """

    def forward(self, z: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute the activation function value.

        Args:
            z: Affine output of a layer (scalar or numpy array).

        Returns:
            Activated output.
        """
        raise NotImplementedError

    def backward(self, a: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute the derivative of the activation with respect to its input.

        Args:
            a: The already-activated output, i.e. ``forward(z)``.

        Returns:
            ``f'(z)`` evaluated elementwise, same shape as ``a``.
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class Sigmoid(Activation):
    """Sigmoid activation function.

    Mathematical form:
        forward: a = 1 / (1 + e^-z)
        backward: f'(z) = a * (1 - a)
    """

    def forward(self, z: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute sigmoid activation with clipping for numerical stability."""
        # Clip input to avoid overflow in exp(-z) for large negative z
        clipped_z = np.clip(z, -500, 500)
        return 1.0 / (1.0 + np.exp(-clipped_z))

    def backward(self, a: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute sigmoid derivative from the sigmoid output."""
        return a * (1.0 - a)


class Tanh(Activation):
    """Hyperbolic tangent activation function.

    Mathematical form:
        forward: a = tanh(z)
        backward: f'(z) = 1 - a^2
    """

    def forward(self, z: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return np.tanh(z)

    def backward(self, a: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return 1.0 - a ** 2


class ReLU(Activation):
    """Rectified Linear Unit activation function.

    Mathematical form:
        forward: a = max(0, z)
        backward: f'(z) = 1 if a > 0 else 0

    ``a > 0`` exactly when ``z > 0``, so the output is enough to evaluate the
    derivative.
    """

    def forward(self, z: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return np.maximum(0, z)

    def backward(self, a: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return np.where(a > 0, 1.0, 0.0)


class Linear(Activation):
    """Linear activation function (identity).

    Mathematical form:
        forward: a = z
        backward: f'(z) = 1
    """

    def forward(self, z: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return z

    def backward(self, a: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        # Returns an array of ones with the same shape as the input
        return np.ones_like(a)


# Dictionary mapping activation function names to their classes
ACTIVATION_FUNCTIONS = {
    'sigmoid': Sigmoid,
    'tanh': Tanh,
    'relu': ReLU,
    'linear': Linear,
}


def get_activation(name: str, **kwargs) -> Activation:
    """Factory function to get an activation function instance by name.

    Args:
        name: Name of the activation function (case-insensitive).
        **kwargs: Additional arguments passed to the activation's constructor.

    Returns:
        An instance of the requested Activation class.

    Raises:
        ValueError: If the activation function name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in ACTIVATION_FUNCTIONS:
        raise ValueError(
            f"Unknown activation function '{name}'. "
            f"Available functions: {list(ACTIVATION_FUNCTIONS.keys())}"
        )
    return ACTIVATION_FUNCTIONS[name_lower](**kwargs)


def resolve_activation(activation: Union[str, Activation, None]) -> Activation:
    """Turns a name, an instance or ``None`` (linear) into an Activation instance."""
    if isinstance(activation, str):
        return get_activation(activation)
    if isinstance(activation, Activation):
        return activation
    if activation is None:
        return Linear()
    raise TypeError(
        f"Invalid activation type '{type(activation).__name__}'; "
        f"expected a name, an Activation instance or None."
    )
