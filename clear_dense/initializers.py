import numpy as np
from typing import Optional
import logging


class Initializer:
    """Base class for parameter initialization strategies.

    An initializer owns a ``numpy.random.Generator`` so that a single seed fixes
    every parameter drawn from it. Passing the same initializer to every layer
    of a network makes the whole network reproducible.

    Args:
        seed: Seed for a new ``numpy.random.default_rng``. Ignored if `rng` is given.
        rng: An existing generator to draw from.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def weights(self, input_size: int, output_size: int) -> np.ndarray:
        """Returns a weight matrix of shape (input_size, output_size)."""
        raise NotImplementedError

    def bias(self, output_size: int) -> np.ndarray:
        """Returns a bias row of shape (1, output_size)."""
        raise NotImplementedError


class UniformInitializer(Initializer):
    """Draws weights and biases uniformly from ``[low, high)``.

    The defaults ``[0, 1)`` give every parameter a positive starting value.
    """

    def __init__(
        self,
        low: float = 0.0,
        high: float = 1.0,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        if low >= high:
            raise ValueError(f"UniformInitializer: low ({low}) must be smaller than high ({high})")
        super().__init__(seed=seed, rng=rng)
        self.low = low
        self.high = high

    def weights(self, input_size: int, output_size: int) -> np.ndarray:
        return self.rng.uniform(self.low, self.high, (input_size, output_size))

    def bias(self, output_size: int) -> np.ndarray:
        return self.rng.uniform(self.low, self.high, (1, output_size))

    def __repr__(self):
        return f"UniformInitializer(low={self.low}, high={self.high})"


class XavierInitializer(Initializer):
    """Xavier/Glorot uniform weights with zero biases.

    Uniform distribution limits: sqrt(6 / (fan_in + fan_out)).
    """

    def weights(self, input_size: int, output_size: int) -> np.ndarray:
        limit = np.sqrt(6.0 / (input_size + output_size))
        logging.debug(f"Xavier uniform limit for ({input_size}, {output_size}): {limit:.4f}")
        return self.rng.uniform(-limit, limit, (input_size, output_size))

    def bias(self, output_size: int) -> np.ndarray:
        return np.zeros((1, output_size), dtype=float)

    def __repr__(self):
        return "XavierInitializer()"


INITIALIZERS = {
    'uniform': UniformInitializer,
    'xavier': XavierInitializer,
}


def get_initializer(name: str, **kwargs) -> Initializer:
    """Factory function to get an initializer by name.

    Args:
        name: 'uniform' or 'xavier' (case-insensitive).
        **kwargs: Constructor arguments, e.g. ``seed`` or ``low``/``high``.

    Raises:
        ValueError: If the name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in INITIALIZERS:
        raise ValueError(
            f"Unknown initializer '{name}'. "
            f"Available initializers: {list(INITIALIZERS.keys())}"
        )
    return INITIALIZERS[name_lower](**kwargs)
