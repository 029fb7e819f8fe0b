"""Exception types raised by layers, networks and the trainer.

Each error also derives from the builtin exception that callers would
naturally catch for the same problem (``ValueError`` for bad shapes,
``RuntimeError`` for calls made in the wrong state).
"""


class NeuralNetworkError(Exception):
    """Base class for all clear_dense errors."""


class ShapeMismatchError(NeuralNetworkError, ValueError):
    """Input, weight, bias or signal dimensions are incompatible."""


class UninitializedParameterError(NeuralNetworkError, RuntimeError):
    """A layer was used before ``init()`` allocated its parameters."""


class OrderingViolationError(NeuralNetworkError, RuntimeError):
    """forward/backward/update were called out of order for the current step."""


class NetworkShapeIncompatibilityError(NeuralNetworkError, ValueError):
    """Adjacent layers of a network disagree on their sizes."""
