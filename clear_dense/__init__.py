"""A from-scratch feedforward neural network built on NumPy."""

from .activations import Activation, Linear, ReLU, Sigmoid, Tanh, get_activation
from .errors import (
    NetworkShapeIncompatibilityError,
    NeuralNetworkError,
    OrderingViolationError,
    ShapeMismatchError,
    UninitializedParameterError,
)
from .initializers import Initializer, UniformInitializer, XavierInitializer, get_initializer
from .input_type import InputType
from .layer import DenseLayer, LayerPhase
from .losses import binary_cross_entropy_loss, compute_loss, mse_loss
from .network import Network
from .trainer import Trainer

__version__ = "0.1.0"
