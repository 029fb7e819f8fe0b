import numpy as np
from enum import Enum
from typing import Optional, Union
import logging
import weakref

from .activations import Activation, resolve_activation
from .errors import OrderingViolationError, ShapeMismatchError, UninitializedParameterError
from .initializers import Initializer, UniformInitializer


class LayerPhase(Enum):
    """Where a layer stands in the current training step."""
    UNINITIALIZED = 'uninitialized'
    AWAITING_FORWARD = 'awaiting_forward'
    AWAITING_BACKWARD = 'awaiting_backward'
    AWAITING_UPDATE = 'awaiting_update'


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class DenseLayer:
    """
    A fully connected layer: an affine map followed by an activation.

    Computes A = activation(X @ W + b) for a batch X of shape (batch_size, input_size).
    The layer owns its parameters and the values cached by the last forward and
    backward passes. During backward it needs state owned by its neighbors (the
    next layer's weights, the previous layer's output); it reads that state
    through the network it belongs to, which it references weakly and only by index.

    Key Attributes:
        weights (np.ndarray): Weight matrix of shape (input_size, output_size).
        bias (np.ndarray): Bias row of shape (1, output_size), broadcast over the batch.
        activation_fn (Activation): Activation applied elementwise to the affine output.
        last_input (np.ndarray): Raw input of the last forward pass. Cached by the
                                 first layer (index 0) only.
        output (np.ndarray): Activated output of the last forward pass.
                             Shape: (batch_size, output_size).
        delta (np.ndarray): Error signal of the last backward pass, i.e. the
                            gradient with respect to the affine output.
                            Shape: (batch_size, output_size).
        weight_gradient (np.ndarray): Gradient for `weights`, including the L2 term.
        bias_gradient (np.ndarray): Gradient for `bias`, summed over the batch.
        phase (LayerPhase): Step state used to reject out-of-order calls.

    A training step is forward -> backward -> update. Across a network, all
    forwards run in increasing index order, then all backwards in decreasing
    index order, then the updates. Any other order raises OrderingViolationError.
    """

    def __init__(
        self,
        input_size: int,
        output_size: int,
        activation: Union[str, Activation, None] = 'sigmoid',
        is_output_layer: bool = False,
        initial_weights: Optional[np.ndarray] = None,  # Expected shape (input_size, output_size)
        initial_bias: Optional[np.ndarray] = None,     # Expected shape (1, output_size)
    ):
        """
        Creates the layer. Parameters are allocated later by `init()`.

        Args:
            input_size: Number of input features (size of the previous layer).
            output_size: Number of output features of this layer.
            activation: Activation identifier (e.g. 'sigmoid', 'tanh'), an Activation
                        instance, or None for linear. Defaults to 'sigmoid'.
            is_output_layer: Whether this layer takes its delta directly from the
                             error supplied by the caller.
            initial_weights: Optional fixed weights used by `init()` instead of the
                             initializer. Must have shape (input_size, output_size).
            initial_bias: Optional fixed bias used by `init()` instead of the
                          initializer. Shape (1, output_size) or (output_size,).
        """
        if input_size <= 0 or output_size <= 0:
            raise ValueError(f"Layer sizes must be positive, got ({input_size}, {output_size})")

        self.input_size = int(input_size)
        self.output_size = int(output_size)
        self.activation_fn = resolve_activation(activation)
        self._is_output_layer = bool(is_output_layer)

        if initial_weights is not None:
            initial_weights = np.array(initial_weights, dtype=float)
            if initial_weights.shape != (self.input_size, self.output_size):
                raise ShapeMismatchError(
                    f"Initial weights shape {initial_weights.shape} "
                    f"does not match expected shape ({self.input_size}, {self.output_size})"
                )
        if initial_bias is not None:
            initial_bias = np.array(initial_bias, dtype=float)
            if initial_bias.ndim == 1:
                initial_bias = initial_bias.reshape(1, -1)
            if initial_bias.shape != (1, self.output_size):
                raise ShapeMismatchError(
                    f"Initial bias shape {initial_bias.shape} "
                    f"does not match expected shape (1, {self.output_size})"
                )
        self._initial_weights = initial_weights
        self._initial_bias = initial_bias

        # Assigned once by the owning network
        self._index = 0
        self._container = None

        self._weights = None
        self._bias = None

        # Values cached by the passes of the current step
        self._last_input = None
        self._output = None
        self._delta = None
        self._weight_gradient = None
        self._bias_gradient = None

        # Number of forward passes run so far, and the previous layer's count
        # when this layer last consumed its output
        self._generation = 0
        self._consumed_generation = None

        self.phase = LayerPhase.UNINITIALIZED

        logging.debug(
            f"DenseLayer created: input_size={self.input_size}, output_size={self.output_size}, "
            f"activation={self.activation_fn.__class__.__name__}, is_output_layer={self._is_output_layer}"
        )

    # --- Network wiring ---

    def build(self, network, index: int):
        """
        Attaches the layer to `network` at position `index`.

        Called by the network during construction. The network is held through a
        weak reference: the layer never keeps its container (or its neighbors) alive.
        """
        if self._container is not None:
            raise ValueError(f"Layer #{self._index} already belongs to a network.")
        self._index = index
        self._container = weakref.ref(network)
        logging.debug(f"Layer #{index} attached to network.")

    @property
    def index(self) -> int:
        return self._index

    @property
    def is_output_layer(self) -> bool:
        return self._is_output_layer

    @property
    def is_attached(self) -> bool:
        return self._container is not None

    def _network(self):
        network = self._container() if self._container is not None else None
        if network is None:
            raise RuntimeError(
                f"Layer #{self._index}: not attached to a network, neighbor layers are unavailable."
            )
        return network

    # --- Parameters ---

    def init(self, initializer: Optional[Initializer] = None):
        """
        Allocates and initializes weights and bias.

        Fixed initial values given at construction take precedence over the
        initializer. Calling `init()` again re-initializes the layer and discards
        every cached value.

        Args:
            initializer: Source of random values. Defaults to a fresh
                         UniformInitializer over [0, 1).
        """
        if initializer is None:
            initializer = UniformInitializer()

        if self._initial_weights is not None:
            weights = self._initial_weights.copy()
            logging.debug(f"Layer #{self._index}: Using provided initial weights.")
        else:
            weights = np.array(initializer.weights(self.input_size, self.output_size), dtype=float)
            logging.debug(f"Layer #{self._index}: Initializing weights with {initializer!r}.")

        if self._initial_bias is not None:
            bias = self._initial_bias.copy()
        else:
            bias = np.array(initializer.bias(self.output_size), dtype=float)

        if weights.shape != (self.input_size, self.output_size):
            raise ShapeMismatchError(
                f"Layer {self._index}: initializer produced weights of shape {weights.shape}, "
                f"expected ({self.input_size}, {self.output_size})"
            )
        if bias.shape != (1, self.output_size):
            raise ShapeMismatchError(
                f"Layer {self._index}: initializer produced bias of shape {bias.shape}, "
                f"expected (1, {self.output_size})"
            )

        self._weights = weights
        self._bias = bias
        self._last_input = None
        self._output = None
        self._delta = None
        self._weight_gradient = None
        self._bias_gradient = None
        self._consumed_generation = None
        self.phase = LayerPhase.AWAITING_FORWARD

    def _require_parameters(self):
        if self._weights is None or self._bias is None:
            raise UninitializedParameterError(
                f"Layer {self._index}: parameters are not initialized, call init() first."
            )

    def _require(self, value: Optional[np.ndarray], name: str, produced_by: str) -> np.ndarray:
        if value is None:
            raise OrderingViolationError(
                f"Layer {self._index}: '{name}' is not available until {produced_by}() has run."
            )
        return value

    @property
    def weights(self) -> np.ndarray:
        self._require_parameters()
        return _read_only(self._weights)

    @property
    def bias(self) -> np.ndarray:
        self._require_parameters()
        return _read_only(self._bias)

    @property
    def last_input(self) -> np.ndarray:
        return _read_only(self._require(self._last_input, 'last_input', 'forward'))

    @property
    def output(self) -> np.ndarray:
        return _read_only(self._require(self._output, 'output', 'forward'))

    @property
    def generation(self) -> int:
        """Number of forward passes this layer has run."""
        return self._generation

    @property
    def delta(self) -> np.ndarray:
        return _read_only(self._require(self._delta, 'delta', 'backward'))

    @property
    def weight_gradient(self) -> np.ndarray:
        return _read_only(self._require(self._weight_gradient, 'weight_gradient', 'backward'))

    @property
    def bias_gradient(self) -> np.ndarray:
        return _read_only(self._require(self._bias_gradient, 'bias_gradient', 'backward'))

    @property
    def num_parameters(self) -> int:
        return self.input_size * self.output_size + self.output_size

    # --- Training step ---

    def forward(self, inputs: np.ndarray) -> np.ndarray:
        """
        Performs the forward pass through the layer.

        Computes Z = X @ W + b, followed by A = activation_fn(Z). Only A is kept.

        Args:
            inputs: Input data matrix of shape (batch_size, input_size). A 1D
                    array of length input_size is treated as a single sample.

        Returns:
            Output activations matrix of shape (batch_size, output_size).

        Raises:
            UninitializedParameterError: If `init()` has not been called.
            ShapeMismatchError: If the input width does not match `input_size`.
        """
        self._require_parameters()

        inputs = np.array(inputs, dtype=float)
        if inputs.ndim == 1:
            if inputs.shape[0] != self.input_size:
                raise ShapeMismatchError(
                    f"Layer {self._index}: Expected {self.input_size} inputs for a single sample, "
                    f"got {inputs.shape[0]}"
                )
            inputs = inputs.reshape(1, -1)
        elif inputs.ndim == 2:
            if inputs.shape[1] != self.input_size:
                raise ShapeMismatchError(
                    f"Layer {self._index}: Input shape {inputs.shape} is incompatible with "
                    f"weights of shape {self._weights.shape}"
                )
        else:
            raise ShapeMismatchError(
                f"Layer {self._index}: Unexpected input dimensions: {inputs.shape}. Expected 1D or 2D array."
            )

        # (batch_size, input_size) @ (input_size, output_size) + (1, output_size)
        z = np.dot(inputs, self._weights) + self._bias
        a = self.activation_fn.forward(z)

        # Only the first layer has no previous layer to read its input from
        if self._index == 0:
            self._last_input = inputs
        else:
            network = self._container() if self._container is not None else None
            self._consumed_generation = (
                network.generation_of(self._index - 1) if network is not None else None
            )
        self._generation += 1
        self._output = a
        self.phase = LayerPhase.AWAITING_BACKWARD

        return _read_only(a)

    def backward(self, signal: np.ndarray, regularization_strength: float = 0.0) -> np.ndarray:
        """
        Performs the backward pass through the layer.

        For the output layer the incoming signal *is* the delta: the caller passes
        the error with respect to the affine output (e.g. prediction - target for
        a sigmoid output trained with cross-entropy). For any other layer the
        signal is the next layer's delta, which is propagated through the next
        layer's weights and gated by this layer's activation derivative:

            delta = (signal @ W_next.T) * activation.backward(output)

        Then, in both cases:

            weight_gradient = previous_output.T @ delta + regularization_strength * W
            bias_gradient   = sum(delta over the batch)

        where previous_output is the cached raw input for the first layer and the
        previous layer's output otherwise.

        Args:
            signal: Output error (output layer) or next layer's delta.
                    Shape: (batch_size, output_size) or (batch_size, next_output_size).
            regularization_strength: L2 coefficient added directly to the weight gradient.

        Returns:
            This layer's delta, to be passed to the previous layer's backward().

        Raises:
            UninitializedParameterError: If `init()` has not been called.
            OrderingViolationError: If forward() has not run since the last backward(),
                                    if the next layer has not run backward() yet in
                                    this step, or if the previous layer's output is stale.
            ShapeMismatchError: If the signal does not fit this layer.
        """
        self._require_parameters()
        if self.phase is not LayerPhase.AWAITING_BACKWARD:
            raise OrderingViolationError(
                f"Layer {self._index}: backward() requires a forward() first in this step "
                f"(phase: {self.phase.value})."
            )
        if regularization_strength < 0.0:
            raise ValueError(f"Regularization strength must be non-negative, got {regularization_strength}")

        signal = np.asarray(signal, dtype=float)
        if signal.ndim == 1:
            signal = signal.reshape(1, -1)

        if self._is_output_layer:
            if signal.shape != self._output.shape:
                raise ShapeMismatchError(
                    f"Layer {self._index}: Output error shape {signal.shape} does not match "
                    f"output shape {self._output.shape}"
                )
            delta = signal.copy()
        else:
            network = self._network()
            next_index = self._index + 1
            if network.phase_of(next_index) is not LayerPhase.AWAITING_UPDATE:
                raise OrderingViolationError(
                    f"Layer {self._index}: backward() called before layer {next_index} ran backward() "
                    f"in this step (layer {next_index} phase: {network.phase_of(next_index).value})."
                )
            next_weights = network.weights_of(next_index)
            if signal.ndim != 2 or signal.shape != (self._output.shape[0], next_weights.shape[1]):
                raise ShapeMismatchError(
                    f"Layer {self._index}: Signal shape {signal.shape} is incompatible with "
                    f"next layer weights {next_weights.shape} and output shape {self._output.shape}"
                )
            # (batch_size, next_output_size) @ (next_output_size, output_size)
            delta = np.dot(signal, next_weights.T) * self.activation_fn.backward(self._output)

        previous_output = self._previous_output()
        if previous_output.shape[0] != delta.shape[0]:
            raise ShapeMismatchError(
                f"Layer {self._index}: Delta batch size ({delta.shape[0]}) doesn't match "
                f"previous output batch size ({previous_output.shape[0]})."
            )

        # (input_size, batch_size) @ (batch_size, output_size) -> (input_size, output_size)
        weight_gradient = np.dot(previous_output.T, delta)
        if regularization_strength > 0.0:
            # d(0.5 * lambda * W^2) / dW = lambda * W, no matching term in the loss
            weight_gradient = weight_gradient + regularization_strength * self._weights

        self._delta = delta
        self._weight_gradient = weight_gradient
        self._bias_gradient = np.sum(delta, axis=0, keepdims=True)
        self.phase = LayerPhase.AWAITING_UPDATE

        return _read_only(delta)

    def _previous_output(self) -> np.ndarray:
        if self._index == 0:
            return self._require(self._last_input, 'last_input', 'forward')
        network = self._network()
        previous_index = self._index - 1
        if network.phase_of(previous_index) is not LayerPhase.AWAITING_BACKWARD:
            raise OrderingViolationError(
                f"Layer {self._index}: output of layer {previous_index} is not from the current step "
                f"(layer {previous_index} phase: {network.phase_of(previous_index).value})."
            )
        if self._consumed_generation != network.generation_of(previous_index):
            raise OrderingViolationError(
                f"Layer {self._index}: layer {previous_index} ran forward() again after this layer "
                f"consumed its output (consumed generation {self._consumed_generation}, "
                f"current generation {network.generation_of(previous_index)})."
            )
        return network.output_of(previous_index)

    def update(self, learning_rate: float):
        """
        Applies one gradient-descent step using the gradients of the last backward().

            W = W - learning_rate * weight_gradient
            b = b - learning_rate * bias_gradient

        Gradients are summed over the batch, not averaged.

        Raises:
            UninitializedParameterError: If `init()` has not been called.
            OrderingViolationError: If backward() has not run in this step.
        """
        self._require_parameters()
        if self.phase is not LayerPhase.AWAITING_UPDATE:
            raise OrderingViolationError(
                f"Layer {self._index}: update() requires backward() first in this step "
                f"(phase: {self.phase.value})."
            )

        grad_norm = np.linalg.norm(self._weight_gradient)
        if grad_norm > 1e6:
            logging.warning(f"Layer {self._index}: Large gradient norm detected ({grad_norm:.2e}) before update.")

        self._weights -= learning_rate * self._weight_gradient
        self._bias -= learning_rate * self._bias_gradient
        self.phase = LayerPhase.AWAITING_FORWARD

    def summary(self) -> str:
        """Returns a string summary of the layer's configuration."""
        return (
            f"Layer Summary (index={self._index}):\n"
            f"  Type: Dense\n"
            f"  Input size: {self.input_size}\n"
            f"  Output size: {self.output_size}\n"
            f"  Activation: {self.activation_fn.__class__.__name__}\n"
            f"  Output layer: {self._is_output_layer}\n"
            f"  Weights shape: ({self.input_size}, {self.output_size})\n"
            f"  Bias shape: (1, {self.output_size})\n"
            f"  Parameters: {self.num_parameters:,} parameters\n"
        )

    def __repr__(self):
        return (f"DenseLayer(index={self._index}, input_size={self.input_size}, "
                f"output_size={self.output_size}, "
                f"activation={self.activation_fn.__class__.__name__}, "
                f"is_output_layer={self._is_output_layer})")
