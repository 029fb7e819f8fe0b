import numpy as np
from typing import Iterator, List, Optional, Union
import logging

from .activations import Activation
from .errors import NetworkShapeIncompatibilityError
from .initializers import Initializer, UniformInitializer, get_initializer
from .input_type import InputType
from .layer import DenseLayer, LayerPhase


class Network:
    """
    A feedforward neural network: an ordered container of dense layers.

    The network owns its layers, assigns each one its index and validates at
    construction that adjacent layers fit together. During backpropagation the
    layers query it for their neighbors' state (`weights_of`, `output_of`,
    `phase_of`, `generation_of`); those lookups are read-only.

    `forward`, `backward`, `update` and `predict` run one pass over all layers in
    the required order. Loss computation and the training loop live in
    `clear_dense.trainer`.
    """

    def __init__(self, input_type: Union[int, InputType], layers: List[DenseLayer]):
        """
        Builds the network and attaches every layer to it.

        Args:
            input_type: Size of one input sample, or an InputType descriptor.
            layers: Layers in forward order. Exactly the last one must be flagged
                    as the output layer.

        Raises:
            NetworkShapeIncompatibilityError: If the input size and the layer
                sizes do not chain together.
            ValueError: If there are no layers, the output-layer flags are wrong,
                or a layer already belongs to a network.
        """
        if not isinstance(input_type, InputType):
            input_type = InputType(input_type)
        layers = list(layers)

        if not layers:
            raise ValueError("Network must have at least one layer.")

        if layers[0].input_size != input_type.input_size:
            raise NetworkShapeIncompatibilityError(
                f"Layer 0 expects {layers[0].input_size} inputs but the network input size "
                f"is {input_type.input_size}"
            )
        for i in range(len(layers) - 1):
            if layers[i].output_size != layers[i + 1].input_size:
                raise NetworkShapeIncompatibilityError(
                    f"Layer {i} output size ({layers[i].output_size}) does not match "
                    f"layer {i + 1} input size ({layers[i + 1].input_size})"
                )

        last_index = len(layers) - 1
        for i, layer in enumerate(layers):
            if layer.is_output_layer != (i == last_index):
                raise ValueError(
                    f"Layer {i}: only the last layer may be (and must be) the output layer, "
                    f"got is_output_layer={layer.is_output_layer}"
                )
            if layer.is_attached:
                raise ValueError(f"Layer {i} already belongs to a network.")
        if len({id(layer) for layer in layers}) != len(layers):
            raise ValueError("The same layer instance appears more than once.")

        self.input_type = input_type
        self.layers: List[DenseLayer] = layers
        for i, layer in enumerate(self.layers):
            layer.build(self, i)

        logging.info(f"Created neural network with architecture: {self.layer_sizes}")
        logging.info(f"Layer activations: {[l.activation_fn.__class__.__name__ for l in self.layers]}")

    @classmethod
    def from_layer_sizes(
        cls,
        layer_sizes: List[int],
        activations: Optional[Union[List[str], List[Activation]]] = None,
        initial_layer_weights: Optional[List[np.ndarray]] = None,  # List of (input_size, output_size) arrays
        initial_layer_biases: Optional[List[np.ndarray]] = None,   # List of (1, output_size) arrays
    ) -> 'Network':
        """
        Builds a network of dense layers from a list of sizes.

        Args:
            layer_sizes: Sizes starting with the input dimension and ending with
                         the output dimension. Example: [2, 4, 1].
            activations: One activation per layer (len(layer_sizes) - 1). Defaults
                         to 'sigmoid' everywhere.
            initial_layer_weights: Optional fixed weights for each layer.
            initial_layer_biases: Optional fixed biases for each layer.
        """
        if len(layer_sizes) < 2:
            raise ValueError("Network must have at least an input and an output layer size.")

        num_layers = len(layer_sizes) - 1

        if activations is None:
            activations = ['sigmoid'] * num_layers
        elif len(activations) != num_layers:
            raise ValueError(f"Number of activation functions ({len(activations)}) must match "
                             f"number of layers ({num_layers}).")

        if initial_layer_weights is not None and len(initial_layer_weights) != num_layers:
            raise ValueError(f"Length of initial_layer_weights ({len(initial_layer_weights)}) "
                             f"must match number of layers ({num_layers}).")
        if initial_layer_biases is not None and len(initial_layer_biases) != num_layers:
            raise ValueError(f"Length of initial_layer_biases ({len(initial_layer_biases)}) "
                             f"must match number of layers ({num_layers}).")

        layers = []
        for i in range(num_layers):
            layers.append(DenseLayer(
                input_size      = layer_sizes[i],
                output_size     = layer_sizes[i + 1],
                activation      = activations[i],
                is_output_layer = (i == num_layers - 1),
                initial_weights = initial_layer_weights[i] if initial_layer_weights else None,
                initial_bias    = initial_layer_biases[i] if initial_layer_biases else None,
            ))
        return cls(layer_sizes[0], layers)

    @property
    def layer_sizes(self) -> List[int]:
        return [self.input_type.input_size] + [l.output_size for l in self.layers]

    @property
    def output_layer(self) -> DenseLayer:
        return self.layers[-1]

    def __len__(self) -> int:
        return len(self.layers)

    def __getitem__(self, index: int) -> DenseLayer:
        return self.layers[index]

    def __iter__(self) -> Iterator[DenseLayer]:
        return iter(self.layers)

    def init(self, initializer: Union[str, Initializer, None] = None):
        """
        Initializes the parameters of every layer.

        A single initializer is shared by all layers, so a seeded initializer
        makes the whole network reproducible.

        Args:
            initializer: An Initializer, an initializer name ('uniform', 'xavier'),
                         or None for UniformInitializer over [0, 1).
        """
        if initializer is None:
            initializer = UniformInitializer()
        elif isinstance(initializer, str):
            initializer = get_initializer(initializer)

        for layer in self.layers:
            layer.init(initializer)
        logging.debug(f"Initialized {len(self.layers)} layers with {initializer!r}")

    # --- Neighbor queries used by the layers during backward ---

    def _layer_at(self, index: int) -> DenseLayer:
        if not 0 <= index < len(self.layers):
            raise IndexError(f"Network has no layer at index {index} (it has {len(self.layers)} layers)")
        return self.layers[index]

    def weights_of(self, index: int) -> np.ndarray:
        """Returns the (read-only) weights of the layer at `index`."""
        return self._layer_at(index).weights

    def output_of(self, index: int) -> np.ndarray:
        """Returns the (read-only) last forward output of the layer at `index`."""
        return self._layer_at(index).output

    def phase_of(self, index: int) -> LayerPhase:
        return self._layer_at(index).phase

    def generation_of(self, index: int) -> int:
        """Returns how many forward passes the layer at `index` has run."""
        return self._layer_at(index).generation

    # --- Passes ---

    def forward(self, inputs: np.ndarray) -> np.ndarray:
        """
        Performs a forward pass through all layers of the network.

        Args:
            inputs: Input data matrix of shape (batch_size, input_dim).

        Returns:
            Network output matrix of shape (batch_size, output_dim).
        """
        current_output = inputs
        for i, layer in enumerate(self.layers):
            current_output = layer.forward(current_output)
            logging.debug(f"Forward pass - Layer {i} output shape: {current_output.shape}")
        return current_output

    def backward(self, output_error: np.ndarray, l2_lambda: float = 0.0) -> np.ndarray:
        """
        Performs a backward pass (backpropagation) through all layers in reverse order.

        Args:
            output_error: Delta of the output layer, i.e. the error with respect to
                          its affine output (see `clear_dense.losses`).
            l2_lambda: L2 regularization strength.

        Returns:
            The delta of the first layer.
        """
        current_delta = output_error
        for layer in reversed(self.layers):
            current_delta = layer.backward(current_delta, regularization_strength=l2_lambda)
            logging.debug(f"Backward pass - Layer {layer.index} delta shape: {current_delta.shape}")
        return current_delta

    def update(self, learning_rate: float):
        """Updates the parameters of all layers using the gradients of the last backward pass."""
        for layer in self.layers:
            layer.update(learning_rate)

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        Generates predictions for the input data X.

        This is a regular forward pass: it overwrites the cached outputs and
        starts a new step for every layer.

        Args:
            X: Input data (num_samples, input_dim) or a single sample (input_dim,).

        Returns:
            Network predictions (num_samples, output_dim).
        """
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        elif X.ndim != 2:
            raise ValueError(f"Input X must be a 1D or 2D array, got {X.ndim}D.")
        return self.forward(X)

    def summary(self) -> str:
        """
        Generates a text summary of the network architecture and parameters.

        Returns:
            A string containing the network summary.
        """
        summary_str = "\n" + "="*50 + "\n"
        summary_str += "Neural Network Summary\n"
        summary_str += "="*50 + "\n"
        summary_str += f"Input: {self.input_type!r}\n"
        summary_str += "-"*50 + "\n"
        total_params = 0
        for layer in self.layers:
            total_params += layer.num_parameters
            summary_str += f"Layer {layer.index}: {layer.__class__.__name__}\n"
            summary_str += f"  Input Shape: ({layer.input_size},)\n"
            summary_str += f"  Output Shape: ({layer.output_size},)\n"
            summary_str += f"  Activation: {layer.activation_fn.__class__.__name__}\n"
            summary_str += f"  Output Layer: {layer.is_output_layer}\n"
            summary_str += f"  Phase: {layer.phase.value}\n"
            summary_str += f"  Parameters: {layer.num_parameters}\n"
            summary_str += "-"*50 + "\n"

        summary_str += f"Total Parameters: {total_params}\n"
        summary_str += "="*50 + "\n"
        return summary_str

    def __repr__(self):
        return f"Network(layer_sizes={self.layer_sizes})"
