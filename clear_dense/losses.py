"""
Loss functions and the output-layer error they feed into backpropagation.

The output layer's ``backward`` uses its signal as its delta unchanged, so the
signal must already be the gradient with respect to the output layer's affine
output (dL/dZ). Each loss here returns that value: the derivative of the loss
with respect to the predictions, chained through the output activation.

Gradients are summed over the batch (no 1/N factor); the learning rate absorbs
the batch scale. The reported loss values are averaged over samples.
"""
import numpy as np
from typing import Callable, Dict, Tuple
import logging

from .activations import Activation, Sigmoid
from .errors import ShapeMismatchError

LossFunctionType = Callable[[np.ndarray, np.ndarray, Activation], Tuple[float, np.ndarray]]

_EPSILON = 1e-15


def _check_shapes(loss_name: str, outputs: np.ndarray, targets: np.ndarray):
    if outputs.shape != targets.shape:
        raise ShapeMismatchError(
            f"{loss_name}: Output shape {outputs.shape} must match target shape {targets.shape}"
        )


def mse_loss(outputs: np.ndarray, targets: np.ndarray, activation: Activation) -> Tuple[float, np.ndarray]:
    """
    Computes Mean Squared Error and the output-layer delta.

    Loss  = (1/N) * Σ(output - target)^2
    Delta = (output - target) * f'(z), the gradient of 0.5 * Σ(output - target)^2
            with respect to the output layer's affine output.

    The reported value and the delta use different scales: the loss is
    averaged over the N * output_dim elements, while the delta belongs to the
    summed, halved objective. So the delta is N * output_dim / 2 times the
    gradient of the reported value. Both objectives share the same minimizer;
    the learning rate absorbs the difference.

    Args:
        outputs: Predicted values (batch_size, output_dim).
        targets: True values (batch_size, output_dim).
        activation: Activation of the output layer.

    Returns:
        Tuple of (mse_value, delta).
    """
    _check_shapes("MSE Loss", outputs, targets)
    if outputs.shape[0] == 0:
        return 0.0, np.zeros_like(outputs)

    error = outputs - targets
    loss = np.mean(error ** 2)
    delta = error * activation.backward(outputs)
    return float(loss), delta


def binary_cross_entropy_loss(outputs: np.ndarray, targets: np.ndarray, activation: Activation) -> Tuple[float, np.ndarray]:
    """
    Computes Binary Cross-Entropy and the output-layer delta.

    Loss = - (1/N) * Σ_samples [ target * log(output) + (1 - target) * log(1 - output) ]

    With a Sigmoid output the chain rule collapses to Delta = output - target,
    which is returned directly. For any other activation the delta is
    dL/dOutput * f'(z) with dL/dOutput = -target/output + (1 - target)/(1 - output).

    Args:
        outputs: Predicted probabilities (batch_size, num_outputs).
        targets: True labels (0 or 1) (batch_size, num_outputs).
        activation: Activation of the output layer.

    Returns:
        Tuple of (bce_value, delta).
    """
    _check_shapes("BCE Loss", outputs, targets)
    num_samples = outputs.shape[0]
    if num_samples == 0:
        return 0.0, np.zeros_like(outputs)

    # Clip outputs to avoid log(0) or division by zero in gradient
    outputs_clipped = np.clip(outputs, _EPSILON, 1.0 - _EPSILON)

    term1 = targets * np.log(outputs_clipped)
    term2 = (1 - targets) * np.log(1 - outputs_clipped)
    loss = -np.sum(term1 + term2) / num_samples

    if isinstance(activation, Sigmoid):
        delta = outputs - targets
    else:
        grad_outputs = -targets / outputs_clipped + (1 - targets) / (1 - outputs_clipped)
        delta = grad_outputs * activation.backward(outputs)

    return float(loss), delta


# Dictionary mapping loss_type strings to loss functions
LOSS_FUNCTIONS: Dict[str, LossFunctionType] = {
    "mse": mse_loss,
    "binary_cross_entropy": binary_cross_entropy_loss,
}


def get_loss(loss_type: str) -> LossFunctionType:
    """Returns the loss function registered under `loss_type`."""
    if loss_type not in LOSS_FUNCTIONS:
        raise ValueError(f"Unsupported loss_type '{loss_type}'. "
                         f"Valid options: {list(LOSS_FUNCTIONS.keys())}")
    return LOSS_FUNCTIONS[loss_type]


def compute_loss(outputs: np.ndarray, targets: np.ndarray, activation: Activation,
                 loss_type: str = "mse") -> Tuple[float, np.ndarray]:
    """
    Computes the loss and the output-layer delta for `loss_type`.

    Non-finite values are reported but passed through unchanged.
    """
    loss, delta = get_loss(loss_type)(outputs, targets, activation)
    if not np.isfinite(loss):
        logging.warning(f"Non-finite loss detected (loss_type: {loss_type}): {loss}")
    if not np.all(np.isfinite(delta)):
        logging.warning(f"Non-finite values in output error (loss_type: {loss_type})")
    return loss, delta
