import numpy as np
from typing import Dict, List, Optional
import logging
import time

from .errors import ShapeMismatchError
from .losses import compute_loss, get_loss
from .network import Network


class Trainer:
    """
    Plain gradient-descent training driver for a Network.

    Each step runs the forward pass, turns predictions and targets into the
    output-layer delta, runs the backward pass and applies the update to every
    layer.

    Args:
        network: An initialized Network.
        loss_type: 'mse' or 'binary_cross_entropy'.
        learning_rate: Step size of the update rule.
        l2_lambda: L2 regularization strength passed to every layer's backward().
    """

    def __init__(
        self,
        network: Network,
        loss_type: str = "binary_cross_entropy",
        learning_rate: float = 0.1,
        l2_lambda: float = 0.0,
    ):
        if learning_rate <= 0.0:
            raise ValueError(f"Learning rate must be positive, got {learning_rate}")
        if l2_lambda < 0.0:
            raise ValueError(f"L2 lambda must be non-negative, got {l2_lambda}")
        get_loss(loss_type)  # fail early on unknown loss names

        self.network = network
        self.loss_type = loss_type
        self.learning_rate = learning_rate
        self.l2_lambda = l2_lambda

        # Training history tracking
        self.training_history: Dict[str, List] = {
            'epoch': [],
            'loss': [],
            'time_per_epoch': [],
        }

    def _targets(self, y: np.ndarray) -> np.ndarray:
        y = np.asarray(y, dtype=float)
        if y.ndim == 1:
            output_size = self.network.output_layer.output_size
            if y.size % output_size != 0:
                raise ShapeMismatchError(
                    f"Flat targets of length {y.size} cannot be arranged into rows of "
                    f"{output_size} outputs."
                )
            y = y.reshape(-1, output_size)
        return y

    def train_batch(self, X_batch: np.ndarray, y_batch: np.ndarray) -> float:
        """
        Trains the network on a single batch of data.

        Performs forward pass, loss calculation, backward pass, and parameter update.

        Args:
            X_batch: Input data for the batch (batch_size, input_dim).
            y_batch: Target values for the batch (batch_size, output_dim).

        Returns:
            The loss for this batch, computed before the update.
        """
        y_batch = self._targets(y_batch)

        outputs = self.network.forward(X_batch)
        loss, output_error = compute_loss(
            outputs, y_batch, self.network.output_layer.activation_fn, loss_type=self.loss_type
        )
        self.network.backward(output_error, l2_lambda=self.l2_lambda)
        self.network.update(self.learning_rate)
        return loss

    def fit(
        self,
        X: np.ndarray,
        y: np.ndarray,
        epochs: int = 1000,
        batch_size: Optional[int] = None,
        shuffle: bool = False,
        seed: Optional[int] = None,
        log_every: int = 100,
    ) -> Dict[str, List]:
        """
        Trains the network for a fixed number of epochs.

        Args:
            X: Training input data (num_samples, input_dim).
            y: Training target data (num_samples, output_dim).
            epochs: Number of training epochs.
            batch_size: Size of mini-batches. None trains on the full set each step.
                        The last batch of an epoch may be smaller.
            shuffle: Whether to shuffle the training data before each epoch.
            seed: Seed for the shuffling generator.
            log_every: Log progress every `log_every` epochs.

        Returns:
            The training history (epoch, loss, time_per_epoch).
        """
        X = np.asarray(X, dtype=float)
        y = self._targets(y)
        num_samples = X.shape[0]

        if y.shape[0] != num_samples:
            raise ShapeMismatchError(
                f"Number of samples in X ({num_samples}) and y ({y.shape[0]}) must match."
            )
        if num_samples == 0:
            raise ValueError("Cannot train on an empty dataset.")
        if epochs <= 0:
            raise ValueError(f"Number of epochs must be positive, got {epochs}")

        if batch_size is None:
            batch_size = num_samples
        elif batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")
        elif batch_size > num_samples:
            logging.warning(f"Batch size ({batch_size}) is larger than training set size ({num_samples}). "
                            f"Setting batch size to {num_samples}.")
            batch_size = num_samples

        rng = np.random.default_rng(seed)
        logging.info(f"Training on {num_samples} samples for {epochs} epochs, batch size {batch_size}.")

        # --- Training Loop ---
        for epoch in range(epochs):
            epoch_start_time = time.time()
            epoch_loss = 0.0

            if shuffle:
                indices = rng.permutation(num_samples)
                X, y = X[indices], y[indices]

            for start_idx in range(0, num_samples, batch_size):
                X_batch = X[start_idx:start_idx + batch_size]
                y_batch = y[start_idx:start_idx + batch_size]
                batch_loss = self.train_batch(X_batch, y_batch)
                # Weight loss by batch size for accurate epoch average
                epoch_loss += batch_loss * len(X_batch)

            epoch_loss /= num_samples
            epoch_time = time.time() - epoch_start_time

            self.training_history['epoch'].append(epoch)
            self.training_history['loss'].append(epoch_loss)
            self.training_history['time_per_epoch'].append(epoch_time)

            if log_every and (epoch % log_every == 0 or epoch == epochs - 1):
                logging.info(f"Epoch {epoch+1}/{epochs} - loss: {epoch_loss:.5f} - time: {epoch_time:.2f}s")

        logging.info("Training finished.")
        return self.training_history

    def evaluate(self, X: np.ndarray, y: np.ndarray) -> Dict[str, float]:
        """
        Evaluates the network on the given data.

        Returns:
            A dictionary with 'loss', plus 'accuracy' (threshold 0.5) for
            binary cross-entropy.
        """
        y = self._targets(y)
        predictions = self.network.predict(X)
        loss, _ = compute_loss(
            predictions, y, self.network.output_layer.activation_fn, loss_type=self.loss_type
        )

        eval_metrics = {'loss': loss}
        if self.loss_type == "binary_cross_entropy":
            pred_labels = (predictions > 0.5).astype(int)
            true_labels = y.astype(int)
            eval_metrics['accuracy'] = float(np.mean(pred_labels == true_labels))
        return eval_metrics
