import numpy as np
import pytest

from clear_dense import (
    LayerPhase,
    Network,
    ShapeMismatchError,
    Trainer,
    UniformInitializer,
    XavierInitializer,
)


def train_xor(X, y, seed):
    network = Network.from_layer_sizes([2, 4, 1], activations=['tanh', 'sigmoid'])
    network.init(XavierInitializer(seed=seed))
    trainer = Trainer(network, loss_type='binary_cross_entropy', learning_rate=0.25)
    history = trainer.fit(X, y, epochs=8000, log_every=0)
    return network, trainer, history


def test_xor_converges(xor_data):
    X, y = xor_data
    network, trainer, history = train_xor(X, y, seed=0)
    predictions = network.predict(X)
    assert np.mean((predictions - y) ** 2) < 0.01
    assert history['loss'][-1] < history['loss'][0]
    assert trainer.evaluate(X, y)['accuracy'] == 1.0


def test_train_batch_lowers_loss(fixed_network):
    x = np.array([[1.0, 0.5, -1.0], [0.0, 1.0, 0.5]])
    y = np.array([[1.0], [0.0]])
    trainer = Trainer(fixed_network, loss_type='mse', learning_rate=0.5)
    losses = [trainer.train_batch(x, y) for _ in range(50)]
    assert losses[-1] < losses[0]
    assert all(layer.phase is LayerPhase.AWAITING_FORWARD for layer in fixed_network)


def test_train_batch_accepts_flat_targets(fixed_network):
    trainer = Trainer(fixed_network, loss_type='mse')
    loss = trainer.train_batch(np.array([[1.0, 0.5, -1.0], [0.0, 1.0, 0.5]]), np.array([1.0, 0.0]))
    assert np.isfinite(loss)


def test_flat_targets_must_fill_whole_rows():
    network = Network.from_layer_sizes([3, 2])
    network.init(UniformInitializer(seed=0))
    trainer = Trainer(network, loss_type='mse')
    with pytest.raises(ShapeMismatchError, match="length 3"):
        trainer.train_batch(np.ones((1, 3)), np.array([1.0, 0.0, 1.0]))
    with pytest.raises(ShapeMismatchError):
        trainer.fit(np.ones((2, 3)), np.array([1.0, 0.0, 1.0]), epochs=1, log_every=0)
    assert all(layer.phase is LayerPhase.AWAITING_FORWARD for layer in network)


def test_fit_history_and_minibatches():
    network = Network.from_layer_sizes([3, 4, 1])
    network.init(UniformInitializer(low=-0.5, high=0.5, seed=4))
    trainer = Trainer(network, loss_type='mse', learning_rate=0.1)
    rng = np.random.default_rng(0)
    X = rng.normal(size=(5, 3))
    y = rng.uniform(size=(5, 1))

    history = trainer.fit(X, y, epochs=7, batch_size=2, shuffle=True, seed=3, log_every=0)

    assert history['epoch'] == list(range(7))
    assert len(history['loss']) == 7
    assert len(history['time_per_epoch']) == 7
    # The last mini-batch of each epoch holds the remaining sample
    assert network[0].last_input.shape == (1, 3)


def test_fit_is_reproducible_with_seed():
    def run():
        network = Network.from_layer_sizes([2, 3, 1])
        network.init(UniformInitializer(low=-1.0, high=1.0, seed=11))
        X = np.array([[0.0, 1.0], [1.0, 0.0], [1.0, 1.0], [0.5, 0.5]])
        y = np.array([[1.0], [1.0], [0.0], [0.5]])
        Trainer(network, learning_rate=0.2).fit(X, y, epochs=20, batch_size=2,
                                                shuffle=True, seed=5, log_every=0)
        return [np.array(layer.weights) for layer in network]

    for a, b in zip(run(), run()):
        np.testing.assert_array_equal(a, b)


def test_fit_validation(fixed_network):
    trainer = Trainer(fixed_network)
    X = np.ones((3, 3))
    with pytest.raises(ShapeMismatchError):
        trainer.fit(X, np.ones((2, 1)), epochs=1)
    with pytest.raises(ValueError):
        trainer.fit(X, np.ones((3, 1)), epochs=0)
    with pytest.raises(ValueError):
        trainer.fit(X, np.ones((3, 1)), epochs=1, batch_size=0)


def test_trainer_validation(fixed_network):
    with pytest.raises(ValueError):
        Trainer(fixed_network, learning_rate=0.0)
    with pytest.raises(ValueError):
        Trainer(fixed_network, l2_lambda=-1.0)
    with pytest.raises(ValueError):
        Trainer(fixed_network, loss_type='hinge')


def test_regularization_shrinks_weights(xor_data):
    X, y = xor_data

    def weight_norm(l2_lambda):
        network = Network.from_layer_sizes([2, 4, 1], activations=['tanh', 'sigmoid'])
        network.init(XavierInitializer(seed=0))
        Trainer(network, learning_rate=0.1, l2_lambda=l2_lambda).fit(X, y, epochs=200, log_every=0)
        return sum(np.sum(np.array(layer.weights) ** 2) for layer in network)

    assert weight_norm(0.5) < weight_norm(0.0)


def test_evaluate_mse_has_no_accuracy(fixed_network):
    trainer = Trainer(fixed_network, loss_type='mse')
    metrics = trainer.evaluate(np.ones((2, 3)), np.zeros((2, 1)))
    assert set(metrics) == {'loss'}
