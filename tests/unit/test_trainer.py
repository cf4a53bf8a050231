import numpy as np
import pytest

from xornet.core.activations import sigmoid, xavier_limit
from xornet.core.errors import (
    InitializationOrderError,
    InvalidConfigurationError,
    ShapeMismatchError,
    UninitializedSourceError,
)
from xornet.core.rng import RandomSource
from xornet.data import XOR_SAMPLES
from xornet.training.losses import REGISTRY, bce_with_logits
from xornet.training.trainer import (
    Trainer,
    XorNetwork,
    forward,
    sample_loss_and_gradients,
)


def _trainer(seed=3, hidden=3, lr=0.5, **kwargs):
    trainer = Trainer(hidden_size=hidden, lr=lr, **kwargs)
    trainer.initialize(seed)
    return trainer


def _mean_loss(params):
    losses = [bce_with_logits(forward(params, s.inputs).logit, s.target) for s in XOR_SAMPLES]
    return float(np.mean(losses))


def _mean_gradients(params):
    loss_fn = REGISTRY.resolve("bcewithlogits")
    grads = [sample_loss_and_gradients(params, s, loss_fn)[1] for s in XOR_SAMPLES]
    return {
        "hidden.weights": np.mean([g.hidden.weights for g in grads], axis=0),
        "hidden.biases": np.mean([g.hidden.biases for g in grads], axis=0),
        "output.weights": np.mean([g.output.weights for g in grads], axis=0),
        "output.biases": np.mean([g.output.biases for g in grads], axis=0),
    }


def test_initial_parameters_follow_xavier_bounds():
    trainer = _trainer(seed=11, hidden=5)
    params = trainer.current_parameters()
    assert params.hidden.weights.shape == (5, 2)
    assert params.output.weights.shape == (1, 5)
    assert np.array_equal(params.hidden.biases, np.zeros(5))
    assert np.array_equal(params.output.biases, np.zeros(1))
    assert np.all(np.abs(params.hidden.weights) <= xavier_limit(2, 5))
    assert np.all(np.abs(params.output.weights) <= xavier_limit(5, 1))


def test_output_init_modes_pick_their_bounds():
    assert XorNetwork(hidden_size=4).init_bounds() == (xavier_limit(2, 4), xavier_limit(4, 1))
    legacy = XorNetwork(hidden_size=4, output_init="hidden")
    assert legacy.init_bounds() == (xavier_limit(2, 4), xavier_limit(2, 4))
    with pytest.raises(InvalidConfigurationError):
        XorNetwork(hidden_size=4, output_init="fan_avg")


def test_gradient_check_against_central_differences():
    params = _trainer(seed=21, hidden=3).current_parameters()
    analytic = _mean_gradients(params)
    h = 1e-6
    for name, grad in analytic.items():
        layer, attr = name.split(".")
        for index in np.ndindex(grad.shape):
            plus, minus = params.copy(), params.copy()
            getattr(getattr(plus, layer), attr)[index] += h
            getattr(getattr(minus, layer), attr)[index] -= h
            numeric = (_mean_loss(plus) - _mean_loss(minus)) / (2 * h)
            assert abs(numeric - grad[index]) < 1e-4, (name, index)


def test_train_epoch_applies_mean_gradient_step():
    trainer = _trainer(seed=8, hidden=4, lr=0.25)
    before = trainer.current_parameters()
    expected_loss = _mean_loss(before)
    grads = _mean_gradients(before)

    result = trainer.train_epoch()
    after = trainer.current_parameters()

    assert result.epoch == 1
    assert result.mean_loss == pytest.approx(expected_loss)
    assert np.allclose(after.hidden.weights, before.hidden.weights - 0.25 * grads["hidden.weights"])
    assert np.allclose(after.hidden.biases, before.hidden.biases - 0.25 * grads["hidden.biases"])
    assert np.allclose(after.output.weights, before.output.weights - 0.25 * grads["output.weights"])
    assert np.allclose(after.output.biases, before.output.biases - 0.25 * grads["output.biases"])


def test_epoch_predictions_follow_dataset_order():
    trainer = _trainer()
    result = trainer.train_epoch()
    assert [tuple(p.inputs) for p in result.predictions] == [(0, 0), (1, 0), (0, 1), (1, 1)]
    assert [p.target for p in result.predictions] == [0.0, 1.0, 1.0, 0.0]
    for pred in result.predictions:
        assert pred.probability == pytest.approx(sigmoid(pred.logit))


def test_best_loss_tracks_strict_improvements():
    trainer = _trainer(seed=2)
    first = trainer.train_epoch()
    assert trainer.best_loss == first.mean_loss
    assert trainer.best_loss_epoch == 1
    losses = [first.mean_loss] + [trainer.train_epoch().mean_loss for _ in range(49)]
    assert trainer.best_loss == min(losses)
    assert trainer.best_loss_epoch == int(np.argmin(losses)) + 1


def test_initialize_is_idempotent_but_refuses_reseed():
    trainer = _trainer(seed=5)
    params = trainer.current_parameters()
    trainer.initialize(5)
    assert np.array_equal(trainer.current_parameters().hidden.weights, params.hidden.weights)
    with pytest.raises(InitializationOrderError):
        trainer.initialize(6)


def test_initialize_rejects_source_seeded_elsewhere():
    source = RandomSource()
    source.init(3)
    trainer = Trainer(hidden_size=2, lr=0.5, source=source)
    with pytest.raises(InitializationOrderError):
        trainer.initialize(5)
    assert trainer.model.params is None

    matching = RandomSource()
    matching.init(5)
    trainer = Trainer(hidden_size=2, lr=0.5, source=matching)
    trainer.initialize(5)
    trainer.initialize(5)
    with pytest.raises(InitializationOrderError):
        trainer.initialize(3)


def test_negative_seed_initializes_reproducibly():
    a, b = _trainer(seed=-7), _trainer(seed=-7)
    assert a.source.seed == -7
    assert np.array_equal(a.current_parameters().hidden.weights, b.current_parameters().hidden.weights)


def test_engine_requires_initialize_first():
    trainer = Trainer(hidden_size=2, lr=0.1)
    with pytest.raises(UninitializedSourceError):
        trainer.train_epoch()
    with pytest.raises(UninitializedSourceError):
        trainer.predict([0.0, 1.0])


def test_predict_rejects_wrong_input_size():
    trainer = _trainer()
    with pytest.raises(ShapeMismatchError):
        trainer.predict([1.0, 0.0, 1.0])


def test_predict_does_not_touch_parameters():
    trainer = _trainer()
    before = trainer.current_parameters()
    trainer.predict([1.0, 1.0])
    assert np.array_equal(before.hidden.weights, trainer.current_parameters().hidden.weights)
    assert trainer.epoch == 0


def test_snapshot_is_detached_from_engine_state():
    trainer = _trainer()
    snapshot = trainer.current_parameters()
    snapshot.hidden.weights[:] = 0.0
    assert not np.allclose(trainer.current_parameters().hidden.weights, 0.0)


@pytest.mark.parametrize(
    "kwargs",
    [{"hidden_size": 0, "lr": 0.5}, {"hidden_size": 4, "lr": 0.0}, {"hidden_size": 4, "lr": -1.0}],
)
def test_invalid_hyperparameters_are_rejected(kwargs):
    with pytest.raises(InvalidConfigurationError):
        Trainer(**kwargs)


def test_fit_rejects_non_positive_epochs():
    trainer = _trainer()
    with pytest.raises(InvalidConfigurationError):
        trainer.fit(0)
    with pytest.raises(InvalidConfigurationError):
        trainer.fit(0.5)
    assert trainer.epoch == 0


def test_same_seed_reproduces_training():
    a, b = _trainer(seed=99), _trainer(seed=99)
    a.fit(25)
    b.fit(25)
    pa, pb = a.current_parameters(), b.current_parameters()
    assert np.array_equal(pa.hidden.weights, pb.hidden.weights)
    assert np.array_equal(pa.output.weights, pb.output.weights)
    assert a.best_loss == b.best_loss
