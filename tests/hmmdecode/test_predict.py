import chex
import jax
import jax.numpy as jnp
import pytest

import hmmdecode
from hmmdecode import (
    DimensionMismatch,
    EmptyObservationSequence,
    GaussianEmission,
    InvalidModel,
    ListSink,
    PersistenceError,
    build_model,
    predict,
)


@pytest.fixture(scope="module", autouse=True)
def config():
    jax.config.update("jax_enable_x64", True)
    yield
    jax.config.update("jax_enable_x64", False)


@pytest.fixture
def model():
    return build_model(
        jnp.array([0.6, 0.4]),
        jnp.array([[0.7, 0.3], [0.4, 0.6]]),
        [
            GaussianEmission.from_cov(0.0, 1.0),
            GaussianEmission.from_cov(5.0, 1.0),
        ],
    )


@pytest.mark.parametrize(
    "observations",
    [
        jnp.array([[0.1, 4.9, 0.2]]),
        jnp.array([[0.1], [4.9], [0.2]]),
        jnp.array([0.1, 4.9, 0.2]),
    ],
)
def test_predict_toy_example(model, observations):
    sink = ListSink()
    states = predict(model, observations, sink=sink)

    chex.assert_trees_all_equal(states, jnp.array([0, 1, 0]))
    chex.assert_trees_all_equal(sink.sequences[0], jnp.array([0, 1, 0]))


def test_predict_without_sink_still_decodes(model):
    with pytest.warns(UserWarning):
        states = predict(model, jnp.array([[0.1, 4.9, 0.2]]))
    chex.assert_trees_all_equal(states, jnp.array([0, 1, 0]))


def test_predict_multidimensional_mismatch():
    model = build_model(
        jnp.array([1.0]),
        jnp.array([[1.0]]),
        [GaussianEmission.from_cov(jnp.zeros(2), jnp.ones(2))],
    )
    with pytest.raises(DimensionMismatch):
        predict(model, jnp.zeros((5, 1)), sink=ListSink())


def test_predict_empty(model):
    with pytest.raises(EmptyObservationSequence):
        predict(model, jnp.zeros((1, 0)), sink=ListSink())


def test_predict_invalid_model(model):
    broken = model._replace(trans_matrix=jnp.array([[0.7, 0.3], [0.2, 0.3]]))
    with pytest.raises(InvalidModel):
        predict(broken, jnp.array([[0.1, 4.9, 0.2]]), sink=ListSink())


def test_predict_sink_failure_after_decoding(model):
    decoded = []

    def failing_sink(states):
        decoded.append(states)
        raise OSError("disk full")

    with pytest.raises(PersistenceError, match="disk full"):
        predict(model, jnp.array([[0.1, 4.9, 0.2]]), sink=failing_sink)
    chex.assert_trees_all_equal(decoded[0], jnp.array([0, 1, 0]))


def test_version():
    assert isinstance(hmmdecode.__version__, str)


def test_predict_custom_tolerance(model):
    loose = model._replace(init_dist=jnp.array([0.6, 0.4 + 1e-4]))
    observations = jnp.array([[0.1, 4.9, 0.2]])

    with pytest.raises(InvalidModel):
        predict(loose, observations, sink=ListSink())

    states = predict(loose, observations, sink=ListSink(), atol=1e-3)
    chex.assert_trees_all_equal(states, jnp.array([0, 1, 0]))
    assert states.dtype == jnp.uint32
