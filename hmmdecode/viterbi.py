import logging
from typing import NamedTuple

import jax
import jax.numpy as jnp

from hmmdecode.emissions import obs_log_likelihoods
from hmmdecode.errors import DimensionMismatch, EmptyObservationSequence
from hmmdecode.model import DEFAULT_ATOL, HiddenMarkovModel, validate_model
from hmmdecodelib.discrete import viterbi as discrete_viterbi
from hmmdecodelib.types import ArrayLike, IntArray, ScalarArray

logger = logging.getLogger(__name__)

_decode = jax.jit(discrete_viterbi.decode)

STATE_DTYPE = jnp.uint32


class ViterbiResult(NamedTuple):
    """Most probable state path.

    Attributes:
        states: Unsigned integer array of shape (T,) with values in [0, N).
        log_prob: Joint log probability of `states` and the observations.
    """

    states: IntArray
    log_prob: ScalarArray


def model_log_params(model: HiddenMarkovModel) -> tuple[jax.Array, jax.Array]:
    """Log initial and transition probabilities, zeros map to `-inf`."""
    return jnp.log(jnp.asarray(model.init_dist)), jnp.log(
        jnp.asarray(model.trans_matrix)
    )


def check_observations(observations: ArrayLike, expected_dim: int) -> jax.Array:
    """Checks that the observations form a non-empty (d, T) matrix.

    Raises:
        EmptyObservationSequence: If T is zero.
        DimensionMismatch: If the matrix is not 2-D or d differs from
            `expected_dim`.
    """
    observations = jnp.asarray(observations)
    if observations.ndim != 2:
        raise DimensionMismatch(
            observations.shape[0] if observations.ndim else 0, expected_dim
        )
    if observations.shape[1] == 0:
        raise EmptyObservationSequence()
    if observations.shape[0] != expected_dim:
        raise DimensionMismatch(observations.shape[0], expected_dim)
    return observations


def decode_validated(
    model: HiddenMarkovModel, observations: ArrayLike
) -> ViterbiResult:
    """Decodes observations against a model that already passed `validate_model`.

    Only the observations are checked here, callers which validated the
    model themselves (such as `predict`) use this to avoid a second pass.
    """
    observations = check_observations(observations, model.dimensionality)

    logger.debug(
        "Decoding %d observations with %d states",
        observations.shape[1],
        model.num_states,
    )

    log_init, log_trans = model_log_params(model)
    obs_lls = obs_log_likelihoods(model.emissions, observations.T)
    states, log_prob = _decode(log_init, log_trans, obs_lls)
    return ViterbiResult(states.astype(STATE_DTYPE), log_prob)


def viterbi(
    model: HiddenMarkovModel, observations: ArrayLike, atol: float = DEFAULT_ATOL
) -> ViterbiResult:
    """Computes the most probable hidden state sequence of an HMM.

    All checks happen before any decoding work, an invalid input never
    produces a partial result. Zero initial or transition probabilities are
    valid and only make some paths unreachable.

    Args:
        model: The trained HMM, not modified.
        observations: Array of shape (d, T) with one column per time step,
            already oriented (see `normalize_observations`).
        atol: Absolute tolerance for the model probabilities summing to one.

    Returns:
        The decoded states (dtype `uint32`) and their log probability.

    Raises:
        InvalidModel: If the model is malformed.
        EmptyObservationSequence: If there are no time steps.
        DimensionMismatch: If d does not match the emission dimensionality.
    """
    validate_model(model, atol=atol)
    return decode_validated(model, observations)


def sequence_log_prob(
    model: HiddenMarkovModel,
    observations: ArrayLike,
    states: ArrayLike,
    atol: float = DEFAULT_ATOL,
) -> ScalarArray:
    """Joint log probability of a state sequence and the observations.

    Args:
        model: The trained HMM.
        observations: Array of shape (d, T).
        states: Integer array of shape (T,).
        atol: Absolute tolerance for the model probabilities summing to one.

    Returns:
        Scalar log probability, `-inf` if the path is impossible.
    """
    validate_model(model, atol=atol)
    observations = check_observations(observations, model.dimensionality)
    log_init, log_trans = model_log_params(model)
    obs_lls = obs_log_likelihoods(model.emissions, observations.T)
    return discrete_viterbi.path_log_prob(log_init, log_trans, obs_lls, states)
