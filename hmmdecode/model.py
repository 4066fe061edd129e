"""Container for a trained continuous-emission hidden Markov model."""

import logging
from typing import NamedTuple, Sequence

import jax.numpy as jnp
import numpy as np

from hmmdecode.emissions import Emission
from hmmdecode.errors import InvalidModel
from hmmdecodelib.types import Array, ArrayLike

logger = logging.getLogger(__name__)

DEFAULT_ATOL = 1e-6


class HiddenMarkovModel(NamedTuple):
    r"""A trained HMM, borrowed read-only by the decoder.

    Attributes:
        init_dist: Array $m$ of shape (N,) with $m_i = p(x_0 = i)$.
        trans_matrix: Array $A$ of shape (N, N) with
            $A_{ij} = p(x_t = j \mid x_{t-1} = i)$.
        emissions: Tuple of N emission densities, one per state.
    """

    init_dist: Array
    trans_matrix: Array
    emissions: tuple[Emission, ...]

    @classmethod
    def from_log_probs(
        cls,
        log_init_dist: ArrayLike,
        log_trans_matrix: ArrayLike,
        emissions: Sequence[Emission],
    ) -> "HiddenMarkovModel":
        """Builds a model whose initial and transition probabilities are given as logarithms."""
        return cls(
            jnp.exp(jnp.asarray(log_init_dist)),
            jnp.exp(jnp.asarray(log_trans_matrix)),
            tuple(emissions),
        )

    @property
    def num_states(self) -> int:
        return len(self.emissions)

    @property
    def dimensionality(self) -> int:
        """Dimensionality expected by the emissions (taken from the first state)."""
        return self.emissions[0].dimensionality


def build_model(
    init_dist: ArrayLike,
    trans_matrix: ArrayLike,
    emissions: Sequence[Emission],
    atol: float = DEFAULT_ATOL,
) -> HiddenMarkovModel:
    """Builds and validates a `HiddenMarkovModel`.

    Args:
        init_dist: Initial state probabilities of shape (N,).
        trans_matrix: Transition probabilities of shape (N, N), rows index
            the state transitioned from.
        emissions: The N per-state emission densities.
        atol: Absolute tolerance for the probabilities summing to one.

    Returns:
        The validated model.

    Raises:
        InvalidModel: If the parameters violate any invariant checked by
            `validate_model`.
    """
    model = HiddenMarkovModel(
        jnp.asarray(init_dist), jnp.asarray(trans_matrix), tuple(emissions)
    )
    validate_model(model, atol=atol)
    return model


def validate_model(model: HiddenMarkovModel, atol: float = DEFAULT_ATOL) -> None:
    """Checks the structural invariants of an HMM.

    Zero probabilities are valid. The checks are done eagerly on concrete
    values and must not be called inside `jax.jit`.

    Args:
        model: The model to check.
        atol: Absolute tolerance for the probabilities summing to one.

    Raises:
        InvalidModel: If there are no states, the shapes are inconsistent,
            a probability is negative or not finite, a row of the transition
            matrix or the initial distribution does not sum to one, or the
            emissions disagree on their dimensionality.
    """
    num_states = len(model.emissions)
    if num_states == 0:
        raise InvalidModel("HMM must have at least one state")

    init_dist = np.asarray(model.init_dist, dtype=np.float64)
    trans_matrix = np.asarray(model.trans_matrix, dtype=np.float64)

    if init_dist.shape != (num_states,):
        raise InvalidModel(
            f"Initial distribution must have shape ({num_states},), "
            f"got {init_dist.shape}"
        )
    if trans_matrix.shape != (num_states, num_states):
        raise InvalidModel(
            f"Transition matrix must have shape ({num_states}, {num_states}), "
            f"got {trans_matrix.shape}"
        )

    for name, probs in (("initial", init_dist), ("transition", trans_matrix)):
        if not np.all(np.isfinite(probs)):
            raise InvalidModel(f"{name.capitalize()} probabilities must be finite")
        if np.any(probs < 0):
            raise InvalidModel(f"{name.capitalize()} probabilities must be non-negative")

    if not np.isclose(init_dist.sum(), 1.0, rtol=0.0, atol=atol):
        raise InvalidModel(
            f"Initial distribution sums to {init_dist.sum()}, expected 1"
        )

    row_sums = trans_matrix.sum(axis=-1)
    bad_rows = np.flatnonzero(~np.isclose(row_sums, 1.0, rtol=0.0, atol=atol))
    if bad_rows.size:
        row = int(bad_rows[0])
        raise InvalidModel(
            f"Transition matrix row {row} sums to {row_sums[row]}, expected 1"
        )

    for i, emission in enumerate(model.emissions):
        if not isinstance(emission, Emission):
            raise InvalidModel(
                f"Emission {i} of type {type(emission).__name__} does not "
                "provide log_likelihood and dimensionality"
            )

    dims = {emission.dimensionality for emission in model.emissions}
    if len(dims) != 1:
        raise InvalidModel(f"Emissions disagree on dimensionality: {sorted(dims)}")

    logger.debug(
        "Validated HMM with %d states and dimensionality %d",
        num_states,
        dims.pop(),
    )
