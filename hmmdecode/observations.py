import logging

import jax.numpy as jnp

from hmmdecode.errors import DimensionMismatch
from hmmdecodelib.types import Array, ArrayLike

logger = logging.getLogger(__name__)


def normalize_observations(observations: ArrayLike, expected_dim: int) -> Array:
    """Validates the orientation of an observation matrix.

    Observations are laid out with one column per time step and one row per
    feature. A matrix with a single column given to a 1-dimensional model is
    read as a column vector of T scalar observations and transposed into a
    (1, T) row. No other orientation is corrected, in particular a single
    row is never transposed.

    Args:
        observations: Array of shape (d, T), or (T, 1) for 1-dimensional
            observations. A 1-D array of length T is read as a single row.
        expected_dim: Dimensionality d of the emission densities.

    Returns:
        Array of shape (expected_dim, T).

    Raises:
        DimensionMismatch: If the (corrected) number of rows differs from
            `expected_dim` or the input has more than two dimensions.
    """
    observations = jnp.asarray(observations)
    if observations.ndim < 2:
        observations = jnp.atleast_2d(observations)
    elif observations.ndim > 2:
        raise DimensionMismatch(observations.shape[0], expected_dim)

    logger.debug(
        "Observation matrix has shape %s, expected dimensionality %d",
        observations.shape,
        expected_dim,
    )

    if observations.shape[1] == 1 and expected_dim == 1:
        logger.info("Data sequence appears to be transposed; correcting.")
        observations = observations.T

    if observations.shape[0] != expected_dim:
        raise DimensionMismatch(observations.shape[0], expected_dim)

    return observations
