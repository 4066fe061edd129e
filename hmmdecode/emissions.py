"""Emission densities attached to the hidden states of an HMM.

The supported densities form a closed set of `NamedTuple` variants, each
implementing the `Emission` protocol. Being `NamedTuple`s they are also JAX
pytrees and can be passed straight through `jax.jit`.
"""

from typing import NamedTuple, Protocol, Sequence, runtime_checkable

import jax.numpy as jnp
import numpy as np
from jax import vmap

from hmmdecodelib.stats import mixture, multivariate_normal
from hmmdecodelib.types import Array, ArrayLike, ScalarArray


@runtime_checkable
class Emission(Protocol):
    """Protocol for the per-state emission density."""

    @property
    def dimensionality(self) -> int:
        """Number of features of a single observation vector."""
        ...

    def log_likelihood(self, x: ArrayLike) -> ScalarArray:
        r"""Evaluate the emission log density.

        Args:
            x: Observation vector of shape (d,).

        Returns:
            Scalar array $\log p(y_t = x \mid x_t = s)$ for this state $s$.
        """
        ...


def _chol_from_cov(cov: ArrayLike) -> Array:
    cov = jnp.asarray(cov)
    if cov.ndim < 2:
        return jnp.sqrt(cov)
    return jnp.linalg.cholesky(cov)


class GaussianEmission(NamedTuple):
    """Single Gaussian emission density.

    Attributes:
        mean: Array of shape (d,).
        chol_cov: Generalized Cholesky factor of the covariance, either a
            scalar standard deviation, a vector of shape (d,) of standard
            deviations or a lower triangular matrix of shape (d, d).
    """

    mean: Array
    chol_cov: Array

    @classmethod
    def from_cov(cls, mean: ArrayLike, cov: ArrayLike) -> "GaussianEmission":
        """Builds the emission from a covariance (matrix, diagonal or scalar variance)."""
        return cls(jnp.atleast_1d(jnp.asarray(mean)), _chol_from_cov(cov))

    @property
    def dimensionality(self) -> int:
        return np.shape(self.mean)[-1]

    def log_likelihood(self, x: ArrayLike) -> ScalarArray:
        return multivariate_normal.logpdf(x, self.mean, self.chol_cov)


class GaussianMixtureEmission(NamedTuple):
    """Gaussian mixture emission density with K components.

    Attributes:
        weights: Mixture weights of shape (K,).
        means: Component means of shape (K, d).
        chol_covs: Component Cholesky factors with leading dimension K,
            see `GaussianEmission` for the accepted trailing shapes.
    """

    weights: Array
    means: Array
    chol_covs: Array

    @classmethod
    def from_covs(
        cls, weights: ArrayLike, means: ArrayLike, covs: ArrayLike
    ) -> "GaussianMixtureEmission":
        """Builds the emission from per-component covariances.

        `covs` has shape (K,) for scalar variances, (K, d) for diagonal
        covariances or (K, d, d) for full covariance matrices. Means of
        shape (K,) describe a 1-dimensional mixture.
        """
        means = jnp.asarray(means)
        if means.ndim == 1:
            means = means[:, None]
        covs = jnp.asarray(covs)
        if covs.ndim == 3:
            chol_covs = vmap(jnp.linalg.cholesky)(covs)
        else:
            chol_covs = jnp.sqrt(covs)
        return cls(jnp.asarray(weights), means, chol_covs)

    @property
    def dimensionality(self) -> int:
        return np.shape(self.means)[-1]

    def log_likelihood(self, x: ArrayLike) -> ScalarArray:
        return mixture.logpdf(x, self.weights, self.means, self.chol_covs)


def obs_log_likelihoods(emissions: Sequence[Emission], observations: ArrayLike) -> Array:
    """Evaluates every emission density at every time step.

    Args:
        emissions: The N per-state emission densities.
        observations: Array of shape (T, d), one observation vector per row.

    Returns:
        Array of shape (T, N) with entry [t, s] = log p(y_t | x_t = s).
    """
    observations = jnp.asarray(observations)
    return jnp.stack(
        [vmap(emission.log_likelihood)(observations) for emission in emissions],
        axis=-1,
    )
