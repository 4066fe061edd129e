"""Gaussian mixture log densities."""

import jax
import jax.numpy as jnp
from jax import vmap

from hmmdecodelib.stats import multivariate_normal
from hmmdecodelib.types import Array, ArrayLike


def component_logpdfs(x: ArrayLike, means: ArrayLike, chol_covs: ArrayLike) -> Array:
    """Log densities of `x` under each Gaussian component.

    Args:
        x: Value at which to evaluate the densities, shape (d,).
        means: Component means of shape (K, d).
        chol_covs: Component Cholesky factors with leading dimension K,
            i.e. shape (K,), (K, d) or (K, d, d).

    Returns:
        Array of shape (K,) with the per-component log densities.
    """
    x = jnp.asarray(x)
    return vmap(lambda m, c: multivariate_normal.logpdf(x, m, c))(
        jnp.asarray(means), jnp.asarray(chol_covs)
    )


def logpdf(
    x: ArrayLike, weights: ArrayLike, means: ArrayLike, chol_covs: ArrayLike
) -> Array:
    r"""Gaussian mixture log density
    $\log \sum_k w_k \mathcal{N}(x \mid \mu_k, L_k L_k^\top)$.

    Components with zero weight contribute $-\infty$ inside the logsumexp
    and are therefore ignored.

    Args:
        x: Value at which to evaluate the density, shape (d,).
        weights: Mixture weights of shape (K,), summing to one.
        means: Component means of shape (K, d).
        chol_covs: Component Cholesky factors with leading dimension K.

    Returns:
        Scalar array with the log density.
    """
    log_weights = jnp.log(jnp.asarray(weights))
    return jax.nn.logsumexp(log_weights + component_logpdfs(x, means, chol_covs))
