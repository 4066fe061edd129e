import numpy as np
from jax import numpy as jnp
from jax.scipy.linalg import solve_triangular

from hmmdecodelib.types import Array, ArrayLike


def _promote(*args: ArrayLike) -> tuple[Array, ...]:
    dtype = jnp.result_type(float, *args)
    return tuple(jnp.asarray(a, dtype=dtype) for a in args)


def logpdf(x: ArrayLike, mean: ArrayLike, chol_cov: ArrayLike) -> Array:
    """Multivariate normal log probability density function
    with (generalized) Cholesky factor of covariance input.

    Counterpart of `jax.scipy.stats.multivariate_normal.logpdf` which takes
    the full covariance matrix as input.

    The Cholesky factor may be given in three forms:
        - a scalar, the standard deviation shared by all dimensions,
        - a vector of shape (d,), per-dimension standard deviations
          (diagonal covariance),
        - a lower triangular matrix of shape (d, d).

    Args:
        x: Value at which to evaluate the density, shape () or (d,).
        mean: Centroid of the distribution, broadcastable to the shape of x.
        chol_cov: Generalized Cholesky factor of the covariance matrix.

    Returns:
        Scalar array with the log density.

    Raises:
        ValueError: If `chol_cov` does not match the dimension of `x`.
    """
    x, mean, chol_cov = _promote(x, mean, chol_cov)

    if not x.shape:
        return -1 / 2 * jnp.square(x - mean) / chol_cov**2 - 1 / 2 * (
            jnp.log(2 * np.pi) + 2 * jnp.log(chol_cov)
        )

    n = x.shape[-1]
    diff = x - jnp.broadcast_to(mean, x.shape)

    if not np.shape(chol_cov):
        return -1 / 2 * jnp.dot(diff, diff) / chol_cov**2 - n / 2 * (
            jnp.log(2 * np.pi) + 2 * jnp.log(chol_cov)
        )
    elif chol_cov.ndim == 1:
        if chol_cov.shape[0] != n:
            raise ValueError("multivariate_normal.logpdf got incompatible shapes")
        y = diff / chol_cov
        return (
            -1 / 2 * jnp.dot(y, y)
            - n / 2 * jnp.log(2 * np.pi)
            - jnp.log(chol_cov).sum()
        )
    else:
        if chol_cov.shape != (n, n):
            raise ValueError("multivariate_normal.logpdf got incompatible shapes")
        y = solve_triangular(chol_cov, diff, lower=True)
        return (
            -1 / 2 * jnp.dot(y, y)
            - n / 2 * jnp.log(2 * np.pi)
            - jnp.log(jnp.abs(jnp.diag(chol_cov))).sum()
        )


def pdf(x: ArrayLike, mean: ArrayLike, chol_cov: ArrayLike) -> Array:
    """Multivariate normal probability density function
    with (generalized) Cholesky factor of covariance input.

    Args:
        x: Value at which to evaluate the density.
        mean: Centroid of the distribution.
        chol_cov: Generalized Cholesky factor of the covariance matrix,
            see `logpdf` for the accepted forms.

    Returns:
        Scalar array with the density.
    """
    return jnp.exp(logpdf(x, mean, chol_cov))
