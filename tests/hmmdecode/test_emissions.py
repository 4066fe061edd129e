import chex
import jax
import jax.numpy as jnp
import pytest
from jax.scipy.stats import multivariate_normal as jax_mvn
from jax.scipy.stats import norm as jax_norm

from hmmdecode.emissions import (
    Emission,
    GaussianEmission,
    GaussianMixtureEmission,
    obs_log_likelihoods,
)


@pytest.fixture(scope="module", autouse=True)
def config():
    jax.config.update("jax_enable_x64", True)
    yield
    jax.config.update("jax_enable_x64", False)


def test_gaussian_from_scalar_variance():
    emission = GaussianEmission.from_cov(5.0, 4.0)

    assert isinstance(emission, Emission)
    assert emission.dimensionality == 1
    chex.assert_trees_all_close(
        emission.log_likelihood(jnp.array([4.0])), jax_norm.logpdf(4.0, 5.0, 2.0)
    )


@pytest.mark.parametrize(
    "cov",
    [
        [[2.0, 0.3], [0.3, 1.0]],
        [2.0, 1.0],
    ],
)
def test_gaussian_from_cov(cov):
    cov = jnp.asarray(cov)
    mean = jnp.array([1.0, -1.0])
    x = jnp.array([0.2, 0.4])
    emission = GaussianEmission.from_cov(mean, cov)

    full_cov = cov if cov.ndim == 2 else jnp.diag(cov)
    assert emission.dimensionality == 2
    chex.assert_trees_all_close(
        emission.log_likelihood(x), jax_mvn.logpdf(x, mean, full_cov), rtol=1e-10
    )


def test_mixture_from_covs():
    weights = jnp.array([0.3, 0.7])
    means = jnp.array([[0.0, 0.0], [2.0, 1.0]])
    covs = jnp.array([jnp.eye(2), jnp.array([[1.0, 0.5], [0.5, 2.0]])])
    x = jnp.array([1.0, 1.0])
    emission = GaussianMixtureEmission.from_covs(weights, means, covs)

    des = jnp.log(
        weights[0] * jax_mvn.pdf(x, means[0], covs[0])
        + weights[1] * jax_mvn.pdf(x, means[1], covs[1])
    )
    assert isinstance(emission, Emission)
    assert emission.dimensionality == 2
    chex.assert_trees_all_close(emission.log_likelihood(x), des, rtol=1e-10)


def test_mixture_from_diag_covs():
    emission = GaussianMixtureEmission.from_covs(
        jnp.array([1.0]), jnp.array([[0.0, 0.0]]), jnp.array([[4.0, 9.0]])
    )
    single = GaussianEmission(jnp.zeros(2), jnp.array([2.0, 3.0]))
    x = jnp.array([1.0, 2.0])
    chex.assert_trees_all_close(
        emission.log_likelihood(x), single.log_likelihood(x), rtol=1e-10
    )


def test_obs_log_likelihoods():
    emissions = [
        GaussianEmission.from_cov(0.0, 1.0),
        GaussianEmission.from_cov(5.0, 1.0),
    ]
    observations = jnp.array([[0.1], [4.9], [0.2]])

    lls = obs_log_likelihoods(emissions, observations)

    assert lls.shape == (3, 2)
    des = jnp.stack(
        [
            jax_norm.logpdf(observations[:, 0], 0.0, 1.0),
            jax_norm.logpdf(observations[:, 0], 5.0, 1.0),
        ],
        axis=-1,
    )
    chex.assert_trees_all_close(lls, des, rtol=1e-10)


def test_emissions_are_pytrees():
    emission = GaussianEmission.from_cov(jnp.zeros(2), jnp.ones(2))
    lls = jax.jit(lambda e, x: e.log_likelihood(x))(emission, jnp.zeros(2))
    chex.assert_trees_all_close(lls, emission.log_likelihood(jnp.zeros(2)))


def test_mixture_from_one_dimensional_means():
    weights = jnp.array([0.5, 0.5])
    emission = GaussianMixtureEmission.from_covs(
        weights, jnp.array([-10.0, 10.0]), jnp.ones(2)
    )
    x = jnp.array([9.0])

    des = jnp.log(
        weights[0] * jax_norm.pdf(9.0, -10.0, 1.0)
        + weights[1] * jax_norm.pdf(9.0, 10.0, 1.0)
    )
    assert emission.means.shape == (2, 1)
    assert emission.dimensionality == 1
    chex.assert_trees_all_close(emission.log_likelihood(x), des, rtol=1e-10)
