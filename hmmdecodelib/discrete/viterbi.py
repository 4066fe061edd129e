"""Implements log-space Viterbi decoding for discrete-state HMMs.

All functions are pure and can be wrapped in `jax.jit`. Probabilities enter
as logarithms, so zero probabilities are represented by `-inf` and simply
make the corresponding paths unreachable.

Ties are broken towards the lowest state index, `jnp.argmax` returns the
first maximal entry.
"""

from typing import NamedTuple

import jax.numpy as jnp
from jax import lax

from hmmdecodelib.types import Array, ArrayLike, IntArray, ScalarArray


class ViterbiTrellis(NamedTuple):
    """Best-path scores and predecessor indices for every (time, state) cell.

    Attributes:
        log_probs: Array of shape (T, N), the log probability of the best
            path ending in state s at time t.
        backpointers: Integer array of shape (T, N), the predecessor state of
            that best path. Row 0 has no predecessor and is filled with zeros.
    """

    log_probs: Array
    backpointers: IntArray


def viterbi_step(
    prev_log_probs: ArrayLike, log_trans: ArrayLike, obs_lls: ArrayLike
) -> tuple[Array, IntArray]:
    r"""Single max-product recursion step.

    $\delta_t(s) = \max_p [\delta_{t-1}(p) + \log A_{ps}] + \log b_s(y_t)$

    Args:
        prev_log_probs: Array of shape (N,), the best-path log probabilities
            at time t - 1.
        log_trans: Array of shape (N, N) with
            log_trans[i, j] = log p(x_t = j | x_{t-1} = i).
        obs_lls: Array of shape (N,) with obs_lls[i] = log p(y_t | x_t = i).

    Returns:
        The best-path log probabilities at time t and the argmax predecessor
            of every state, both of shape (N,).
    """
    prev_log_probs = jnp.asarray(prev_log_probs)
    scores = prev_log_probs[:, None] + jnp.asarray(log_trans)
    backpointers = jnp.argmax(scores, axis=0)
    log_probs = jnp.max(scores, axis=0) + jnp.asarray(obs_lls)
    return log_probs, backpointers


def forward_pass(
    log_init: ArrayLike, log_trans: ArrayLike, obs_lls: ArrayLike
) -> ViterbiTrellis:
    """Fills the Viterbi trellis.

    Args:
        log_init: Array of shape (N,) with log_init[i] = log p(x_0 = i).
        log_trans: Array of shape (N, N) with
            log_trans[i, j] = log p(x_t = j | x_{t-1} = i).
        obs_lls: Array of shape (T, N) with
            obs_lls[t, i] = log p(y_t | x_t = i). T must be at least 1.

    Returns:
        The trellis with arrays of shape (T, N).
    """
    log_init, log_trans, obs_lls = (
        jnp.asarray(log_init),
        jnp.asarray(log_trans),
        jnp.asarray(obs_lls),
    )
    init_log_probs = log_init + obs_lls[0]

    def body(prev_log_probs, lls):
        log_probs, backpointers = viterbi_step(prev_log_probs, log_trans, lls)
        return log_probs, (log_probs, backpointers)

    _, (log_probs, backpointers) = lax.scan(body, init_log_probs, obs_lls[1:])

    log_probs = jnp.concatenate([init_log_probs[None], log_probs])
    backpointers = jnp.concatenate(
        [jnp.zeros((1, log_init.shape[0]), dtype=backpointers.dtype), backpointers]
    )
    return ViterbiTrellis(log_probs, backpointers)


def backtrack(trellis: ViterbiTrellis) -> tuple[IntArray, ScalarArray]:
    """Reconstructs the most probable state path from a filled trellis.

    Args:
        trellis: Output of `forward_pass`.

    Returns:
        The states of shape (T,) in chronological order and the log
            probability of that path.
    """
    final_state = jnp.argmax(trellis.log_probs[-1])
    log_prob = trellis.log_probs[-1, final_state]

    def body(state, backpointers):
        prev_state = backpointers[state]
        return prev_state, prev_state

    # Walks t = T-1, ..., 1; output i holds the state at time i
    _, prev_states = lax.scan(
        body, final_state, trellis.backpointers[1:], reverse=True
    )
    states = jnp.concatenate([prev_states, final_state[None]])
    return states, log_prob


def decode(
    log_init: ArrayLike, log_trans: ArrayLike, obs_lls: ArrayLike
) -> tuple[IntArray, ScalarArray]:
    """Most probable state path and its log probability.

    Args:
        log_init: Array of shape (N,), log initial state probabilities.
        log_trans: Array of shape (N, N), log transition probabilities.
        obs_lls: Array of shape (T, N), observation log likelihoods.

    Returns:
        The states of shape (T,) and the joint log probability of the states
            and the observations.
    """
    return backtrack(forward_pass(log_init, log_trans, obs_lls))


def path_log_prob(
    log_init: ArrayLike, log_trans: ArrayLike, obs_lls: ArrayLike, states: ArrayLike
) -> ScalarArray:
    """Joint log probability of a given state path and the observations.

    Args:
        log_init: Array of shape (N,), log initial state probabilities.
        log_trans: Array of shape (N, N), log transition probabilities.
        obs_lls: Array of shape (T, N), observation log likelihoods.
        states: Integer array of shape (T,).

    Returns:
        Sum of the initial, transition and emission log terms along the path.
    """
    log_init, log_trans, obs_lls = (
        jnp.asarray(log_init),
        jnp.asarray(log_trans),
        jnp.asarray(obs_lls),
    )
    states = jnp.asarray(states)
    emission_term = obs_lls[jnp.arange(states.shape[0]), states].sum()
    transition_term = log_trans[states[:-1], states[1:]].sum()
    return log_init[states[0]] + transition_term + emission_term
