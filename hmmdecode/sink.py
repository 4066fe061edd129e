"""Hand-off of decoded state sequences to their destination."""

import logging
import os
import warnings
from typing import Protocol

import numpy as np

from hmmdecode.errors import PersistenceError
from hmmdecodelib.types import ArrayLike, IntArray

logger = logging.getLogger(__name__)


class ResultSink(Protocol):
    def __call__(self, states: IntArray) -> None:
        """Store a decoded state sequence.

        Args:
            states: Integer array of shape (T,).
        """
        ...


class ListSink:
    """Keeps every emitted sequence in memory."""

    def __init__(self):
        self.sequences: list[np.ndarray] = []

    def __call__(self, states: IntArray) -> None:
        self.sequences.append(np.asarray(states))


def text_file_sink(path: str | os.PathLike) -> ResultSink:
    """Sink writing one unsigned state index per line to `path`."""

    def sink(states: IntArray) -> None:
        np.savetxt(path, np.asarray(states, dtype=np.uint64), fmt="%d")
        logger.info("Saved %d predicted states to %s", np.size(states), path)

    return sink


def emit(states: ArrayLike, sink: ResultSink | None = None) -> ArrayLike:
    """Passes the decoded states to `sink` and returns them unchanged.

    Without a sink a warning is issued and nothing is stored.

    Args:
        states: The decoded state sequence.
        sink: Destination of the sequence.

    Returns:
        `states`.

    Raises:
        PersistenceError: If the sink fails. The decode itself has already
            succeeded at this point.
    """
    if sink is None:
        warnings.warn("No result sink given; no results will be saved")
        return states

    try:
        sink(states)
    except Exception as e:
        raise PersistenceError(f"Failed to save predicted state sequence: {e}") from e
    return states
