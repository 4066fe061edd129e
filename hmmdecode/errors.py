"""Exceptions raised by the decoding pipeline.

Decoding errors are raised eagerly, before any trellis is built, and derive
from `ValueError`. Failures of a result sink are reported separately as
`PersistenceError`.
"""


class HMMDecodeError(ValueError):
    """Base class for invalid decoding inputs."""


class DimensionMismatch(HMMDecodeError):
    """Observation dimensionality does not match the emission dimensionality."""

    def __init__(self, observed: int, expected: int):
        self.observed = observed
        self.expected = expected
        super().__init__(
            f"Observation dimensionality ({observed}) does not match HMM "
            f"emission dimensionality ({expected})"
        )


class EmptyObservationSequence(HMMDecodeError):
    """The observation sequence has no time steps."""

    def __init__(self, message: str = "Observation sequence has no time steps"):
        super().__init__(message)


class InvalidModel(HMMDecodeError):
    """The HMM parameters violate a structural invariant."""


class PersistenceError(RuntimeError):
    """A result sink failed to store a decoded state sequence."""
