from hmmdecode.model import DEFAULT_ATOL, HiddenMarkovModel, validate_model
from hmmdecode.observations import normalize_observations
from hmmdecode.sink import ResultSink, emit
from hmmdecode.viterbi import decode_validated
from hmmdecodelib.types import ArrayLike, IntArray


def predict(
    model: HiddenMarkovModel,
    observations: ArrayLike,
    sink: ResultSink | None = None,
    atol: float = DEFAULT_ATOL,
) -> IntArray:
    """Predicts the most probable hidden state sequence of some observations.

    Runs the full pipeline: the observation matrix is oriented against the
    model dimensionality, decoded with the Viterbi algorithm and the
    resulting states are handed to `sink`. The model is validated once,
    before the observations are oriented.

    Args:
        model: The trained HMM.
        observations: Array of shape (d, T), one column per time step, or
            (T, 1) for a 1-dimensional model.
        sink: Optional destination of the predicted states. Decoding runs
            regardless, without a sink the states are only returned.
        atol: Absolute tolerance for the model probabilities summing to one.

    Returns:
        Unsigned integer array of shape (T,) with the predicted states.

    Raises:
        InvalidModel: If the model is malformed.
        DimensionMismatch: If no supported orientation of the observations
            matches the model dimensionality.
        EmptyObservationSequence: If there are no time steps.
        PersistenceError: If the sink fails to store the states.
    """
    validate_model(model, atol=atol)
    observations = normalize_observations(observations, model.dimensionality)
    result = decode_validated(model, observations)
    return emit(result.states, sink)
