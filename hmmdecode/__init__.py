from importlib.metadata import version

__version__ = version("hmmdecode")
del version

from hmmdecode.emissions import (
    Emission,
    GaussianEmission,
    GaussianMixtureEmission,
    obs_log_likelihoods,
)
from hmmdecode.errors import (
    DimensionMismatch,
    EmptyObservationSequence,
    HMMDecodeError,
    InvalidModel,
    PersistenceError,
)
from hmmdecode.model import HiddenMarkovModel, build_model, validate_model
from hmmdecode.observations import normalize_observations
from hmmdecode.predict import predict
from hmmdecode.sink import ListSink, ResultSink, emit, text_file_sink
from hmmdecode.viterbi import ViterbiResult, sequence_log_prob, viterbi
