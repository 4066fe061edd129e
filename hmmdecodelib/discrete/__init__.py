from hmmdecodelib.discrete.viterbi import (
    ViterbiTrellis,
    backtrack,
    decode,
    forward_pass,
    path_log_prob,
    viterbi_step,
)
