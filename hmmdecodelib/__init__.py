from hmmdecodelib import discrete, stats, types
