from hmmdecodelib.stats import mixture, multivariate_normal
