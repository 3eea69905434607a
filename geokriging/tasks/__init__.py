"""Layer 3: Tasks - User intent translation.

Tasks translate user intent (per-variable solver options) into estimator
selection, neighbor searchers and primitive calls over whole problems.
Tasks must not do file I/O or plotting.
"""

from geokriging.tasks.krigingtask import (
    Kriging,
    KrigingParams,
    Preprocessed,
    solve_approx,
    solve_exact,
)
from geokriging.tasks.simulationtask import (
    SeqGaussSim,
    SeqGaussSimParams,
    SimPreprocessed,
)

__all__ = [
    "Kriging",
    "KrigingParams",
    "Preprocessed",
    "SeqGaussSim",
    "SeqGaussSimParams",
    "SimPreprocessed",
    "solve_approx",
    "solve_exact",
]
