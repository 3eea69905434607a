"""Layer 2: Primitives - Algorithm interfaces and pure operations.

This layer defines algorithm interfaces and pure operations. It can import
numpy and scipy, and optionally numba for compiled kernels. No file I/O or
plotting.
"""

from geokriging.primitives.kriging import (
    ExternalDriftKriging,
    Factorization,
    FittedKriging,
    KrigingEstimator,
    KrigingResult,
    KrigingWeights,
    OrdinaryKriging,
    SimpleKriging,
    UniversalKriging,
    build_lhs,
    cholesky_factorization,
    fit_kriging,
    lu_factorization,
    polynomial_exponents,
    predict,
    select_estimator,
    weights,
)
from geokriging.primitives.neighborhoods import (
    BallNeighborhood,
    BoundedSearcher,
    KBallSearcher,
    NearestNeighborSearcher,
    NeighborSearcher,
    Neighborhood,
    RectangularNeighborhood,
    make_searcher,
)
from geokriging.primitives.simulation import (
    ConditioningArena,
    LinearPath,
    RandomPath,
    get_path,
    sequential_gaussian_simulation,
    simulate_realization,
)
from geokriging.primitives.variogram import (
    VARIOGRAM_MODELS,
    VariogramModel,
    predict_variogram,
)

__all__ = [
    # Kriging
    "ExternalDriftKriging",
    "Factorization",
    "FittedKriging",
    "KrigingEstimator",
    "KrigingResult",
    "KrigingWeights",
    "OrdinaryKriging",
    "SimpleKriging",
    "UniversalKriging",
    "build_lhs",
    "cholesky_factorization",
    "fit_kriging",
    "lu_factorization",
    "polynomial_exponents",
    "predict",
    "select_estimator",
    "weights",
    # Neighborhoods
    "BallNeighborhood",
    "BoundedSearcher",
    "KBallSearcher",
    "NearestNeighborSearcher",
    "NeighborSearcher",
    "Neighborhood",
    "RectangularNeighborhood",
    "make_searcher",
    # Simulation
    "ConditioningArena",
    "LinearPath",
    "RandomPath",
    "get_path",
    "sequential_gaussian_simulation",
    "simulate_realization",
    # Variogram
    "VARIOGRAM_MODELS",
    "VariogramModel",
    "predict_variogram",
]
