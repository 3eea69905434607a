"""geokriging: Kriging estimation and sequential Gaussian simulation.

Layered package:
- objects: point sets, grids, data tables, problems and solutions
- primitives: variograms, kriging systems, neighbor search, SGS
- tasks: the Kriging and SeqGaussSim solvers
- workflows: points-plus-values facade
"""

from geokriging.objects import (
    EstimationProblem,
    EstimationSolution,
    GeoTable,
    PointSet,
    RegularGrid,
    SimulationProblem,
    SimulationSolution,
)
from geokriging.primitives import (
    BallNeighborhood,
    ExternalDriftKriging,
    OrdinaryKriging,
    RectangularNeighborhood,
    SimpleKriging,
    UniversalKriging,
    VariogramModel,
    fit_kriging,
    select_estimator,
)
from geokriging.tasks import Kriging, KrigingParams, SeqGaussSim, SeqGaussSimParams
from geokriging.utils.errors import (
    ConfigurationError,
    DataValidationError,
    GeoKrigingError,
    ParameterError,
)
from geokriging.workflows import GeostatisticalModel, GeostatisticalResult

__version__ = "0.1.0"

__all__ = [
    "BallNeighborhood",
    "ConfigurationError",
    "DataValidationError",
    "EstimationProblem",
    "EstimationSolution",
    "ExternalDriftKriging",
    "GeoKrigingError",
    "GeoTable",
    "GeostatisticalModel",
    "GeostatisticalResult",
    "Kriging",
    "KrigingParams",
    "OrdinaryKriging",
    "ParameterError",
    "PointSet",
    "RectangularNeighborhood",
    "RegularGrid",
    "SeqGaussSim",
    "SeqGaussSimParams",
    "SimpleKriging",
    "SimulationProblem",
    "SimulationSolution",
    "UniversalKriging",
    "VariogramModel",
    "fit_kriging",
    "select_estimator",
]
