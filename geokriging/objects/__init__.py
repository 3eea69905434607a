"""Layer 1: Objects - Immutable data representations.

This layer contains only data structures. Only standard library + numpy +
pandas. No linear algebra and no neighbor search live here.
"""

from geokriging.objects.geotable import GeoTable
from geokriging.objects.grid import RegularGrid
from geokriging.objects.pointset import PointSet
from geokriging.objects.problem import (
    Domain,
    EstimationProblem,
    EstimationSolution,
    SimulationProblem,
    SimulationSolution,
)

__all__ = [
    "Domain",
    "EstimationProblem",
    "EstimationSolution",
    "GeoTable",
    "PointSet",
    "RegularGrid",
    "SimulationProblem",
    "SimulationSolution",
]
