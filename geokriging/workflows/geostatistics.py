"""Unified geostatistical workflow interface.

Provides a points-plus-values interface over the solvers:
- Kriging estimation (Simple, Ordinary, Universal, External Drift)
- Exact or neighbor-restricted estimation
- Sequential Gaussian simulation for uncertainty quantification
"""

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Sequence, Union

import numpy as np

from geokriging.objects.geotable import GeoTable
from geokriging.objects.grid import RegularGrid
from geokriging.objects.pointset import PointSet
from geokriging.objects.problem import EstimationProblem, SimulationProblem
from geokriging.primitives.neighborhoods import Neighborhood
from geokriging.primitives.variogram import VariogramModel
from geokriging.tasks.krigingtask import Kriging, KrigingParams
from geokriging.tasks.simulationtask import SeqGaussSim, SeqGaussSimParams
from geokriging.utils.errors import raise_configuration_error, raise_parameter_error

logger = logging.getLogger(__name__)

_VARIABLE = "value"


@dataclass
class GeostatisticalResult:
    """Results from a geostatistical estimation workflow.

    Attributes:
        estimates: Kriging mean at target locations (NaN where unestimated).
        variance: Kriging variance (prediction uncertainty).
        variogram_model: Variogram model used.
        realizations: Simulation realizations (n_realizations, n_targets),
            if simulation was requested.
    """

    estimates: np.ndarray
    variance: np.ndarray
    variogram_model: Optional[VariogramModel] = None
    realizations: Optional[np.ndarray] = None

    def __repr__(self) -> str:
        """String representation."""
        n_reals = 0 if self.realizations is None else len(self.realizations)
        return (
            f"GeostatisticalResult(n_estimates={len(self.estimates)}, "
            f"mean={np.nanmean(self.estimates):.2f}, n_realizations={n_reals})"
        )


class GeostatisticalModel:
    """Unified interface for geostatistical modeling workflows.

    Handles the workflow from scattered samples to estimates:
    1. Kriging variant selection
    2. Kriging estimation (exact or with a bounded neighborhood)
    3. Sequential Gaussian simulation (optional)

    Example:
        >>> from geokriging import PointSet, RegularGrid, VariogramModel
        >>> from geokriging.workflows.geostatistics import GeostatisticalModel
        >>>
        >>> model = GeostatisticalModel(
        ...     data=pointset,
        ...     values=grades,
        ...     kriging_type="ordinary",
        ...     variogram_model=VariogramModel("spherical", sill=2.0,
        ...                                    range_param=50.0),
        ...     max_neighbors=16,
        ... )
        >>> results = model.estimate(RegularGrid((100, 100)))
    """

    def __init__(
        self,
        data: Union[PointSet, np.ndarray],
        values: np.ndarray,
        kriging_type: Literal["ordinary", "simple", "universal", "external_drift"] = "ordinary",
        variogram_model: Optional[VariogramModel] = None,
        mean: Optional[float] = None,
        degree: int = 1,
        drifts: Optional[Sequence[Callable]] = None,
        neighborhood: Optional[Neighborhood] = None,
        min_neighbors: int = 1,
        max_neighbors: Optional[int] = None,
        n_realizations: int = 0,
        random_seed: Optional[int] = None,
        n_jobs: int = 1,
    ):
        """Initialize geostatistical model.

        Args:
            data: PointSet or coordinate array with sample locations.
            values: Sample values (n_samples,); NaN marks missing samples.
            kriging_type: 'ordinary', 'simple', 'universal' or 'external_drift'.
            variogram_model: Variogram model (default: unit Gaussian).
            mean: Known mean for Simple Kriging (default: sample mean).
            degree: Polynomial degree for Universal Kriging.
            drifts: Drift functions for External Drift Kriging.
            neighborhood: Search neighborhood (only with max_neighbors).
            min_neighbors: Minimum number of neighbors per estimate.
            max_neighbors: Neighbors per estimate; None uses all samples.
            n_realizations: Number of SGS realizations (0 = no simulation).
            random_seed: Random seed for reproducible simulation.
            n_jobs: Worker threads.
        """
        if not isinstance(data, PointSet):
            data = PointSet(coordinates=data)
        self.data = data
        self.values = np.asarray(values)
        self.kriging_type = kriging_type
        self.variogram_model = variogram_model or VariogramModel()
        self.mean = mean
        self.degree = degree
        self.drifts = drifts
        self.neighborhood = neighborhood
        self.min_neighbors = min_neighbors
        self.max_neighbors = max_neighbors
        self.n_realizations = n_realizations
        self.random_seed = random_seed
        self.n_jobs = n_jobs

    def _variant_options(self) -> dict:
        """Translate ``kriging_type`` into solver options."""
        if self.kriging_type == "ordinary":
            return {}
        if self.kriging_type == "simple":
            mean = self.mean
            if mean is None:
                mean = float(np.nanmean(self.values))
            return {"mean": mean}
        if self.kriging_type == "universal":
            return {"degree": self.degree}
        if self.kriging_type == "external_drift":
            if not self.drifts:
                raise_configuration_error(
                    "drifts",
                    self.drifts,
                    constraint="external_drift kriging needs at least one drift function",
                    suggestion="Pass drifts=[...] or use kriging_type='ordinary'",
                )
            return {"drifts": self.drifts}
        raise_parameter_error(
            "kriging_type",
            self.kriging_type,
            valid_values=["ordinary", "simple", "universal", "external_drift"],
        )

    def estimate(
        self, query_points: Union[PointSet, RegularGrid, np.ndarray]
    ) -> GeostatisticalResult:
        """Estimate values at target locations.

        Args:
            query_points: PointSet, RegularGrid or coordinate array of targets.

        Returns:
            GeostatisticalResult with estimates, variance and, when
            ``n_realizations > 0``, simulated realizations.
        """
        if not isinstance(query_points, (PointSet, RegularGrid)):
            query_points = PointSet(coordinates=query_points)

        table = GeoTable(points=self.data, data={_VARIABLE: self.values})
        options = self._variant_options()

        kriging = Kriging(
            {
                _VARIABLE: KrigingParams(
                    variogram=self.variogram_model,
                    min_neighbors=self.min_neighbors,
                    max_neighbors=self.max_neighbors,
                    neighborhood=self.neighborhood,
                    **options,
                )
            }
        )
        estimation = kriging.solve(
            EstimationProblem(data=table, domain=query_points, variables=_VARIABLE),
            n_jobs=self.n_jobs,
        )
        estimates, variance = estimation[_VARIABLE]

        realizations = None
        if self.n_realizations > 0:
            logger.info(f"Drawing {self.n_realizations} SGS realizations")
            sim_params = SeqGaussSimParams(
                variogram=self.variogram_model,
                neighborhood=self.neighborhood,
                min_neighbors=self.min_neighbors,
                max_neighbors=max(self.max_neighbors or 10, self.min_neighbors),
                **options,
            )
            simulation = SeqGaussSim({_VARIABLE: sim_params}).solve(
                SimulationProblem(
                    domain=query_points,
                    variables=_VARIABLE,
                    n_realizations=self.n_realizations,
                    data=table,
                ),
                random_seed=self.random_seed,
                n_jobs=self.n_jobs,
            )
            realizations = np.vstack(simulation[_VARIABLE])

        return GeostatisticalResult(
            estimates=estimates,
            variance=variance,
            variogram_model=self.variogram_model,
            realizations=realizations,
        )
