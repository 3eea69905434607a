"""Kriging estimation solver.

Layer 3: Tasks - User intent translation.

A polyalgorithm solver: for each variable of an EstimationProblem the user
options are resolved once into a kriging variant and a neighbor search
strategy, then every domain location is estimated either from all data
(exact mode, one fit) or from a bounded set of neighbors (approximate mode,
one fit per location).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Sequence, Union

import numpy as np

from geokriging.objects.problem import EstimationProblem, EstimationSolution
from geokriging.primitives.kriging import (
    KrigingEstimator,
    fit_kriging,
    select_estimator,
)
from geokriging.primitives.neighborhoods import (
    NeighborSearcher,
    Neighborhood,
    make_searcher,
)
from geokriging.primitives.variogram import VariogramModel
from geokriging.utils.errors import raise_configuration_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KrigingParams:
    """Per-variable options of the Kriging solver.

    Latter options override former options: ``drifts`` overrides ``degree``
    and ``mean``, ``degree`` overrides ``mean``. With none of them,
    Ordinary Kriging is used.

    Attributes:
        variogram: Variogram model (default: unit Gaussian).
        mean: Simple Kriging mean.
        degree: Universal Kriging polynomial degree.
        drifts: External Drift Kriging drift functions.
        min_neighbors: Fewer neighbors than this leave a location unestimated.
        max_neighbors: Neighbors per location; None uses all data (exact mode).
        neighborhood: Search neighborhood for approximate mode. Without it
            the ``max_neighbors`` nearest data points are used.
        distance_p: Minkowski order of the nearest-neighbor distance.
    """

    variogram: VariogramModel = field(default_factory=VariogramModel)
    mean: Optional[float] = None
    degree: Optional[int] = None
    drifts: Optional[Sequence[Callable]] = None
    min_neighbors: int = 1
    max_neighbors: Optional[int] = None
    neighborhood: Optional[Neighborhood] = None
    distance_p: float = 2.0

    def __post_init__(self) -> None:
        """Validate KrigingParams."""
        if self.min_neighbors < 1:
            raise_configuration_error(
                "min_neighbors", self.min_neighbors, constraint="must be >= 1"
            )
        if self.max_neighbors is not None and self.max_neighbors < self.min_neighbors:
            raise_configuration_error(
                "max_neighbors",
                self.max_neighbors,
                constraint=f"must be >= min_neighbors ({self.min_neighbors})",
            )


@dataclass(frozen=True)
class Preprocessed:
    """Options of one variable, resolved before any location is visited."""

    estimator: KrigingEstimator
    min_neighbors: int
    max_neighbors: Optional[int]
    searcher: Optional[NeighborSearcher]


class _Workspace:
    """Scratch buffers owned by one worker of the approximate loop."""

    def __init__(self, max_neighbors: int, coordinates: np.ndarray, values: np.ndarray):
        self.neighbor_coordinates = np.empty(
            (max_neighbors, coordinates.shape[1]), dtype=coordinates.dtype
        )
        self.neighbor_values = np.empty(max_neighbors, dtype=values.dtype)

    def load(
        self, neighbors: np.ndarray, coordinates: np.ndarray, values: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray]:
        n = len(neighbors)
        np.take(coordinates, neighbors, axis=0, out=self.neighbor_coordinates[:n])
        np.take(values, neighbors, out=self.neighbor_values[:n])
        return self.neighbor_coordinates[:n], self.neighbor_values[:n]


def _as_params(params: Union[KrigingParams, Mapping, None]) -> KrigingParams:
    if params is None:
        return KrigingParams()
    if isinstance(params, KrigingParams):
        return params
    return KrigingParams(**params)


class Kriging:
    """Kriging estimation solver.

    Example:
        >>> from geokriging import Kriging, VariogramModel
        >>> solver = Kriging({
        ...     "grade": {"mean": 1.0},
        ...     "porosity": {
        ...         "degree": 1,
        ...         "variogram": VariogramModel("spherical", range_param=20.0),
        ...         "max_neighbors": 20,
        ...     },
        ... })
        >>> solution = solver.solve(problem)
        >>> mean, variance = solution["grade"]
    """

    def __init__(
        self,
        params: Optional[Mapping[str, Union[KrigingParams, Mapping]]] = None,
    ):
        """Initialize the solver.

        Args:
            params: Options per variable name. Variables of the problem that
                are not listed use the default ``KrigingParams``.
        """
        self.params = {var: _as_params(p) for var, p in (params or {}).items()}

    def preprocess(self, problem: EstimationProblem) -> dict[str, Preprocessed]:
        """Resolve estimator and neighbor searcher for every variable."""
        unknown = set(self.params) - set(problem.variables)
        if unknown:
            raise_configuration_error(
                "params",
                sorted(unknown),
                valid_values=list(problem.variables),
                constraint="options given for variables not in the problem",
            )

        preproc = {}
        for var in problem.variables:
            params = self.params.get(var, KrigingParams())
            estimator = select_estimator(
                params.variogram,
                mean=params.mean,
                degree=params.degree,
                drifts=params.drifts,
                dim=problem.domain.n_dims,
            )

            searcher = None
            if params.max_neighbors is not None:
                coordinates, _ = problem.data.valid(var)
                if len(coordinates) > 0:
                    searcher = make_searcher(
                        coordinates,
                        params.max_neighbors,
                        params.neighborhood,
                        p=params.distance_p,
                    )

            preproc[var] = Preprocessed(
                estimator=estimator,
                min_neighbors=params.min_neighbors,
                max_neighbors=params.max_neighbors,
                searcher=searcher,
            )
        return preproc

    def solve(self, problem: EstimationProblem, n_jobs: int = 1) -> EstimationSolution:
        """Estimate every variable of ``problem`` over its domain.

        Args:
            problem: Estimation problem.
            n_jobs: Worker threads for approximate mode. Exact mode always
                runs on the calling thread.

        Returns:
            EstimationSolution with mean and variance per variable.
        """
        preproc = self.preprocess(problem)

        solution = EstimationSolution(domain=problem.domain)
        for var in problem.variables:
            if preproc[var].max_neighbors is not None:
                mean, variance = solve_approx(problem, var, preproc[var], n_jobs=n_jobs)
            else:
                mean, variance = solve_exact(problem, var, preproc[var])
            solution.mean[var] = mean
            solution.variance[var] = variance
        return solution


def _result_arrays(values: np.ndarray, n_locations: int) -> tuple[np.ndarray, np.ndarray]:
    dtype = np.result_type(values.dtype, np.float32)
    return np.full(n_locations, np.nan, dtype=dtype), np.full(
        n_locations, np.nan, dtype=dtype
    )


def solve_exact(
    problem: EstimationProblem, var: str, preproc: Preprocessed
) -> tuple[np.ndarray, np.ndarray]:
    """Kriging with all valid data points as neighbors.

    One fit, then one solve per location: O(n³ + L·n²).
    """
    coordinates, values = problem.data.valid(var)
    targets = problem.domain.coordinates
    mean, variance = _result_arrays(values, len(targets))

    logger.info(
        f"Exact kriging of '{var}' with {type(preproc.estimator).__name__}: "
        f"{len(values)} data, {len(targets)} locations"
    )

    if len(values) < preproc.min_neighbors:
        logger.warning(
            f"'{var}' has {len(values)} valid data, fewer than "
            f"min_neighbors={preproc.min_neighbors}; leaving it unestimated"
        )
        return mean, variance

    fitted = fit_kriging(preproc.estimator, coordinates, values)
    if not fitted.status:
        logger.warning(
            f"Kriging system of '{var}' is singular; leaving it unestimated"
        )
        return mean, variance

    result = fitted.predict_many(targets)
    mean[:] = result.predictions
    variance[:] = result.variance
    return mean, variance


def _estimate_chunk(
    locations: np.ndarray,
    targets: np.ndarray,
    coordinates: np.ndarray,
    values: np.ndarray,
    preproc: Preprocessed,
    mean: np.ndarray,
    variance: np.ndarray,
) -> tuple[int, int]:
    """Estimate ``locations`` into ``mean``/``variance`` with private buffers.

    Returns:
        Tuple of (locations skipped for too few neighbors, failed fits).
    """
    workspace = _Workspace(preproc.max_neighbors, coordinates, values)
    n_skipped = 0
    n_failed = 0

    for location in locations:
        target = targets[location]
        neighbors = preproc.searcher.search(target)

        if len(neighbors) < preproc.min_neighbors:
            n_skipped += 1
            continue

        neighbor_coordinates, neighbor_values = workspace.load(
            neighbors, coordinates, values
        )
        fitted = fit_kriging(preproc.estimator, neighbor_coordinates, neighbor_values)
        if not fitted.status:
            n_failed += 1
            logger.debug(f"Singular local kriging system at location {location}")
            continue

        mean[location], variance[location] = fitted.predict(target)

    return n_skipped, n_failed


def solve_approx(
    problem: EstimationProblem,
    var: str,
    preproc: Preprocessed,
    n_jobs: int = 1,
) -> tuple[np.ndarray, np.ndarray]:
    """Kriging with a bounded number of neighbors per location.

    Every location gets its own fit: O(L·k³) for k = max_neighbors.
    Locations with fewer than ``min_neighbors`` neighbors, or with a
    singular local system, are left as NaN.
    """
    coordinates, values = problem.data.valid(var)
    values = values.astype(np.result_type(values.dtype, np.float32))
    targets = problem.domain.coordinates
    n_locations = len(targets)
    mean, variance = _result_arrays(values, n_locations)

    logger.info(
        f"Approximate kriging of '{var}' with {type(preproc.estimator).__name__}: "
        f"{len(values)} data, {n_locations} locations, "
        f"max_neighbors={preproc.max_neighbors}"
    )

    if preproc.searcher is None:
        logger.warning(f"'{var}' has no valid data; leaving it unestimated")
        return mean, variance

    chunks = np.array_split(np.arange(n_locations), max(1, n_jobs))
    if n_jobs > 1:
        with ThreadPoolExecutor(max_workers=n_jobs) as executor:
            futures = [
                executor.submit(
                    _estimate_chunk,
                    chunk,
                    targets,
                    coordinates,
                    values,
                    preproc,
                    mean,
                    variance,
                )
                for chunk in chunks
            ]
            counts = [future.result() for future in futures]
    else:
        counts = [
            _estimate_chunk(
                chunks[0], targets, coordinates, values, preproc, mean, variance
            )
        ]

    n_skipped = sum(c[0] for c in counts)
    n_failed = sum(c[1] for c in counts)
    if n_failed:
        logger.warning(
            f"{n_failed} local kriging systems of '{var}' failed to factorize"
        )
    logger.info(
        f"Kriging of '{var}' done: {n_skipped} locations with fewer than "
        f"{preproc.min_neighbors} neighbors"
    )
    return mean, variance
