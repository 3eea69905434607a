"""Sequential Gaussian simulation solver.

Layer 3: Tasks - User intent translation.

Draws conditional (or unconditional) realizations of every variable of a
SimulationProblem. Each realization owns its conditioning arena and its
random generator, so realizations are independent of each other and of the
order in which they run.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Sequence, Union

import numpy as np

from geokriging.objects.problem import SimulationProblem, SimulationSolution
from geokriging.primitives.kriging import KrigingEstimator, select_estimator
from geokriging.primitives.neighborhoods import (
    NeighborSearcher,
    Neighborhood,
    make_searcher,
)
from geokriging.primitives.simulation import (
    PATHS,
    ConditioningArena,
    SimulationPath,
    get_path,
    simulate_realization,
)
from geokriging.primitives.variogram import VariogramModel
from geokriging.utils.errors import raise_configuration_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeqGaussSimParams:
    """Per-variable options of the SeqGaussSim solver.

    The kriging variant is chosen as in ``KrigingParams``: ``drifts`` over
    ``degree`` over ``mean``, Ordinary Kriging otherwise.

    Attributes:
        variogram: Variogram of the normal scores (default: unit Gaussian).
        mean: Simple Kriging mean.
        degree: Universal Kriging polynomial degree.
        drifts: External Drift Kriging drift functions.
        neighborhood: Search neighborhood; None for nearest neighbors.
        min_neighbors: Below this many neighbors the marginal N(0, 1) is drawn.
        max_neighbors: Neighbors per local kriging system.
        path: 'linear' or 'random' visiting order.
    """

    variogram: VariogramModel = field(default_factory=VariogramModel)
    mean: Optional[float] = None
    degree: Optional[int] = None
    drifts: Optional[Sequence[Callable]] = None
    neighborhood: Optional[Neighborhood] = None
    min_neighbors: int = 1
    max_neighbors: int = 10
    path: str = "linear"

    def __post_init__(self) -> None:
        """Validate SeqGaussSimParams."""
        if self.min_neighbors < 1:
            raise_configuration_error(
                "min_neighbors", self.min_neighbors, constraint="must be >= 1"
            )
        if self.max_neighbors < self.min_neighbors:
            raise_configuration_error(
                "max_neighbors",
                self.max_neighbors,
                constraint=f"must be >= min_neighbors ({self.min_neighbors})",
            )
        if isinstance(self.path, str) and self.path not in PATHS:
            raise_configuration_error("path", self.path, valid_values=list(PATHS))


@dataclass(frozen=True)
class SimPreprocessed:
    """Options of one variable, resolved before any realization is drawn."""

    estimator: KrigingEstimator
    min_neighbors: int
    searcher: NeighborSearcher
    path: SimulationPath
    data_coordinates: np.ndarray
    data_values: np.ndarray


def _as_params(params: Union[SeqGaussSimParams, Mapping, None]) -> SeqGaussSimParams:
    if params is None:
        return SeqGaussSimParams()
    if isinstance(params, SeqGaussSimParams):
        return params
    return SeqGaussSimParams(**params)


class SeqGaussSim:
    """Sequential Gaussian simulation solver.

    Example:
        >>> from geokriging import SeqGaussSim, SimulationProblem, VariogramModel
        >>> problem = SimulationProblem(data=table, domain=grid,
        ...                             variables="z", n_realizations=20)
        >>> solver = SeqGaussSim({"z": {
        ...     "variogram": VariogramModel("spherical", range_param=15.0),
        ...     "max_neighbors": 12,
        ...     "path": "random",
        ... }})
        >>> solution = solver.solve(problem, random_seed=2024)
        >>> len(solution["z"])
        20
    """

    def __init__(
        self,
        params: Optional[Mapping[str, Union[SeqGaussSimParams, Mapping]]] = None,
    ):
        self.params = {var: _as_params(p) for var, p in (params or {}).items()}

    def preprocess(self, problem: SimulationProblem) -> dict[str, SimPreprocessed]:
        """Resolve estimator, searcher and path for every variable."""
        unknown = set(self.params) - set(problem.variables)
        if unknown:
            raise_configuration_error(
                "params",
                sorted(unknown),
                valid_values=list(problem.variables),
                constraint="options given for variables not in the problem",
            )

        domain_coordinates = problem.domain.coordinates
        n_dims = problem.domain.n_dims

        preproc = {}
        for var in problem.variables:
            params = self.params.get(var, SeqGaussSimParams())
            if problem.is_conditional:
                data_coordinates, data_values = problem.data.valid(var)
                data_values = np.asarray(data_values, dtype=np.float64)
            else:
                data_coordinates = np.empty((0, n_dims))
                data_values = np.empty(0)

            estimator = select_estimator(
                params.variogram,
                mean=params.mean,
                degree=params.degree,
                drifts=params.drifts,
                dim=n_dims,
            )
            searcher = make_searcher(
                ConditioningArena.layout(data_coordinates, domain_coordinates),
                params.max_neighbors,
                params.neighborhood,
            )
            preproc[var] = SimPreprocessed(
                estimator=estimator,
                min_neighbors=params.min_neighbors,
                searcher=searcher,
                path=get_path(params.path),
                data_coordinates=data_coordinates,
                data_values=data_values,
            )
        return preproc

    def solve(
        self,
        problem: SimulationProblem,
        random_seed: Optional[int] = None,
        n_jobs: int = 1,
    ) -> SimulationSolution:
        """Draw ``problem.n_realizations`` realizations of every variable.

        Args:
            problem: Simulation problem.
            random_seed: Seed; equal seeds give identical solutions whatever
                ``n_jobs`` is.
            n_jobs: Worker threads; realizations are distributed over them.

        Returns:
            SimulationSolution with one array per realization and variable.
        """
        preproc = self.preprocess(problem)
        domain_coordinates = problem.domain.coordinates

        root = np.random.SeedSequence(random_seed)
        var_seeds = root.spawn(len(problem.variables))

        solution = SimulationSolution(domain=problem.domain)
        for var, var_seed in zip(problem.variables, var_seeds):
            p = preproc[var]
            seeds = var_seed.spawn(problem.n_realizations)
            logger.info(
                f"Simulating {problem.n_realizations} realizations of '{var}' "
                f"with {type(p.estimator).__name__}: {len(p.data_values)} data, "
                f"{len(domain_coordinates)} locations"
            )

            def realize(seed: np.random.SeedSequence, p=p) -> np.ndarray:
                arena = ConditioningArena(
                    p.data_coordinates, p.data_values, domain_coordinates
                )
                return simulate_realization(
                    p.estimator,
                    arena,
                    p.searcher,
                    p.min_neighbors,
                    p.path,
                    np.random.default_rng(seed),
                )

            if n_jobs > 1:
                with ThreadPoolExecutor(max_workers=n_jobs) as executor:
                    realizations = list(executor.map(realize, seeds))
            else:
                realizations = [realize(seed) for seed in seeds]

            solution.realizations[var] = realizations
        return solution
