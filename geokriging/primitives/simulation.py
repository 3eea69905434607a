"""Sequential Gaussian simulation primitives.

One realization visits every domain location once along a path. At each
location a kriging system is fitted to the nearest already known values
(observations plus locations simulated earlier in the same realization),
and a value is drawn from the resulting Gaussian. The draw then conditions
every later location.

Values are assumed to be in normal-score space: locations without enough
neighbors are drawn from the standard normal marginal.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np
from scipy.spatial import cKDTree

from geokriging.objects.pointset import PointSet
from geokriging.primitives.kriging import (
    KrigingEstimator,
    as_coordinates,
    fit_kriging,
    select_estimator,
)
from geokriging.primitives.neighborhoods import (
    NeighborSearcher,
    Neighborhood,
    make_searcher,
)
from geokriging.primitives.variogram import VariogramModel
from geokriging.utils.errors import raise_parameter_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinearPath:
    """Visit locations in domain enumeration order."""

    def traverse(self, n_locations: int, rng: np.random.Generator) -> np.ndarray:
        return np.arange(n_locations)


@dataclass(frozen=True)
class RandomPath:
    """Visit locations in a random order drawn from the realization's generator."""

    def traverse(self, n_locations: int, rng: np.random.Generator) -> np.ndarray:
        return rng.permutation(n_locations)


SimulationPath = Union[LinearPath, RandomPath]

PATHS: dict[str, SimulationPath] = {
    "linear": LinearPath(),
    "random": RandomPath(),
}


def get_path(path: Union[str, SimulationPath]) -> SimulationPath:
    """Resolve a path name ('linear', 'random') or pass a path object through."""
    if isinstance(path, str):
        if path not in PATHS:
            raise_parameter_error("path", path, list(PATHS))
        return PATHS[path]
    return path


class ConditioningArena:
    """Growing set of known (location, value) pairs with stable slots.

    Slots ``0..n_data-1`` hold the observations and are filled from the
    start. Slot ``n_data + i`` belongs to domain location ``i`` and is filled
    once that location is simulated. Slot indices never change, so a
    searcher built over ``layout(...)`` stays valid while the set grows.

    Each observation is also assigned to its nearest domain location, which
    takes the observed value and is never simulated.
    """

    def __init__(
        self,
        data_coordinates: np.ndarray,
        data_values: np.ndarray,
        domain_coordinates: np.ndarray,
    ):
        self.n_data = data_coordinates.shape[0]
        self.n_locations = domain_coordinates.shape[0]
        self.coordinates = self.layout(data_coordinates, domain_coordinates)

        n_slots = self.n_data + self.n_locations
        self.values = np.full(n_slots, np.nan)
        self.values[: self.n_data] = data_values
        self.filled = np.zeros(n_slots, dtype=bool)
        self.filled[: self.n_data] = True

        self.realization = np.full(self.n_locations, np.nan)
        self.estimated = np.zeros(self.n_locations, dtype=bool)
        if self.n_data > 0:
            _, hosts = cKDTree(domain_coordinates).query(data_coordinates)
            self.realization[hosts] = data_values
            self.estimated[hosts] = True

    @staticmethod
    def layout(data_coordinates: np.ndarray, domain_coordinates: np.ndarray) -> np.ndarray:
        """Coordinates of every slot, observations first."""
        return np.vstack([data_coordinates, domain_coordinates])

    def fill(self, location: int, value: float) -> None:
        """Record the simulated ``value`` of domain ``location``."""
        slot = self.n_data + location
        self.values[slot] = value
        self.filled[slot] = True
        self.realization[location] = value
        self.estimated[location] = True

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"ConditioningArena(n_data={self.n_data}, "
            f"n_locations={self.n_locations}, n_filled={int(self.filled.sum())})"
        )


def simulate_realization(
    estimator: KrigingEstimator,
    arena: ConditioningArena,
    searcher: NeighborSearcher,
    min_neighbors: int,
    path: SimulationPath,
    rng: np.random.Generator,
) -> np.ndarray:
    """Run one realization of sequential Gaussian simulation.

    Args:
        estimator: Kriging variant used for the local conditional distributions.
        arena: Fresh conditioning arena; it is filled in place.
        searcher: Searcher built over ``arena.coordinates``.
        min_neighbors: Below this many known neighbors, draw from N(0, 1).
        path: Visiting order of the domain locations.
        rng: Generator owned by this realization.

    Returns:
        Simulated values aligned with domain enumeration order.
    """
    n_failed = 0
    n_unconditional = 0
    n_negative = 0

    for location in path.traverse(arena.n_locations, rng):
        if arena.estimated[location]:
            continue

        target = arena.coordinates[arena.n_data + location]
        neighbors = searcher.search(target, mask=arena.filled)

        value = None
        if len(neighbors) >= max(min_neighbors, 1):
            fitted = fit_kriging(
                estimator, arena.coordinates[neighbors], arena.values[neighbors]
            )
            if fitted.status:
                mean, variance = fitted.predict(target)
                if variance < 0:
                    n_negative += 1
                value = rng.normal(mean, np.sqrt(max(variance, 0.0)))
            else:
                n_failed += 1
                logger.debug(
                    f"Kriging system singular at location {location}, "
                    f"drawing from marginal"
                )

        if value is None:
            n_unconditional += 1
            value = rng.standard_normal()

        arena.fill(location, value)

    if n_failed:
        logger.warning(f"{n_failed} local kriging systems failed to factorize")
    logger.debug(
        f"Realization done: {n_unconditional} unconditional draws, "
        f"{n_negative} negative kriging variances drawn with zero spread"
    )
    return arena.realization


def sequential_gaussian_simulation(
    points: Optional[Union[PointSet, np.ndarray]],
    values: Optional[np.ndarray],
    query_points: Union[PointSet, np.ndarray],
    variogram_model: VariogramModel,
    n_realizations: int = 1,
    mean: Optional[float] = None,
    degree: Optional[int] = None,
    drifts: Optional[Sequence] = None,
    neighborhood: Optional[Neighborhood] = None,
    min_neighbors: int = 1,
    max_neighbors: int = 10,
    path: Union[str, SimulationPath] = "linear",
    random_seed: Optional[int] = None,
) -> np.ndarray:
    """Sequential Gaussian simulation over a set of target locations.

    Args:
        points: Observation locations, or None for unconditional simulation.
        values: Observation values in normal-score space (n_samples,).
        query_points: Locations to simulate.
        variogram_model: Variogram of the normal scores.
        n_realizations: Number of independent realizations.
        mean: Known mean (Simple Kriging).
        degree: Polynomial drift degree (Universal Kriging).
        drifts: Drift functions (External Drift Kriging).
        neighborhood: Search neighborhood; None for nearest neighbors.
        min_neighbors: Minimum number of neighbors for a conditional draw.
        max_neighbors: Maximum number of neighbors per local system.
        path: 'linear', 'random' or a path object.
        random_seed: Seed; equal seeds reproduce identical realizations.

    Returns:
        Realizations (n_realizations, n_targets).

    Example:
        >>> from geokriging.primitives.simulation import (
        ...     sequential_gaussian_simulation
        ... )
        >>> reals = sequential_gaussian_simulation(
        ...     points, normal_scores, grid_points, variogram,
        ...     n_realizations=10, random_seed=42,
        ... )
        >>> reals.shape
        (10, 2500)
    """
    targets = as_coordinates(query_points)
    if points is None:
        data_coordinates = np.empty((0, targets.shape[1]))
        data_values = np.empty(0)
    else:
        data_coordinates = as_coordinates(points)
        data_values = np.asarray(values, dtype=float)

    estimator = select_estimator(
        variogram_model, mean=mean, degree=degree, drifts=drifts, dim=targets.shape[1]
    )
    path = get_path(path)
    searcher = make_searcher(
        ConditioningArena.layout(data_coordinates, targets),
        max_neighbors,
        neighborhood,
    )

    realizations = np.empty((n_realizations, targets.shape[0]))
    seeds = np.random.SeedSequence(random_seed).spawn(n_realizations)
    for r, seed in enumerate(seeds):
        arena = ConditioningArena(data_coordinates, data_values, targets)
        realizations[r] = simulate_realization(
            estimator, arena, searcher, min_neighbors, path, np.random.default_rng(seed)
        )
    return realizations
