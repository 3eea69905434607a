"""Neighborhoods and bounded neighbor searchers.

A searcher is built once over a fixed set of coordinates and answers, per
query point, an ordered array of at most ``max_neighbors`` indices into that
set (closest first). An optional boolean ``mask`` restricts the answer to
eligible entries, which lets sequential simulation search a conditioning set
that grows in place without rebuilding the tree.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Union

import numpy as np
from scipy.spatial import cKDTree

from geokriging.utils.errors import raise_parameter_error


@dataclass(frozen=True)
class BallNeighborhood:
    """Ball of a given radius under a Minkowski p-norm.

    Attributes:
        radius: Ball radius.
        p: Minkowski order (2 = Euclidean, np.inf = Chebyshev).
    """

    radius: float
    p: float = 2.0

    def __post_init__(self) -> None:
        """Validate BallNeighborhood parameters."""
        if self.radius <= 0:
            raise_parameter_error("radius", self.radius, constraint="must be positive")
        if self.p < 1:
            raise_parameter_error("p", self.p, constraint="must be >= 1")


@dataclass(frozen=True)
class RectangularNeighborhood:
    """Axis-aligned window centered at the query point.

    Attributes:
        half_widths: Half side length along each axis.
    """

    half_widths: Sequence[float]

    def __post_init__(self) -> None:
        """Validate RectangularNeighborhood parameters."""
        half_widths = tuple(float(w) for w in np.atleast_1d(self.half_widths))
        if len(half_widths) == 0 or any(w <= 0 for w in half_widths):
            raise_parameter_error(
                "half_widths", half_widths, constraint="must all be positive"
            )
        object.__setattr__(self, "half_widths", half_widths)

    def contains(self, center: np.ndarray, coordinates: np.ndarray) -> np.ndarray:
        """Boolean membership of ``coordinates`` in the window around ``center``."""
        half_widths = np.asarray(self.half_widths)
        return np.all(np.abs(coordinates - center) <= half_widths, axis=1)


Neighborhood = Union[BallNeighborhood, RectangularNeighborhood]


class NeighborSearcher(Protocol):
    """Interface of bounded neighbor searchers."""

    max_neighbors: int

    def search(self, target: np.ndarray, mask: Optional[np.ndarray] = None) -> np.ndarray:
        ...


def _query_tree(
    tree: cKDTree,
    target: np.ndarray,
    k: int,
    mask: Optional[np.ndarray],
    p: float = 2.0,
    upper_bound: float = np.inf,
) -> np.ndarray:
    """Up to ``k`` nearest eligible indices, closest first.

    Widens the query until ``k`` eligible points are found, the tree is
    exhausted, or the distance bound cuts the answer short.
    """
    n = tree.n
    if n == 0 or k == 0:
        return np.empty(0, dtype=np.intp)

    k_query = k
    while True:
        k_query = min(k_query, n)
        distances, indices = tree.query(
            target, k=k_query, p=p, distance_upper_bound=upper_bound
        )
        distances = np.atleast_1d(distances)
        indices = np.atleast_1d(indices)
        found = np.isfinite(distances)
        candidates = indices[found]
        if mask is not None:
            candidates = candidates[mask[candidates]]
        if len(candidates) >= k or k_query == n or not found.all():
            return candidates[:k].astype(np.intp)
        k_query *= 2


class NearestNeighborSearcher:
    """The ``max_neighbors`` nearest points under a Minkowski distance.

    Attributes:
        max_neighbors: Maximum number of neighbors returned.
        p: Minkowski order of the distance.
    """

    def __init__(self, coordinates: np.ndarray, max_neighbors: int, p: float = 2.0):
        self.coordinates = coordinates
        self.max_neighbors = max_neighbors
        self.p = p
        self.tree = cKDTree(coordinates)

    def search(self, target: np.ndarray, mask: Optional[np.ndarray] = None) -> np.ndarray:
        return _query_tree(self.tree, target, self.max_neighbors, mask, p=self.p)


class KBallSearcher:
    """The ``max_neighbors`` nearest points inside a ball."""

    def __init__(
        self,
        coordinates: np.ndarray,
        max_neighbors: int,
        neighborhood: BallNeighborhood,
    ):
        self.coordinates = coordinates
        self.max_neighbors = max_neighbors
        self.neighborhood = neighborhood
        self.tree = cKDTree(coordinates)

    def search(self, target: np.ndarray, mask: Optional[np.ndarray] = None) -> np.ndarray:
        # points exactly on the sphere count as inside
        upper_bound = np.nextafter(self.neighborhood.radius, np.inf)
        return _query_tree(
            self.tree,
            target,
            self.max_neighbors,
            mask,
            p=self.neighborhood.p,
            upper_bound=upper_bound,
        )


class BoundedSearcher:
    """Members of an arbitrary neighborhood, closest first, truncated."""

    def __init__(
        self,
        coordinates: np.ndarray,
        max_neighbors: int,
        neighborhood: Neighborhood,
    ):
        self.coordinates = coordinates
        self.max_neighbors = max_neighbors
        self.neighborhood = neighborhood

    def search(self, target: np.ndarray, mask: Optional[np.ndarray] = None) -> np.ndarray:
        inside = self.neighborhood.contains(target, self.coordinates)
        if mask is not None:
            inside &= mask
        candidates = np.flatnonzero(inside)
        distances = np.linalg.norm(self.coordinates[candidates] - target, axis=1)
        order = np.argsort(distances, kind="stable")
        return candidates[order[: self.max_neighbors]]


def make_searcher(
    coordinates: np.ndarray,
    max_neighbors: int,
    neighborhood: Optional[Neighborhood] = None,
    p: float = 2.0,
) -> NeighborSearcher:
    """Pick the searcher for a neighborhood and neighbor budget.

    Args:
        coordinates: Coordinates to search (n_points, n_dims).
        max_neighbors: Maximum number of neighbors per query.
        neighborhood: Ball or window; None means plain nearest neighbors.
        p: Minkowski order for nearest-neighbor search without neighborhood.

    Returns:
        A searcher over ``coordinates``.
    """
    if max_neighbors < 1:
        raise_parameter_error(
            "max_neighbors", max_neighbors, constraint="must be >= 1"
        )
    if neighborhood is None:
        return NearestNeighborSearcher(coordinates, max_neighbors, p=p)
    if isinstance(neighborhood, BallNeighborhood):
        return KBallSearcher(coordinates, max_neighbors, neighborhood)
    if len(neighborhood.half_widths) != coordinates.shape[1]:
        raise_parameter_error(
            "half_widths",
            neighborhood.half_widths,
            constraint=f"must have {coordinates.shape[1]} entries",
        )
    return BoundedSearcher(coordinates, max_neighbors, neighborhood)
