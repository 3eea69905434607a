"""Point set domain.

A PointSet is an ordered collection of locations in n-dimensional space.
It serves both as the support of observed data and as an estimation or
simulation domain.
"""

from dataclasses import dataclass

import numpy as np

from geokriging.utils.errors import raise_validation_error


@dataclass(frozen=True)
class PointSet:
    """Ordered set of point locations.

    Attributes:
        coordinates: Point coordinates (n_points, n_dims). A 1-D array is
            interpreted as n points on a line.
    """

    coordinates: np.ndarray

    def __post_init__(self) -> None:
        """Validate PointSet parameters."""
        coordinates = np.asarray(self.coordinates)
        if coordinates.ndim == 1:
            coordinates = coordinates.reshape(-1, 1)

        if coordinates.ndim != 2:
            raise_validation_error(
                "Coordinates must be a 2D array",
                expected="(n_points, n_dims)",
                received=f"shape {coordinates.shape}",
            )

        if coordinates.shape[1] == 0:
            raise_validation_error("Coordinates must have at least one dimension")

        if not np.issubdtype(coordinates.dtype, np.floating):
            coordinates = coordinates.astype(np.float64)

        if not np.all(np.isfinite(coordinates)):
            raise_validation_error(
                "Coordinates must be finite",
                suggestion="Drop points with NaN or infinite coordinates",
            )

        object.__setattr__(self, "coordinates", coordinates)

    @property
    def n_elements(self) -> int:
        """Number of points."""
        return self.coordinates.shape[0]

    @property
    def n_dims(self) -> int:
        """Embedding dimension."""
        return self.coordinates.shape[1]

    def centroid(self, index: int) -> np.ndarray:
        """Coordinates of the point at ``index``."""
        return self.coordinates[index]

    def subset(self, indices) -> "PointSet":
        """Return a new PointSet restricted to ``indices`` (in that order)."""
        return PointSet(coordinates=self.coordinates[np.asarray(indices)])

    def __len__(self) -> int:
        return self.n_elements

    def __repr__(self) -> str:
        """String representation."""
        return f"PointSet(n_points={self.n_elements}, n_dims={self.n_dims})"
