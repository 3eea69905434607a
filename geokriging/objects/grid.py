"""Regular Cartesian grid domain.

Cells are enumerated in C order (last axis varies fastest), the same order
``np.meshgrid(..., indexing="ij")`` followed by ``ravel`` produces.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from geokriging.utils.errors import raise_parameter_error


@dataclass(frozen=True)
class RegularGrid:
    """Regular grid of cell centroids.

    Attributes:
        dims: Number of cells along each axis.
        origin: Coordinates of the first cell centroid (default: zeros).
        spacing: Cell size along each axis (default: ones).
    """

    dims: tuple[int, ...]
    origin: Optional[tuple[float, ...]] = None
    spacing: Optional[tuple[float, ...]] = None
    _coordinates: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate RegularGrid parameters and precompute centroids."""
        dims = (self.dims,) if isinstance(self.dims, (int, np.integer)) else self.dims
        dims = tuple(int(d) for d in dims)
        if len(dims) == 0 or any(d <= 0 for d in dims):
            raise_parameter_error(
                "dims", dims, constraint="all dimensions must be positive"
            )

        origin = tuple(float(o) for o in (self.origin or (0.0,) * len(dims)))
        spacing = tuple(float(s) for s in (self.spacing or (1.0,) * len(dims)))
        if len(origin) != len(dims) or len(spacing) != len(dims):
            raise_parameter_error(
                "origin/spacing",
                (origin, spacing),
                constraint=f"must have {len(dims)} entries to match dims",
            )
        if any(s <= 0 for s in spacing):
            raise_parameter_error(
                "spacing", spacing, constraint="cell sizes must be positive"
            )

        axes = [o + s * np.arange(n) for o, s, n in zip(origin, spacing, dims)]
        mesh = np.meshgrid(*axes, indexing="ij")
        coordinates = np.column_stack([m.ravel() for m in mesh])

        object.__setattr__(self, "dims", dims)
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "spacing", spacing)
        object.__setattr__(self, "_coordinates", coordinates)

    @property
    def coordinates(self) -> np.ndarray:
        """Cell centroids (n_cells, n_dims) in enumeration order."""
        return self._coordinates

    @property
    def n_elements(self) -> int:
        return self._coordinates.shape[0]

    @property
    def n_dims(self) -> int:
        return len(self.dims)

    def centroid(self, index: int) -> np.ndarray:
        return self._coordinates[index]

    def linear_index(self, *cell: int) -> int:
        """Linear (enumeration) index of a cell given its per-axis indices."""
        return int(np.ravel_multi_index(cell, self.dims))

    def reshape(self, values: np.ndarray) -> np.ndarray:
        """Reshape values aligned with enumeration order to grid shape."""
        return np.asarray(values).reshape(self.dims)

    def __len__(self) -> int:
        return self.n_elements

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"RegularGrid(dims={self.dims}, origin={self.origin}, "
            f"spacing={self.spacing})"
        )
