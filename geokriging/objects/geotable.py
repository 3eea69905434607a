"""Geospatial table: point locations plus attribute columns.

Missing values are marked with NaN. Each variable may be missing at a
different subset of locations, so ``valid`` is always evaluated per variable.
"""

from dataclasses import dataclass
from typing import Mapping, Union

import numpy as np
import pandas as pd

from geokriging.objects.pointset import PointSet
from geokriging.utils.errors import raise_validation_error


@dataclass(frozen=True)
class GeoTable:
    """Observed variables attached to a PointSet.

    Attributes:
        points: Observation locations.
        data: One row per point, one column per variable.
    """

    points: PointSet
    data: pd.DataFrame

    def __post_init__(self) -> None:
        """Validate GeoTable parameters."""
        if not isinstance(self.points, PointSet):
            object.__setattr__(self, "points", PointSet(coordinates=self.points))

        data = self.data
        if isinstance(data, Mapping):
            data = pd.DataFrame(dict(data))
        if not isinstance(data, pd.DataFrame):
            raise_validation_error(
                "data must be a pandas DataFrame or a mapping of columns",
                received=type(data).__name__,
            )

        if len(data) != self.points.n_elements:
            raise_validation_error(
                "Number of rows must match number of points",
                expected=str(self.points.n_elements),
                received=str(len(data)),
            )

        object.__setattr__(self, "data", data.reset_index(drop=True))

    @classmethod
    def from_arrays(
        cls,
        coordinates: np.ndarray,
        **variables: Union[np.ndarray, list],
    ) -> "GeoTable":
        """Build a GeoTable from a coordinate array and named value arrays."""
        return cls(
            points=PointSet(coordinates=coordinates),
            data=pd.DataFrame({name: np.asarray(v) for name, v in variables.items()}),
        )

    @property
    def variables(self) -> tuple[str, ...]:
        return tuple(str(c) for c in self.data.columns)

    @property
    def n_elements(self) -> int:
        return self.points.n_elements

    @property
    def n_dims(self) -> int:
        return self.points.n_dims

    @property
    def coordinates(self) -> np.ndarray:
        return self.points.coordinates

    def values(self, variable: str) -> np.ndarray:
        """All values of ``variable``, NaN where missing."""
        if variable not in self.data.columns:
            raise_validation_error(
                f"Variable '{variable}' not found in data",
                expected=f"one of {list(self.variables)}",
                received=variable,
            )
        return self.data[variable].to_numpy()

    def valid(self, variable: str) -> tuple[np.ndarray, np.ndarray]:
        """Coordinates and values of the rows where ``variable`` is present.

        Returns:
            Tuple of (coordinates (n_valid, n_dims), values (n_valid,)).
        """
        values = self.values(variable)
        mask = ~pd.isna(values)
        return self.coordinates[mask], values[mask]

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"GeoTable(n_points={self.n_elements}, n_dims={self.n_dims}, "
            f"variables={list(self.variables)})"
        )
