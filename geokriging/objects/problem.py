"""Estimation and simulation problems and their solutions.

A problem ties observed data (optional for simulation) to a domain and
names the variables to solve for. A solution holds per-variable arrays
aligned with the domain enumeration order.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np
import pandas as pd

from geokriging.objects.geotable import GeoTable
from geokriging.objects.grid import RegularGrid
from geokriging.objects.pointset import PointSet
from geokriging.utils.errors import raise_parameter_error, raise_validation_error

Domain = Union[PointSet, RegularGrid]


def _check_variables(variables, data: Optional[GeoTable]) -> tuple[str, ...]:
    if isinstance(variables, str):
        variables = (variables,)
    variables = tuple(variables)
    if len(variables) == 0:
        raise_validation_error("At least one variable must be given")
    if data is not None:
        missing = [v for v in variables if v not in data.variables]
        if missing:
            raise_validation_error(
                f"Variables {missing} not found in data",
                expected=f"subset of {list(data.variables)}",
            )
    return variables


def _check_dims(data: GeoTable, domain: Domain) -> None:
    if data.n_dims != domain.n_dims:
        raise_validation_error(
            "Data and domain must have the same number of dimensions",
            expected=str(domain.n_dims),
            received=str(data.n_dims),
        )


@dataclass(frozen=True)
class EstimationProblem:
    """Estimate ``variables`` over ``domain`` from ``data``."""

    data: GeoTable
    domain: Domain
    variables: tuple[str, ...]

    def __post_init__(self) -> None:
        """Validate EstimationProblem parameters."""
        object.__setattr__(
            self, "variables", _check_variables(self.variables, self.data)
        )
        _check_dims(self.data, self.domain)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"EstimationProblem(n_data={self.data.n_elements}, "
            f"n_locations={self.domain.n_elements}, variables={list(self.variables)})"
        )


@dataclass(frozen=True)
class SimulationProblem:
    """Draw ``n_realizations`` of ``variables`` over ``domain``.

    Without ``data`` the simulation is unconditional.
    """

    domain: Domain
    variables: tuple[str, ...]
    n_realizations: int = 1
    data: Optional[GeoTable] = None

    def __post_init__(self) -> None:
        """Validate SimulationProblem parameters."""
        object.__setattr__(
            self, "variables", _check_variables(self.variables, self.data)
        )
        if self.n_realizations < 1:
            raise_parameter_error(
                "n_realizations", self.n_realizations, constraint="must be >= 1"
            )
        if self.data is not None:
            _check_dims(self.data, self.domain)

    @property
    def is_conditional(self) -> bool:
        return self.data is not None

    def __repr__(self) -> str:
        """String representation."""
        n_data = self.data.n_elements if self.data is not None else 0
        return (
            f"SimulationProblem(n_data={n_data}, "
            f"n_locations={self.domain.n_elements}, "
            f"variables={list(self.variables)}, "
            f"n_realizations={self.n_realizations})"
        )


@dataclass
class EstimationSolution:
    """Kriging mean and variance per variable.

    Locations that could not be estimated hold NaN in both arrays.
    """

    domain: Domain
    mean: dict[str, np.ndarray] = field(default_factory=dict)
    variance: dict[str, np.ndarray] = field(default_factory=dict)

    def __getitem__(self, variable: str) -> tuple[np.ndarray, np.ndarray]:
        return self.mean[variable], self.variance[variable]

    def to_dataframe(self) -> pd.DataFrame:
        """Tabulate coordinates with ``<var>_mean`` and ``<var>_variance`` columns."""
        columns = {
            f"x{d}": self.domain.coordinates[:, d] for d in range(self.domain.n_dims)
        }
        for var in self.mean:
            columns[f"{var}_mean"] = self.mean[var]
            columns[f"{var}_variance"] = self.variance[var]
        return pd.DataFrame(columns)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"EstimationSolution(n_locations={self.domain.n_elements}, "
            f"variables={list(self.mean)})"
        )


@dataclass
class SimulationSolution:
    """Realizations per variable, each aligned with domain enumeration order."""

    domain: Domain
    realizations: dict[str, list[np.ndarray]] = field(default_factory=dict)

    def __getitem__(self, variable: str) -> list[np.ndarray]:
        return self.realizations[variable]

    def to_dataframe(self) -> pd.DataFrame:
        """Tabulate coordinates with one ``<var>_<r>`` column per realization."""
        columns = {
            f"x{d}": self.domain.coordinates[:, d] for d in range(self.domain.n_dims)
        }
        for var, reals in self.realizations.items():
            for r, real in enumerate(reals):
                columns[f"{var}_{r}"] = real
        return pd.DataFrame(columns)

    def __repr__(self) -> str:
        """String representation."""
        n_reals = {var: len(r) for var, r in self.realizations.items()}
        return (
            f"SimulationSolution(n_locations={self.domain.n_elements}, "
            f"realizations={n_reals})"
        )
