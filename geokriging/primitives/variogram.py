"""Variogram model primitives.

Theoretical semivariogram models evaluated on distances or pairs of
locations. Kriging only needs three things from a model: its value between
two locations, whether it is stationary, and its sill.
"""

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from scipy.spatial.distance import cdist, pdist, squareform

from geokriging.utils.errors import raise_parameter_error

STATIONARY_MODELS = ("spherical", "exponential", "gaussian")
NONSTATIONARY_MODELS = ("linear", "power")


@dataclass(frozen=True)
class VariogramModel:
    """Container for variogram model parameters.

    Attributes:
        model_type: Type of model ('spherical', 'exponential', 'gaussian',
            'linear', 'power').
        nugget: Nugget effect (discontinuity at the origin).
        sill: Total sill (nugget + partial sill). For the unbounded 'linear'
            and 'power' models it is the value reached at ``range_param``.
        range_param: Range parameter (correlation length).
        exponent: Power exponent, only used by the 'power' model.
    """

    model_type: str = "gaussian"
    nugget: float = 0.0
    sill: float = 1.0
    range_param: float = 1.0
    exponent: float = 1.5

    def __post_init__(self) -> None:
        """Validate VariogramModel parameters."""
        valid_types = STATIONARY_MODELS + NONSTATIONARY_MODELS
        if self.model_type not in valid_types:
            raise_parameter_error("model_type", self.model_type, list(valid_types))

        if self.nugget < 0:
            raise_parameter_error(
                "nugget", self.nugget, constraint="must be non-negative"
            )

        if self.sill < self.nugget:
            raise_parameter_error(
                "sill", self.sill, constraint=f"must be >= nugget ({self.nugget})"
            )

        if self.range_param <= 0:
            raise_parameter_error(
                "range_param", self.range_param, constraint="must be positive"
            )

        if self.model_type == "power" and not 0 < self.exponent < 2:
            raise_parameter_error(
                "exponent", self.exponent, constraint="must lie in (0, 2)"
            )

    @property
    def partial_sill(self) -> float:
        return self.sill - self.nugget

    @property
    def is_stationary(self) -> bool:
        """True when the model reaches a sill and converts to a covariance."""
        return self.model_type in STATIONARY_MODELS

    def __call__(self, x: np.ndarray, y: np.ndarray) -> float:
        """Semivariance between two locations."""
        h = np.linalg.norm(np.atleast_1d(x) - np.atleast_1d(y))
        return float(predict_variogram(self, np.asarray([h]))[0])

    def pairwise(
        self, coordinates: np.ndarray, other: Optional[np.ndarray] = None
    ) -> np.ndarray:
        """Semivariance matrix between two sets of locations.

        With a single set the result is computed from one triangle and
        mirrored, so it is exactly symmetric.
        """
        if other is None:
            distances = squareform(pdist(coordinates))
        else:
            distances = cdist(coordinates, other)
        return predict_variogram(self, distances)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"VariogramModel(type={self.model_type}, nugget={self.nugget:.4f}, "
            f"sill={self.sill:.4f}, range={self.range_param:.4f})"
        )


def _spherical_shape(s: np.ndarray, exponent: float) -> np.ndarray:
    """Spherical structure, reaching 1 at one range."""
    s = np.minimum(s, 1.0)
    return 1.5 * s - 0.5 * s**3


def _exponential_shape(s: np.ndarray, exponent: float) -> np.ndarray:
    return 1.0 - np.exp(-s)


def _gaussian_shape(s: np.ndarray, exponent: float) -> np.ndarray:
    return 1.0 - np.exp(-(s**2))


def _linear_shape(s: np.ndarray, exponent: float) -> np.ndarray:
    return s


def _power_shape(s: np.ndarray, exponent: float) -> np.ndarray:
    """Unbounded fractal structure, ``s**exponent`` with 0 < exponent < 2."""
    return s**exponent


# Structure functions of the scaled lag h / range_param. Each is 0 at the
# origin; the stationary ones tend to 1, the others pass through 1 at one
# range and keep growing.
VARIOGRAM_MODELS: dict[str, Callable[[np.ndarray, float], np.ndarray]] = {
    "spherical": _spherical_shape,
    "exponential": _exponential_shape,
    "gaussian": _gaussian_shape,
    "linear": _linear_shape,
    "power": _power_shape,
}


def predict_variogram(
    variogram_model: VariogramModel, distances: np.ndarray
) -> np.ndarray:
    """Evaluate a variogram model at given distances.

    ``gamma(h) = nugget + partial_sill * f(h / range_param)`` for ``h > 0``
    and exactly zero at zero lag, so the nugget never reaches the diagonal.

    Args:
        variogram_model: VariogramModel to evaluate.
        distances: Distances (any shape).

    Returns:
        Semi-variance values with the shape of ``distances``.
    """
    distances = np.asarray(distances, dtype=float)
    shape = VARIOGRAM_MODELS[variogram_model.model_type]
    structure = shape(distances / variogram_model.range_param, variogram_model.exponent)
    gamma = variogram_model.nugget + variogram_model.partial_sill * structure
    return np.where(distances > 0, gamma, 0.0)
