"""Kriging primitives for spatial interpolation.

Pure kriging operations shared by four estimator variants:

- Simple Kriging (SK): known constant mean
- Ordinary Kriging (OK): constant but unknown mean
- Universal Kriging (UK): polynomial drift of a given degree
- External Drift Kriging (EDK): arbitrary drift functions

Every variant builds the same linear system

    [ C   F ] [λ]   [c]
    [ F'  0 ] [ν] = [f]

where ``C`` is the covariance (or raw semivariance, for non-stationary
models) between observations, ``F`` holds the variant's constraint columns,
``c`` the covariance between observations and the target, and ``f`` the
constraint values at the target. Variants differ only in ``F``/``f``, in the
factorization they pick, and in how weights are combined into a mean and a
variance. They are plain frozen dataclasses satisfying ``KrigingEstimator``;
the shared fit/predict machinery lives in module-level functions and in
``FittedKriging``.

Fitting costs O(n³) in the number of observations. Local (neighbor
restricted) estimation and sequential simulation refit at every location,
which makes ``fit_kriging`` the dominant cost of those loops.

Coordinates, values and variogram parameters are plain floats. Physical
units are not tracked; callers keep them consistent and reattach them to
the outputs if needed.
"""

import itertools
import warnings
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, Sequence, Union

import numpy as np
from scipy.linalg import LinAlgError, LinAlgWarning, cho_factor, cho_solve
from scipy.linalg import lu_factor, lu_solve
from scipy.spatial.distance import cdist

from geokriging.objects.pointset import PointSet
from geokriging.primitives._numba_helpers import NUMBA_AVAILABLE, njit
from geokriging.primitives.variogram import VariogramModel, predict_variogram
from geokriging.utils.errors import (
    raise_configuration_error,
    raise_validation_error,
)


@dataclass
class KrigingResult:
    """Container for kriging predictions and diagnostics.

    Attributes:
        predictions: Predicted values at target locations.
        variance: Kriging variance (prediction uncertainty).
        weights: Optional kriging weights (n_targets, n_samples).
        lagrange_multiplier: Optional Lagrange multipliers
            (n_targets, n_constraints).
    """

    predictions: np.ndarray
    variance: np.ndarray
    weights: Optional[np.ndarray] = None
    lagrange_multiplier: Optional[np.ndarray] = None

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"KrigingResult(n_predictions={len(self.predictions)}, "
            f"mean_prediction={np.nanmean(self.predictions):.4f}, "
            f"mean_variance={np.nanmean(self.variance):.4f})"
        )


@dataclass(frozen=True)
class KrigingWeights:
    """Kriging weights ``lambdas`` and Lagrange multipliers ``nus``."""

    lambdas: np.ndarray
    nus: np.ndarray


@dataclass
class Factorization:
    """Factorized left-hand side of a kriging system.

    Building a factorization never raises. ``success`` is False when the
    system is numerically singular (or not positive definite, for
    Cholesky); solving with an unsuccessful factorization raises
    ``LinAlgError``. Only exact breakdowns are detected: an ill-conditioned
    system (e.g. a Gaussian variogram without nugget on close data) still
    reports success and can yield huge weights.

    Attributes:
        method: 'cholesky' or 'lu'.
        factors: Factors as returned by scipy.linalg.
        success: Whether the factorization can be used to solve.
    """

    method: str
    factors: Any
    success: bool

    def solve(self, rhs: np.ndarray) -> np.ndarray:
        """Solve ``LHS @ x = rhs``."""
        if not self.success:
            raise LinAlgError(f"{self.method} factorization of kriging system failed")
        if self.method == "cholesky":
            return cho_solve(self.factors, rhs, check_finite=False)
        return lu_solve(self.factors, rhs, check_finite=False)


def cholesky_factorization(lhs: np.ndarray) -> Factorization:
    """Cholesky factorization for symmetric positive definite systems."""
    try:
        factors = cho_factor(lhs, lower=True, check_finite=False)
    except LinAlgError:
        return Factorization(method="cholesky", factors=None, success=False)
    success = bool(np.all(np.isfinite(factors[0])))
    return Factorization(method="cholesky", factors=factors, success=success)


def lu_factorization(lhs: np.ndarray) -> Factorization:
    """LU factorization with partial pivoting for constrained systems.

    Constrained kriging systems are symmetric but indefinite (zero corner
    block), so Cholesky does not apply.
    """
    with warnings.catch_warnings():
        # singular matrices are reported through ``success``
        warnings.simplefilter("ignore", LinAlgWarning)
        lu, piv = lu_factor(lhs, check_finite=False)
    success = bool(np.all(np.isfinite(lu)) and np.all(np.diag(lu) != 0))
    return Factorization(method="lu", factors=(lu, piv), success=success)


@njit(cache=True)
def _compute_distances_fast(point: np.ndarray, coordinates: np.ndarray) -> np.ndarray:
    """Numba-accelerated Euclidean distance computation."""
    n_points = coordinates.shape[0]
    n_dims = coordinates.shape[1]
    distances = np.empty(n_points)

    for i in range(n_points):
        dist_sq = 0.0
        for d in range(n_dims):
            diff = point[d] - coordinates[i, d]
            dist_sq += diff * diff
        distances[i] = np.sqrt(dist_sq)

    return distances


def _distances_to(target: np.ndarray, coordinates: np.ndarray) -> np.ndarray:
    if NUMBA_AVAILABLE:
        return _compute_distances_fast(target, coordinates)
    return cdist(coordinates, target.reshape(1, -1)).ravel()


def as_coordinates(points: Union[PointSet, np.ndarray]) -> np.ndarray:
    if isinstance(points, PointSet):
        return points.coordinates
    coordinates = np.asarray(points, dtype=np.float64)
    if coordinates.ndim == 1:
        coordinates = coordinates.reshape(-1, 1)
    return coordinates


def covariance_transform(variogram_model: VariogramModel, gamma: np.ndarray) -> np.ndarray:
    """Turn semivariances into covariances when the model is stationary."""
    if variogram_model.is_stationary:
        return variogram_model.sill - gamma
    return gamma


def covariance_block(
    variogram_model: VariogramModel, coordinates: np.ndarray
) -> np.ndarray:
    """Symmetric observation-observation block of the kriging system."""
    gamma = variogram_model.pairwise(coordinates)
    return covariance_transform(variogram_model, gamma)


def _set_drift_block(lhs: np.ndarray, drift: np.ndarray) -> None:
    """Place drift columns ``F`` and rows ``F'`` and zero the corner."""
    n_obs = drift.shape[0]
    lhs[:n_obs, n_obs:] = drift
    lhs[n_obs:, :n_obs] = drift.T
    lhs[n_obs:, n_obs:] = 0.0


def _combine_constrained(
    fitted: "FittedKriging", weights: KrigingWeights, values: np.ndarray
) -> tuple[float, float]:
    """Mean and variance for estimators with unbiasedness constraints."""
    variogram_model = fitted.estimator.variogram_model
    rhs = fitted.rhs
    n_obs = len(weights.lambdas)

    c = rhs[:n_obs] @ weights.lambdas + rhs[n_obs:] @ weights.nus
    mean = values @ weights.lambdas
    if variogram_model.is_stationary:
        return mean, variogram_model.sill - c
    return mean, c


class KrigingEstimator(Protocol):
    """Interface every kriging variant implements."""

    variogram_model: VariogramModel

    def n_constraints(self) -> int:
        """Number of constraint rows appended to the system."""
        ...

    def set_constraints_lhs(self, lhs: np.ndarray, coordinates: np.ndarray) -> None:
        """Fill constraint rows/columns of ``lhs`` for the observations."""
        ...

    def set_constraints_rhs(self, rhs: np.ndarray, target: np.ndarray) -> None:
        """Fill the constraint slice ``rhs`` for the target location."""
        ...

    def factorize(self, lhs: np.ndarray) -> Factorization:
        ...

    def combine(
        self, fitted: "FittedKriging", weights: KrigingWeights, values: np.ndarray
    ) -> tuple[float, float]:
        ...


@dataclass(frozen=True)
class SimpleKriging:
    """Simple Kriging with known constant mean.

    Requires a stationary variogram. No unbiasedness constraint is added,
    so the system is the bare covariance matrix and is factorized with
    Cholesky.

    Attributes:
        variogram_model: Stationary variogram model.
        mean: Known mean value.
    """

    variogram_model: VariogramModel
    mean: float

    def __post_init__(self) -> None:
        """Validate SimpleKriging parameters."""
        if not self.variogram_model.is_stationary:
            raise_configuration_error(
                "variogram_model",
                self.variogram_model.model_type,
                constraint="Simple Kriging requires a stationary variogram",
                suggestion="Use Ordinary or Universal Kriging instead",
            )

    def n_constraints(self) -> int:
        return 0

    def set_constraints_lhs(self, lhs: np.ndarray, coordinates: np.ndarray) -> None:
        pass

    def set_constraints_rhs(self, rhs: np.ndarray, target: np.ndarray) -> None:
        pass

    def factorize(self, lhs: np.ndarray) -> Factorization:
        return cholesky_factorization(lhs)

    def combine(
        self, fitted: "FittedKriging", weights: KrigingWeights, values: np.ndarray
    ) -> tuple[float, float]:
        lambdas = weights.lambdas
        mean = self.mean + (values - self.mean) @ lambdas
        variance = self.variogram_model.sill - fitted.rhs[: len(lambdas)] @ lambdas
        return mean, variance

    def fit(self, points, values) -> "FittedKriging":
        return fit_kriging(self, points, values)


@dataclass(frozen=True)
class OrdinaryKriging:
    """Ordinary Kriging: constant but unknown mean, weights sum to one.

    Attributes:
        variogram_model: Variogram model (stationary or not).
    """

    variogram_model: VariogramModel

    def n_constraints(self) -> int:
        return 1

    def set_constraints_lhs(self, lhs: np.ndarray, coordinates: np.ndarray) -> None:
        _set_drift_block(lhs, np.ones((coordinates.shape[0], 1)))

    def set_constraints_rhs(self, rhs: np.ndarray, target: np.ndarray) -> None:
        rhs[0] = 1.0

    def factorize(self, lhs: np.ndarray) -> Factorization:
        return lu_factorization(lhs)

    def combine(
        self, fitted: "FittedKriging", weights: KrigingWeights, values: np.ndarray
    ) -> tuple[float, float]:
        return _combine_constrained(fitted, weights, values)

    def fit(self, points, values) -> "FittedKriging":
        return fit_kriging(self, points, values)


def polynomial_exponents(degree: int, dim: int) -> np.ndarray:
    """Exponents of all monomials in ``dim`` variables up to ``degree``.

    Rows are sorted by descending total degree, which gives better
    conditioned kriging matrices.

    Returns:
        Integer array (n_terms, dim).
    """
    rows = []
    for d in range(degree + 1):
        for combo in itertools.combinations_with_replacement(range(dim), d):
            row = [0] * dim
            for axis in combo:
                row[axis] += 1
            rows.append(row)
    rows.sort(key=sum, reverse=True)
    return np.asarray(rows, dtype=np.int64).reshape(-1, dim)


def _evaluate_monomials(coordinates: np.ndarray, exponents: np.ndarray) -> np.ndarray:
    """Monomial values (n_points, n_terms) at ``coordinates`` (n_points, dim)."""
    return np.prod(coordinates[:, None, :] ** exponents[None, :, :], axis=2)


@dataclass(frozen=True)
class UniversalKriging:
    """Universal Kriging with a polynomial drift.

    Ordinary Kriging is recovered for ``degree=0``. For a non-polynomial
    mean, see ``ExternalDriftKriging``.

    Attributes:
        variogram_model: Variogram model.
        degree: Polynomial degree of the drift.
        dim: Spatial dimension of the locations.
        exponents: Derived monomial exponents (n_terms, dim).
    """

    variogram_model: VariogramModel
    degree: int
    dim: int
    exponents: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate UniversalKriging parameters and derive exponents."""
        if self.degree < 0:
            raise_configuration_error(
                "degree", self.degree, constraint="must be non-negative"
            )
        if self.dim <= 0:
            raise_configuration_error("dim", self.dim, constraint="must be positive")
        object.__setattr__(
            self, "exponents", polynomial_exponents(self.degree, self.dim)
        )

    def n_constraints(self) -> int:
        return self.exponents.shape[0]

    def set_constraints_lhs(self, lhs: np.ndarray, coordinates: np.ndarray) -> None:
        if coordinates.shape[1] != self.dim:
            raise_validation_error(
                "Observation dimension does not match Universal Kriging dimension",
                expected=str(self.dim),
                received=str(coordinates.shape[1]),
            )
        _set_drift_block(lhs, _evaluate_monomials(coordinates, self.exponents))

    def set_constraints_rhs(self, rhs: np.ndarray, target: np.ndarray) -> None:
        rhs[:] = _evaluate_monomials(target.reshape(1, -1), self.exponents)[0]

    def factorize(self, lhs: np.ndarray) -> Factorization:
        return lu_factorization(lhs)

    def combine(
        self, fitted: "FittedKriging", weights: KrigingWeights, values: np.ndarray
    ) -> tuple[float, float]:
        return _combine_constrained(fitted, weights, values)

    def fit(self, points, values) -> "FittedKriging":
        return fit_kriging(self, points, values)


@dataclass(frozen=True)
class ExternalDriftKriging:
    """External Drift Kriging with user-supplied drift functions.

    Each drift maps a coordinate vector to a scalar. Drifts should be
    smooth, and one of them should be constant (e.g. ``lambda x: 1.0``)
    for an unbiased estimate; with ``drifts=[lambda x: 1.0]`` the result
    equals Ordinary Kriging. Systems with external drifts are often
    unstable, so check ``FittedKriging.status``.

    Attributes:
        variogram_model: Variogram model.
        drifts: Ordered drift functions.
    """

    variogram_model: VariogramModel
    drifts: Sequence[Callable[[np.ndarray], float]]

    def __post_init__(self) -> None:
        """Validate ExternalDriftKriging parameters."""
        drifts = tuple(self.drifts)
        if len(drifts) == 0:
            raise_configuration_error(
                "drifts", drifts, constraint="at least one drift function is required"
            )
        if not all(callable(f) for f in drifts):
            raise_configuration_error(
                "drifts", drifts, constraint="every drift must be callable"
            )
        object.__setattr__(self, "drifts", drifts)

    def n_constraints(self) -> int:
        return len(self.drifts)

    def _drift_values(self, x: np.ndarray) -> list[float]:
        return [float(f(x)) for f in self.drifts]

    def set_constraints_lhs(self, lhs: np.ndarray, coordinates: np.ndarray) -> None:
        drift = np.array([self._drift_values(x) for x in coordinates], dtype=float)
        _set_drift_block(lhs, drift.reshape(coordinates.shape[0], -1))

    def set_constraints_rhs(self, rhs: np.ndarray, target: np.ndarray) -> None:
        rhs[:] = self._drift_values(target)

    def factorize(self, lhs: np.ndarray) -> Factorization:
        return lu_factorization(lhs)

    def combine(
        self, fitted: "FittedKriging", weights: KrigingWeights, values: np.ndarray
    ) -> tuple[float, float]:
        return _combine_constrained(fitted, weights, values)

    def fit(self, points, values) -> "FittedKriging":
        return fit_kriging(self, points, values)


def select_estimator(
    variogram_model: VariogramModel,
    mean: Optional[float] = None,
    degree: Optional[int] = None,
    drifts: Optional[Sequence[Callable]] = None,
    dim: Optional[int] = None,
) -> KrigingEstimator:
    """Pick the kriging variant implied by user options.

    Later options override earlier ones: ``drifts`` wins over ``degree``,
    which wins over ``mean``. With none of them, Ordinary Kriging is used.

    Args:
        variogram_model: Variogram model for the variable.
        mean: Known mean (Simple Kriging).
        degree: Polynomial degree (Universal Kriging).
        drifts: Drift functions (External Drift Kriging).
        dim: Spatial dimension, required for Universal Kriging.

    Returns:
        A kriging estimator.

    Raises:
        ConfigurationError: If the selected variant is misconfigured.
    """
    if drifts is not None:
        return ExternalDriftKriging(variogram_model, drifts)
    if degree is not None:
        if dim is None:
            raise_configuration_error(
                "dim", dim, constraint="required for Universal Kriging"
            )
        return UniversalKriging(variogram_model, degree, dim)
    if mean is not None:
        return SimpleKriging(variogram_model, mean)
    return OrdinaryKriging(variogram_model)


def build_lhs(estimator: KrigingEstimator, coordinates: np.ndarray) -> np.ndarray:
    """Assemble the left-hand side of the kriging system.

    Args:
        estimator: Kriging variant.
        coordinates: Observation coordinates (n_obs, n_dims).

    Returns:
        Symmetric matrix (n_obs + n_constraints, n_obs + n_constraints).
    """
    n_obs = coordinates.shape[0]
    size = n_obs + estimator.n_constraints()
    lhs = np.zeros((size, size))
    lhs[:n_obs, :n_obs] = covariance_block(estimator.variogram_model, coordinates)
    estimator.set_constraints_lhs(lhs, coordinates)
    return lhs


@dataclass
class FittedKriging:
    """A kriging estimator fitted to a set of observations.

    Holds references to the observation arrays (not copies), the
    factorized system and a right-hand-side scratch buffer that is
    overwritten by every query. A FittedKriging must therefore not be
    queried from several threads at once.

    Attributes:
        estimator: Kriging variant.
        coordinates: Observation coordinates (n_obs, n_dims).
        values: Observation values (n_obs,).
        factorization: Factorized LHS.
        rhs: Scratch right-hand side (n_obs + n_constraints,).
        value_type: Numeric type of returned means and variances.
    """

    estimator: KrigingEstimator
    coordinates: np.ndarray
    values: np.ndarray
    factorization: Factorization
    rhs: np.ndarray
    value_type: np.dtype

    @property
    def n_obs(self) -> int:
        return self.coordinates.shape[0]

    @property
    def status(self) -> bool:
        """Whether the kriging system was factorized successfully."""
        return self.factorization.success

    def weights(self, target: np.ndarray) -> KrigingWeights:
        """Kriging weights and Lagrange multipliers at ``target``."""
        target = np.ascontiguousarray(target, dtype=np.float64).ravel()
        variogram_model = self.estimator.variogram_model
        n_obs = self.n_obs

        gamma = predict_variogram(variogram_model, _distances_to(target, self.coordinates))
        self.rhs[:n_obs] = covariance_transform(variogram_model, gamma)
        self.estimator.set_constraints_rhs(self.rhs[n_obs:], target)

        solution = self.factorization.solve(self.rhs)
        return KrigingWeights(lambdas=solution[:n_obs], nus=solution[n_obs:])

    def predict(self, target: np.ndarray) -> tuple[float, float]:
        """Kriging mean and variance at ``target``.

        The variance is returned as computed; cancellation can make it
        slightly negative and it is not clamped.
        """
        mean, variance = self.estimator.combine(
            self, self.weights(target), self.values
        )
        return self.value_type.type(mean), self.value_type.type(variance)

    def predict_many(
        self,
        query_points: Union[PointSet, np.ndarray],
        return_weights: bool = False,
    ) -> KrigingResult:
        """Predict at every location of ``query_points``.

        Args:
            query_points: PointSet or coordinate array of target locations.
            return_weights: Whether to keep weights and Lagrange multipliers.

        Returns:
            KrigingResult with predictions and variance.
        """
        targets = as_coordinates(query_points)
        n_targets = targets.shape[0]
        predictions = np.empty(n_targets, dtype=self.value_type)
        variances = np.empty(n_targets, dtype=self.value_type)
        lambdas = np.empty((n_targets, self.n_obs)) if return_weights else None
        nus = (
            np.empty((n_targets, self.rhs.shape[0] - self.n_obs))
            if return_weights
            else None
        )

        for i in range(n_targets):
            weights = self.weights(targets[i])
            predictions[i], variances[i] = self.estimator.combine(
                self, weights, self.values
            )
            if return_weights:
                lambdas[i] = weights.lambdas
                nus[i] = weights.nus

        return KrigingResult(
            predictions=predictions,
            variance=variances,
            weights=lambdas,
            lagrange_multiplier=nus,
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"FittedKriging(estimator={type(self.estimator).__name__}, "
            f"n_obs={self.n_obs}, status={self.status})"
        )


def fit_kriging(
    estimator: KrigingEstimator,
    points: Union[PointSet, np.ndarray],
    values: np.ndarray,
) -> FittedKriging:
    """Build and factorize the kriging system for a set of observations.

    Args:
        estimator: Kriging variant.
        points: PointSet or coordinate array (n_obs, n_dims) of observations.
        values: Observation values (n_obs,).

    Returns:
        FittedKriging. Check ``status`` before querying it.

    Raises:
        DataValidationError: If coordinates and values are inconsistent.
    """
    coordinates = as_coordinates(points)
    values = np.asarray(values)

    if coordinates.shape[0] != values.shape[0]:
        raise_validation_error(
            "Coordinates and values must have same length",
            expected=str(coordinates.shape[0]),
            received=str(values.shape[0]),
        )

    if coordinates.shape[0] == 0:
        raise_validation_error("Need at least 1 observation for kriging")

    lhs = build_lhs(estimator, coordinates)
    factorization = estimator.factorize(lhs)
    rhs = np.empty(lhs.shape[0])
    value_type = np.result_type(values.dtype, np.float32)

    return FittedKriging(
        estimator=estimator,
        coordinates=coordinates,
        values=values,
        factorization=factorization,
        rhs=rhs,
        value_type=value_type,
    )


def predict(fitted: FittedKriging, target: np.ndarray) -> tuple[float, float]:
    """Kriging mean and variance of ``fitted`` at ``target``."""
    return fitted.predict(target)


def weights(fitted: FittedKriging, target: np.ndarray) -> KrigingWeights:
    """Kriging weights of ``fitted`` at ``target``."""
    return fitted.weights(target)
