"""Tests for kriging estimator variants and the shared fit/predict machinery."""

from dataclasses import dataclass

import numpy as np
import pytest
from scipy.linalg import LinAlgError

from geokriging.objects.pointset import PointSet
from geokriging.primitives.kriging import (
    ExternalDriftKriging,
    OrdinaryKriging,
    SimpleKriging,
    UniversalKriging,
    build_lhs,
    cholesky_factorization,
    fit_kriging,
    lu_factorization,
    polynomial_exponents,
    predict,
    select_estimator,
    weights,
)
from geokriging.primitives.variogram import VariogramModel
from geokriging.utils.errors import (
    ConfigurationError,
    DataValidationError,
    ParameterError,
)


@dataclass(frozen=True)
class NegativeVarianceKriging(OrdinaryKriging):
    """Ordinary Kriging whose variance is shifted below zero."""

    def combine(self, fitted, weights, values):
        mean, variance = super().combine(fitted, weights, values)
        return mean, variance - 10.0


@pytest.fixture
def samples():
    np.random.seed(42)
    coords = np.random.rand(12, 2) * 10.0
    values = np.sin(coords[:, 0]) + 0.5 * coords[:, 1]
    return coords, values


@pytest.fixture
def spherical():
    return VariogramModel("spherical", nugget=0.0, sill=2.0, range_param=8.0)


def all_estimators(variogram):
    return [
        SimpleKriging(variogram, mean=1.0),
        OrdinaryKriging(variogram),
        UniversalKriging(variogram, degree=1, dim=2),
        ExternalDriftKriging(variogram, drifts=[lambda x: 1.0, lambda x: x[0]]),
    ]


class TestInterpolation:
    """Kriging honors the data when there is no nugget."""

    def test_exact_at_data(self, samples, spherical):
        coords, values = samples
        for estimator in all_estimators(spherical):
            fitted = estimator.fit(coords, values)
            assert fitted.status
            for x, z in zip(coords, values):
                mean, variance = fitted.predict(x)
                assert mean == pytest.approx(z, abs=1e-8)
                assert variance == pytest.approx(0.0, abs=1e-8)

    def test_weights_at_data_are_unit_vector(self, samples, spherical):
        coords, values = samples
        fitted = OrdinaryKriging(spherical).fit(coords, values)

        w = weights(fitted, coords[3])

        expected = np.zeros(len(values))
        expected[3] = 1.0
        np.testing.assert_allclose(w.lambdas, expected, atol=1e-10)
        np.testing.assert_allclose(w.nus, 0.0, atol=1e-10)


class TestInvariances:
    """Properties that hold for any configuration."""

    def test_translation_invariance(self, samples, spherical):
        coords, values = samples
        offset = np.array([125.0, -40.0])
        target = np.array([4.2, 5.1])

        estimators = [
            SimpleKriging(spherical, mean=1.0),
            OrdinaryKriging(spherical),
            UniversalKriging(spherical, degree=1, dim=2),
        ]
        for estimator in estimators:
            mean, variance = estimator.fit(coords, values).predict(target)
            mean_t, variance_t = estimator.fit(coords + offset, values).predict(
                target + offset
            )
            assert mean_t == pytest.approx(mean, rel=1e-6)
            assert variance_t == pytest.approx(variance, rel=1e-6)

    def test_covariance_scaling(self, samples):
        coords, values = samples
        target = np.array([3.3, 7.7])
        base = VariogramModel("exponential", nugget=0.1, sill=1.0, range_param=5.0)
        scaled = VariogramModel("exponential", nugget=0.3, sill=3.0, range_param=5.0)

        for make in [lambda v: SimpleKriging(v, mean=0.5), OrdinaryKriging]:
            mean, variance = make(base).fit(coords, values).predict(target)
            mean_s, variance_s = make(scaled).fit(coords, values).predict(target)
            assert mean_s == pytest.approx(mean, rel=1e-8)
            assert variance_s == pytest.approx(3.0 * variance, rel=1e-8)

    def test_variance_independent_of_values(self, samples, spherical):
        coords, values = samples
        target = np.array([5.0, 5.0])
        other_values = np.random.RandomState(0).randn(len(values)) * 100

        for estimator in all_estimators(spherical):
            _, variance = estimator.fit(coords, values).predict(target)
            _, variance_other = estimator.fit(coords, other_values).predict(target)
            assert variance_other == pytest.approx(variance, rel=1e-10)

    def test_ordinary_weights_sum_to_one(self, samples, spherical):
        coords, values = samples
        fitted = OrdinaryKriging(spherical).fit(coords, values)
        w = fitted.weights(np.array([2.5, 8.0]))
        assert w.lambdas.sum() == pytest.approx(1.0, abs=1e-10)

    def test_universal_weights_reproduce_linear_drift(self, samples, spherical):
        coords, values = samples
        target = np.array([6.0, 1.5])
        fitted = UniversalKriging(spherical, degree=1, dim=2).fit(coords, values)
        w = fitted.weights(target)
        np.testing.assert_allclose(w.lambdas @ coords, target, atol=1e-8)


class TestEquivalences:
    """Different variants that must give identical results."""

    def test_universal_degree_zero_is_ordinary(self, samples, spherical):
        coords, values = samples
        ok = OrdinaryKriging(spherical).fit(coords, values)
        uk = UniversalKriging(spherical, degree=0, dim=2).fit(coords, values)
        for target in [np.array([1.0, 1.0]), np.array([9.5, 0.2])]:
            np.testing.assert_allclose(uk.predict(target), ok.predict(target), rtol=1e-10)

    def test_constant_drift_is_ordinary(self, samples, spherical):
        coords, values = samples
        ok = OrdinaryKriging(spherical).fit(coords, values)
        edk = ExternalDriftKriging(spherical, drifts=[lambda x: 1.0]).fit(coords, values)
        for target in [np.array([1.0, 1.0]), np.array([9.5, 0.2])]:
            np.testing.assert_allclose(
                edk.predict(target), ok.predict(target), rtol=1e-10
            )


class TestVariance:
    """Kriging variance properties."""

    @pytest.mark.parametrize(
        "variogram",
        [
            VariogramModel("spherical", nugget=0.0, sill=1.0, range_param=6.0),
            VariogramModel("exponential", nugget=0.2, sill=1.0, range_param=3.0),
            VariogramModel("linear", nugget=0.0, sill=1.0, range_param=10.0),
            VariogramModel("power", nugget=0.0, sill=1.0, range_param=10.0, exponent=1.2),
        ],
    )
    def test_non_negative(self, samples, variogram):
        coords, values = samples
        targets = np.random.RandomState(1).rand(25, 2) * 12.0 - 1.0
        estimator = OrdinaryKriging(variogram)
        result = estimator.fit(coords, values).predict_many(targets)
        assert np.all(result.variance >= -1e-10)

    def test_simple_variance_not_above_ordinary(self, samples, spherical):
        coords, values = samples
        targets = np.random.RandomState(2).rand(20, 2) * 10.0
        sk = SimpleKriging(spherical, mean=0.0).fit(coords, values).predict_many(targets)
        ok = OrdinaryKriging(spherical).fit(coords, values).predict_many(targets)
        assert np.all(sk.variance <= ok.variance + 1e-10)

    def test_negative_variance_is_not_clamped(self, samples, spherical):
        coords, values = samples
        target = np.array([4.0, 4.0])
        _, ok_variance = OrdinaryKriging(spherical).fit(coords, values).predict(target)

        fitted = NegativeVarianceKriging(spherical).fit(coords, values)
        _, variance = predict(fitted, target)

        assert variance < 0
        assert variance == pytest.approx(ok_variance - 10.0)
        assert np.all(fitted.predict_many(coords).variance < 0)

    def test_non_stationary_variance_positive_away_from_data(self, samples):
        coords, values = samples
        power = VariogramModel("power", sill=1.0, range_param=5.0, exponent=1.5)
        _, variance = OrdinaryKriging(power).fit(coords, values).predict(
            np.array([20.0, 20.0])
        )
        assert variance > 0


class TestValueType:
    """Result numeric type follows the observation value type."""

    def test_float32_matches_float64(self, samples, spherical):
        coords, values = samples
        targets = np.random.RandomState(3).rand(10, 2) * 10.0
        estimator = OrdinaryKriging(spherical)

        r64 = estimator.fit(coords, values).predict_many(targets)
        r32 = estimator.fit(coords, values.astype(np.float32)).predict_many(targets)

        assert r32.predictions.dtype == np.float32
        assert r32.variance.dtype == np.float32
        assert r64.predictions.dtype == np.float64
        np.testing.assert_allclose(r32.predictions, r64.predictions, rtol=1e-5, atol=1e-5)
        np.testing.assert_allclose(r32.variance, r64.variance, rtol=1e-4, atol=1e-5)

    def test_integer_values_give_float64(self, spherical):
        coords = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
        fitted = OrdinaryKriging(spherical).fit(coords, np.array([1, 2, 3]))
        mean, _ = fitted.predict(np.array([0.5, 0.5]))
        assert isinstance(mean, np.float64)


class TestFactorization:
    """Factorization status instead of exceptions."""

    def test_cholesky_reports_indefinite(self):
        factorization = cholesky_factorization(np.array([[1.0, 2.0], [2.0, 1.0]]))
        assert not factorization.success
        with pytest.raises(LinAlgError):
            factorization.solve(np.ones(2))

    def test_lu_reports_singular(self):
        factorization = lu_factorization(np.array([[1.0, 1.0], [1.0, 1.0]]))
        assert not factorization.success

    def test_duplicate_points_fail_ordinary(self, spherical):
        coords = np.array([[1.0, 1.0], [1.0, 1.0]])
        fitted = OrdinaryKriging(spherical).fit(coords, np.array([2.0, 2.0]))
        assert not fitted.status
        with pytest.raises(LinAlgError):
            fitted.predict(np.array([0.5, 0.5]))

    def test_simple_kriging_uses_cholesky(self, samples, spherical):
        coords, values = samples
        fitted = SimpleKriging(spherical, mean=0.0).fit(coords, values)
        assert fitted.factorization.method == "cholesky"
        fitted = OrdinaryKriging(spherical).fit(coords, values)
        assert fitted.factorization.method == "lu"


class TestSystemAssembly:
    """Structure of the kriging left-hand side."""

    def test_lhs_blocks(self, samples, spherical):
        coords, _ = samples
        estimator = UniversalKriging(spherical, degree=2, dim=2)
        lhs = build_lhs(estimator, coords)

        n = len(coords)
        assert lhs.shape == (n + 6, n + 6)
        np.testing.assert_array_equal(lhs, lhs.T)
        np.testing.assert_array_equal(lhs[n:, n:], 0.0)
        np.testing.assert_allclose(np.diag(lhs)[:n], spherical.sill)

    def test_polynomial_exponents(self):
        exponents = polynomial_exponents(2, 2)
        assert exponents.shape == (6, 2)
        degrees = exponents.sum(axis=1)
        assert list(degrees) == sorted(degrees, reverse=True)
        assert degrees[0] == 2
        np.testing.assert_array_equal(exponents[-1], [0, 0])

    def test_polynomial_exponents_degree_zero(self):
        np.testing.assert_array_equal(polynomial_exponents(0, 3), [[0, 0, 0]])

    def test_pointset_input(self, samples, spherical):
        coords, values = samples
        from_array = fit_kriging(OrdinaryKriging(spherical), coords, values)
        from_points = fit_kriging(OrdinaryKriging(spherical), PointSet(coords), values)
        target = np.array([2.0, 2.0])
        assert from_points.predict(target) == pytest.approx(from_array.predict(target))

    def test_return_weights(self, samples, spherical):
        coords, values = samples
        result = OrdinaryKriging(spherical).fit(coords, values).predict_many(
            coords[:4], return_weights=True
        )
        assert result.weights.shape == (4, len(coords))
        assert result.lagrange_multiplier.shape == (4, 1)


class TestConfiguration:
    """Invalid estimator configurations."""

    def test_simple_kriging_requires_stationary(self):
        with pytest.raises(ConfigurationError, match="stationary"):
            SimpleKriging(VariogramModel("linear"), mean=0.0)

    def test_negative_degree(self):
        with pytest.raises(ConfigurationError):
            UniversalKriging(VariogramModel(), degree=-1, dim=2)

    def test_non_positive_dimension(self):
        with pytest.raises(ConfigurationError):
            UniversalKriging(VariogramModel(), degree=1, dim=0)

    def test_empty_drifts(self):
        with pytest.raises(ConfigurationError):
            ExternalDriftKriging(VariogramModel(), drifts=[])

    def test_configuration_error_is_parameter_error(self):
        with pytest.raises(ParameterError):
            ExternalDriftKriging(VariogramModel(), drifts=["not callable"])

    def test_dimension_mismatch(self, samples):
        coords, values = samples
        with pytest.raises(DataValidationError):
            UniversalKriging(VariogramModel(), degree=1, dim=3).fit(coords, values)

    def test_length_mismatch(self, samples):
        coords, values = samples
        with pytest.raises(DataValidationError, match="same length"):
            OrdinaryKriging(VariogramModel()).fit(coords, values[:-1])

    def test_no_observations(self):
        with pytest.raises(DataValidationError):
            OrdinaryKriging(VariogramModel()).fit(np.empty((0, 2)), np.empty(0))


class TestSelectEstimator:
    """Later options override earlier ones."""

    def test_default_is_ordinary(self):
        assert isinstance(select_estimator(VariogramModel()), OrdinaryKriging)

    def test_mean_selects_simple(self):
        estimator = select_estimator(VariogramModel(), mean=2.0)
        assert isinstance(estimator, SimpleKriging)
        assert estimator.mean == 2.0

    def test_degree_overrides_mean(self):
        estimator = select_estimator(VariogramModel(), mean=2.0, degree=1, dim=2)
        assert isinstance(estimator, UniversalKriging)

    def test_drifts_override_degree(self):
        estimator = select_estimator(
            VariogramModel(), mean=2.0, degree=1, drifts=[lambda x: 1.0], dim=2
        )
        assert isinstance(estimator, ExternalDriftKriging)

    def test_degree_requires_dimension(self):
        with pytest.raises(ConfigurationError):
            select_estimator(VariogramModel(), degree=1)
