"""Tests for variogram models."""

import numpy as np
import pytest

from geokriging.primitives.variogram import VariogramModel, predict_variogram
from geokriging.utils.errors import ParameterError


class TestVariogramModel:
    """Tests for VariogramModel."""

    def test_defaults(self):
        model = VariogramModel()
        assert model.model_type == "gaussian"
        assert model.sill == 1.0
        assert model.nugget == 0.0
        assert model.is_stationary

    def test_stationarity(self):
        for model_type in ["spherical", "exponential", "gaussian"]:
            assert VariogramModel(model_type).is_stationary
        for model_type in ["linear", "power"]:
            assert not VariogramModel(model_type).is_stationary

    def test_zero_at_origin_with_nugget(self):
        model = VariogramModel("exponential", nugget=0.3, sill=1.0, range_param=5.0)
        gamma = predict_variogram(model, np.array([0.0, 1e-12, 1.0]))
        assert gamma[0] == 0.0
        assert gamma[1] == pytest.approx(0.3)
        assert gamma[2] > 0.3

    def test_spherical_reaches_sill(self):
        model = VariogramModel("spherical", nugget=0.1, sill=2.0, range_param=10.0)
        gamma = predict_variogram(model, np.array([5.0, 10.0, 50.0]))
        assert gamma[0] < 2.0
        np.testing.assert_allclose(gamma[1:], 2.0)

    def test_monotone(self):
        h = np.linspace(0.0, 30.0, 61)
        for model_type in ["spherical", "exponential", "gaussian", "linear", "power"]:
            gamma = predict_variogram(VariogramModel(model_type, range_param=10.0), h)
            assert np.all(np.diff(gamma) >= 0)

    def test_unbounded_models_hit_sill_at_range(self):
        for model_type in ["linear", "power"]:
            model = VariogramModel(model_type, nugget=0.5, sill=2.0, range_param=4.0)
            assert predict_variogram(model, np.array([4.0]))[0] == pytest.approx(2.0)

    def test_call_on_locations(self):
        model = VariogramModel("gaussian", sill=1.0, range_param=5.0)
        expected = 1.0 - np.exp(-(5.0**2) / 25.0)
        assert model(np.array([0.0, 0.0]), np.array([3.0, 4.0])) == pytest.approx(expected)
        assert model(np.array([1.0]), np.array([1.0])) == 0.0

    def test_pairwise_symmetric(self):
        np.random.seed(0)
        coords = np.random.rand(15, 3) * 10
        model = VariogramModel("spherical", range_param=4.0)
        gamma = model.pairwise(coords)
        assert gamma.shape == (15, 15)
        np.testing.assert_array_equal(gamma, gamma.T)
        np.testing.assert_array_equal(np.diag(gamma), 0.0)

    def test_pairwise_cross(self):
        model = VariogramModel("linear", sill=1.0, range_param=1.0)
        gamma = model.pairwise(np.array([[0.0], [1.0]]), np.array([[0.0], [2.0], [3.0]]))
        np.testing.assert_allclose(gamma, [[0.0, 2.0, 3.0], [1.0, 1.0, 2.0]])

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"model_type": "cubic"},
            {"nugget": -0.1},
            {"sill": 0.5, "nugget": 1.0},
            {"range_param": 0.0},
            {"model_type": "power", "exponent": 2.5},
        ],
    )
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ParameterError):
            VariogramModel(**kwargs)
