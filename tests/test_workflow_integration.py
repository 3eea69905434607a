"""Integration tests for complete geostatistical workflows.

Tests end-to-end workflows combining objects, primitives and tasks.
"""

import numpy as np
import pytest

pytestmark = pytest.mark.integration

from geokriging import (
    BallNeighborhood,
    EstimationProblem,
    GeoTable,
    Kriging,
    PointSet,
    RegularGrid,
    SeqGaussSim,
    SimulationProblem,
    VariogramModel,
)
from geokriging.utils.errors import ConfigurationError, ParameterError
from geokriging.workflows.geostatistics import GeostatisticalModel, GeostatisticalResult


@pytest.fixture
def grades():
    """Synthetic spatially correlated grades on a 100 x 100 area."""
    np.random.seed(42)
    n_samples = 40
    coords = np.random.rand(n_samples, 2) * 100
    values = (
        coords[:, 0] * 0.02
        + np.sin(coords[:, 1] / 15.0)
        + np.random.randn(n_samples) * 0.1
    )
    return coords, values


@pytest.fixture
def variogram():
    return VariogramModel("spherical", nugget=0.0, sill=1.0, range_param=40.0)


class TestGeostatisticalModel:
    """Integration tests for the points-plus-values facade."""

    @pytest.mark.parametrize("kriging_type", ["ordinary", "simple", "universal"])
    def test_estimate_honors_data(self, grades, variogram, kriging_type):
        coords, values = grades
        model = GeostatisticalModel(
            data=PointSet(coordinates=coords),
            values=values,
            kriging_type=kriging_type,
            variogram_model=variogram,
        )
        result = model.estimate(coords)

        assert isinstance(result, GeostatisticalResult)
        np.testing.assert_allclose(result.estimates, values, atol=1e-6)
        np.testing.assert_allclose(result.variance, 0.0, atol=1e-6)
        assert result.realizations is None

    def test_external_drift(self, grades, variogram):
        coords, values = grades
        model = GeostatisticalModel(
            data=coords,
            values=values,
            kriging_type="external_drift",
            variogram_model=variogram,
            drifts=[lambda x: 1.0, lambda x: x[0]],
        )
        result = model.estimate(RegularGrid((20, 20), spacing=(5.0, 5.0)))
        assert result.estimates.shape == (400,)
        assert np.all(np.isfinite(result.estimates))

    def test_local_estimation_with_simulation(self, grades, variogram):
        coords, values = grades
        model = GeostatisticalModel(
            data=coords,
            values=values,
            variogram_model=variogram,
            neighborhood=BallNeighborhood(30.0),
            max_neighbors=8,
            n_realizations=3,
            random_seed=7,
        )
        grid = RegularGrid((25, 25), spacing=(4.0, 4.0))
        result = model.estimate(grid)

        assert result.estimates.shape == (625,)
        assert result.realizations.shape == (3, 625)
        assert np.all(np.isfinite(result.realizations))
        assert np.all(result.variance[np.isfinite(result.variance)] >= -1e-10)

    @pytest.mark.parametrize("drifts", [None, []])
    def test_external_drift_requires_drifts(self, grades, variogram, drifts):
        coords, values = grades
        model = GeostatisticalModel(
            data=coords,
            values=values,
            kriging_type="external_drift",
            variogram_model=variogram,
            drifts=drifts,
        )
        with pytest.raises(ConfigurationError, match="drifts"):
            model.estimate(coords[:3])

    def test_simple_mean_not_stored(self, grades, variogram):
        coords, values = grades
        model = GeostatisticalModel(
            data=coords, values=values, kriging_type="simple", variogram_model=variogram
        )
        model.estimate(coords[:3])
        assert model.mean is None

    def test_unknown_kriging_type(self, grades):
        coords, values = grades
        model = GeostatisticalModel(data=coords, values=values, kriging_type="indicator")
        with pytest.raises(ParameterError, match="kriging_type"):
            model.estimate(coords[:3])


class TestSolverWorkflow:
    """Estimation followed by simulation on the same table."""

    def test_estimate_then_simulate(self, grades, variogram):
        coords, values = grades
        scores = (values - values.mean()) / values.std()
        table = GeoTable.from_arrays(coords, grade=values, score=scores)
        grid = RegularGrid((30, 30), spacing=(3.4, 3.4))

        estimation = Kriging(
            {
                "grade": {"variogram": variogram, "max_neighbors": 12},
                "score": {"variogram": variogram, "mean": 0.0},
            }
        ).solve(EstimationProblem(table, grid, ["grade", "score"]), n_jobs=2)

        grade_mean, grade_var = estimation["grade"]
        score_mean, _ = estimation["score"]
        assert np.all(np.isfinite(grade_mean))
        assert np.all(grade_var >= -1e-10)
        assert np.nanmin(grade_mean) > values.min() - 1.0
        assert np.nanmax(grade_mean) < values.max() + 1.0
        assert np.all(np.abs(score_mean) < 5.0)

        simulation = SeqGaussSim(
            {"score": {"variogram": variogram, "mean": 0.0, "max_neighbors": 12}}
        ).solve(
            SimulationProblem(grid, "score", n_realizations=2, data=table),
            random_seed=11,
            n_jobs=2,
        )
        reals = simulation["score"]
        assert len(reals) == 2
        assert all(np.all(np.isfinite(r)) for r in reals)

        df = estimation.to_dataframe()
        assert {"grade_mean", "grade_variance", "score_mean"} <= set(df.columns)
