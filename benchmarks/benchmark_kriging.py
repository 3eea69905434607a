"""Performance benchmarks for kriging operations."""

import time
from typing import Dict, Optional

import numpy as np

from geokriging import (
    EstimationProblem,
    GeoTable,
    Kriging,
    PointSet,
    RegularGrid,
    VariogramModel,
)
from geokriging.primitives.kriging import (
    ExternalDriftKriging,
    OrdinaryKriging,
    SimpleKriging,
    UniversalKriging,
)


def _variogram() -> VariogramModel:
    return VariogramModel(
        model_type="spherical",
        nugget=0.1,
        sill=2.0,
        range_param=100.0,
    )


def benchmark_ordinary_kriging(
    n_samples: int = 100,
    n_targets: int = 1000,
    n_dims: int = 3,
) -> Dict[str, float]:
    """Benchmark Ordinary Kriging fit and predict.

    Args:
        n_samples: Number of sample points.
        n_targets: Number of target points to predict.
        n_dims: Number of dimensions (2 or 3).

    Returns:
        Dictionary with timing results.
    """
    np.random.seed(42)

    samples = PointSet(coordinates=np.random.rand(n_samples, n_dims) * 1000)
    sample_values = np.random.rand(n_samples) * 10
    targets = PointSet(coordinates=np.random.rand(n_targets, n_dims) * 1000)

    kriging = OrdinaryKriging(variogram_model=_variogram())
    start = time.perf_counter()
    fitted = kriging.fit(samples, sample_values)
    fit_time = time.perf_counter() - start

    start = time.perf_counter()
    fitted.predict_many(targets)
    predict_time = time.perf_counter() - start

    return {
        "n_samples": n_samples,
        "n_targets": n_targets,
        "n_dims": n_dims,
        "fit_time_seconds": fit_time,
        "predict_time_seconds": predict_time,
        "predictions_per_second": n_targets / predict_time,
    }


def benchmark_kriging_types(
    n_samples: int = 50,
    n_targets: int = 500,
) -> Dict[str, Dict[str, float]]:
    """Benchmark the four kriging variants on the same data.

    Args:
        n_samples: Number of sample points.
        n_targets: Number of target points.

    Returns:
        Dictionary with results for each kriging type.
    """
    np.random.seed(42)

    samples = PointSet(coordinates=np.random.rand(n_samples, 2) * 1000)
    sample_values = np.random.rand(n_samples) * 10
    targets = PointSet(coordinates=np.random.rand(n_targets, 2) * 1000)

    variogram = _variogram()
    estimators = {
        "simple": SimpleKriging(variogram, mean=float(np.mean(sample_values))),
        "ordinary": OrdinaryKriging(variogram),
        "universal": UniversalKriging(variogram, degree=1, dim=2),
        "external_drift": ExternalDriftKriging(
            variogram, drifts=[lambda x: 1.0, lambda x: x[0] / 1000.0]
        ),
    }

    results = {}
    for name, estimator in estimators.items():
        start = time.perf_counter()
        fitted = estimator.fit(samples, sample_values)
        fit_time = time.perf_counter() - start
        start = time.perf_counter()
        fitted.predict_many(targets)
        predict_time = time.perf_counter() - start
        results[name] = {
            "fit_time": fit_time,
            "predict_time": predict_time,
        }

    return results


def benchmark_kriging_solver(
    n_samples: int = 200,
    grid_size: int = 50,
    max_neighbors: Optional[int] = 16,
    n_jobs: int = 1,
) -> Dict[str, float]:
    """Benchmark the Kriging solver over a 2D grid.

    Args:
        n_samples: Number of sample points.
        grid_size: Cells per axis of the square grid.
        max_neighbors: Neighbors per location; None for exact mode.
        n_jobs: Worker threads.

    Returns:
        Dictionary with timing results.
    """
    np.random.seed(42)

    coords = np.random.rand(n_samples, 2) * grid_size
    table = GeoTable.from_arrays(coords, z=np.random.rand(n_samples))
    grid = RegularGrid((grid_size, grid_size))
    problem = EstimationProblem(table, grid, "z")

    variogram = VariogramModel("spherical", sill=1.0, range_param=grid_size / 4)
    solver = Kriging({"z": {"variogram": variogram, "max_neighbors": max_neighbors}})

    start = time.perf_counter()
    solver.solve(problem, n_jobs=n_jobs)
    total_time = time.perf_counter() - start

    return {
        "n_samples": n_samples,
        "n_locations": grid.n_elements,
        "max_neighbors": max_neighbors,
        "n_jobs": n_jobs,
        "total_time_seconds": total_time,
        "locations_per_second": grid.n_elements / total_time,
    }


def run_all_kriging_benchmarks() -> Dict[str, Dict]:
    """Run all kriging benchmarks and return results.

    Returns:
        Dictionary with all benchmark results.
    """
    results = {}

    print("Benchmarking Ordinary Kriging scalability...")
    results["ordinary_scalability"] = {
        "small": benchmark_ordinary_kriging(50, 500, 2),
        "medium": benchmark_ordinary_kriging(200, 2000, 2),
        "large": benchmark_ordinary_kriging(500, 5000, 2),
        "3d": benchmark_ordinary_kriging(100, 1000, 3),
    }

    print("Benchmarking different kriging types...")
    results["kriging_types"] = benchmark_kriging_types(50, 500)

    print("Benchmarking the Kriging solver...")
    results["solver"] = {
        "exact": benchmark_kriging_solver(200, 50, None),
        "local": benchmark_kriging_solver(200, 50, 16),
        "local_threads": benchmark_kriging_solver(200, 50, 16, n_jobs=4),
    }

    return results


if __name__ == "__main__":
    """Run benchmarks and print results."""
    results = run_all_kriging_benchmarks()

    print("\n" + "=" * 60)
    print("KRIGING PERFORMANCE BENCHMARKS")
    print("=" * 60)

    print("\nOrdinary Kriging Scalability:")
    for size, data in results["ordinary_scalability"].items():
        print(f"  {size:8s}: {data['n_samples']:4d} samples, {data['n_targets']:5d} targets")
        print(f"            Fit: {data['fit_time_seconds']*1000:6.2f} ms")
        print(f"            Predict: {data['predict_time_seconds']*1000:6.2f} ms")
        print(f"            Throughput: {data['predictions_per_second']:8.0f} pred/s")

    print("\nKriging Type Comparison (50 samples, 500 targets):")
    for ktype, data in results["kriging_types"].items():
        print(f"  {ktype:14s}: Fit {data['fit_time']*1000:6.2f} ms, "
              f"Predict {data['predict_time']*1000:6.2f} ms")

    print("\nKriging Solver (200 samples, 50 x 50 grid):")
    for mode, data in results["solver"].items():
        print(f"  {mode:14s}: {data['total_time_seconds']:6.2f} s, "
              f"{data['locations_per_second']:8.0f} locations/s")
