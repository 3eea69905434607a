"""Performance benchmarks for simulation operations."""

import time
from typing import Dict

import numpy as np

from geokriging import (
    BallNeighborhood,
    GeoTable,
    PointSet,
    RegularGrid,
    SeqGaussSim,
    SimulationProblem,
    VariogramModel,
)
from geokriging.primitives.simulation import sequential_gaussian_simulation


def benchmark_sgs(
    n_samples: int = 50,
    n_targets: int = 1000,
    n_realizations: int = 10,
) -> Dict[str, float]:
    """Benchmark Sequential Gaussian Simulation on scattered targets.

    Args:
        n_samples: Number of sample points.
        n_targets: Number of target points to simulate.
        n_realizations: Number of realizations to generate.

    Returns:
        Dictionary with timing results.
    """
    np.random.seed(42)

    samples = PointSet(coordinates=np.random.rand(n_samples, 2) * 1000)
    sample_values = np.random.randn(n_samples)
    targets = PointSet(coordinates=np.random.rand(n_targets, 2) * 1000)

    variogram = VariogramModel(
        model_type="spherical",
        nugget=0.1,
        sill=1.0,
        range_param=100.0,
    )

    start = time.perf_counter()
    sequential_gaussian_simulation(
        samples,
        sample_values,
        targets,
        variogram,
        n_realizations=n_realizations,
        mean=0.0,
        random_seed=42,
    )
    total_time = time.perf_counter() - start

    return {
        "n_samples": n_samples,
        "n_targets": n_targets,
        "n_realizations": n_realizations,
        "total_time_seconds": total_time,
        "time_per_realization": total_time / n_realizations,
        "targets_per_second": (n_targets * n_realizations) / total_time,
    }


def benchmark_sgs_scalability() -> Dict[str, Dict[str, float]]:
    """Benchmark SGS across different problem sizes.

    Returns:
        Dictionary with results for different sizes.
    """
    results = {}

    configs = [
        ("small", 30, 500, 5),
        ("medium", 50, 1000, 10),
        ("large", 100, 2000, 10),
    ]

    for size_name, n_samples, n_targets, n_realizations in configs:
        print(f"  Benchmarking {size_name} ({n_samples} samples, {n_targets} targets, {n_realizations} realizations)...")
        results[size_name] = benchmark_sgs(
            n_samples=n_samples,
            n_targets=n_targets,
            n_realizations=n_realizations,
        )

    return results


def benchmark_sgs_threads(
    grid_size: int = 40,
    n_realizations: int = 8,
    n_jobs: int = 4,
) -> Dict[str, float]:
    """Compare serial and threaded realizations of the SeqGaussSim solver.

    Args:
        grid_size: Cells per axis of the square grid.
        n_realizations: Number of realizations.
        n_jobs: Worker threads for the threaded run.

    Returns:
        Dictionary with timing results.
    """
    np.random.seed(42)

    coords = np.random.rand(30, 2) * grid_size
    table = GeoTable.from_arrays(coords, z=np.random.randn(30))
    problem = SimulationProblem(
        RegularGrid((grid_size, grid_size)), "z", n_realizations=n_realizations, data=table
    )
    solver = SeqGaussSim(
        {
            "z": {
                "variogram": VariogramModel("exponential", range_param=grid_size / 5),
                "neighborhood": BallNeighborhood(grid_size / 4),
                "max_neighbors": 12,
                "path": "random",
            }
        }
    )

    start = time.perf_counter()
    solver.solve(problem, random_seed=42)
    serial_time = time.perf_counter() - start

    start = time.perf_counter()
    solver.solve(problem, random_seed=42, n_jobs=n_jobs)
    threaded_time = time.perf_counter() - start

    return {
        "n_locations": grid_size * grid_size,
        "n_realizations": n_realizations,
        "n_jobs": n_jobs,
        "serial_time_seconds": serial_time,
        "threaded_time_seconds": threaded_time,
    }


def run_all_simulation_benchmarks() -> Dict[str, Dict]:
    """Run all simulation benchmarks and return results.

    Returns:
        Dictionary with all benchmark results.
    """
    results = {}

    print("Benchmarking Sequential Gaussian Simulation scalability...")
    results["sgs_scalability"] = benchmark_sgs_scalability()

    print("Benchmarking threaded realizations...")
    results["sgs_threads"] = benchmark_sgs_threads()

    return results


if __name__ == "__main__":
    """Run benchmarks and print results."""
    results = run_all_simulation_benchmarks()

    print("\n" + "=" * 60)
    print("SIMULATION PERFORMANCE BENCHMARKS")
    print("=" * 60)

    print("\nSequential Gaussian Simulation Scalability:")
    for size, data in results["sgs_scalability"].items():
        print(f"  {size:8s}: {data['n_samples']:3d} samples, {data['n_targets']:5d} targets, {data['n_realizations']:2d} realizations")
        print(f"            Total time: {data['total_time_seconds']:6.2f} s")
        print(f"            Time per realization: {data['time_per_realization']:6.2f} s")
        print(f"            Throughput: {data['targets_per_second']:8.0f} targets/s")

    threads = results["sgs_threads"]
    print(f"\nSeqGaussSim ({threads['n_locations']} locations, "
          f"{threads['n_realizations']} realizations):")
    print(f"  Serial:          {threads['serial_time_seconds']:6.2f} s")
    print(f"  {threads['n_jobs']} threads:       {threads['threaded_time_seconds']:6.2f} s")
