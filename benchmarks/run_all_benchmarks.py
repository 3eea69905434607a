"""Run all performance benchmarks and generate report."""

import json
from pathlib import Path

from benchmark_kriging import run_all_kriging_benchmarks
from benchmark_simulation import run_all_simulation_benchmarks


def main():
    """Run all benchmarks and save results."""
    print("=" * 60)
    print("GEOKRIGING PERFORMANCE BENCHMARK SUITE")
    print("=" * 60)
    print()

    all_results = {}

    print("\n[1/2] Kriging Benchmarks")
    print("-" * 60)
    all_results["kriging"] = run_all_kriging_benchmarks()

    print("\n[2/2] Simulation Benchmarks")
    print("-" * 60)
    all_results["simulation"] = run_all_simulation_benchmarks()

    output_file = Path("benchmarks/results.json")
    output_file.parent.mkdir(exist_ok=True)

    # Convert numpy types to native Python types for JSON serialization
    def convert_to_native(obj):
        """Convert numpy types to native Python types."""
        if isinstance(obj, dict):
            return {k: convert_to_native(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [convert_to_native(item) for item in obj]
        elif hasattr(obj, "item"):  # numpy scalar
            return obj.item()
        else:
            return obj

    with open(output_file, "w") as f:
        json.dump(convert_to_native(all_results), f, indent=2)

    print(f"\nResults saved to {output_file}")

    print("\n" + "=" * 60)
    print("BENCHMARK SUMMARY")
    print("=" * 60)

    krig_results = all_results["kriging"]["ordinary_scalability"]
    print("\nOrdinary Kriging:")
    print(f"  Small (50 samples, 500 targets):    {krig_results['small']['predict_time_seconds']*1000:6.2f} ms")
    print(f"  Large (500 samples, 5000 targets):  {krig_results['large']['predict_time_seconds']*1000:6.2f} ms")

    solver_results = all_results["kriging"]["solver"]
    print("\nKriging Solver (2500 locations):")
    print(f"  Exact:                {solver_results['exact']['total_time_seconds']:6.2f} s")
    print(f"  16 neighbors:         {solver_results['local']['total_time_seconds']:6.2f} s")
    print(f"  16 neighbors, 4 jobs: {solver_results['local_threads']['total_time_seconds']:6.2f} s")

    sim_results = all_results["simulation"]["sgs_scalability"]
    print("\nSequential Gaussian Simulation:")
    print(f"  Small (500 targets, 5 realizations):  {sim_results['small']['total_time_seconds']:6.2f} s")
    print(f"  Large (2000 targets, 10 realizations): {sim_results['large']['total_time_seconds']:6.2f} s")


if __name__ == "__main__":
    main()
