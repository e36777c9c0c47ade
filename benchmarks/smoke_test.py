"""Quick smoke test for the ring benchmark suite.

Runs a minimal benchmark (ring sizes 2 and 4, one iteration) and plots it.
"""

import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).parent.parent
BENCHMARK_SCRIPT = REPO_ROOT / "benchmarks" / "ring_metrics.py"
PLOT_SCRIPT = REPO_ROOT / "benchmarks" / "plot_metrics.py"
METRICS_DIR = REPO_ROOT / "artifacts" / "metrics"


def main():
    print("=" * 70)
    print("  SMOKE TEST: Ring Benchmark Suite")
    print("=" * 70)
    print("\nRunning minimal benchmark (ring sizes 2, 4)...\n")

    benchmark_cmd = [
        sys.executable,
        str(BENCHMARK_SCRIPT),
        "--ring-sizes", "2", "4",
        "--iterations", "1",
        "--output", str(METRICS_DIR / "ring_metrics.csv"),
        "--clean",
    ]

    print(f"$ {' '.join(benchmark_cmd)}\n")
    result = subprocess.run(benchmark_cmd)

    if result.returncode != 0:
        print("\n✗ Benchmark failed")
        sys.exit(1)

    print("\n✓ Benchmark completed")

    print("\nGenerating plots...")
    plot_cmd = [
        sys.executable,
        str(PLOT_SCRIPT),
        "--metrics-dir", str(METRICS_DIR),
        "--output-dir", str(METRICS_DIR),
    ]

    print(f"$ {' '.join(plot_cmd)}\n")
    result = subprocess.run(plot_cmd)

    if result.returncode != 0:
        print("\n✗ Plot generation failed")
        sys.exit(1)

    print("\n✓ Plots generated")

    print("\n" + "=" * 70)
    print("  SMOKE TEST PASSED")
    print("=" * 70)
    print("\nGenerated files:")

    for csv_file in METRICS_DIR.glob("*.csv"):
        print(f"  CSV: {csv_file.name} ({csv_file.stat().st_size} bytes)")

    for png_file in METRICS_DIR.glob("*.png"):
        print(f"  PNG: {png_file.name} ({png_file.stat().st_size} bytes)")


if __name__ == "__main__":
    main()
