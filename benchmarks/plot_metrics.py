"""Plotting helpers for benchmark CSV outputs."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt


METRICS_DIR = Path("artifacts/metrics")


def load_csv(path: Path) -> Optional[pd.DataFrame]:
    if not path.exists():
        print(f"skipping {path} (missing)")
        return None
    return pd.read_csv(path)


def plot_ring_scaling(metrics: pd.DataFrame, output_dir: Path) -> None:
    timed = metrics[metrics["phase"].isin(["sign", "verify", "issue_credential"])]
    if timed.empty:
        return
    pivot = timed.pivot_table(
        index="ring_size",
        columns="phase",
        values="duration_ms",
        aggfunc="mean",
    ).sort_index()
    fig, ax = plt.subplots(figsize=(8, 4))
    pivot.plot(ax=ax, marker="o")
    ax.set_title("Ring Signature Timing")
    ax.set_ylabel("milliseconds")
    ax.set_xlabel("ring size")
    ax.grid(True, linestyle=":", linewidth=0.8)
    plt.tight_layout()
    output_path = output_dir / "ring_scaling.png"
    fig.savefig(output_path)
    plt.close(fig)
    print(f"wrote {output_path}")


def plot_keygen(metrics: pd.DataFrame, output_dir: Path) -> None:
    keygen = metrics[metrics["phase"] == "generate_keys"]
    if keygen.empty:
        return
    summary = keygen.groupby("ring_size")["duration_ms"].mean().sort_index()
    fig, ax = plt.subplots(figsize=(8, 4))
    summary.plot(kind="bar", ax=ax, color="#4072a5")
    ax.set_title("Key Generation Timing")
    ax.set_ylabel("milliseconds")
    ax.set_xlabel("keys generated")
    plt.tight_layout()
    output_path = output_dir / "keygen.png"
    fig.savefig(output_path)
    plt.close(fig)
    print(f"wrote {output_path}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Plot benchmark metrics")
    parser.add_argument(
        "--metrics-dir",
        type=Path,
        default=METRICS_DIR,
        help="Directory containing CSV files",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=METRICS_DIR,
        help="Directory for generated plots",
    )
    args = parser.parse_args()

    args.output_dir.mkdir(parents=True, exist_ok=True)

    metrics = load_csv(args.metrics_dir / "ring_metrics.csv")
    if metrics is not None:
        plot_ring_scaling(metrics, args.output_dir)
        plot_keygen(metrics, args.output_dir)


if __name__ == "__main__":
    main()
