"""Benchmark harness for ring signature cost versus ring size.

For each ring size this script seeds a fresh environment, issues a
credential, and times key generation, ring writes, signing and verification.
Results are appended to artifacts/metrics/ring_metrics.csv.
"""

from __future__ import annotations

import argparse
import csv
import time
import sys
from pathlib import Path
from typing import Dict, Iterable, List

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ringkyc.credential import issue_credential, new_challenge
from ringkyc.keys import generate_keypair, generate_keys
from ringkyc.state import CredentialEnvironment


METRICS_DIR = Path("artifacts/metrics")
RING_CSV = METRICS_DIR / "ring_metrics.csv"

RING_HEADER = ["ring_size", "iteration", "phase", "duration_ms", "notes"]


def append_rows(path: Path, header: List[str], rows: Iterable[Dict[str, object]]) -> None:
    """Append rows to a CSV file, creating it with headers when missing."""

    path.parent.mkdir(parents=True, exist_ok=True)
    file_exists = path.exists()

    with path.open("a", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=header)
        if not file_exists:
            writer.writeheader()
        for row in rows:
            writer.writerow(row)


def _row(ring_size: int, iteration: int, phase: str, start: float, notes: str = "") -> Dict[str, object]:
    return {
        "ring_size": ring_size,
        "iteration": iteration,
        "phase": phase,
        "duration_ms": round((time.perf_counter() - start) * 1000.0, 3),
        "notes": notes,
    }


def run_ring_size(ring_size: int, iterations: int) -> List[Dict[str, object]]:
    """Time every engine phase for one ring size."""

    rows: List[Dict[str, object]] = []
    env = CredentialEnvironment()
    env.initialize("bench-admin")
    issuer = generate_keypair()
    env.register_issuer(issuer.pk, caller="bench-admin")

    start = time.perf_counter()
    batch = generate_keys(ring_size)
    rows.append(_row(ring_size, 0, "generate_keys", start))
    batch.wipe()

    for iteration in range(1, iterations + 1):
        start = time.perf_counter()
        credential = issue_credential(env, issuer, f"bench-{iteration}", ["bench"], decoys=ring_size - 1)
        rows.append(_row(ring_size, iteration, "issue_credential", start))

        challenge = new_challenge()
        start = time.perf_counter()
        signature = credential.prove("bench", challenge)
        rows.append(_row(ring_size, iteration, "sign", start))

        start = time.perf_counter()
        ok = env.verify_attribute(challenge, signature, "bench")
        rows.append(_row(ring_size, iteration, "verify", start, notes=f"valid={ok}"))
        if not ok:
            raise RuntimeError(f"benchmark signature failed to verify at ring size {ring_size}")

        credential.wipe()

    return rows


def main() -> None:
    parser = argparse.ArgumentParser(description="Ring signature benchmarks")
    parser.add_argument(
        "--ring-sizes",
        type=int,
        nargs="+",
        default=[2, 4, 8, 16],
        help="Ring sizes to measure",
    )
    parser.add_argument("--iterations", type=int, default=3, help="Runs per ring size")
    parser.add_argument("--output", type=Path, default=RING_CSV, help="CSV output path")
    parser.add_argument("--clean", action="store_true", help="Remove previous results first")
    args = parser.parse_args()

    if args.clean and args.output.exists():
        args.output.unlink()

    for ring_size in args.ring_sizes:
        print(f"measuring ring size {ring_size} ({args.iterations} iterations)...")
        rows = run_ring_size(ring_size, args.iterations)
        append_rows(args.output, RING_HEADER, rows)
        verify_ms = [r["duration_ms"] for r in rows if r["phase"] == "verify"]
        print(f"  mean verify: {sum(verify_ms) / len(verify_ms):.1f} ms")

    print(f"results appended to {args.output}")


if __name__ == "__main__":
    main()
