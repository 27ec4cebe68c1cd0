"""
Command-line runner for the simulation engine.

Drives the engine for a fixed number of ticks and prints snapshots, either
back-to-back or paced by the configured tick interval. Rendering stays out of
the engine: this module only formats snapshots it receives.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from typing import List, Optional, TextIO, Tuple

from dotenv import load_dotenv

from vitalsync.analytics.correlation import CorrelationMatrix
from vitalsync.core.config import config
from vitalsync.core.logging_config import setup_logging
from vitalsync.engine import EngineSnapshot, VitalSignEngine
from vitalsync.signals.randomness import SeededRandomSource

load_dotenv()

logger = logging.getLogger("vitalsync.cli")


def strongest_pair(matrix: CorrelationMatrix) -> Optional[Tuple[Tuple[str, str], float]]:
    """Off-diagonal pair with the largest |r|; ties keep matrix order."""
    off_diagonal = [(pair, r) for pair, r in matrix.pairs().items() if pair[0] != pair[1]]
    if not off_diagonal:
        return None
    return max(off_diagonal, key=lambda item: abs(item[1]))


def format_summary(snapshot: EngineSnapshot) -> str:
    """One-line human-readable digest of a snapshot."""
    vitals = " ".join(
        f"{s.label}={s.value}{s.unit}" for s in snapshot.signals.values()
    )
    risks = " ".join(f"{name}={r.display_value}" for name, r in snapshot.risks.items())
    mode = "ANOMALY" if snapshot.anomaly.state.active else "normal"
    strongest = strongest_pair(snapshot.correlations)
    corr = f"{strongest[0][0]}~{strongest[0][1]}={strongest[1]:+.2f}" if strongest else "n/a"
    return (
        f"[tick {snapshot.tick:>4}] {mode:<7} {vitals} | risk {risks} | corr {corr} | "
        f"events {snapshot.stats.total} (critical {snapshot.stats.critical}, "
        f"resolved {snapshot.stats.resolved})"
    )


def emit(snapshot: EngineSnapshot, output_format: str, stream: TextIO) -> None:
    if output_format == "json":
        stream.write(snapshot.model_dump_json() + "\n")
    else:
        stream.write(format_summary(snapshot) + "\n")
    stream.flush()


def run(
    ticks: int,
    seed: Optional[int] = None,
    realtime: bool = False,
    output_format: str = "summary",
    stream: Optional[TextIO] = None,
) -> EngineSnapshot:
    stream = stream or sys.stdout
    engine = VitalSignEngine(rng=SeededRandomSource(seed if seed is not None else config.random_seed))
    snapshot = engine.initialize()
    emit(snapshot, output_format, stream)

    interval = engine.settings.tick_interval_ms / 1000.0
    for _ in range(ticks):
        if realtime:
            time.sleep(interval)
        snapshot = engine.tick()
        emit(snapshot, output_format, stream)

    logger.info(
        "Finished %d ticks; %d events logged (%d resolved)",
        snapshot.tick,
        snapshot.stats.total,
        snapshot.stats.resolved,
    )
    return snapshot


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="VitalSync vital-sign simulation runner")
    parser.add_argument("--ticks", type=int, default=60, help="Number of ticks to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Pace ticks by the configured tick interval",
    )
    parser.add_argument("--format", choices=["summary", "json"], default="summary")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", config.log_level))
    args = parser.parse_args(argv)

    if args.ticks < 0:
        parser.error("--ticks must be non-negative")

    setup_logging("vitalsync", level=args.log_level)
    try:
        run(args.ticks, seed=args.seed, realtime=args.realtime, output_format=args.format)
    except KeyboardInterrupt:
        logger.info("Interrupted; stopping simulation")


if __name__ == "__main__":
    main()
