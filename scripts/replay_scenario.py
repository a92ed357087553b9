#!/usr/bin/env python3
"""
Scenario Replay Script
======================

Standalone script to replay a mission scenario through the engine.

This script:
    1. Loads a scenario file (YAML or JSON)
    2. Feeds every event through a fresh engine
    3. Prints one line per event (or only alerts with --alerts-only)
    4. Reports decision counts

Usage:
    python scripts/replay_scenario.py data/scenarios/warehouse_fire.yaml
    python scripts/replay_scenario.py scenario.json --alerts-only
"""

import argparse
import logging
import sys

from surfacing_engine.config import settings
from surfacing_engine.engine import SignificanceEngine, SurfacingThresholds
from surfacing_engine.scenario import load_scenario, replay, summarize


# Logging is configured from config.yaml by surfacing_engine.config
logger = logging.getLogger(__name__)


def main() -> int:
    """Parse arguments and run the replay."""
    parser = argparse.ArgumentParser(description="Replay a detection scenario")
    parser.add_argument("path", help="Scenario file (YAML or JSON)")
    parser.add_argument(
        "--alerts-only",
        action="store_true",
        help="Print only surface and auto-dispatch decisions",
    )
    args = parser.parse_args()

    scenario = load_scenario(args.path)
    engine = SignificanceEngine(thresholds=SurfacingThresholds.from_settings(settings))

    results = []
    for index, result in enumerate(replay(scenario, engine)):
        results.append(result)
        if args.alerts_only and not result.decision.is_alert:
            continue

        signals = result.signals
        label = signals.label if signals else "-"
        persistence = signals.persistence_count if signals else 0
        print(
            f"{index:4d}  t={result.timestamp}  {label:<10} "
            f"{result.decision.value:<14} {result.reason_code.value:<32} "
            f"persist={persistence}"
        )

    counts = summarize(results)
    logger.info(f"Scenario '{scenario.name}': {len(results)} events")
    for decision, count in counts.items():
        logger.info(f"  {decision:<14} {count}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
