"""Record simulated airframe data for later replay."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Iterator, List, Sequence

from ..core.airframe import AirframeData
from ..core.categories import Category
from ..core.config import load_config
from ..core.errors import ConfigError
from ..core.roles import SourceRole
from ..io.generators import SimulatedGenerator
from ..io.recorder import AirframeRecording


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="efis-adapter-record", description="Record simulated airframe data"
    )
    parser.add_argument("output", help="Path of the .jsonl.zst recording to write")
    parser.add_argument("--config", help="Path to config.yaml overriding defaults")
    parser.add_argument("--samples", type=int, default=10, help="Records per role and category")
    parser.add_argument("--interval", type=float, default=0.1, help="Seconds between samples")
    parser.add_argument("--seed", type=int, default=0, help="Phase seed for the simulator")
    return parser


def _sample(
    generator: SimulatedGenerator, categories: Sequence[Category], roles: Sequence[SourceRole]
) -> Iterator[AirframeData]:
    for category in categories:
        for role in roles:
            data = generator.read(role, category)
            if data is not None:
                yield data


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.samples < 1:
        parser.error("--samples must be at least 1")

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigError as exc:
        parser.error(str(exc))

    generator = SimulatedGenerator(seed=args.seed)
    categories = [category for category in config.categories.values() if category.valid]
    with AirframeRecording(args.output) as recording:
        for idx in range(args.samples):
            recording.record_all(_sample(generator, categories, config.roles))
            if args.interval and idx + 1 < args.samples:
                time.sleep(args.interval)
    print(f"wrote {recording.count} records to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
