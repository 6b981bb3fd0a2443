"""Command line entry point printing one instrument readout."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List

from ..core.config import load_config
from ..core.errors import ConfigError, RecordingError, UnknownCategory
from ..core.roles import SourceRole
from ..core.service import InstrumentService, Readout, build_service
from ..io.generators import ReplayGenerator, SimulatedAutopilot, SimulatedGenerator, SimulatedInclinometer

INSTRUMENTS = ("hsi", "vsi", "speed", "nav-mode", "inclinometer")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="efis-adapter", description="EFIS instrument readouts")
    parser.add_argument("instrument", choices=INSTRUMENTS, help="Instrument to read")
    parser.add_argument(
        "identifier",
        help="Category id (or sensor array key for the inclinometer)",
    )
    parser.add_argument("--config", help="Path to config.yaml overriding defaults")
    parser.add_argument("--replay", help="Serve airframe data from a .jsonl.zst recording")
    parser.add_argument("--seed", type=int, default=0, help="Phase seed for simulated generators")
    parser.add_argument(
        "--offline",
        action="append",
        default=[],
        choices=[role.value for role in SourceRole],
        help="Simulate a role with no data (repeatable)",
    )
    parser.add_argument(
        "--failing",
        action="append",
        default=[],
        choices=[role.value for role in SourceRole],
        help="Simulate a role whose reads fail (repeatable)",
    )
    parser.add_argument(
        "--jsonl",
        action="store_true",
        help="Emit a JSON line instead of human readable output",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


async def _read(service: InstrumentService, instrument: str, identifier: str) -> Readout:
    if instrument == "hsi":
        return await service.hsi_readout(identifier)
    if instrument == "vsi":
        return await service.vsi_readout(identifier)
    if instrument == "speed":
        return await service.speed_readout(identifier)
    if instrument == "nav-mode":
        return await service.nav_mode_readout(identifier)
    return await service.inclinometer_readout(identifier)


def _emit(readout: Readout, jsonl: bool) -> None:
    payload = readout.to_dict()
    if jsonl:
        print(json.dumps(payload, ensure_ascii=False))
        return
    role = payload["role"] or "-"
    print(f"[{readout.instrument}] {readout.category_id} status={payload['status']} role={role}")
    view = payload["view"]
    if isinstance(view, list):
        for item in view:
            print("  " + " ".join(f"{key}={value}" for key, value in item.items()))
    elif view:
        for key, value in view.items():
            if key != "role":
                print(f"  {key}={value}")
    if readout.reason:
        print(f"  reason: {readout.reason}")


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigError as exc:
        parser.error(str(exc))

    if args.replay:
        try:
            generator = ReplayGenerator.from_file(args.replay)
        except RecordingError as exc:
            parser.error(str(exc))
    else:
        generator = SimulatedGenerator(
            seed=args.seed,
            offline=[SourceRole(name) for name in args.offline],
            failing=[SourceRole(name) for name in args.failing],
        )
    service = build_service(
        config,
        generator,
        SimulatedAutopilot(),
        inclinometer=SimulatedInclinometer(),
    )

    try:
        readout = asyncio.run(_read(service, args.instrument, args.identifier))
    except UnknownCategory as exc:
        parser.error(str(exc))
    finally:
        service.close()

    _emit(readout, args.jsonl)
    return 0 if readout.available else 1


if __name__ == "__main__":
    sys.exit(main())
