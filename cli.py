"""
Chart replay CLI - indicator calculation and replay from candle files.

Usage:
    python cli.py indicators [--category CATEGORY]
    python cli.py calc FILE INDICATOR [-p KEY=VALUE ...]
    python cli.py replay FILE INDICATOR [-p KEY=VALUE ...] [--start N] [--end N]
"""

import argparse
import csv
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from config import ConfigError, load_config
from domain.indicators import IndicatorOutput, default_registry
from domain.indicators.base import BandOutput, CalculatedIndicator, MultiLineOutput
from domain.models import Candle, ConfigValue
from engine import IndicatorEngine, InstanceStore, ReplayController, candles_to_ohlcv, derive_series, parse_candles
from ports.errors import EngineError


class _ManualScheduler:
    """Scheduler that never fires; the CLI drives the playhead with seek()."""

    class _Token:
        def cancel(self) -> None:
            pass

    def after(self, ms, fn):
        return self._Token()


def load_candles(path: Path) -> list[Candle]:
    """
    Read candles from a CSV or JSON file.

    CSV needs a header with date, open, high, low, close and optionally
    volume. JSON is a list of objects with the same keys. Candles are
    returned newest-first whatever the file order.
    """
    if path.suffix.lower() == ".json":
        raw = json.loads(path.read_text())
        if isinstance(raw, dict):
            raw = raw.get("results", [])
    else:
        with open(path, newline="") as f:
            raw = [
                {k: v for k, v in row.items() if v not in ("", None)}
                for row in csv.DictReader(f)
            ]

    candles = parse_candles(raw)
    return sorted(candles, key=lambda c: c.timestamp, reverse=True)


def parse_param(text: str) -> tuple[str, ConfigValue]:
    """Parse KEY=VALUE into a typed config entry."""
    if "=" not in text:
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got: {text}")
    key, value = text.split("=", 1)
    lowered = value.lower()
    if lowered in ("true", "false"):
        return key, lowered == "true"
    for cast in (int, float):
        try:
            return key, cast(value)
        except ValueError:
            continue
    return key, value


def latest_values(output: IndicatorOutput) -> dict[str, float]:
    """Most recent value of every sub-series."""
    if isinstance(output, BandOutput):
        series = {"upper": output.upper, "middle": output.middle, "lower": output.lower}
    elif isinstance(output, MultiLineOutput):
        series = output.series
    else:
        series = {"value": output.data}
    return {key: points[-1].value for key, points in series.items() if points}


def format_result(result: CalculatedIndicator) -> str:
    if result.error:
        return f"error: {result.error}"
    values = latest_values(result.output)
    if not values:
        return "-"
    return "  ".join(f"{k}={v:.4f}" for k, v in values.items())


def _build_store(args: argparse.Namespace) -> InstanceStore:
    store = InstanceStore()
    store.add(args.indicator, dict(args.param or []))
    return store


def cmd_indicators(args: argparse.Namespace) -> int:
    """List available indicators."""
    for group in default_registry.get_indicators_grouped():
        if args.category and group.category.value != args.category:
            continue
        print(f"\n## {group.name} ({group.category.value})")
        for definition in group.indicators:
            params = ", ".join(f"{p.key}={p.default}" for p in definition.parameters)
            print(f"  {definition.id:<26} {definition.name}")
            print(f"  {'':<26} {params}")
    return 0


def cmd_calc(args: argparse.Namespace) -> int:
    """Calculate an indicator over a candle file."""
    candles = load_candles(Path(args.file))
    store = _build_store(args)

    engine = IndicatorEngine(config=args.config)
    result = engine.update(candles, store)

    for calculated in result.calculated:
        print(f"{calculated.instance.instance_id}: {format_result(calculated)}")
    return 0


def cmd_replay(args: argparse.Namespace) -> int:
    """Step through a candle file and print indicator values per step."""
    candles = load_candles(Path(args.file))
    store = _build_store(args)

    engine = IndicatorEngine(config=args.config)
    controller = ReplayController(_ManualScheduler(), args.config.replay, args.config.display)
    controller.set_total_steps(len(candles))
    controller.set_enabled(True)

    end = min(args.end or len(candles), len(candles))
    bars = derive_series(candles_to_ohlcv(candles), display=args.config.display).price

    for step in range(max(1, args.start), end + 1):
        controller.seek(step)
        result = engine.update(candles, store, replay_step=controller.indicator_display_index)
        label = controller.current_label(bars)
        for calculated in result.calculated:
            print(f"[{step:>5}] {label}  {format_result(calculated)}")

    print(f"Buffer recomputations: {engine.recompute_count}", file=sys.stderr)
    controller.dispose()
    engine.dispose()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="chartreplay",
        description="Technical indicator calculation and replay",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-c", "--config", dest="config_path", help="Path to a TOML config file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Indicators command
    indicators_parser = subparsers.add_parser("indicators", help="List available indicators")
    indicators_parser.add_argument(
        "--category",
        choices=["overlay", "panel"],
        help="Only show one category",
    )
    indicators_parser.set_defaults(func=cmd_indicators)

    # Calc command
    calc_parser = subparsers.add_parser("calc", help="Calculate an indicator over a candle file")
    calc_parser.add_argument("file", help="CSV or JSON candle file")
    calc_parser.add_argument("indicator", help="Indicator id (see 'indicators')")
    calc_parser.add_argument("-p", "--param", action="append", type=parse_param, help="KEY=VALUE override")
    calc_parser.set_defaults(func=cmd_calc)

    # Replay command
    replay_parser = subparsers.add_parser("replay", help="Replay a candle file step by step")
    replay_parser.add_argument("file", help="CSV or JSON candle file")
    replay_parser.add_argument("indicator", help="Indicator id (see 'indicators')")
    replay_parser.add_argument("-p", "--param", action="append", type=parse_param, help="KEY=VALUE override")
    replay_parser.add_argument("--start", type=int, default=1, help="First step")
    replay_parser.add_argument("--end", type=int, help="Last step")
    replay_parser.set_defaults(func=cmd_replay)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        args.config = load_config(args.config_path)
        return args.func(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except (EngineError, ValidationError, OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
