"""Command line interface for sample_chunks."""

from __future__ import annotations

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd

from . import __version__
from .config import StoreConfig, load_store_config
from .logging_utils import configure_logging
from .store import SeriesStore, replay


def _print_result(result: Any, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result, indent=2, default=str))
    else:
        print(result)


def load_samples(path: str | Path, value_column: str | None = None) -> List[Dict[str, Any]]:
    """Load sample rows from CSV, JSON list, or JSONL file.

    Plain numbers become rows with a single ``value`` series. CSV files keep
    every numeric column unless ``value_column`` selects one.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in {".json", ".jsonl"}:
        if suffix == ".jsonl":
            items = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
        else:
            items = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(items, list):
                raise ValueError("JSON sample file must contain a list")
        rows: List[Dict[str, Any]] = []
        for item in items:
            if isinstance(item, (int, float)):
                rows.append({"value": float(item)})
            elif isinstance(item, dict):
                rows.append({value_column: item[value_column]} if value_column else dict(item))
            else:
                raise ValueError(f"Unsupported sample entry: {item!r}")
        return rows

    df = pd.read_csv(path)
    if value_column is not None:
        columns = [value_column]
    else:
        columns = list(df.select_dtypes(include="number").columns)
        if not columns:
            raise ValueError("CSV sample file must contain at least one numeric column")
    return [dict(zip(columns, row)) for row in df[columns].astype(float).itertuples(index=False, name=None)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sample-chunks",
        description="Replay sample files through bounded, absolutely indexed series windows.",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON logs")

    subparsers = parser.add_subparsers(dest="command", required=True)

    replay_cmd = subparsers.add_parser("replay", help="Replay a sample file through a series store")
    replay_cmd.add_argument("samples", type=Path, help="Path to CSV/JSON/JSONL samples")
    replay_cmd.add_argument("--config", type=Path, help="Store configuration (YAML or JSON)")
    replay_cmd.add_argument("--capacity", type=int, help="Maximum values retained per series")
    replay_cmd.add_argument("--max-age-s", type=float, help="Prune samples older than this many seconds")
    replay_cmd.add_argument("--overflow", choices=["raise", "drop_oldest"], help="What to do when a series is full")
    replay_cmd.add_argument("--sample-rate", type=float, default=1.0, help="Sample rate used for timestamps")
    replay_cmd.add_argument("--value-column", type=str, help="Single column to replay from CSV/JSON objects")
    replay_cmd.add_argument("--json", action="store_true", help="Emit summary as JSON")

    inspect = subparsers.add_parser("inspect-config", help="Validate and print a store configuration")
    inspect.add_argument("config", type=Path, help="Path to store configuration")
    inspect.add_argument("--json", action="store_true", help="Emit configuration as JSON")

    subparsers.add_parser("version", help="Display the installed version")

    return parser


def _replay_config(args: argparse.Namespace, samples: Sequence[Dict[str, Any]]) -> StoreConfig:
    config = load_store_config(args.config) if args.config else StoreConfig()
    raw = config.model_dump()
    for field in ("capacity", "max_age_s", "overflow"):
        value = getattr(args, field)
        if value is not None:
            raw[field] = value
    if not raw["series"] and samples:
        raw["series"] = list(samples[0])
    return StoreConfig.from_mapping(raw)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_logs=args.json_logs)

    if args.command == "replay":
        samples = load_samples(args.samples, value_column=args.value_column)
        store = SeriesStore(_replay_config(args, samples))
        count = replay(store, samples, start=datetime.now(timezone.utc), sample_rate=args.sample_rate)
        result = {
            "samples": count,
            "base": store.timeline.base,
            "next_index": store.timeline.next_index,
            "series": store.summary(),
        }
        if args.json:
            _print_result(result, as_json=True)
        else:
            print(f"Replayed {count} samples into {len(store.names)} series (base={result['base']})")
            for name, info in result["series"].items():
                print(f"  {name}: base={info['base']} len={info['len']} first={info['first']} last={info['last']}")
    elif args.command == "inspect-config":
        config = load_store_config(args.config)
        if args.json:
            _print_result(config.model_dump(), as_json=True)
        else:
            for key, value in config.model_dump().items():
                print(f"{key}: {value}")
    elif args.command == "version":
        print(__version__)
    else:  # pragma: no cover - argparse enforces choices
        parser.error(f"Unknown command {args.command}")


if __name__ == "__main__":  # pragma: no cover
    main()
