"""
Command line bridge for landmark files.

Input JSON format:
{
  "fps": 30.0,
  "height_cm": 170.0,
  "duration": 20.0,
  "frames": [{"timestamp": 0.0, "landmarks": {"left_ankle": [x, y, visibility], ...}}, ...]
}

CSV files in wide format (``timestamp``, ``<landmark>_x``, ``<landmark>_y``,
``<landmark>_visibility``) are accepted too.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import cadencekit
from cadencekit._config import EngineConfig

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _load_json_object(path: Path, what: str) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"{what} JSON must be an object")
    return payload


def _write_json(path: Path | None, payload: Dict[str, Any]) -> None:
    txt = json.dumps(payload, ensure_ascii=True, indent=2)
    if path is None:
        print(txt)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(txt)


def _parse_engines(value: str) -> List[str]:
    if not isinstance(value, str):
        raise ValueError("--engines must be a comma-separated string")
    parts = [p.strip().lower() for p in value.split(",") if p.strip()]
    if not parts:
        raise ValueError("--engines must not be empty")
    # Preserve user order while removing duplicates.
    return list(dict.fromkeys(parts))


def _load_config(path: Path | None) -> EngineConfig | None:
    if path is None:
        return None
    return EngineConfig.from_mapping(_load_json_object(path, "Config"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cadencekit",
        description="Compute step count, cadence and gait metrics from pose landmarks.",
    )
    parser.add_argument("--input", required=True, type=Path, help="Landmark file (.json or .csv).")
    parser.add_argument("--output", type=Path, default=None,
                        help="Output JSON path (stdout when omitted).")
    parser.add_argument("--height-cm", type=float, default=None,
                        help="Subject height in cm. Overrides height_cm from the input file.")
    parser.add_argument("--duration", type=float, default=None,
                        help="Recording duration in seconds (inferred from timestamps when omitted).")
    parser.add_argument("--fps", type=float, default=None,
                        help="Frame rate for frames without timestamps.")
    parser.add_argument("--engines", type=str, default=",".join(cadencekit.DEFAULT_ENGINES),
                        help="Comma-separated step engines, e.g. separation,vertical")
    parser.add_argument("--config", type=Path, default=None,
                        help="JSON file overriding engine configuration values.")
    parser.add_argument("--assessment", type=Path, default=None,
                        help="JSON file of qualitative fields to merge with the metrics.")
    parser.add_argument("--camel-case", action="store_true",
                        help="Emit camelCase metric names.")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=_LOG_FORMAT)

    if args.height_cm is not None and args.height_cm <= 0:
        raise ValueError("--height-cm must be strictly positive")
    engines = _parse_engines(args.engines)
    config = _load_config(args.config)

    result = cadencekit.analyze(
        args.input,
        height_cm=args.height_cm,
        duration=args.duration,
        fps=args.fps,
        engines=engines,
        config=config,
    )

    if args.assessment is not None:
        assessment = _load_json_object(args.assessment, "Assessment")
        payload = cadencekit.merge_assessment(result.metrics, assessment)
    else:
        payload = result.to_dict(camel_case=args.camel_case)
    _write_json(args.output, payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
