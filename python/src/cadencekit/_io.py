"""I/O utilities: load landmark files and the bundled example walks."""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List

from ._landmarks import Landmark

logger = logging.getLogger(__name__)

# ── Bundled examples ─────────────────────────────────────────────────

_EXAMPLE_MAP = {
    "healthy":   "healthy",
    "normal":    "healthy",
    "shuffling": "shuffling",
    "magnetic":  "shuffling",
    "parkinson": "shuffling",
    "pd":        "shuffling",
    "standing":  "standing",
    "still":     "standing",
}


def _normalize_example_name(name: str) -> str:
    return name.lower().strip().replace(" ", "").replace("-", "").replace("_", "")


def load_example(name: str = "healthy", duration: float = 20.0) -> dict:
    """Load a bundled example walk.

    Examples are generated deterministically by
    :func:`cadencekit._synthetic.synthesize_walk`.

    Parameters
    ----------
    name : str
        Example name.  Available: "healthy", "shuffling", "standing".
        Aliases: "normal" -> "healthy", "magnetic"/"parkinson"/"pd" ->
        "shuffling", "still" -> "standing".
    duration : float
        Length of the walk in seconds.

    Returns
    -------
    dict
        Keys: *frames* (list of dicts), *fps*, *height_cm*, *duration*,
        *description*, *name* and *ground_truth*.

    Examples
    --------
    >>> import cadencekit
    >>> walk = cadencekit.load_example("healthy")
    >>> len(walk["frames"])
    600
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Example name must be a non-empty string")
    key = _normalize_example_name(name)
    if key not in _EXAMPLE_MAP:
        raise ValueError(f"Unknown example {name!r}. Available: {list_examples()}")
    from ._synthetic import synthesize_walk
    return synthesize_walk(_EXAMPLE_MAP[key], duration=duration)


def list_examples() -> list:
    """List available example names.

    Returns
    -------
    list of str
        Primary names (without aliases).
    """
    return ["healthy", "shuffling", "standing"]


# ── Landmark files ───────────────────────────────────────────────────

def load_landmarks(path) -> Dict[str, Any]:
    """Load landmark frames from a JSON or CSV file.

    Parameters
    ----------
    path : str or Path
        ``.json`` file holding a payload object (``{"fps", "height_cm",
        "duration", "frames": [...]}``) or a bare list of frames, or a
        ``.csv`` file in wide format: a ``timestamp`` (or ``time``)
        column, optional ``frame_index``, and ``<landmark>_x``,
        ``<landmark>_y``, ``<landmark>_visibility`` columns.  Empty
        coordinates mean the landmark was not found in that frame.

    Returns
    -------
    dict
        Payload with at least *frames* and *source_file*.
    """
    if not isinstance(path, (str, Path)) or not str(path).strip():
        raise ValueError("path must be a non-empty string or Path")
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix not in (".json", ".csv"):
        raise ValueError(f"Unsupported file format: {file_path.suffix or '<none>'}")
    if not file_path.exists():
        raise FileNotFoundError(f"Landmark file not found: {file_path}")

    if suffix == ".json":
        payload = _load_json(file_path)
    else:
        payload = {"frames": _load_csv(file_path)}
    payload["source_file"] = str(file_path)
    logger.debug("Loaded %d frames from %s", len(payload["frames"]), file_path)
    return payload


def _load_json(path: Path) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc.msg}") from exc
    if isinstance(data, list):
        return {"frames": data}
    if not isinstance(data, dict):
        raise ValueError("Landmark JSON must be an object or a list of frames")
    if not isinstance(data.get("frames"), list):
        raise ValueError("Landmark JSON object must contain a 'frames' list")
    return data


def _load_csv(path: Path) -> List[Dict[str, Any]]:
    import pandas as pd

    df = pd.read_csv(path)
    time_col = "timestamp" if "timestamp" in df.columns else "time"
    if time_col not in df.columns:
        raise ValueError("Landmark CSV must have a 'timestamp' column")
    names = [lm.value for lm in Landmark if f"{lm.value}_x" in df.columns]
    if not names:
        raise ValueError("Landmark CSV has no '<landmark>_x' columns")
    missing = [f"{n}_y" for n in names if f"{n}_y" not in df.columns]
    if missing:
        raise ValueError(f"Landmark CSV is missing columns: {missing}")

    frames = []
    for i, row in enumerate(df.to_dict(orient="records")):
        landmarks = {}
        for name in names:
            x, y = row[f"{name}_x"], row[f"{name}_y"]
            if _is_missing(x) or _is_missing(y):
                continue
            vis = row.get(f"{name}_visibility", 1.0)
            landmarks[name] = [float(x), float(y), 1.0 if _is_missing(vis) else float(vis)]
        frame_index = row.get("frame_index", i)
        frames.append({
            "timestamp": float(row[time_col]),
            "frame_index": i if _is_missing(frame_index) else int(frame_index),
            "landmarks": landmarks,
        })
    return frames


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


__all__ = ["load_example", "list_examples", "load_landmarks"]
