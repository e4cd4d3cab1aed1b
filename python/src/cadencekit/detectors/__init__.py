"""
Step engines.

Registry of whole-pipeline step detectors.  Every engine is a plain
function ``(samples, duration, config) -> EngineResult`` with its own
default configuration.

Engines:
    - separation: dual-domain (peaks + band-limited DFT) detection on the
      normalised ankle-separation signal, with consensus arbitration
    - vertical: per-foot ankle-lift valley counting
"""

from typing import Callable, Dict, List, NamedTuple

from .._config import DEFAULT_CONFIG, VERTICAL_CONFIG, EngineConfig
from .separation_engine import detect_separation_steps
from .vertical_engine import detect_vertical_steps


class EngineSpec(NamedTuple):
    function: Callable
    default_config: EngineConfig


# ---- Engine registry -------------------------------------------------------
ENGINE_REGISTRY: Dict[str, EngineSpec] = {
    "separation": EngineSpec(detect_separation_steps, DEFAULT_CONFIG),
    "vertical": EngineSpec(detect_vertical_steps, VERTICAL_CONFIG),
}

_ENGINE_ALIASES = {
    "ankle_separation": "separation",
    "mediapipe": "separation",
    "oscillation": "vertical",
    "ankle_vertical": "vertical",
}


def resolve_engine(name: str) -> str:
    """Map a user-facing engine name to its registry key."""
    if not isinstance(name, str) or not name.strip():
        raise ValueError("engine names must be non-empty strings")
    key = name.lower().strip()
    key = _ENGINE_ALIASES.get(key, key)
    if key not in ENGINE_REGISTRY:
        available = ", ".join(sorted(ENGINE_REGISTRY))
        raise ValueError(f"Unknown engine '{name}'. Available: {available}")
    return key


def get_engine(name: str) -> EngineSpec:
    return ENGINE_REGISTRY[resolve_engine(name)]


def list_engines() -> List[str]:
    return sorted(ENGINE_REGISTRY.keys())


__all__ = ["ENGINE_REGISTRY", "EngineSpec", "get_engine", "list_engines", "resolve_engine"]
