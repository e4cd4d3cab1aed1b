# -*- coding: utf-8 -*-
"""
Multi-engine reconciliation.

Runs several independently tuned step engines over the same recording and
combines their outputs with an explicit policy.

Policy
------
The engine reporting the **higher** step count is adopted, ties going to
the engine requested first.  This is a deliberate asymmetric tie-break,
not an average: on pathological gait the engines far more often miss
low-amplitude steps than invent rhythmic ones.

Engines only read the immutable sample tuple and return independent
results, so they may run concurrently; their scalar outputs are combined
at a single join point.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ._config import EngineConfig
from ._landmarks import LandmarkSample
from ._types import EngineResult
from .detectors import ENGINE_REGISTRY, resolve_engine

logger = logging.getLogger(__name__)

DEFAULT_ENGINES: List[str] = ["separation"]


def _normalize_engines(engines: Sequence[str]) -> List[str]:
    """Resolve aliases and deduplicate while preserving order."""
    if isinstance(engines, (str, bytes)):
        raise ValueError("engines must be a sequence of engine names, not a single string")
    out: List[str] = []
    for name in engines:
        key = resolve_engine(name)
        if key not in out:
            out.append(key)
    if not out:
        raise ValueError("at least one engine is required")
    return out


def reconcile(results: Sequence[EngineResult]) -> EngineResult:
    """Adopt the result with the highest step count.

    Parameters
    ----------
    results : sequence of EngineResult
        In order of preference for ties.

    Returns
    -------
    EngineResult
    """
    if not results:
        raise ValueError("reconcile() needs at least one engine result")
    best = results[0]
    for result in results[1:]:
        if result.step_count > best.step_count:
            best = result
    if len(results) > 1:
        logger.info(
            "Reconciled %s -> %s (%d steps)",
            ", ".join(f"{r.engine}={r.step_count}" for r in results),
            best.engine, best.step_count,
        )
    return best


def _engine_config(name: str, config: Optional[EngineConfig],
                   engine_configs: Optional[Mapping[str, EngineConfig]]) -> EngineConfig:
    if engine_configs and name in engine_configs:
        return engine_configs[name]
    if config is not None:
        return config
    return ENGINE_REGISTRY[name].default_config


def run_engines(
    samples: Tuple[LandmarkSample, ...],
    duration: float,
    engines: Sequence[str],
    *,
    config: Optional[EngineConfig] = None,
    engine_configs: Optional[Mapping[str, EngineConfig]] = None,
    max_workers: int = 1,
) -> Tuple[Dict[str, EngineResult], Dict[str, str]]:
    """Run each engine over the same samples.

    Parameters
    ----------
    samples : tuple of LandmarkSample
    duration : float
        Analysed duration in seconds.
    engines : sequence of str
        Engine names (aliases accepted).
    config : EngineConfig, optional
        Configuration for engines without an entry in *engine_configs*.
        When omitted each engine uses its own tuned defaults.
    engine_configs : mapping, optional
        ``{engine_name: EngineConfig}`` per-engine overrides.
    max_workers : int
        ``1`` runs engines sequentially; more uses a thread pool.

    Returns
    -------
    results : dict
        ``{engine_name: EngineResult}`` in requested order.
    failed : dict
        ``{engine_name: error_message}`` for engines that raised.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")
    names = _normalize_engines(engines)
    if engine_configs:
        engine_configs = {resolve_engine(k): v for k, v in engine_configs.items()}
    samples = tuple(samples)

    def _run(name: str) -> EngineResult:
        spec = ENGINE_REGISTRY[name]
        return spec.function(samples, duration, _engine_config(name, config, engine_configs))

    outcomes: Dict[str, object] = {}
    if max_workers == 1 or len(names) == 1:
        for name in names:
            try:
                outcomes[name] = _run(name)
            except Exception as exc:
                outcomes[name] = exc
    else:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(names))) as pool:
            futures = {name: pool.submit(_run, name) for name in names}
        for name in names:
            exc = futures[name].exception()
            if exc is not None and not isinstance(exc, Exception):
                raise exc
            outcomes[name] = exc if exc is not None else futures[name].result()

    results: Dict[str, EngineResult] = {}
    failed: Dict[str, str] = {}
    for name in names:
        outcome = outcomes[name]
        if isinstance(outcome, Exception):
            # One engine failing must not abort the others.
            logger.warning("Engine '%s' failed: %s", name, outcome)
            failed[name] = str(outcome)
        else:
            results[name] = outcome
    return results, failed


__all__ = ["DEFAULT_ENGINES", "reconcile", "run_engines"]
