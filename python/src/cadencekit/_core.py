"""Core data structures and the analysis entry points for cadencekit."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ._config import DEFAULT_CONFIG, EngineConfig
from ._ensemble import DEFAULT_ENGINES, reconcile, run_engines
from ._errors import EngineFailureError
from ._landmarks import LandmarkSample, build_samples, infer_duration, truncate_samples
from ._types import EngineResult
from .detectors import list_engines as _list_engines
from .spatial import SpatialMetrics, spatial_metrics
from .timing import STATUS_OK

logger = logging.getLogger(__name__)

_CAMEL_CASE = {
    "step_count": "stepCount",
    "cadence": "cadence",
    "mean_step_interval": "meanStepInterval",
    "step_time_variability": "stepTimeVariability",
    "average_base_of_support_cm": "averageBaseOfSupportCm",
    "average_heel_lift_cm": "averageHeelLiftCm",
    "variability_status": "variabilityStatus",
    "magnetic_gait_suspected": "magneticGaitSuspected",
    "engine": "engine",
    "duration": "duration",
}

# Fields supplied by the qualitative-assessment collaborator.
QUALITATIVE_FIELDS = ("gaitSpeed", "baseOfSupport", "turningDuration", "analysisSummary")


def list_engines() -> List[str]:
    """Return names of all available step engines.

    Returns
    -------
    list of str
        Engine identifiers accepted by :func:`analyze`.
        "separation" is the default.
    """
    return _list_engines()


# ── GaitMetrics ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class GaitMetrics:
    """Quantitative gait metrics of one recording.

    Attributes
    ----------
    step_count : int
        Final step count (>= 0).
    cadence : int
        Steps per minute.
    mean_step_interval : float
        Mean time between steps (s).
    step_time_variability : float
        Standard deviation of step intervals (ms).  A placeholder when
        ``variability_status == "insufficient_data"``.
    average_base_of_support_cm : float
        Steady-state stance width (cm), 0 when not measurable.
    average_heel_lift_cm : float
        Mean heel clearance (cm), 0 when not measurable.
    variability_status : str
        ``"ok"`` or ``"insufficient_data"``.
    magnetic_gait_suspected : bool
        Near-zero heel lift at a normal cadence.
    engine : str
        Engine whose counts were adopted.
    duration : float
        Analysed duration (s).
    """

    step_count: int = 0
    cadence: int = 0
    mean_step_interval: float = 0.0
    step_time_variability: float = 0.0
    average_base_of_support_cm: float = 0.0
    average_heel_lift_cm: float = 0.0
    variability_status: str = STATUS_OK
    magnetic_gait_suspected: bool = False
    engine: str = ""
    duration: float = 0.0

    def to_dict(self, camel_case: bool = False) -> Dict[str, Any]:
        """Metrics as a plain dict, optionally with camelCase keys."""
        data = asdict(self)
        if camel_case:
            return {_CAMEL_CASE[k]: v for k, v in data.items()}
        return data


def _build_metrics(chosen: EngineResult, spatial: SpatialMetrics, duration: float,
                   config: EngineConfig) -> GaitMetrics:
    magnetic = (
        spatial.height_scale is not None
        and chosen.step_count > 0
        and chosen.cadence >= config.magnetic_min_cadence
        and spatial.heel_lift_cm < config.magnetic_lift_cm
    )
    return GaitMetrics(
        step_count=int(chosen.step_count),
        cadence=int(chosen.cadence),
        mean_step_interval=round(chosen.timing.mean_step_interval, 3),
        step_time_variability=float(chosen.timing.step_time_variability),
        average_base_of_support_cm=round(spatial.base_of_support_cm, 1),
        average_heel_lift_cm=round(spatial.heel_lift_cm, 1),
        variability_status=chosen.timing.status,
        magnetic_gait_suspected=bool(magnetic),
        engine=chosen.engine,
        duration=round(float(duration), 3),
    )


# ── GaitResult ──────────────────────────────────────────────────────

@dataclass
class GaitResult:
    """Container for one analysis.

    Attributes
    ----------
    metrics : GaitMetrics
        Final metrics after reconciliation.
    engine_results : dict
        ``{engine_name: EngineResult}`` for every engine that succeeded.
    spatial : SpatialMetrics
    metadata : dict
        Engines requested/succeeded/failed, configuration, input size.
    """

    metrics: GaitMetrics
    engine_results: Dict[str, EngineResult] = field(default_factory=dict)
    spatial: Optional[SpatialMetrics] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    _samples: Tuple[LandmarkSample, ...] = field(default=(), repr=False)

    @property
    def chosen(self) -> EngineResult:
        """Engine result whose counts were adopted."""
        return self.engine_results[self.metrics.engine]

    @property
    def n_frames(self) -> int:
        return len(self._samples)

    # ── export ────────────────────────────────────────────────────

    @property
    def events(self):
        """Step events of every engine as a pandas DataFrame.

        Columns: engine, time, value, adopted.
        """
        import pandas as pd
        rows = []
        for name, res in self.engine_results.items():
            for peak in res.peaks:
                rows.append({
                    "engine": name,
                    "time": round(peak.time, 4),
                    "value": peak.value,
                    "adopted": name == self.metrics.engine,
                })
        df = pd.DataFrame(rows, columns=["engine", "time", "value", "adopted"])
        if len(df):
            df = df.sort_values(["engine", "time"]).reset_index(drop=True)
        return df

    def to_dict(self, camel_case: bool = False) -> Dict[str, Any]:
        """Metrics plus per-engine counts, JSON-serialisable."""
        return {
            "metrics": self.metrics.to_dict(camel_case=camel_case),
            "engines": {
                name: {
                    "step_count": res.step_count,
                    "cadence": res.cadence,
                    "peak_times": [round(t, 4) for t in res.peak_times],
                    **{k: v for k, v in res.diagnostics.items()
                       if isinstance(v, (int, float, str, bool))},
                }
                for name, res in self.engine_results.items()
            },
            "metadata": self.metadata,
        }

    def to_json(self, path: str) -> None:
        """Write :meth:`to_dict` to a JSON file."""
        Path(path).write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")

    def to_csv(self, path: str) -> None:
        """Write step events to a CSV file."""
        self.events.to_csv(path, index=False)

    # ── visualisation delegates ───────────────────────────────────

    def plot(self, **kwargs):
        """Plot the adopted engine's signal with its step events.  See :func:`cadencekit._viz.plot_result`."""
        from ._viz import plot_result
        return plot_result(self, **kwargs)

    # ── summary ───────────────────────────────────────────────────

    def summary(self) -> str:
        """Print a concise summary of the analysis."""
        m = self.metrics
        variability = (f"{m.step_time_variability:.0f} ms"
                       if m.variability_status == STATUS_OK else "insufficient data")
        lines = [
            f"GaitResult  engine={m.engine}  duration={m.duration:.1f} s  frames={self.n_frames}",
            f"  Steps:        {m.step_count}  (cadence {m.cadence} steps/min)",
            f"  Step time:    {m.mean_step_interval:.3f} s  (variability {variability})",
            f"  Base of support: {m.average_base_of_support_cm:.1f} cm",
            f"  Heel lift:       {m.average_heel_lift_cm:.1f} cm",
        ]
        if len(self.engine_results) > 1:
            counts = ", ".join(f"{k}={v.step_count}" for k, v in self.engine_results.items())
            lines.append(f"  Engines:      {counts}")
        if m.magnetic_gait_suspected:
            lines.append("  Low heel clearance at normal cadence: magnetic/shuffling gait suspected")
        text = "\n".join(lines)
        print(text)
        return text

    def __repr__(self) -> str:
        m = self.metrics
        return (f"GaitResult(engine={m.engine!r}, steps={m.step_count}, "
                f"cadence={m.cadence}, frames={self.n_frames})")


# ── Main analysis functions ─────────────────────────────────────────

def analyze(
    data=None,
    *,
    height_cm: Optional[float] = None,
    duration: Optional[float] = None,
    engines: Optional[Sequence[str]] = None,
    fps: Optional[float] = None,
    config: Optional[EngineConfig] = None,
    engine_configs: Optional[Mapping[str, EngineConfig]] = None,
    max_workers: int = 1,
) -> GaitResult:
    """Detect steps and compute gait metrics for one recording.

    Parameters
    ----------
    data : str, Path, dict, or sequence
        Input landmarks.  Can be:
        - Path to a JSON or CSV landmark file (see :func:`load_landmarks`)
        - A payload dict with a ``"frames"`` key (and optionally ``fps``,
          ``height_cm``, ``duration``)
        - A sequence of :class:`LandmarkSample` objects or frame dicts
    height_cm : float
        Subject height in centimeters.  Required unless the payload
        carries ``height_cm``.
    duration : float, optional
        Recording duration in seconds; inferred from the timestamps when
        omitted.  Capped at ``config.max_duration``.
    engines : list of str, optional
        Step engines to run (default :data:`DEFAULT_ENGINES`).  With several
        engines the highest step count is adopted.
    fps : float, optional
        Frame rate, used only for frames without timestamps.
    config : EngineConfig, optional
        Configuration for the spatial metrics, the duration cap and every
        engine not listed in *engine_configs*.  When omitted each engine
        runs with its own tuned defaults.
    engine_configs : dict, optional
        ``{engine_name: EngineConfig}`` per-engine overrides.
    max_workers : int
        Run engines concurrently when > 1.

    Returns
    -------
    GaitResult

    Raises
    ------
    EngineFailureError
        If every requested engine failed.

    Examples
    --------
    >>> import cadencekit
    >>> walk = cadencekit.load_example("healthy")
    >>> result = cadencekit.analyze(walk)
    >>> result.summary()
    """
    samples, payload = _normalize_input(data, fps)
    if height_cm is None:
        height_cm = payload.get("height_cm")
    if height_cm is None:
        raise ValueError("height_cm is required")
    height_cm = float(height_cm)
    if not height_cm > 0:
        raise ValueError("height_cm must be strictly positive")
    if duration is None:
        duration = payload.get("duration")
    if duration is None:
        duration = infer_duration(samples)
    else:
        duration = float(duration)
        if not duration > 0:
            raise ValueError("duration must be strictly positive")

    cfg = config or DEFAULT_CONFIG
    analysed = min(duration, cfg.max_duration)
    if duration > cfg.max_duration:
        logger.info("Recording of %.1f s capped at %.1f s", duration, cfg.max_duration)
    samples = truncate_samples(samples, analysed)
    if not samples:
        logger.warning("No landmark samples to analyse; reporting zero steps")

    requested = DEFAULT_ENGINES if engines is None else engines
    results, failed = run_engines(
        samples, analysed, requested,
        config=config, engine_configs=engine_configs, max_workers=max_workers,
    )
    if not results:
        raise EngineFailureError(failed)

    chosen = reconcile(list(results.values()))
    spatial = spatial_metrics(samples, height_cm, cfg)
    metrics = _build_metrics(chosen, spatial, analysed, cfg)

    return GaitResult(
        metrics=metrics,
        engine_results=results,
        spatial=spatial,
        metadata={
            "engines_requested": list(requested),
            "engines_succeeded": list(results),
            "engines_failed": failed,
            "height_cm": height_cm,
            "duration": duration,
            "analysed_duration": analysed,
            "n_frames": len(samples),
            "config": cfg.to_dict(),
        },
        _samples=samples,
    )


def compute_gait_metrics(samples: Sequence[Any], height_cm: float, duration: float,
                         config: EngineConfig = DEFAULT_CONFIG) -> GaitMetrics:
    """Pure core: ``(landmarks, height, duration, constants) -> GaitMetrics``.

    Runs the separation engine with *config* and computes the spatial
    metrics.  See :func:`analyze` for multi-engine analyses.
    """
    return analyze(samples, height_cm=height_cm, duration=duration,
                   engines=["separation"], config=config).metrics


def merge_assessment(metrics, assessment: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge a qualitative assessment with the quantitative metrics.

    Parameters
    ----------
    metrics : GaitMetrics or GaitResult
    assessment : mapping
        Output of the qualitative-assessment collaborator, e.g. with keys
        ``gaitSpeed``, ``baseOfSupport``, ``turningDuration`` and
        ``analysisSummary``.

    Returns
    -------
    dict
        camelCase record.  Quantitative fields computed here always
        override same-named fields of the assessment.
    """
    if isinstance(metrics, GaitResult):
        metrics = metrics.metrics
    if not isinstance(metrics, GaitMetrics):
        raise TypeError("metrics must be a GaitMetrics or GaitResult")
    if assessment is None:
        assessment = {}
    if not isinstance(assessment, Mapping):
        raise ValueError("assessment must be a mapping")
    merged = dict(assessment)
    merged.update(metrics.to_dict(camel_case=True))
    return merged


def _normalize_input(data, fps) -> Tuple[Tuple[LandmarkSample, ...], Dict[str, Any]]:
    """Convert various input formats to (samples, payload metadata)."""
    if fps is not None and fps <= 0:
        raise ValueError("fps must be strictly positive")

    # Case 1: string/Path → landmark file
    if isinstance(data, (str, Path)):
        from ._io import load_landmarks
        return _normalize_input(load_landmarks(data), fps)

    # Case 2: payload dict with 'frames'
    if isinstance(data, Mapping):
        if "frames" not in data:
            raise ValueError("Input mapping must contain a 'frames' list")
        frames = data["frames"]
        if not isinstance(frames, (list, tuple)):
            raise ValueError("'frames' must be a list")
        resolved_fps = fps if fps is not None else data.get("fps")
        meta = {k: data[k] for k in ("height_cm", "duration") if data.get(k) is not None}
        return build_samples(frames, resolved_fps), meta

    # Case 3: sequence of samples or frame dicts
    if isinstance(data, (list, tuple)):
        return build_samples(data, fps), {}

    if data is None:
        raise ValueError("data (landmark frames) is required")
    raise TypeError(
        f"Cannot interpret data of type {type(data).__name__}. "
        "Pass a landmark file path, payload dict, or list of frames."
    )


__all__ = [
    "GaitMetrics",
    "GaitResult",
    "analyze",
    "compute_gait_metrics",
    "list_engines",
    "merge_assessment",
    "QUALITATIVE_FIELDS",
]
