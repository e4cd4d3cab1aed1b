"""Tuned constants for the step engines and spatial metrics.

Every threshold used by the pipeline lives in :class:`EngineConfig` so
that independently tuned engine instances can run side by side on the
same recording.  The defaults were calibrated against pathological
footage (shuffling, magnetic and festinating gait); change them only
with new calibration data.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class EngineConfig:
    """Configuration constants for one engine instance.

    Attributes
    ----------
    min_visibility : float
        Landmarks below this visibility are treated as occluded.
    shoulder_floor : float
        Shoulder widths below this value are replaced by
        ``shoulder_fallback`` before normalisation.
    shoulder_fallback : float
        Substitute shoulder width for degenerate frames.
    min_height_proxy : float
        Minimum nose-to-heel vertical extent (normalised units) for a
        frame to contribute a height scale.
    threshold_floor : float
        Lower bound of the adaptive peak threshold.
    smoothing_window : int
        Trailing moving-average window (samples) for step detection.
    min_peak_spacing : float
        Minimum time (s) between two accepted step events.
    freq_min, freq_max, freq_step : float
        Frequency band (Hz) swept by the spectral estimator.
    stride_cadence_range : tuple of float
        Implied cadence band ``[low, high)`` (steps/min) in which the
        spectral estimate may reflect stride rather than step frequency.
    stride_peak_ratio : float
        The spectral estimate is doubled only when the peak count exceeds
        this multiple of it.
    consensus_tolerance : float
        Relative discrepancy up to which the peak count is trusted.
    min_fft_steps : int
        The spectral count overrides the peak count only when it is
        strictly greater than this value.
    valley_range_fraction : float
        Fraction of the signal range defining the valley ceiling used by
        the vertical engine.
    bos_alignment_tolerance : float
        Maximum heel height difference (normalised) for a frame to count
        as double support.
    perspective_correction : float
        Multiplier applied to base-of-support widths.
    bos_range_cm : tuple of float
        Plausible base-of-support range in centimeters.
    bos_quantile : float
        Quantile of the valid base-of-support list that is reported.
    heel_smoothing_window : int
        Trailing moving-average window for the heel vertical series.
    heel_floor_percentile : float
        Percentile of the raw heel series used as floor level.
    heel_lift_noise_floor : float
        Minimum lift (normalised units) retained as a lift event.
    max_duration : float
        Analysis cap in seconds.
    insufficient_variability_ms : float
        Placeholder variability reported when fewer than two steps were
        timed.
    magnetic_lift_cm, magnetic_min_cadence : float
        Average heel lift below ``magnetic_lift_cm`` at a cadence of at
        least ``magnetic_min_cadence`` flags magnetic/shuffling gait.
    """

    min_visibility: float = 0.5
    shoulder_floor: float = 0.01
    shoulder_fallback: float = 1.0
    min_height_proxy: float = 0.2
    threshold_floor: float = 0.15
    smoothing_window: int = 4
    min_peak_spacing: float = 0.20
    freq_min: float = 0.5
    freq_max: float = 4.0
    freq_step: float = 0.05
    stride_cadence_range: Tuple[float, float] = (25.0, 65.0)
    stride_peak_ratio: float = 1.5
    consensus_tolerance: float = 0.20
    min_fft_steps: int = 5
    valley_range_fraction: float = 0.65
    bos_alignment_tolerance: float = 0.03
    perspective_correction: float = 0.85
    bos_range_cm: Tuple[float, float] = (2.0, 45.0)
    bos_quantile: float = 0.25
    heel_smoothing_window: int = 5
    heel_floor_percentile: float = 90.0
    heel_lift_noise_floor: float = 0.01
    max_duration: float = 180.0
    insufficient_variability_ms: float = 20.0
    magnetic_lift_cm: float = 2.0
    magnetic_min_cadence: float = 60.0

    def __post_init__(self):
        for name in (
            "shoulder_floor", "shoulder_fallback", "freq_min", "freq_max",
            "freq_step", "max_duration", "stride_peak_ratio",
            "perspective_correction",
        ):
            value = getattr(self, name)
            if not _is_finite_number(value) or value <= 0:
                raise ValueError(f"{name} must be a finite number > 0")
        for name in (
            "min_height_proxy", "threshold_floor", "min_peak_spacing",
            "consensus_tolerance", "bos_alignment_tolerance",
            "heel_lift_noise_floor", "insufficient_variability_ms",
            "magnetic_lift_cm", "magnetic_min_cadence",
        ):
            value = getattr(self, name)
            if not _is_finite_number(value) or value < 0:
                raise ValueError(f"{name} must be a finite number >= 0")
        if not 0.0 <= self.min_visibility <= 1.0:
            raise ValueError("min_visibility must be within [0, 1]")
        for name in ("smoothing_window", "heel_smoothing_window"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be an integer >= 1")
        if isinstance(self.min_fft_steps, bool) or not isinstance(self.min_fft_steps, int):
            raise ValueError("min_fft_steps must be an integer")
        if self.freq_min >= self.freq_max:
            raise ValueError("freq_min must be lower than freq_max")
        _check_range("stride_cadence_range", self.stride_cadence_range)
        _check_range("bos_range_cm", self.bos_range_cm)
        if not 0.0 < self.valley_range_fraction <= 1.0:
            raise ValueError("valley_range_fraction must be within (0, 1]")
        if not 0.0 <= self.bos_quantile < 1.0:
            raise ValueError("bos_quantile must be within [0, 1)")
        if not 0.0 <= self.heel_floor_percentile <= 100.0:
            raise ValueError("heel_floor_percentile must be within [0, 100]")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any],
                     base: "EngineConfig" = None) -> "EngineConfig":
        """Build a configuration from a mapping of overrides.

        Parameters
        ----------
        values : mapping
            Field overrides, e.g. parsed from a JSON ``"config"`` object.
            Lists are accepted for the range fields.
        base : EngineConfig, optional
            Configuration the overrides apply to (default
            :data:`DEFAULT_CONFIG`).
        """
        if not isinstance(values, Mapping):
            raise ValueError("config overrides must be a mapping")
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown configuration key(s): {unknown}")
        overrides: Dict[str, Any] = {}
        for key, value in values.items():
            if key in ("stride_cadence_range", "bos_range_cm"):
                value = tuple(float(v) for v in value)
            overrides[key] = value
        return dataclasses.replace(base or DEFAULT_CONFIG, **overrides)

    def replace(self, **changes) -> "EngineConfig":
        """Return a copy with *changes* applied (validated)."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def _is_finite_number(value) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value))


def _check_range(name: str, value) -> None:
    if (not isinstance(value, tuple) or len(value) != 2
            or not all(_is_finite_number(v) for v in value)):
        raise ValueError(f"{name} must be a (low, high) tuple of numbers")
    if value[0] >= value[1]:
        raise ValueError(f"{name} must satisfy low < high")


DEFAULT_CONFIG = EngineConfig()

# Vertical-oscillation engine: looser visibility gate, wider smoothing and
# a longer refractory period to tolerate festination without double counts.
VERTICAL_CONFIG = DEFAULT_CONFIG.replace(
    min_visibility=0.3,
    smoothing_window=5,
    min_peak_spacing=0.25,
)

__all__ = ["EngineConfig", "DEFAULT_CONFIG", "VERTICAL_CONFIG"]
