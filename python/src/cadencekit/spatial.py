"""
Spatial gait metrics: base of support and heel lift.

Both metrics are computed from the raw landmarks, independently of the
step engines, and converted to centimeters with the subject-height scale.

Base of support
---------------
Measured only during double support (both heels at the same image
height), corrected for perspective, range-checked, and aggregated as the
25th percentile of the valid widths.  The narrowest consistent stance is
the clinically relevant steady-state width; a low percentile suppresses
transient wide stances from turns and stumbles.

Heel lift
---------
Per foot, the floor level is a high percentile (90th) of the heel's raw
vertical series (large image ``y`` is ground contact).  Valleys of the
smoothed series are lift events, measured as their height above the
floor.  A near-zero average lift at a normal cadence is the signature of
magnetic/shuffling gait.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple, Optional, Sequence

import numpy as np
from scipy.signal import find_peaks

from ._config import DEFAULT_CONFIG, EngineConfig
from ._landmarks import Landmark, LandmarkSample
from ._types import Signal
from .signals import height_scales, session_height_scale, vertical_signal
from .utils.preprocessing import trailing_moving_average

logger = logging.getLogger(__name__)


class SpatialMetrics(NamedTuple):
    """Spatial summary of one recording."""

    base_of_support_cm: float
    heel_lift_cm: float
    n_bos_samples: int
    n_lift_events: int
    height_scale: Optional[float]


# ── Base of support ─────────────────────────────────────────────────

def bos_measurements(samples: Sequence[LandmarkSample], scales: np.ndarray,
                     config: EngineConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Plausible base-of-support widths (cm) from double-support frames.

    Parameters
    ----------
    samples : sequence of LandmarkSample
    scales : ndarray
        Per-frame centimeters per unit (NaN where unusable), as returned by
        :func:`cadencekit.signals.height_scales`.
    """
    low, high = config.bos_range_cm
    widths = []
    for sample, scale in zip(samples, scales):
        if not math.isfinite(scale):
            continue
        left = sample.visible(Landmark.LEFT_HEEL, config.min_visibility)
        right = sample.visible(Landmark.RIGHT_HEEL, config.min_visibility)
        if left is None or right is None:
            continue
        if abs(left.y - right.y) >= config.bos_alignment_tolerance:
            continue
        width = abs(left.x - right.x) * scale * config.perspective_correction
        if low <= width <= high:
            widths.append(width)
    return np.asarray(widths, dtype=float)


def aggregate_base_of_support(widths: Sequence[float], quantile: float = 0.25) -> float:
    """Element at index ``floor(quantile * N)`` of the sorted widths; 0 if none."""
    ordered = np.sort(np.asarray(widths, dtype=float))
    if ordered.size == 0:
        return 0.0
    return float(ordered[int(math.floor(quantile * ordered.size))])


# ── Heel lift ───────────────────────────────────────────────────────

def heel_lifts(signal: Signal, config: EngineConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Lift amounts (normalised units) of one heel above its floor level."""
    raw = signal.values
    if raw.size < 3:
        return np.zeros(0)
    floor_level = float(np.percentile(raw, config.heel_floor_percentile))
    smoothed = trailing_moving_average(raw, config.heel_smoothing_window)
    valleys, _ = find_peaks(-smoothed)
    lifts = floor_level - smoothed[valleys]
    return lifts[lifts >= config.heel_lift_noise_floor]


# ── Combined ────────────────────────────────────────────────────────

def spatial_metrics(samples: Sequence[LandmarkSample], height_cm: float,
                    config: EngineConfig = DEFAULT_CONFIG) -> SpatialMetrics:
    """Compute base of support and average heel lift for one recording."""
    scales = height_scales(samples, height_cm, config)
    scale = session_height_scale(scales)

    widths = bos_measurements(samples, scales, config)
    bos = aggregate_base_of_support(widths, config.bos_quantile)

    lifts = np.concatenate([
        heel_lifts(vertical_signal(samples, heel, config.min_visibility), config)
        for heel in (Landmark.LEFT_HEEL, Landmark.RIGHT_HEEL)
    ])
    if scale is None or lifts.size == 0:
        lift_cm = 0.0
    else:
        lift_cm = float(np.mean(lifts) * scale)

    if scale is None:
        logger.warning("No frame qualified for the height scale; spatial metrics are 0")
    logger.debug(
        "BOS=%.1f cm from %d frames, heel lift=%.2f cm from %d events",
        bos, widths.size, lift_cm, lifts.size,
    )
    return SpatialMetrics(bos, lift_cm, int(widths.size), int(lifts.size), scale)


__all__ = [
    "SpatialMetrics",
    "bos_measurements",
    "aggregate_base_of_support",
    "heel_lifts",
    "spatial_metrics",
]
