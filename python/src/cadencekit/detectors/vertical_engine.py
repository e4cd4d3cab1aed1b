"""
Vertical-oscillation step engine.

Principle
---------
Each foot rises during swing, so its ankle's image ``y`` coordinate dips
once per step of that foot (image ``y`` grows downwards).  Valleys of the
smoothed per-foot series are counted when they are deep enough: below
the series mean and within the top ``valley_range_fraction`` of its
movement range.  A high fraction (0.65) keeps the detector sensitive to
the barely-lifted feet of magnetic gait.

The engine is tuned independently of the separation engine (looser
visibility gate, wider smoothing, 0.25 s refractory period) and is meant
to be reconciled with it.
"""

from __future__ import annotations

import logging
from typing import Sequence, Tuple

import numpy as np

from .._config import VERTICAL_CONFIG, EngineConfig
from .._landmarks import Landmark, LandmarkSample
from .._types import EngineResult, Peak, Signal
from ..signals import tracking_confidence, vertical_signal
from ..timing import step_timing
from ..utils.preprocessing import trailing_moving_average
from .consensus import cadence_from_count

logger = logging.getLogger(__name__)

ENGINE_NAME = "vertical"


def find_step_valleys(signal: Signal,
                      config: EngineConfig = VERTICAL_CONFIG) -> Tuple[Peak, ...]:
    """Lift events of one foot as valleys of its smoothed vertical series."""
    if len(signal) < 3 or np.ptp(signal.values) == 0.0:
        return ()
    v = trailing_moving_average(signal.values, config.smoothing_window)
    t = signal.times
    lo, hi = float(np.min(v)), float(np.max(v))
    ceiling = lo + (hi - lo) * config.valley_range_fraction
    mean = float(np.mean(v))

    inner = v[1:-1]
    is_min = (inner < v[:-2]) & (inner < v[2:]) & (inner < mean) & (inner < ceiling)
    valleys = []
    for i in np.flatnonzero(is_min) + 1:
        if valleys and t[i] - valleys[-1].time <= config.min_peak_spacing:
            continue
        valleys.append(Peak(float(t[i]), float(v[i])))
    return tuple(valleys)


def detect_vertical_steps(samples: Sequence[LandmarkSample], duration: float,
                          config: EngineConfig = VERTICAL_CONFIG) -> EngineResult:
    """Count steps as ankle-lift valleys of both feet."""
    left = vertical_signal(samples, Landmark.LEFT_ANKLE, config.min_visibility)
    right = vertical_signal(samples, Landmark.RIGHT_ANKLE, config.min_visibility)
    left_valleys = find_step_valleys(left, config)
    right_valleys = find_step_valleys(right, config)
    confidence = tracking_confidence(
        samples, (Landmark.LEFT_ANKLE, Landmark.RIGHT_ANKLE), config.min_visibility)

    events = tuple(sorted(left_valleys + right_valleys, key=lambda p: p.time))
    step_count = len(events)
    cadence = cadence_from_count(step_count, duration)
    timing = step_timing(events, step_count, duration, config)

    logger.debug(
        "%s: left=%d right=%d -> %d steps, cadence=%d, confidence=%.2f",
        ENGINE_NAME, len(left_valleys), len(right_valleys), step_count, cadence,
        confidence,
    )
    return EngineResult(
        engine=ENGINE_NAME,
        step_count=step_count,
        cadence=cadence,
        peaks=events,
        timing=timing,
        signal=left,
        diagnostics={
            "left_steps": len(left_valleys),
            "right_steps": len(right_valleys),
            "confidence": confidence,
            "right_signal": right,
        },
    )


__all__ = ["ENGINE_NAME", "find_step_valleys", "detect_vertical_steps"]
