"""
Time-domain step detector.

Principle
---------
Each step widens the ankle separation, so the smoothed separation signal
shows one local maximum per step.  A maximum is accepted when it rises
above an adaptive threshold anchored to the walk's own mean (a fixed
absolute threshold fails across camera distances and gait pathologies)
and when it is far enough from the previously accepted step.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from .._config import DEFAULT_CONFIG, EngineConfig
from .._types import Peak, Signal
from ..utils.preprocessing import trailing_moving_average

logger = logging.getLogger(__name__)


def adaptive_threshold(values: np.ndarray, floor: float = 0.15) -> float:
    """``max(mean(values), floor)``; the floor alone for an empty signal.

    The floor suppresses noise while the subject stands still.
    """
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        return float(floor)
    return float(max(np.mean(values), floor))


def find_step_peaks(signal: Signal, threshold: float,
                    min_spacing: float) -> Tuple[Peak, ...]:
    """Strict local maxima above *threshold*, at least *min_spacing* apart.

    Candidates are scanned in time order and compared to the last
    accepted peak; a candidate that comes too soon is rejected, so the
    earliest peak of a close pair is kept.

    Parameters
    ----------
    signal : Signal
        Usually the smoothed separation signal.
    threshold : float
        Minimum value of an accepted peak (exclusive).
    min_spacing : float
        Minimum time (s) between consecutive accepted peaks.

    Returns
    -------
    tuple of Peak
        In strictly increasing time order.
    """
    v = signal.values
    t = signal.times
    if v.size < 3:
        return ()
    inner = v[1:-1]
    is_max = (inner > v[:-2]) & (inner > v[2:]) & (inner > threshold)
    peaks = []
    for i in np.flatnonzero(is_max) + 1:
        if peaks and t[i] - peaks[-1].time <= min_spacing:
            continue
        peaks.append(Peak(float(t[i]), float(v[i])))
    return tuple(peaks)


def detect_peaks(signal: Signal, config: EngineConfig = DEFAULT_CONFIG):
    """Smooth *signal*, estimate the threshold and pick the step peaks.

    Returns
    -------
    smoothed : Signal
    threshold : float
    peaks : tuple of Peak
    """
    threshold = adaptive_threshold(signal.values, config.threshold_floor)
    smoothed = Signal(signal.times,
                      trailing_moving_average(signal.values, config.smoothing_window))
    if len(signal) == 0 or np.ptp(signal.values) == 0.0:
        # Constant input: smoothing round-off must not produce maxima.
        return smoothed, threshold, ()
    peaks = find_step_peaks(smoothed, threshold, config.min_peak_spacing)
    logger.debug("threshold=%.4f  peaks=%d", threshold, len(peaks))
    return smoothed, threshold, peaks


__all__ = ["adaptive_threshold", "find_step_peaks", "detect_peaks"]
