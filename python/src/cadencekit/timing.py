"""Inter-step timing statistics."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ._config import DEFAULT_CONFIG, EngineConfig
from ._types import Peak, TimingStats
from .utils.preprocessing import round_half_up

STATUS_OK = "ok"
STATUS_INSUFFICIENT = "insufficient_data"


def step_timing(peaks: Sequence[Peak], step_count: int, duration: float,
                config: EngineConfig = DEFAULT_CONFIG) -> TimingStats:
    """Mean interval and variability of the detected step events.

    Intervals come from the time-domain events themselves, not from the
    consensus-adjusted count.  Variability is the population standard
    deviation of the intervals in milliseconds.

    With fewer than two events the mean interval falls back to
    ``duration / step_count`` and the variability is the configured
    placeholder, flagged ``insufficient_data``.
    """
    if len(peaks) > 1:
        intervals = np.diff([p.time for p in peaks])
        return TimingStats(
            mean_step_interval=float(np.mean(intervals)),
            step_time_variability=float(round_half_up(np.std(intervals) * 1000.0)),
            status=STATUS_OK,
        )
    mean_interval = duration / step_count if step_count > 0 and duration > 0 else 0.0
    return TimingStats(
        mean_step_interval=float(mean_interval),
        step_time_variability=float(config.insufficient_variability_ms),
        status=STATUS_INSUFFICIENT,
    )


__all__ = ["step_timing", "STATUS_OK", "STATUS_INSUFFICIENT"]
