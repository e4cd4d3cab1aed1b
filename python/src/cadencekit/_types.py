"""Value types passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, NamedTuple, Optional, Tuple

import numpy as np


@dataclass(frozen=True, eq=False)
class Signal:
    """Scalar time series with one entry per processed frame.

    Attributes
    ----------
    times : ndarray, shape (N,)
        Sample timestamps in seconds, strictly increasing.
    values : ndarray, shape (N,)
        Scalar value per sample.
    """

    times: np.ndarray
    values: np.ndarray

    def __post_init__(self):
        times = np.array(self.times, dtype=float)
        values = np.array(self.values, dtype=float)
        if times.shape != values.shape or times.ndim != 1:
            raise ValueError("times and values must be 1-D arrays of equal length")
        times.setflags(write=False)
        values.setflags(write=False)
        object.__setattr__(self, "times", times)
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return int(self.values.size)

    @property
    def span(self) -> float:
        """Time between first and last sample (s)."""
        if self.times.size < 2:
            return 0.0
        return float(self.times[-1] - self.times[0])


class Peak(NamedTuple):
    """A detected step event."""

    time: float
    value: float


@dataclass(frozen=True)
class TimingStats:
    """Inter-step timing summary.

    ``status`` is ``"insufficient_data"`` when fewer than two step events
    were timed; ``step_time_variability`` then holds a placeholder, not a
    measured zero.
    """

    mean_step_interval: float
    step_time_variability: float
    status: str = "ok"

    @property
    def is_measured(self) -> bool:
        return self.status == "ok"


@dataclass(frozen=True)
class EngineResult:
    """Tagged output shared by every step engine.

    Attributes
    ----------
    engine : str
        Engine identifier (registry name).
    step_count : int
        Final step count after the engine's own arbitration.
    cadence : int
        Steps per minute.
    peaks : tuple of Peak
        Time-domain step events the timing statistics were computed from.
    timing : TimingStats
    signal : Signal or None
        Source signal, kept for plotting and diagnostics.
    diagnostics : dict
        Engine-specific intermediate values (threshold, counts, ...).
    """

    engine: str
    step_count: int
    cadence: int
    peaks: Tuple[Peak, ...]
    timing: TimingStats
    signal: Optional[Signal] = field(default=None, repr=False, compare=False)
    diagnostics: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def peak_times(self) -> Tuple[float, ...]:
        return tuple(p.time for p in self.peaks)
