"""
Signal preprocessing utilities shared by the step engines.

Provides the occlusion carry-forward scan, trailing smoothing and the
rounding convention used for step counts and cadence.
"""

import math
from typing import Iterable, Optional

import numpy as np


def carry_forward(values: Iterable[Optional[float]],
                  initial: float = 0.0) -> np.ndarray:
    """Replace missing measurements by the last valid one.

    This is an explicit scan over the frame stream whose state is the last
    valid value.  Frames are never dropped, so the output has one entry
    per input entry; a run of missing frames becomes a plateau.

    Parameters
    ----------
    values : iterable of float or None
        Per-frame measurements; ``None`` or NaN marks an occluded frame.
    initial : float
        Value used before the first valid measurement.

    Returns
    -------
    ndarray, shape (N,)
    """
    out = []
    last: Optional[float] = None
    for value in values:
        if value is not None and math.isfinite(value):
            last = float(value)
        out.append(initial if last is None else last)
    return np.asarray(out, dtype=float)


def trailing_moving_average(signal: np.ndarray, window: int) -> np.ndarray:
    """Causal moving average over the last *window* samples.

    The window shrinks at the start of the sequence (sample ``i`` averages
    ``signal[max(0, i - window + 1) : i + 1]``); there is no padding or
    wraparound.

    Parameters
    ----------
    signal : ndarray, shape (N,)
    window : int
        Window length in samples (>= 1).

    Returns
    -------
    ndarray, shape (N,)
    """
    if window < 1:
        raise ValueError("window must be >= 1")
    x = np.asarray(signal, dtype=float)
    if x.size == 0:
        return x.copy()
    sums = np.convolve(x, np.ones(window))[:x.size]
    counts = np.minimum(np.arange(1, x.size + 1), window)
    return sums / counts


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's built-in :func:`round` uses banker's rounding, which would
    turn 5.5 predicted steps into 6 but 4.5 into 4.
    """
    if not math.isfinite(value):
        return 0
    return int(math.floor(value + 0.5))
