"""
Scale-invariant signals built from raw landmark samples.

The separation signal divides the ankle distance by the shoulder width
so that it does not depend on how far the subject stands from the
camera.  Occluded frames carry the last valid value forward, keeping one
signal entry per processed frame.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np

from ._config import DEFAULT_CONFIG, EngineConfig
from ._landmarks import Landmark, LandmarkSample
from ._types import Signal
from .utils.preprocessing import carry_forward

logger = logging.getLogger(__name__)


def _distance(a, b) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def _times(samples: Sequence[LandmarkSample]) -> np.ndarray:
    return np.array([s.timestamp for s in samples], dtype=float)


def separation_ratio(sample: LandmarkSample,
                     config: EngineConfig = DEFAULT_CONFIG) -> Optional[float]:
    """Ankle distance over shoulder width for one frame.

    Returns None when either ankle is below the visibility gate or a
    shoulder is missing, i.e. when the frame must be carried forward.
    """
    left_ankle = sample.visible(Landmark.LEFT_ANKLE, config.min_visibility)
    right_ankle = sample.visible(Landmark.RIGHT_ANKLE, config.min_visibility)
    left_shoulder = sample.get(Landmark.LEFT_SHOULDER)
    right_shoulder = sample.get(Landmark.RIGHT_SHOULDER)
    if None in (left_ankle, right_ankle, left_shoulder, right_shoulder):
        return None
    shoulder_width = _distance(left_shoulder, right_shoulder)
    if shoulder_width < config.shoulder_floor:
        shoulder_width = config.shoulder_fallback
    return _distance(left_ankle, right_ankle) / shoulder_width


def separation_signal(samples: Sequence[LandmarkSample],
                      config: EngineConfig = DEFAULT_CONFIG) -> Signal:
    """Normalised ankle-separation signal, one value per sample."""
    ratios = [separation_ratio(s, config) for s in samples]
    n_missing = sum(r is None for r in ratios)
    if n_missing:
        logger.debug("Carried forward %d/%d occluded frames", n_missing, len(ratios))
    return Signal(_times(samples), carry_forward(ratios))


def vertical_signal(samples: Sequence[LandmarkSample], landmark,
                    min_visibility: float) -> Signal:
    """Vertical (image y) position of one landmark, occlusions carried forward.

    Frames before the first valid observation take that observation's
    value: a zero there would read as the foot at the top of the image.
    """
    values = []
    for s in samples:
        point = s.visible(landmark, min_visibility)
        values.append(None if point is None else point.y)
    first = next((v for v in values if v is not None), 0.0)
    return Signal(_times(samples), carry_forward(values, initial=first))


def tracking_confidence(samples: Sequence[LandmarkSample], landmarks,
                        min_visibility: float) -> float:
    """Fraction of samples in which every landmark in *landmarks* is visible.

    The complement is the share of the signal that was carried forward.
    Zero for an empty recording.
    """
    if not samples:
        return 0.0
    tracked = sum(
        all(s.visible(lm, min_visibility) is not None for lm in landmarks)
        for s in samples
    )
    return tracked / len(samples)


def height_scales(samples: Sequence[LandmarkSample], height_cm: float,
                  config: EngineConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Per-frame centimeters per normalised unit.

    The nose-to-heel vertical extent is used as a proxy for the subject's
    height in the image.  Frames without visible heels or nose, or whose
    extent is below ``config.min_height_proxy`` (too foreshortened to
    trust), are NaN.

    Returns
    -------
    ndarray, shape (N,)
    """
    if height_cm <= 0:
        raise ValueError("height_cm must be strictly positive")
    out = np.full(len(samples), np.nan)
    for i, s in enumerate(samples):
        left = s.visible(Landmark.LEFT_HEEL, config.min_visibility)
        right = s.visible(Landmark.RIGHT_HEEL, config.min_visibility)
        nose = s.get(Landmark.NOSE)
        if left is None or right is None or nose is None:
            continue
        proxy = abs((left.y + right.y) / 2.0 - nose.y)
        if proxy < config.min_height_proxy:
            continue
        out[i] = height_cm / proxy
    return out


def session_height_scale(scales: np.ndarray) -> Optional[float]:
    """Mean of the valid per-frame scales, or None if no frame qualified."""
    valid = scales[np.isfinite(scales)]
    if valid.size == 0:
        return None
    return float(np.mean(valid))


__all__ = [
    "separation_ratio",
    "separation_signal",
    "vertical_signal",
    "tracking_confidence",
    "height_scales",
    "session_height_scale",
]
