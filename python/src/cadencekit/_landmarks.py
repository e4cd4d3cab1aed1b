"""Landmark data structures and ingestion of pose-estimator output."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, NamedTuple, Optional, Sequence, Tuple

import numpy as np


class Landmark(str, Enum):
    """Landmarks consumed by the engines, valued by their canonical name."""

    NOSE = "nose"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"
    LEFT_HEEL = "left_heel"
    RIGHT_HEEL = "right_heel"

    @property
    def mediapipe_index(self) -> int:
        return MEDIAPIPE_INDEX[self]


# MediaPipe Pose (33-point) topology
MEDIAPIPE_INDEX: Dict[Landmark, int] = {
    Landmark.NOSE: 0,
    Landmark.LEFT_SHOULDER: 11,
    Landmark.RIGHT_SHOULDER: 12,
    Landmark.LEFT_HIP: 23,
    Landmark.RIGHT_HIP: 24,
    Landmark.LEFT_KNEE: 25,
    Landmark.RIGHT_KNEE: 26,
    Landmark.LEFT_ANKLE: 27,
    Landmark.RIGHT_ANKLE: 28,
    Landmark.LEFT_HEEL: 29,
    Landmark.RIGHT_HEEL: 30,
}

_LANDMARK_NAMES = frozenset(lm.value for lm in Landmark)


class LandmarkPoint(NamedTuple):
    """Normalised 2-D landmark position with detection confidence."""

    x: float
    y: float
    visibility: float = 1.0


@dataclass(frozen=True)
class LandmarkSample:
    """All landmarks observed in one processed frame.

    Attributes
    ----------
    timestamp : float
        Frame time in seconds.
    landmarks : dict
        ``{landmark_name: LandmarkPoint}``.  Empty when no pose was found.
    frame_index : int
        Index of the frame in the source recording.
    """

    timestamp: float
    landmarks: Mapping[str, LandmarkPoint] = field(default_factory=dict)
    frame_index: int = 0

    def get(self, name) -> Optional[LandmarkPoint]:
        return self.landmarks.get(_landmark_name(name))

    def visible(self, name, min_visibility: float) -> Optional[LandmarkPoint]:
        """Return the landmark if present with ``visibility >= min_visibility``."""
        point = self.get(name)
        if point is None or point.visibility < min_visibility:
            return None
        return point


def _landmark_name(name) -> str:
    if isinstance(name, Landmark):
        return name.value
    return str(name).lower().strip()


def _coerce_point(value: Any) -> LandmarkPoint:
    if isinstance(value, LandmarkPoint):
        return value
    if isinstance(value, Mapping):
        vis = value.get("visibility", value.get("score", 1.0))
        point = LandmarkPoint(float(value["x"]), float(value["y"]),
                              1.0 if vis is None else float(vis))
    elif hasattr(value, "x") and hasattr(value, "y"):
        vis = getattr(value, "visibility", 1.0)
        point = LandmarkPoint(float(value.x), float(value.y),
                              1.0 if vis is None else float(vis))
    elif isinstance(value, (list, tuple)) and len(value) in (2, 3):
        point = LandmarkPoint(*(float(v) for v in value))
    else:
        raise ValueError(
            f"Cannot interpret landmark value {value!r}; expected (x, y[, visibility])"
        )
    if not all(math.isfinite(v) for v in point):
        raise ValueError(f"Landmark coordinates must be finite, got {tuple(point)}")
    return point


def from_mediapipe(landmarks: Optional[Sequence[Any]], timestamp: float,
                   frame_index: int = 0) -> LandmarkSample:
    """Build a sample from a 33-point MediaPipe landmark list.

    ``landmarks`` may be ``None`` (no pose in the frame), in which case an
    empty sample is returned so the frame still counts downstream.
    """
    if landmarks is None:
        return LandmarkSample(float(timestamp), {}, int(frame_index))
    if len(landmarks) < max(MEDIAPIPE_INDEX.values()) + 1:
        raise ValueError(
            f"MediaPipe landmark list must contain 33 points, got {len(landmarks)}"
        )
    points = {
        lm.value: _coerce_point(landmarks[idx])
        for lm, idx in MEDIAPIPE_INDEX.items()
        if landmarks[idx] is not None
    }
    return LandmarkSample(float(timestamp), points, int(frame_index))


def _sample_from_dict(frame: Mapping[str, Any], index: int,
                      fps: Optional[float]) -> LandmarkSample:
    frame_index = int(frame.get("frame_index", index))
    timestamp = frame.get("timestamp", frame.get("time"))
    if timestamp is None:
        if fps is None:
            raise ValueError("fps is required when frames carry no timestamp")
        timestamp = frame_index / fps
    raw = frame.get("landmarks", frame.get("landmark_positions"))
    if raw is None:
        return LandmarkSample(float(timestamp), {}, frame_index)
    if isinstance(raw, (list, tuple)):
        return from_mediapipe(raw, timestamp, frame_index)
    if not isinstance(raw, Mapping):
        raise ValueError("'landmarks' must be a mapping or a MediaPipe list")
    points = {}
    for name, value in raw.items():
        key = _landmark_name(name)
        if key in _LANDMARK_NAMES and value is not None:
            points[key] = _coerce_point(value)
    return LandmarkSample(float(timestamp), points, frame_index)


def build_samples(frames: Sequence[Any],
                  fps: Optional[float] = None) -> Tuple[LandmarkSample, ...]:
    """Convert structured frames to an immutable tuple of samples.

    Parameters
    ----------
    frames : sequence
        :class:`LandmarkSample` objects or dicts with keys ``timestamp``
        (or ``time``), optional ``frame_index`` and ``landmarks`` (a
        ``{name: [x, y, visibility]}`` mapping or a MediaPipe list).
    fps : float, optional
        Used to derive timestamps for frames that have none.

    Raises
    ------
    ValueError
        If timestamps are not strictly increasing or a landmark cannot be
        interpreted.
    """
    if frames is None:
        return ()
    if isinstance(frames, (str, bytes)):
        raise ValueError("frames must be a sequence of samples, not a string")
    if fps is not None and fps <= 0:
        raise ValueError("fps must be strictly positive")

    samples = []
    for i, frame in enumerate(frames):
        if isinstance(frame, LandmarkSample):
            samples.append(frame)
        elif isinstance(frame, Mapping):
            samples.append(_sample_from_dict(frame, i, fps))
        else:
            raise TypeError(
                f"Cannot interpret frame of type {type(frame).__name__}. "
                "Pass LandmarkSample objects or dicts."
            )

    times = np.array([s.timestamp for s in samples], dtype=float)
    if len(times) and not np.all(np.isfinite(times)):
        raise ValueError("timestamps must be finite")
    if len(times) > 1 and np.any(np.diff(times) <= 0):
        raise ValueError("timestamps must be strictly increasing")
    return tuple(samples)


def infer_duration(samples: Sequence[LandmarkSample]) -> float:
    """Recording duration implied by the sample timestamps.

    The span between the first and last sample plus one median frame
    period, i.e. the length of the recording the frames were sampled from.
    """
    if len(samples) < 2:
        return 0.0
    times = np.array([s.timestamp for s in samples], dtype=float)
    return float(times[-1] - times[0] + np.median(np.diff(times)))


def truncate_samples(samples: Sequence[LandmarkSample],
                     max_seconds: float) -> Tuple[LandmarkSample, ...]:
    """Keep samples within ``max_seconds`` of the first one."""
    if not samples:
        return ()
    t0 = samples[0].timestamp
    return tuple(s for s in samples if s.timestamp - t0 < max_seconds)


__all__ = [
    "Landmark",
    "LandmarkPoint",
    "LandmarkSample",
    "MEDIAPIPE_INDEX",
    "build_samples",
    "from_mediapipe",
    "infer_duration",
    "truncate_samples",
]
