"""Adapter between a pose-estimation backend and cadencekit samples.

The estimator itself is not part of this package.  Any object with an
``estimate(image)`` method returning the landmarks of one person (or
``None`` when nobody is found) can be plugged in, e.g. a thin wrapper
around MediaPipe Pose.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, Sized, Tuple

import numpy as np

from ._errors import PoseEstimationError, VideoDecodeError
from ._landmarks import LandmarkSample, build_samples, from_mediapipe

logger = logging.getLogger(__name__)


class PoseEstimator(Protocol):
    def estimate(self, image: Any) -> Optional[Any]:
        """Landmarks of the person in *image*, or ``None`` if nobody was found.

        Either a 33-point MediaPipe landmark list (objects with ``x``,
        ``y``, ``visibility``, or ``(x, y[, visibility])`` rows), an array
        of shape ``(33, 2|3|4)`` (``x, y[, z], visibility``), or a
        ``{landmark_name: point}`` mapping.
        """


def _to_sample(landmarks: Any, timestamp: float, frame_index: int) -> LandmarkSample:
    if landmarks is None:
        return LandmarkSample(timestamp, {}, frame_index)
    if isinstance(landmarks, Mapping):
        frame = {"timestamp": timestamp, "frame_index": frame_index, "landmarks": landmarks}
        return build_samples([frame])[0]
    if isinstance(landmarks, np.ndarray):
        arr = np.asarray(landmarks, dtype=float)
        if arr.ndim != 2 or arr.shape[1] not in (2, 3, 4):
            raise ValueError(f"Landmark array must have shape (33, 2|3|4), got {arr.shape}")
        if arr.shape[1] == 4:
            # x, y, z, visibility
            arr = arr[:, [0, 1, 3]]
        landmarks = [tuple(row) for row in arr.tolist()]
    return from_mediapipe(list(landmarks), timestamp, frame_index)


def _expected_frames(frames, fps: float, max_duration: Optional[float],
                     total_frames: Optional[int]) -> Optional[int]:
    if total_frames is None and isinstance(frames, Sized):
        total_frames = len(frames)
    if max_duration is not None:
        capped = int(math.ceil(max_duration * fps))
        total_frames = capped if total_frames is None else min(total_frames, capped)
    return total_frames


def collect_landmarks(
    frames: Iterable[Any],
    estimator: PoseEstimator,
    fps: float = 30.0,
    max_duration: Optional[float] = 180.0,
    progress: Optional[Callable[[float], Any]] = None,
    total_frames: Optional[int] = None,
) -> Tuple[LandmarkSample, ...]:
    """Run *estimator* over decoded frames and collect landmark samples.

    Parameters
    ----------
    frames : iterable
        Decoded images in presentation order, sampled at *fps*.
    estimator : PoseEstimator
    fps : float
        Rate at which *frames* were sampled (30 by default).
    max_duration : float, optional
        Stop after this many seconds of footage.
    progress : callable, optional
        Called with the percentage of frames processed after each frame,
        and with 100 once collection ends.  Percentages need a known
        frame count: *total_frames*, ``len(frames)`` or the duration cap.
    total_frames : int, optional
        Number of frames in *frames* when it has no length.

    Returns
    -------
    tuple of LandmarkSample
        One sample per frame.  Frames without a detected person give an
        empty sample, which the signal builders carry forward.

    Raises
    ------
    PoseEstimationError
        If the estimator raises or returns landmarks that cannot be read.
    VideoDecodeError
        If iterating *frames* fails.
    """
    if fps is None or fps <= 0:
        raise ValueError("fps must be strictly positive")
    if max_duration is not None and max_duration <= 0:
        raise ValueError("max_duration must be strictly positive")
    if not callable(getattr(estimator, "estimate", None)):
        raise TypeError("estimator must provide an estimate(image) method")
    if progress is not None and not callable(progress):
        raise TypeError("progress must be callable")

    expected = _expected_frames(frames, fps, max_duration, total_frames)
    last_percent = None

    samples = []
    detected = 0
    iterator = iter(frames)
    frame_index = 0
    while True:
        timestamp = frame_index / fps
        if max_duration is not None and timestamp >= max_duration:
            logger.info("Stopped pose collection at the %.0f s duration cap", max_duration)
            break
        try:
            image = next(iterator)
        except StopIteration:
            break
        except (OSError, ValueError, RuntimeError) as exc:
            raise VideoDecodeError(f"Could not decode frame {frame_index}: {exc}") from exc

        try:
            landmarks = estimator.estimate(image)
            sample = _to_sample(landmarks, timestamp, frame_index)
        except Exception as exc:
            raise PoseEstimationError(
                f"Pose estimation failed on frame {frame_index}: {exc}", frame_index
            ) from exc
        if sample.landmarks:
            detected += 1
        samples.append(sample)
        frame_index += 1
        if progress is not None and expected:
            last_percent = min(100.0, 100.0 * frame_index / expected)
            progress(last_percent)

    if progress is not None and last_percent != 100.0:
        progress(100.0)

    if samples:
        logger.info("Pose found in %d/%d frames (%.0f%%)",
                    detected, len(samples), 100.0 * detected / len(samples))
    else:
        logger.warning("No frames were collected")
    return tuple(samples)


__all__ = ["PoseEstimator", "collect_landmarks"]
