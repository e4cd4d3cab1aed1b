"""Typed failures raised by cadencekit.

A walk in which no step is found is a valid clinical outcome and is
reported as a normal :class:`~cadencekit.GaitMetrics` with
``step_count == 0``.  The exceptions below are reserved for analyses
that could not be carried out at all.
"""

from __future__ import annotations

from typing import Dict, Optional


class GaitAnalysisError(RuntimeError):
    """Base class for failures that prevent an analysis from completing."""


class PoseEstimationError(GaitAnalysisError):
    """The pose-estimation collaborator was unavailable or failed on a frame.

    Attributes
    ----------
    frame_index : int or None
        Index of the frame being processed when the estimator failed.
    """

    def __init__(self, message: str, frame_index: Optional[int] = None):
        super().__init__(message)
        self.frame_index = frame_index


class VideoDecodeError(GaitAnalysisError):
    """A recording could not be decoded into frames."""


class EngineFailureError(GaitAnalysisError):
    """Every requested step engine failed.

    Attributes
    ----------
    failures : dict
        ``{engine_name: error_message}`` for each failed engine.
    """

    def __init__(self, failures: Dict[str, str]):
        names = ", ".join(sorted(failures)) or "<none>"
        super().__init__(f"No step engine produced a result (failed: {names})")
        self.failures = dict(failures)


__all__ = [
    "GaitAnalysisError",
    "PoseEstimationError",
    "VideoDecodeError",
    "EngineFailureError",
]
