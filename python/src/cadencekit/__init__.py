"""cadencekit: adaptive gait signal processing from pose landmarks.

Quick start
-----------
>>> import cadencekit
>>> walk = cadencekit.load_example("healthy")
>>> result = cadencekit.analyze(walk)
>>> result.summary()

Available engines: separation (default), vertical.
"""

__version__ = "0.3.0"

from ._config import DEFAULT_CONFIG, VERTICAL_CONFIG, EngineConfig
from ._core import (
    GaitMetrics,
    GaitResult,
    analyze,
    compute_gait_metrics,
    list_engines,
    merge_assessment,
)
from ._ensemble import DEFAULT_ENGINES, reconcile
from ._errors import EngineFailureError, GaitAnalysisError, PoseEstimationError, VideoDecodeError
from ._io import list_examples, load_example, load_landmarks
from ._landmarks import Landmark, LandmarkPoint, LandmarkSample, build_samples, from_mediapipe
from ._pose import PoseEstimator, collect_landmarks
from ._types import EngineResult, Peak, Signal, TimingStats
from ._viz import compare_plot

__all__ = [
    "analyze",
    "compute_gait_metrics",
    "merge_assessment",
    "reconcile",
    "DEFAULT_ENGINES",
    "list_engines",
    "load_example",
    "list_examples",
    "load_landmarks",
    "build_samples",
    "from_mediapipe",
    "collect_landmarks",
    "compare_plot",
    "EngineConfig",
    "DEFAULT_CONFIG",
    "VERTICAL_CONFIG",
    "GaitMetrics",
    "GaitResult",
    "EngineResult",
    "Landmark",
    "LandmarkPoint",
    "LandmarkSample",
    "Peak",
    "PoseEstimator",
    "Signal",
    "TimingStats",
    "GaitAnalysisError",
    "PoseEstimationError",
    "VideoDecodeError",
    "EngineFailureError",
    "__version__",
]
