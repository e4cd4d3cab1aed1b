"""
Dual-domain step engine on the ankle-separation signal.

Pipeline
--------
1. Normalised ankle separation (ankle distance / shoulder width), with
   occluded frames carried forward.
2. Adaptive threshold and time-domain peak picking on the smoothed
   signal.
3. Band-limited spectral estimate on the unsmoothed signal, with
   stride/step disambiguation.
4. Consensus between both counts, cadence and timing statistics.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .._config import DEFAULT_CONFIG, EngineConfig
from .._landmarks import Landmark, LandmarkSample
from .._types import EngineResult
from ..signals import separation_signal, tracking_confidence
from ..timing import step_timing
from .consensus import cadence_from_count, resolve_step_count
from .peak_detector import detect_peaks
from .spectral_detector import estimate_steps

logger = logging.getLogger(__name__)

ENGINE_NAME = "separation"


def detect_separation_steps(samples: Sequence[LandmarkSample], duration: float,
                            config: EngineConfig = DEFAULT_CONFIG) -> EngineResult:
    """Run the separation pipeline over one recording.

    Parameters
    ----------
    samples : sequence of LandmarkSample
        Frames of the analysed window, in time order.
    duration : float
        Analysed duration in seconds.
    config : EngineConfig

    Returns
    -------
    EngineResult
    """
    signal = separation_signal(samples, config)
    smoothed, threshold, peaks = detect_peaks(signal, config)
    spectral = estimate_steps(signal, duration, len(peaks), config)
    consensus = resolve_step_count(len(peaks), spectral.steps, config)
    cadence = cadence_from_count(consensus.step_count, duration)
    timing = step_timing(peaks, consensus.step_count, duration, config)
    confidence = tracking_confidence(
        samples, (Landmark.LEFT_ANKLE, Landmark.RIGHT_ANKLE), config.min_visibility)

    logger.debug(
        "%s: peaks=%d fft=%d -> %d steps (%s), cadence=%d",
        ENGINE_NAME, len(peaks), spectral.steps, consensus.step_count,
        consensus.decision, cadence,
    )
    return EngineResult(
        engine=ENGINE_NAME,
        step_count=consensus.step_count,
        cadence=cadence,
        peaks=peaks,
        timing=timing,
        signal=signal,
        diagnostics={
            "threshold": threshold,
            "peak_count": len(peaks),
            "fft_steps": spectral.steps,
            "fft_raw_steps": spectral.raw_steps,
            "dominant_frequency": spectral.frequency,
            "stride_doubled": spectral.doubled,
            "discrepancy": consensus.discrepancy,
            "decision": consensus.decision,
            "confidence": confidence,
            "smoothed": smoothed,
        },
    )


__all__ = ["ENGINE_NAME", "detect_separation_steps"]
