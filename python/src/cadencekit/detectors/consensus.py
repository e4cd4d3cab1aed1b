"""
Consensus between the time-domain and frequency-domain step counts.

Policy
------
- Counts within ``consensus_tolerance`` (20 %) of each other: trust the
  peaks, which also carry temporal precision.
- Larger discrepancy with a usable spectral count (``fft > min_fft_steps``):
  - peaks < fft: adopt fft (missed low-amplitude or shuffling steps);
  - peaks > fft: keep peaks (rhythmic over-detection is judged less
    likely than genuine steps).
- Otherwise keep the peaks.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from .._config import DEFAULT_CONFIG, EngineConfig
from ..utils.preprocessing import round_half_up

logger = logging.getLogger(__name__)

DECISION_AGREE = "agree"
DECISION_FFT = "fft"
DECISION_PEAKS = "peaks"
DECISION_FFT_UNRELIABLE = "peaks_fft_unreliable"


class ConsensusDecision(NamedTuple):
    step_count: int
    discrepancy: float
    decision: str


def count_discrepancy(peak_count: int, fft_steps: int) -> float:
    """``|peaks - fft| / mean(peaks, fft)``, 0 when both counts are 0."""
    mean = (peak_count + fft_steps) / 2.0
    if mean <= 0:
        return 0.0
    return abs(peak_count - fft_steps) / mean


def resolve_step_count(peak_count: int, fft_steps: int,
                       config: EngineConfig = DEFAULT_CONFIG) -> ConsensusDecision:
    """Arbitrate between the peak count and the spectral count."""
    discrepancy = count_discrepancy(peak_count, fft_steps)
    if discrepancy <= config.consensus_tolerance:
        return ConsensusDecision(peak_count, discrepancy, DECISION_AGREE)
    if fft_steps <= config.min_fft_steps:
        return ConsensusDecision(peak_count, discrepancy, DECISION_FFT_UNRELIABLE)
    logger.info(
        "Step count discrepancy %.0f%% (peaks=%d, fft=%d)",
        discrepancy * 100, peak_count, fft_steps,
    )
    if peak_count < fft_steps:
        return ConsensusDecision(fft_steps, discrepancy, DECISION_FFT)
    return ConsensusDecision(peak_count, discrepancy, DECISION_PEAKS)


def cadence_from_count(step_count: int, duration: float) -> int:
    """Steps per minute over *duration* seconds, 0 for an empty recording."""
    if duration <= 0:
        return 0
    return round_half_up(step_count / (duration / 60.0))


__all__ = [
    "ConsensusDecision",
    "count_discrepancy",
    "resolve_step_count",
    "cadence_from_count",
    "DECISION_AGREE",
    "DECISION_FFT",
    "DECISION_PEAKS",
    "DECISION_FFT_UNRELIABLE",
]
