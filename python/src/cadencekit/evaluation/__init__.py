"""
Scoring of detected steps against annotated step times.

Matching, count and cadence errors per recording, and statistics for
comparing engines across recordings.
"""

from .matching import StepMatch, match_steps
from .metrics import compute_cadence_error, compute_step_count_error, compute_step_metrics
from .statistics import (
    ConfidenceInterval,
    PairedComparison,
    bootstrap_confidence_interval,
    compare_engines,
    compute_summary_table,
    wilcoxon_signed_rank,
)

__all__ = [
    "match_steps", "StepMatch",
    "compute_step_metrics", "compute_cadence_error", "compute_step_count_error",
    "bootstrap_confidence_interval", "wilcoxon_signed_rank", "compare_engines",
    "compute_summary_table", "ConfidenceInterval", "PairedComparison",
]
