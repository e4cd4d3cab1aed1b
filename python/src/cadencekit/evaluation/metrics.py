"""
Detection metrics for step evaluation.

Computes precision, recall, F1-score and temporal accuracy (MAE) of
detected steps against annotated step times, plus step-count and cadence
errors.

When valid_time_range is provided, both detected and annotated steps are
filtered to that window before scoring, for annotations that only cover
part of a recording.
"""

import numpy as np

from .matching import match_steps


def _filter_to_range(times, valid_range):
    """Keep only times within [start, end] (inclusive)."""
    start, end = valid_range
    return [t for t in times if start <= t <= end]


def compute_step_metrics(detected, ground_truth, tolerance_ms=150.0,
                         valid_time_range=None):
    """Compute step detection performance metrics.

    Parameters
    ----------
    detected : sequence of float
        Detected step times (s).
    ground_truth : sequence of float
        Annotated step times (s).
    tolerance_ms : float
        Matching tolerance in milliseconds.
    valid_time_range : tuple of (float, float) or None
        If provided, only steps within [start, end] seconds are scored.

    Returns
    -------
    dict
        Keys: precision, recall, f1, mae_ms, n_tp, n_fp, n_fn.
    """
    if detected is None or ground_truth is None:
        raise ValueError("detected and ground_truth must be sequences of step times")
    if tolerance_ms is None or tolerance_ms < 0:
        raise ValueError("tolerance_ms must be >= 0")
    detected = list(detected)
    ground_truth = list(ground_truth)
    if valid_time_range is not None:
        if not isinstance(valid_time_range, tuple) or len(valid_time_range) != 2:
            raise ValueError("valid_time_range must be a (start, end) tuple")
        if valid_time_range[0] > valid_time_range[1]:
            raise ValueError("valid_time_range start must be <= end")
        detected = _filter_to_range(detected, valid_time_range)
        ground_truth = _filter_to_range(ground_truth, valid_time_range)

    # --- Edge cases ----------------------------------------------------------
    if not ground_truth:
        if not detected:
            return dict(precision=1.0, recall=1.0, f1=1.0, mae_ms=0.0,
                        n_tp=0, n_fp=0, n_fn=0)
        return dict(precision=0.0, recall=0.0, f1=0.0, mae_ms=float("inf"),
                    n_tp=0, n_fp=len(detected), n_fn=0)
    if not detected:
        return dict(precision=0.0, recall=0.0, f1=0.0, mae_ms=float("inf"),
                    n_tp=0, n_fp=0, n_fn=len(ground_truth))

    # --- Matching ------------------------------------------------------------
    matches, unmatched_gt = match_steps(detected, ground_truth, tolerance_ms / 1000.0)

    tp = sum(1 for m in matches if m.gt_time is not None)
    fp = sum(1 for m in matches if m.gt_time is None)
    fn = len(unmatched_gt)

    precision = tp / (tp + fp) if (tp + fp) > 0 else 0.0
    recall = tp / (tp + fn) if (tp + fn) > 0 else 0.0
    f1 = (2 * precision * recall / (precision + recall)
          if (precision + recall) > 0 else 0.0)

    errors = [abs(m.error_s) for m in matches if m.error_s is not None]
    mae_ms = float(np.mean(errors)) * 1000.0 if errors else float("inf")

    return dict(precision=precision, recall=recall, f1=f1, mae_ms=mae_ms,
                n_tp=tp, n_fp=fp, n_fn=fn)


def compute_cadence_error(detected, gt_cadence):
    """Compute absolute cadence error (steps/min).

    Parameters
    ----------
    detected : sequence of float
        Detected step times (s).
    gt_cadence : float
        Annotated cadence in steps/min.

    Returns
    -------
    float
        Absolute error of the cadence implied by the mean step interval,
        or -1 if not computable.
    """
    if len(detected) < 2 or gt_cadence <= 0:
        return -1.0
    intervals = np.diff(sorted(detected))
    detected_cadence = (60.0 / np.mean(intervals)
                        if np.mean(intervals) > 0 else 0.0)
    return float(abs(detected_cadence - gt_cadence))


def compute_step_count_error(detected_count, gt_count):
    """Signed, absolute and relative step-count error.

    Parameters
    ----------
    detected_count : int
    gt_count : int

    Returns
    -------
    dict
        Keys: error (detected - annotated), abs_error, rel_error (fraction
        of the annotated count; NaN when it is 0).
    """
    if detected_count < 0 or gt_count < 0:
        raise ValueError("step counts must be >= 0")
    error = int(detected_count) - int(gt_count)
    rel = abs(error) / gt_count if gt_count > 0 else float("nan")
    return dict(error=error, abs_error=abs(error), rel_error=rel)
