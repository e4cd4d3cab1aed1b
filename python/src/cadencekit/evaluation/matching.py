"""
Step matching between detected and annotated step times.

Greedy nearest-neighbour matching in time: each detected step, in
temporal order, takes the closest still-unmatched annotated step within
the tolerance window.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


@dataclass
class StepMatch:
    """Result of matching a single detected step to the annotation.

    Attributes
    ----------
    detected_time : float
        Time (s) of the detected step.
    gt_time : float or None
        Time of the matched annotated step, or None (false positive).
    error_s : float or None
        Signed error in seconds (detected - annotated), or None if unmatched.
    """
    detected_time: float
    gt_time: Optional[float]
    error_s: Optional[float]


def match_steps(detected: Sequence[float], ground_truth: Sequence[float],
                tolerance_s: float) -> Tuple[List[StepMatch], List[float]]:
    """Match detected steps to annotated steps within a tolerance.

    Parameters
    ----------
    detected : sequence of float
        Detected step times (s), need not be sorted.
    ground_truth : sequence of float
        Annotated step times (s), need not be sorted.
    tolerance_s : float
        Maximum allowed distance (s) for a valid match.

    Returns
    -------
    matches : list of StepMatch
        One entry per detected step (matched or false positive).
    unmatched_gt : list of float
        Annotated steps that were not matched (false negatives).
    """
    if tolerance_s < 0:
        raise ValueError("tolerance_s must be >= 0")
    det_sorted = sorted(float(d) for d in detected)
    gt_sorted = sorted(float(g) for g in ground_truth)
    gt_used = [False] * len(gt_sorted)

    matches = []
    for d in det_sorted:
        best_j = -1
        best_dist = float("inf")
        for j, g in enumerate(gt_sorted):
            if gt_used[j]:
                continue
            dist = abs(d - g)
            if dist <= tolerance_s and dist < best_dist:
                best_dist = dist
                best_j = j
        if best_j >= 0:
            gt_used[best_j] = True
            matches.append(StepMatch(
                detected_time=d,
                gt_time=gt_sorted[best_j],
                error_s=d - gt_sorted[best_j],
            ))
        else:
            matches.append(StepMatch(detected_time=d, gt_time=None, error_s=None))

    unmatched_gt = [gt_sorted[j] for j in range(len(gt_sorted)) if not gt_used[j]]
    return matches, unmatched_gt
