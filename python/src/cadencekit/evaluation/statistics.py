"""
Statistics for comparing step engines across recordings.

Per-recording results are expected in long format: one row per
``(source_file, engine)`` with metric columns such as ``step_f1``,
``step_count_abs_error`` or ``cadence_error``.
"""

from typing import List, NamedTuple, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

_SUMMARY_METRICS = (
    "step_precision",
    "step_recall",
    "step_f1",
    "step_mae_ms",
    "step_count_abs_error",
    "cadence_error",
)


class ConfidenceInterval(NamedTuple):
    estimate: float
    lower: float
    upper: float


class PairedComparison(NamedTuple):
    """Paired comparison of two engines on one metric."""

    metric: str
    engine_a: str
    engine_b: str
    n_pairs: int
    median_difference: float
    statistic: float
    p_value: float


def bootstrap_confidence_interval(values, n_bootstrap: int = 10000,
                                  confidence: float = 0.95,
                                  statistic: str = "mean",
                                  seed: int = 42) -> ConfidenceInterval:
    """Percentile bootstrap interval of the mean or median.

    Parameters
    ----------
    values : array-like
        Per-recording values.  NaN and infinite entries are dropped.
    n_bootstrap : int
        Number of resamples.
    confidence : float
        Coverage in (0, 1), e.g. 0.95.
    statistic : str
        ``'mean'`` or ``'median'``.
    seed : int
        Seed of the resampling generator; equal seeds give equal intervals.

    Returns
    -------
    ConfidenceInterval
        ``(estimate, lower, upper)``; all NaN when no finite value is left.
    """
    reducers = {"mean": np.mean, "median": np.median}
    if statistic not in reducers:
        raise ValueError("statistic must be 'mean' or 'median'")
    if not 0 < confidence < 1:
        raise ValueError("confidence must be within (0, 1)")
    if n_bootstrap < 1:
        raise ValueError("n_bootstrap must be >= 1")
    reduce = reducers[statistic]

    x = np.asarray(values, dtype=float).ravel()
    x = x[np.isfinite(x)]
    if x.size == 0:
        return ConfidenceInterval(np.nan, np.nan, np.nan)

    rng = np.random.default_rng(seed)
    idx = rng.integers(0, x.size, size=(n_bootstrap, x.size))
    replicates = reduce(x[idx], axis=1)
    tail = (1.0 - confidence) / 2.0
    lower, upper = np.quantile(replicates, [tail, 1.0 - tail])
    return ConfidenceInterval(float(reduce(x)), float(lower), float(upper))


def wilcoxon_signed_rank(values_a, values_b, alternative: str = "two-sided"):
    """Wilcoxon signed-rank test on paired per-recording values.

    Pairs with a non-finite member are dropped.  With fewer than 5
    remaining pairs, or when every pair is tied, the test is not
    informative and ``(nan, nan)`` is returned.

    Returns
    -------
    statistic : float
    p_value : float
    """
    if alternative not in ("two-sided", "greater", "less"):
        raise ValueError("alternative must be 'two-sided', 'greater' or 'less'")
    a = np.asarray(values_a, dtype=float)
    b = np.asarray(values_b, dtype=float)
    if a.shape != b.shape:
        raise ValueError("values_a and values_b must be paired (same length)")
    keep = np.isfinite(a) & np.isfinite(b)
    diff = a[keep] - b[keep]
    if diff.size < 5 or not np.any(diff):
        return float("nan"), float("nan")
    res = stats.wilcoxon(diff, alternative=alternative)
    return float(res.statistic), float(res.pvalue)


def compare_engines(df: pd.DataFrame, metric: str, engine_a: str, engine_b: str,
                    alternative: str = "two-sided") -> PairedComparison:
    """Compare two engines on *metric*, pairing rows by ``source_file``.

    Recordings analysed by only one of the engines are ignored.
    """
    if not isinstance(df, pd.DataFrame):
        raise ValueError("df must be a pandas DataFrame")
    for col in ("engine", "source_file", metric):
        if col not in df.columns:
            raise ValueError(f"column {col!r} not in DataFrame")
    wide = df.pivot_table(index="source_file", columns="engine",
                          values=metric, aggfunc="mean")
    for engine in (engine_a, engine_b):
        if engine not in wide.columns:
            raise ValueError(f"engine {engine!r} has no rows")
    pairs = wide[[engine_a, engine_b]].dropna()
    stat, p = wilcoxon_signed_rank(pairs[engine_a].to_numpy(),
                                   pairs[engine_b].to_numpy(), alternative)
    diff = pairs[engine_a] - pairs[engine_b]
    return PairedComparison(
        metric=metric,
        engine_a=engine_a,
        engine_b=engine_b,
        n_pairs=int(len(pairs)),
        median_difference=float(diff.median()) if len(pairs) else float("nan"),
        statistic=stat,
        p_value=p,
    )


def compute_summary_table(df: pd.DataFrame,
                          group_cols: Optional[List[str]] = None,
                          metrics: Sequence[str] = _SUMMARY_METRICS) -> pd.DataFrame:
    """Mean of each metric per group, with the number of recordings.

    Parameters
    ----------
    df : DataFrame
        Long-format per-recording results.
    group_cols : list of str, optional
        Grouping columns (default ``['engine']``).
    metrics : sequence of str
        Metric columns to average; those missing from *df* are skipped.

    Returns
    -------
    DataFrame
        Indexed by *group_cols*, values rounded to 3 decimals.  An
        ``n_recordings`` column is added when *df* has ``source_file``.
    """
    if not isinstance(df, pd.DataFrame):
        raise ValueError("df must be a pandas DataFrame")
    group_cols = ["engine"] if group_cols is None else list(group_cols)
    if not group_cols:
        raise ValueError("group_cols must name at least one column")
    missing = [c for c in group_cols if c not in df.columns]
    if missing:
        raise ValueError(f"group columns not in DataFrame: {missing}")

    named = {m: (m, "mean") for m in metrics if m in df.columns}
    if "source_file" in df.columns:
        named["n_recordings"] = ("source_file", "nunique")
    if not named:
        raise ValueError("df has none of the metric columns to summarise")
    return df.groupby(group_cols).agg(**named).round(3).sort_index()


__all__ = [
    "ConfidenceInterval",
    "PairedComparison",
    "bootstrap_confidence_interval",
    "wilcoxon_signed_rank",
    "compare_engines",
    "compute_summary_table",
]
