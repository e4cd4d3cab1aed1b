"""Unit tests for evaluation.statistics helpers."""

from __future__ import annotations

import math
import sys
import unittest
from pathlib import Path

import numpy as np
import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "python" / "src"))

from cadencekit.evaluation.statistics import (
    bootstrap_confidence_interval,
    compare_engines,
    compute_summary_table,
    wilcoxon_signed_rank,
)


class TestEvaluationStatistics(unittest.TestCase):
    def test_bootstrap_confidence_interval_validates_controls(self):
        x = np.array([1.0, 2.0, 3.0], dtype=float)
        with self.assertRaises(ValueError):
            bootstrap_confidence_interval(x, n_bootstrap=0)
        with self.assertRaises(ValueError):
            bootstrap_confidence_interval(x, confidence=0.0)
        with self.assertRaises(ValueError):
            bootstrap_confidence_interval(x, statistic="mode")

    def test_bootstrap_confidence_interval_brackets_estimate(self):
        x = np.array([2.0, 3.0, np.nan, 4.0, 5.0, 6.0])
        est, lo, hi = bootstrap_confidence_interval(x, n_bootstrap=500)
        self.assertAlmostEqual(est, 4.0)
        self.assertLessEqual(lo, est)
        self.assertGreaterEqual(hi, est)
        self.assertEqual(bootstrap_confidence_interval(x, n_bootstrap=500),
                         (est, lo, hi))
        self.assertTrue(all(math.isnan(v) for v in bootstrap_confidence_interval([])))

    def test_wilcoxon_signed_rank_validates_alternative(self):
        a = np.array([1.0, 2.0, 3.0, 4.0, 5.0], dtype=float)
        b = np.array([1.1, 1.9, 3.2, 3.8, 4.9], dtype=float)
        with self.assertRaises(ValueError):
            wilcoxon_signed_rank(a, b, alternative="invalid")
        with self.assertRaises(ValueError):
            wilcoxon_signed_rank(a, b[:4])

    def test_wilcoxon_signed_rank_degenerate_inputs(self):
        stat, p = wilcoxon_signed_rank([1.0, 2.0, 3.0], [2.0, 3.0, 4.0])
        self.assertTrue(math.isnan(stat) and math.isnan(p))
        same = np.arange(6, dtype=float)
        stat, p = wilcoxon_signed_rank(same, same)
        self.assertTrue(math.isnan(p))

    def test_compute_summary_table_validates_group_columns(self):
        with self.assertRaises(ValueError):
            compute_summary_table([], group_cols=["engine"])  # type: ignore[arg-type]
        df = pd.DataFrame(
            {
                "engine": ["separation", "separation"],
                "source_file": ["a.json", "b.json"],
                "step_f1": [0.5, 0.6],
            }
        )
        with self.assertRaises(ValueError):
            compute_summary_table(df, group_cols=[])
        with self.assertRaises(ValueError):
            compute_summary_table(df, group_cols=["missing"])

    def test_compute_summary_table_aggregates_per_engine(self):
        df = pd.DataFrame(
            {
                "engine": ["separation", "separation", "vertical"],
                "source_file": ["a.json", "b.json", "a.json"],
                "step_f1": [0.8, 0.9, 0.7],
                "step_count_abs_error": [1, 3, 2],
            }
        )
        table = compute_summary_table(df)
        self.assertEqual(list(table.index), ["separation", "vertical"])
        self.assertAlmostEqual(table.loc["separation", "step_f1"], 0.85)
        self.assertEqual(table.loc["separation", "n_recordings"], 2)
        self.assertEqual(table.loc["vertical", "step_count_abs_error"], 2)

    def test_compare_engines_pairs_by_recording(self):
        files = [f"walk_{i}.json" for i in range(6)]
        df = pd.DataFrame({
            "source_file": files * 2 + ["extra.json"],
            "engine": ["separation"] * 6 + ["vertical"] * 6 + ["vertical"],
            "step_count_abs_error": [0, 1, 0, 2, 1, 0, 2, 3, 1, 4, 3, 2, 9],
        })
        cmp = compare_engines(df, "step_count_abs_error", "separation", "vertical")
        self.assertEqual(cmp.n_pairs, 6)
        self.assertEqual(cmp.median_difference, -2.0)
        self.assertGreater(cmp.p_value, 0.0)
        self.assertLess(cmp.p_value, 0.1)
        with self.assertRaises(ValueError):
            compare_engines(df, "step_f1", "separation", "vertical")
        with self.assertRaises(ValueError):
            compare_engines(df, "step_count_abs_error", "separation", "optical_flow")


if __name__ == "__main__":
    unittest.main()
