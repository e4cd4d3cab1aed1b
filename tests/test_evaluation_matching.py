"""Unit tests for evaluation.matching helpers."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "python" / "src"))

from cadencekit.evaluation.matching import match_steps


class TestEvaluationMatching(unittest.TestCase):
    def test_rejects_negative_tolerance(self):
        with self.assertRaises(ValueError):
            match_steps([1.0], [1.0], tolerance_s=-0.1)

    def test_empty_fast_paths(self):
        matches, unmatched = match_steps([], [1.0, 2.0], tolerance_s=0.1)
        self.assertEqual(matches, [])
        self.assertEqual(unmatched, [1.0, 2.0])

        matches, unmatched = match_steps([1.0, 2.0], [], tolerance_s=0.1)
        self.assertEqual(len(matches), 2)
        self.assertEqual(unmatched, [])
        self.assertTrue(all(m.gt_time is None for m in matches))

    def test_each_annotation_is_used_once(self):
        matches, unmatched = match_steps([1.02, 0.97], [1.0], tolerance_s=0.1)
        matched = [m for m in matches if m.gt_time is not None]
        self.assertEqual(len(matched), 1)
        self.assertEqual(matched[0].detected_time, 0.97)
        self.assertAlmostEqual(matched[0].error_s, -0.03)
        self.assertEqual(unmatched, [])

    def test_outside_tolerance_is_unmatched(self):
        matches, unmatched = match_steps([1.5], [1.0], tolerance_s=0.2)
        self.assertIsNone(matches[0].error_s)
        self.assertEqual(unmatched, [1.0])


if __name__ == "__main__":
    unittest.main()
