"""Unit tests for peak/spectral consensus."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "python" / "src"))

from cadencekit.detectors.consensus import (
    DECISION_AGREE,
    DECISION_FFT,
    DECISION_FFT_UNRELIABLE,
    DECISION_PEAKS,
    cadence_from_count,
    count_discrepancy,
    resolve_step_count,
)


class TestConsensus(unittest.TestCase):
    def test_fft_wins_when_peaks_missed_steps(self):
        d = resolve_step_count(10, 14)
        self.assertEqual(d.step_count, 14)
        self.assertEqual(d.decision, DECISION_FFT)

    def test_peaks_kept_when_higher(self):
        d = resolve_step_count(14, 10)
        self.assertEqual(d.step_count, 14)
        self.assertEqual(d.decision, DECISION_PEAKS)

    def test_small_discrepancy_trusts_peaks(self):
        d = resolve_step_count(10, 12)
        self.assertEqual(d.step_count, 10)
        self.assertEqual(d.decision, DECISION_AGREE)

    def test_unreliable_fft_is_ignored(self):
        d = resolve_step_count(2, 5)
        self.assertEqual(d.step_count, 2)
        self.assertEqual(d.decision, DECISION_FFT_UNRELIABLE)
        self.assertEqual(resolve_step_count(0, 6).step_count, 6)

    def test_zero_counts(self):
        self.assertEqual(count_discrepancy(0, 0), 0.0)
        d = resolve_step_count(0, 0)
        self.assertEqual((d.step_count, d.decision), (0, DECISION_AGREE))

    def test_discrepancy_is_relative_to_mean(self):
        self.assertAlmostEqual(count_discrepancy(10, 14), 4 / 12)


class TestCadence(unittest.TestCase):
    def test_steps_per_minute(self):
        self.assertEqual(cadence_from_count(36, 20.0), 108)
        self.assertEqual(cadence_from_count(0, 20.0), 0)
        self.assertEqual(cadence_from_count(5, 0.0), 0)

    def test_rounds_half_up(self):
        # 7 steps in 8 s is 52.5 steps/min
        self.assertEqual(cadence_from_count(7, 8.0), 53)


if __name__ == "__main__":
    unittest.main()
