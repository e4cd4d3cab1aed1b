"""Unit tests for base of support and heel lift."""

from __future__ import annotations

import math
import sys
import unittest
from pathlib import Path

import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "python" / "src"))

from cadencekit._config import DEFAULT_CONFIG
from cadencekit._core import _build_metrics
from cadencekit._landmarks import LandmarkPoint, LandmarkSample, build_samples
from cadencekit._synthetic import synthesize_walk
from cadencekit._types import Signal
from cadencekit.detectors.separation_engine import detect_separation_steps
from cadencekit.signals import height_scales
from cadencekit.spatial import (
    aggregate_base_of_support,
    bos_measurements,
    heel_lifts,
    spatial_metrics,
)


def _stance(t, heel_gap, left_y=0.85, right_y=0.85, vis=0.9):
    return LandmarkSample(t, {
        "nose": LandmarkPoint(0.5, 0.15),
        "left_heel": LandmarkPoint(0.5 + heel_gap / 2, left_y, vis),
        "right_heel": LandmarkPoint(0.5 - heel_gap / 2, right_y, vis),
    })


class TestAggregateBaseOfSupport(unittest.TestCase):
    def test_floor_index_of_sorted_widths(self):
        self.assertEqual(aggregate_base_of_support([5.0, 1.0, 3.0, 2.0, 4.0]), 2.0)
        self.assertEqual(aggregate_base_of_support([9.0, 7.0, 8.0]), 7.0)
        self.assertEqual(aggregate_base_of_support([12.0]), 12.0)

    def test_matches_definition_for_many_sizes(self):
        rng = np.random.default_rng(1)
        for n in range(1, 40):
            widths = rng.uniform(2, 45, size=n)
            expected = sorted(widths)[math.floor(0.25 * n)]
            self.assertEqual(aggregate_base_of_support(widths), expected)

    def test_empty_is_zero(self):
        self.assertEqual(aggregate_base_of_support([]), 0.0)


class TestBosMeasurements(unittest.TestCase):
    def test_width_is_scaled_and_corrected(self):
        samples = [_stance(0.0, 0.05)]
        scales = height_scales(samples, 140.0)
        widths = bos_measurements(samples, scales)
        # 140 cm over 0.70 units is 200 cm/unit
        np.testing.assert_allclose(widths, [0.05 * 200.0 * 0.85])

    def test_single_support_frames_are_skipped(self):
        samples = [_stance(0.0, 0.05, left_y=0.80, right_y=0.85)]
        self.assertEqual(bos_measurements(samples, height_scales(samples, 170.0)).size, 0)

    def test_implausible_widths_are_excluded(self):
        samples = [_stance(0.0, 0.005), _stance(0.1, 0.5), _stance(0.2, 0.05)]
        widths = bos_measurements(samples, height_scales(samples, 140.0))
        self.assertEqual(widths.size, 1)

    def test_occluded_heels_are_skipped(self):
        samples = [_stance(0.0, 0.05, vis=0.2)]
        self.assertEqual(bos_measurements(samples, np.array([200.0])).size, 0)


class TestHeelLift(unittest.TestCase):
    def test_lift_above_floor(self):
        t = np.arange(300) / 30.0
        y = 0.85 - 0.02 * np.maximum(0.0, np.sin(2 * np.pi * 0.8 * t)) ** 4
        lifts = heel_lifts(Signal(t, y))
        self.assertGreater(lifts.size, 5)
        self.assertTrue(np.all(lifts > 0.015))
        self.assertTrue(np.all(lifts <= 0.02 + 1e-9))

    def test_lifts_below_noise_floor_are_dropped(self):
        t = np.arange(300) / 30.0
        amplitude = np.where(np.floor(0.8 * t) % 2 == 0, 0.02, 0.005)
        y = 0.85 - amplitude * np.maximum(0.0, np.sin(2 * np.pi * 0.8 * t)) ** 4
        lifts = heel_lifts(Signal(t, y))
        self.assertEqual(DEFAULT_CONFIG.heel_lift_noise_floor, 0.01)
        self.assertEqual(lifts.size, 4)
        self.assertTrue(np.all(lifts > 0.015))

        lowered = DEFAULT_CONFIG.replace(heel_lift_noise_floor=0.003)
        self.assertEqual(heel_lifts(Signal(t, y), lowered).size, 8)

    def test_shuffling_lift_is_below_noise_floor(self):
        t = np.arange(300) / 30.0
        y = 0.85 - 0.006 * np.maximum(0.0, np.sin(2 * np.pi * 0.8 * t)) ** 4
        self.assertEqual(heel_lifts(Signal(t, y)).size, 0)

    def test_flat_heel_has_no_lift(self):
        t = np.arange(300) / 30.0
        self.assertEqual(heel_lifts(Signal(t, np.full(300, 0.85))).size, 0)

    def test_short_series(self):
        self.assertEqual(heel_lifts(Signal([0.0, 0.1], [0.8, 0.7])).size, 0)


class TestSpatialMetrics(unittest.TestCase):
    def test_without_height_scale_metrics_are_zero(self):
        samples = [LandmarkSample(i / 30.0, {}) for i in range(30)]
        with self.assertLogs("cadencekit.spatial", level="WARNING"):
            m = spatial_metrics(samples, 170.0)
        self.assertEqual((m.base_of_support_cm, m.heel_lift_cm), (0.0, 0.0))
        self.assertIsNone(m.height_scale)

    def test_standing_subject(self):
        samples = [_stance(i / 30.0, 0.05) for i in range(60)]
        m = spatial_metrics(samples, 140.0, DEFAULT_CONFIG)
        self.assertAlmostEqual(m.base_of_support_cm, 8.5)
        self.assertEqual(m.heel_lift_cm, 0.0)
        self.assertEqual(m.n_bos_samples, 60)
        self.assertAlmostEqual(m.height_scale, 200.0)

    def test_sub_floor_lifts_still_flag_magnetic_gait(self):
        walk = synthesize_walk("shuffling", duration=12.0)
        samples = build_samples(walk["frames"])
        m = spatial_metrics(samples, walk["height_cm"])
        self.assertEqual(m.heel_lift_cm, 0.0)
        self.assertEqual(m.n_lift_events, 0)
        self.assertIsNotNone(m.height_scale)

        chosen = detect_separation_steps(samples, walk["duration"])
        metrics = _build_metrics(chosen, m, walk["duration"], DEFAULT_CONFIG)
        self.assertGreaterEqual(metrics.cadence, 60)
        self.assertEqual(metrics.average_heel_lift_cm, 0.0)
        self.assertTrue(metrics.magnetic_gait_suspected)


if __name__ == "__main__":
    unittest.main()
