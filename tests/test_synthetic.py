"""Tests for the synthetic walk generator."""

from __future__ import annotations

import math
import sys
import unittest
from pathlib import Path

import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "python" / "src"))

from cadencekit._landmarks import build_samples
from cadencekit._synthetic import WALK_PRESETS, step_signal, synthesize_walk


class TestSynthesizeWalk(unittest.TestCase):
    def test_payload_layout(self):
        walk = synthesize_walk("healthy", duration=4.0, fps=25.0, height_cm=180.0)
        self.assertEqual(len(walk["frames"]), 100)
        self.assertEqual(walk["fps"], 25.0)
        self.assertEqual(walk["height_cm"], 180.0)
        self.assertEqual(walk["duration"], 4.0)
        first = walk["frames"][0]
        self.assertEqual(first["frame_index"], 0)
        self.assertEqual(len(first["landmarks"]["left_heel"]), 3)
        self.assertEqual(len(build_samples(walk["frames"])), 100)

    def test_same_seed_same_walk(self):
        a = synthesize_walk("healthy", duration=3.0, seed=7)
        b = synthesize_walk("healthy", duration=3.0, seed=7)
        c = synthesize_walk("healthy", duration=3.0, seed=8)
        self.assertEqual(a["frames"], b["frames"])
        self.assertNotEqual(a["frames"], c["frames"])

    def test_ground_truth_step_times(self):
        walk = synthesize_walk("healthy", duration=20.0)
        gt = walk["ground_truth"]
        self.assertEqual(gt["step_count"], len(gt["step_times"]))
        self.assertEqual(gt["step_count"], 36)
        intervals = np.diff(gt["step_times"])
        self.assertTrue(np.allclose(intervals, 60.0 / 110.0, atol=1e-5))
        self.assertLess(gt["step_times"][-1], 20.0)

    def test_standing_has_no_steps(self):
        walk = synthesize_walk("standing", duration=5.0)
        self.assertEqual(walk["ground_truth"]["step_times"], [])
        ys = {f["landmarks"]["left_ankle"][1] for f in walk["frames"]}
        self.assertEqual(len(ys), 1)

    def test_occlusion_lowers_ankle_visibility(self):
        walk = synthesize_walk("healthy", duration=10.0, occlusion_rate=1.0)
        vis = {f["landmarks"]["right_ankle"][2] for f in walk["frames"]}
        self.assertEqual(vis, {0.2})
        self.assertEqual(walk["frames"][0]["landmarks"]["nose"][2], 0.95)

    def test_rejects_unknown_names(self):
        with self.assertRaises(ValueError):
            synthesize_walk("jogging")
        with self.assertRaises(ValueError):
            synthesize_walk("healthy", stride_length=0.1)
        with self.assertRaises(ValueError):
            synthesize_walk("healthy", duration=0)

    def test_presets_cover_examples(self):
        self.assertEqual(sorted(WALK_PRESETS), ["healthy", "shuffling", "standing"])


class TestStepSignal(unittest.TestCase):
    def test_one_maximum_per_step(self):
        t, v = step_signal(2.0, duration=5.0, fps=100.0, amplitude=0.5, offset=1.0)
        self.assertEqual(t.size, 500)
        self.assertAlmostEqual(float(v.min()), 1.0)
        self.assertAlmostEqual(float(v.max()), 1.5)
        inner = v[1:-1]
        n_max = int(np.sum((inner > v[:-2]) & (inner > v[2:])))
        self.assertEqual(n_max, 10)

    def test_noise_is_seeded(self):
        _, a = step_signal(1.5, 4.0, noise=0.01, seed=3)
        _, b = step_signal(1.5, 4.0, noise=0.01, seed=3)
        self.assertTrue(np.array_equal(a, b))
        self.assertFalse(math.isnan(float(a.mean())))


if __name__ == "__main__":
    unittest.main()
