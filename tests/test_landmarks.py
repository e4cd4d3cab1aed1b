"""Unit tests for landmark ingestion."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path
from types import SimpleNamespace

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "python" / "src"))

from cadencekit._landmarks import (
    MEDIAPIPE_INDEX,
    Landmark,
    LandmarkPoint,
    LandmarkSample,
    build_samples,
    from_mediapipe,
    infer_duration,
    truncate_samples,
)


def _mediapipe_list(visibility=0.9):
    return [SimpleNamespace(x=i / 100.0, y=1.0 - i / 100.0, visibility=visibility)
            for i in range(33)]


class TestLandmarkSample(unittest.TestCase):
    def test_get_accepts_enum_and_name(self):
        s = LandmarkSample(0.0, {"left_ankle": LandmarkPoint(0.4, 0.8, 0.9)})
        self.assertEqual(s.get(Landmark.LEFT_ANKLE), s.get("LEFT_ANKLE"))
        self.assertIsNone(s.get(Landmark.RIGHT_ANKLE))

    def test_visible_applies_gate(self):
        s = LandmarkSample(0.0, {"left_ankle": LandmarkPoint(0.4, 0.8, 0.49)})
        self.assertIsNone(s.visible(Landmark.LEFT_ANKLE, 0.5))
        self.assertIsNotNone(s.visible(Landmark.LEFT_ANKLE, 0.3))

    def test_visibility_at_gate_is_valid(self):
        s = LandmarkSample(0.0, {"left_ankle": LandmarkPoint(0.4, 0.8, 0.5)})
        self.assertIsNotNone(s.visible(Landmark.LEFT_ANKLE, 0.5))


class TestFromMediapipe(unittest.TestCase):
    def test_picks_pose_indices(self):
        s = from_mediapipe(_mediapipe_list(), timestamp=1.5, frame_index=45)
        self.assertEqual(s.timestamp, 1.5)
        self.assertEqual(s.frame_index, 45)
        self.assertEqual(len(s.landmarks), len(MEDIAPIPE_INDEX))
        self.assertAlmostEqual(s.get(Landmark.LEFT_ANKLE).x, 0.27)
        self.assertAlmostEqual(s.get(Landmark.RIGHT_HEEL).y, 0.70)
        self.assertEqual(Landmark.NOSE.mediapipe_index, 0)

    def test_no_pose_gives_empty_sample(self):
        s = from_mediapipe(None, timestamp=0.2)
        self.assertEqual(dict(s.landmarks), {})

    def test_rejects_short_list(self):
        with self.assertRaises(ValueError):
            from_mediapipe(_mediapipe_list()[:20], timestamp=0.0)


class TestBuildSamples(unittest.TestCase):
    def test_dict_frames(self):
        frames = [
            {"timestamp": 0.0, "landmarks": {"left_ankle": [0.4, 0.8, 0.9]}},
            {"time": 0.1, "landmarks": {"left_ankle": {"x": 0.41, "y": 0.8, "score": 0.7}}},
            {"timestamp": 0.2, "landmarks": None},
        ]
        samples = build_samples(frames)
        self.assertEqual(len(samples), 3)
        self.assertEqual(samples[1].get("left_ankle").visibility, 0.7)
        self.assertEqual(dict(samples[2].landmarks), {})

    def test_visibility_defaults_to_one(self):
        samples = build_samples([{"timestamp": 0.0, "landmarks": {"nose": [0.5, 0.1]}}])
        self.assertEqual(samples[0].get(Landmark.NOSE).visibility, 1.0)

    def test_unknown_landmarks_are_ignored(self):
        samples = build_samples([{"timestamp": 0.0, "landmarks": {"left_pinky": [0.5, 0.1]}}])
        self.assertEqual(dict(samples[0].landmarks), {})

    def test_timestamps_from_fps(self):
        frames = [{"landmarks": {}} for _ in range(3)]
        samples = build_samples(frames, fps=30.0)
        self.assertAlmostEqual(samples[2].timestamp, 2 / 30.0)

    def test_missing_timestamp_without_fps_raises(self):
        with self.assertRaises(ValueError):
            build_samples([{"landmarks": {}}])

    def test_rejects_non_increasing_timestamps(self):
        with self.assertRaises(ValueError):
            build_samples([{"timestamp": 0.1}, {"timestamp": 0.1}])
        with self.assertRaises(ValueError):
            build_samples([{"timestamp": 0.2}, {"timestamp": 0.1}])

    def test_rejects_bad_inputs(self):
        with self.assertRaises(ValueError):
            build_samples("frames")  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            build_samples([42])
        with self.assertRaises(ValueError):
            build_samples([{"timestamp": 0.0, "landmarks": {"nose": [0.5, float("nan")]}}])
        with self.assertRaises(ValueError):
            build_samples([{"timestamp": 0.0, "landmarks": {"nose": [0.5]}}])
        with self.assertRaises(ValueError):
            build_samples([], fps=0)


class TestDuration(unittest.TestCase):
    def test_infer_duration_adds_one_frame_period(self):
        samples = build_samples([{"landmarks": {}} for _ in range(30)], fps=30.0)
        self.assertAlmostEqual(infer_duration(samples), 1.0)

    def test_infer_duration_degenerate(self):
        self.assertEqual(infer_duration(()), 0.0)
        self.assertEqual(infer_duration(build_samples([{"timestamp": 3.0}])), 0.0)

    def test_truncate_samples(self):
        samples = build_samples([{"landmarks": {}} for _ in range(90)], fps=30.0)
        kept = truncate_samples(samples, 2.0)
        self.assertEqual(len(kept), 60)
        self.assertEqual(truncate_samples((), 2.0), ())


if __name__ == "__main__":
    unittest.main()
