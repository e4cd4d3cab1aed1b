"""Tests for multi-engine execution and reconciliation."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path
from unittest import mock

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "python" / "src"))

import cadencekit
from cadencekit._config import DEFAULT_CONFIG, VERTICAL_CONFIG
from cadencekit._ensemble import reconcile, run_engines
from cadencekit._errors import EngineFailureError
from cadencekit._landmarks import build_samples
from cadencekit._synthetic import synthesize_walk
from cadencekit._types import EngineResult, TimingStats
from cadencekit.detectors import ENGINE_REGISTRY, EngineSpec


def _result(engine, steps):
    return EngineResult(engine=engine, step_count=steps, cadence=steps * 3,
                        peaks=(), timing=TimingStats(0.0, 20.0, "insufficient_data"))


def _boom(samples, duration, config):
    raise RuntimeError("engine exploded")


class TestReconcile(unittest.TestCase):
    def test_adopts_highest_count(self):
        chosen = reconcile([_result("separation", 12), _result("vertical", 15)])
        self.assertEqual(chosen.engine, "vertical")
        self.assertEqual(chosen.step_count, 15)

    def test_tie_goes_to_first_engine(self):
        chosen = reconcile([_result("vertical", 10), _result("separation", 10)])
        self.assertEqual(chosen.engine, "vertical")

    def test_single_result_is_returned_as_is(self):
        only = _result("separation", 0)
        self.assertIs(reconcile([only]), only)

    def test_empty_raises(self):
        with self.assertRaises(ValueError):
            reconcile([])


class TestRunEngines(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        payload = synthesize_walk("healthy", duration=12.0, noise=0.0, occlusion_rate=0.0)
        cls.samples = build_samples(payload["frames"])
        cls.duration = payload["duration"]

    def test_runs_requested_engines_in_order(self):
        results, failed = run_engines(self.samples, self.duration, ["vertical", "separation"])
        self.assertEqual(list(results), ["vertical", "separation"])
        self.assertEqual(failed, {})

    def test_aliases_are_deduplicated(self):
        results, _ = run_engines(self.samples, self.duration,
                                 ["separation", "mediapipe", " SEPARATION "])
        self.assertEqual(list(results), ["separation"])

    def test_failing_engine_does_not_abort_others(self):
        with mock.patch.dict(ENGINE_REGISTRY, {"vertical": EngineSpec(_boom, VERTICAL_CONFIG)}):
            with self.assertLogs("cadencekit._ensemble", level="WARNING"):
                results, failed = run_engines(self.samples, self.duration,
                                              ["separation", "vertical"])
        self.assertEqual(list(results), ["separation"])
        self.assertIn("engine exploded", failed["vertical"])

    def test_threaded_run_matches_sequential(self):
        sequential, _ = run_engines(self.samples, self.duration, ["separation", "vertical"])
        threaded, _ = run_engines(self.samples, self.duration, ["separation", "vertical"],
                                  max_workers=2)
        self.assertEqual(list(threaded), list(sequential))
        for name in sequential:
            self.assertEqual(threaded[name].step_count, sequential[name].step_count)
            self.assertEqual(threaded[name].peak_times, sequential[name].peak_times)

    def test_threaded_run_isolates_failures(self):
        with mock.patch.dict(ENGINE_REGISTRY, {"vertical": EngineSpec(_boom, VERTICAL_CONFIG)}):
            results, failed = run_engines(self.samples, self.duration,
                                          ["separation", "vertical"], max_workers=2)
        self.assertEqual(list(results), ["separation"])
        self.assertEqual(list(failed), ["vertical"])

    def test_per_engine_config_accepts_aliases(self):
        strict = DEFAULT_CONFIG.replace(threshold_floor=5.0)
        results, _ = run_engines(self.samples, self.duration, ["separation"],
                                 engine_configs={"mediapipe": strict})
        diag = results["separation"].diagnostics
        self.assertEqual(diag["threshold"], 5.0)
        self.assertEqual(diag["peak_count"], 0)

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            run_engines(self.samples, self.duration, "separation")
        with self.assertRaises(ValueError):
            run_engines(self.samples, self.duration, [])
        with self.assertRaises(ValueError):
            run_engines(self.samples, self.duration, ["optical_flow"])
        with self.assertRaises(ValueError):
            run_engines(self.samples, self.duration, ["separation"], max_workers=0)


class TestAnalyzeEnsemble(unittest.TestCase):
    def test_adopted_engine_has_max_count(self):
        walk = cadencekit.load_example("healthy", duration=12.0)
        result = cadencekit.analyze(walk, engines=["separation", "vertical"])
        counts = {k: v.step_count for k, v in result.engine_results.items()}
        self.assertEqual(result.metrics.step_count, max(counts.values()))
        self.assertEqual(result.chosen.step_count, result.metrics.step_count)
        self.assertEqual(result.metadata["engines_succeeded"], ["separation", "vertical"])

    def test_all_engines_failing_raises_typed_error(self):
        walk = cadencekit.load_example("healthy", duration=5.0)
        patched = {
            "separation": EngineSpec(_boom, DEFAULT_CONFIG),
            "vertical": EngineSpec(_boom, VERTICAL_CONFIG),
        }
        with mock.patch.dict(ENGINE_REGISTRY, patched):
            with self.assertRaises(EngineFailureError) as ctx:
                cadencekit.analyze(walk, engines=["separation", "vertical"])
        self.assertEqual(sorted(ctx.exception.failures), ["separation", "vertical"])
        self.assertIsInstance(ctx.exception, RuntimeError)


if __name__ == "__main__":
    unittest.main()
