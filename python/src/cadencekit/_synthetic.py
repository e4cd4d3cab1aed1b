"""
Deterministic synthetic walks.

Generates landmark payloads of a subject walking towards the camera, used
as bundled examples and in the test suite.

Model
-----
With ``x = pi * f * t`` (``f`` = steps per second):

- ankles are a fixed lateral distance apart; the forward/backward
  scissoring shows up as an image-``y`` difference ``D * sin(x)``, so
  the ankle separation peaks once per step
- each foot lifts by ``L * max(0, +/-cos(x))`` during its swing, once
  per stride, alternating between feet
- heels share the lift but not the scissoring, and sit a fixed lateral
  distance apart chosen so the perspective-corrected base of support
  matches the requested width

Ground-truth step times are the separation maxima
``t = (k + 1/2 + phi / pi) / f`` with ``phi = atan2(L, D)``.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

import numpy as np

# Normalised image layout
_CENTER_X = 0.5
_NOSE_Y = 0.15
_SHOULDER_Y = 0.30
_HIP_Y = 0.50
_KNEE_Y = 0.67
_ANKLE_Y = 0.83
_HEEL_Y = 0.86
_SHOULDER_HALF_WIDTH = 0.05
_ANKLE_HALF_WIDTH = 0.03

_PERSPECTIVE_CORRECTION = 0.85

WALK_PRESETS: Dict[str, Dict[str, Any]] = {
    "healthy": {
        "description": "Healthy adult, normal cadence and foot clearance",
        "cadence": 110.0, "stride_depth": 0.05, "heel_lift": 0.03,
        "base_of_support_cm": 10.0, "noise": 0.0015, "occlusion_rate": 0.02,
    },
    "shuffling": {
        "description": "Short, shuffling steps with minimal heel clearance",
        "cadence": 96.0, "stride_depth": 0.02, "heel_lift": 0.006,
        "base_of_support_cm": 16.0, "noise": 0.0002, "occlusion_rate": 0.0,
    },
    "standing": {
        "description": "Subject standing still in front of the camera",
        "cadence": 0.0, "stride_depth": 0.0, "heel_lift": 0.0,
        "base_of_support_cm": 12.0, "noise": 0.0, "occlusion_rate": 0.0,
    },
}


def synthesize_walk(
    walk: str = "healthy",
    duration: float = 20.0,
    fps: float = 30.0,
    height_cm: float = 170.0,
    seed: int = 42,
    **overrides,
) -> Dict[str, Any]:
    """Generate a synthetic landmark payload.

    Parameters
    ----------
    walk : str
        Preset name: "healthy", "shuffling" or "standing".
    duration : float
        Length of the recording (s).
    fps : float
        Frame rate.
    height_cm : float
        Subject height stored in the payload.
    seed : int
        Seed of the landmark noise and occlusion draws.
    **overrides
        Replace preset parameters: ``cadence`` (steps/min),
        ``stride_depth`` and ``heel_lift`` (normalised units),
        ``base_of_support_cm``, ``noise`` (std, normalised units),
        ``occlusion_rate`` (fraction of frames with low-visibility ankles).

    Returns
    -------
    dict
        Payload accepted by :func:`cadencekit.analyze`, with keys *fps*,
        *height_cm*, *duration*, *frames*, *description* and
        *ground_truth* (``step_times``, ``step_count``, ``cadence``).
    """
    if walk not in WALK_PRESETS:
        raise ValueError(f"Unknown walk {walk!r}. Available: {sorted(WALK_PRESETS)}")
    if duration <= 0 or fps <= 0 or height_cm <= 0:
        raise ValueError("duration, fps and height_cm must be strictly positive")
    params = dict(WALK_PRESETS[walk])
    unknown = set(overrides) - set(params)
    if unknown:
        raise ValueError(f"Unknown walk parameter(s): {sorted(unknown)}")
    params.update(overrides)

    rng = np.random.default_rng(seed)
    n = int(round(duration * fps))
    t = np.arange(n) / fps
    f = float(params["cadence"]) / 60.0
    phase = math.pi * f * t
    depth = float(params["stride_depth"])
    lift = float(params["heel_lift"])
    noise = float(params["noise"])

    scissor = 0.5 * depth * np.sin(phase)
    lift_left = lift * np.maximum(0.0, np.cos(phase))
    lift_right = lift * np.maximum(0.0, -np.cos(phase))

    # Heel spacing giving the requested base of support at this height scale
    scale = height_cm / (_HEEL_Y - _NOSE_Y)
    heel_half_width = params["base_of_support_cm"] / (scale * _PERSPECTIVE_CORRECTION) / 2.0

    def jitter(values):
        if noise == 0.0:
            return values
        return values + rng.normal(0.0, noise, size=n)

    tracks = {
        "nose": (np.full(n, _CENTER_X), np.full(n, _NOSE_Y)),
        "left_shoulder": (np.full(n, _CENTER_X + _SHOULDER_HALF_WIDTH), np.full(n, _SHOULDER_Y)),
        "right_shoulder": (np.full(n, _CENTER_X - _SHOULDER_HALF_WIDTH), np.full(n, _SHOULDER_Y)),
        "left_hip": (np.full(n, _CENTER_X + 0.04), np.full(n, _HIP_Y)),
        "right_hip": (np.full(n, _CENTER_X - 0.04), np.full(n, _HIP_Y)),
        "left_knee": (np.full(n, _CENTER_X + 0.035), _KNEE_Y + 0.5 * scissor - 0.5 * lift_left),
        "right_knee": (np.full(n, _CENTER_X - 0.035), _KNEE_Y - 0.5 * scissor - 0.5 * lift_right),
        "left_ankle": (np.full(n, _CENTER_X + _ANKLE_HALF_WIDTH), _ANKLE_Y + scissor - lift_left),
        "right_ankle": (np.full(n, _CENTER_X - _ANKLE_HALF_WIDTH), _ANKLE_Y - scissor - lift_right),
        "left_heel": (np.full(n, _CENTER_X + heel_half_width), _HEEL_Y - lift_left),
        "right_heel": (np.full(n, _CENTER_X - heel_half_width), _HEEL_Y - lift_right),
    }
    tracks = {name: (jitter(x), jitter(y)) for name, (x, y) in tracks.items()}

    occluded = rng.random(n) < float(params["occlusion_rate"])

    frames: List[Dict[str, Any]] = []
    for i in range(n):
        landmarks = {}
        for name, (x, y) in tracks.items():
            vis = 0.2 if occluded[i] and name.endswith("ankle") else 0.95
            landmarks[name] = [round(float(x[i]), 6), round(float(y[i]), 6), vis]
        frames.append({"timestamp": round(float(t[i]), 6), "frame_index": i,
                       "landmarks": landmarks})

    # Separation maxima lag the scissoring by the lift-induced phase
    step_times = _step_times(f, n / fps, math.atan2(lift, depth) if depth else 0.0)
    return {
        "name": walk,
        "description": params["description"],
        "fps": float(fps),
        "height_cm": float(height_cm),
        "duration": n / fps,
        "frames": frames,
        "ground_truth": {
            "step_times": step_times,
            "step_count": len(step_times),
            "cadence": float(params["cadence"]),
        },
    }


def _step_times(step_frequency: float, duration: float, phase: float = 0.0) -> List[float]:
    if step_frequency <= 0:
        return []
    out = []
    k = 0
    while True:
        t = (k + 0.5 + phase / math.pi) / step_frequency
        if t >= duration:
            return out
        out.append(round(t, 6))
        k += 1


def step_signal(step_frequency: float, duration: float, fps: float = 30.0,
                amplitude: float = 1.0, offset: float = 0.0,
                noise: float = 0.0, seed: Optional[int] = None):
    """Times and values of ``offset + amplitude * |sin(pi * f * t)|``.

    A rectified sinusoid with one maximum per step at ``step_frequency``.
    """
    t = np.arange(int(round(duration * fps))) / fps
    values = offset + amplitude * np.abs(np.sin(math.pi * step_frequency * t))
    if noise:
        values = values + np.random.default_rng(seed).normal(0.0, noise, size=t.size)
    return t, values


__all__ = ["WALK_PRESETS", "synthesize_walk", "step_signal"]
