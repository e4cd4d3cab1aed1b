"""Visualization functions for step signals and engine outputs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    from ._core import GaitResult


def _import_mpl():
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        return plt
    except ImportError:
        raise ImportError(
            "matplotlib is required for plotting. "
            "Install with: pip install cadencekit[viz]"
        )


# ── Colours ──────────────────────────────────────────────────────────
_RAW_COLOR = "#999999"
_SMOOTH_COLOR = "#2166ac"
_STEP_COLOR = "#b2182b"
_STEP_MARKER = "v"   # downward triangle


def _engine_result(result: "GaitResult", engine: Optional[str]):
    if engine is None:
        return result.chosen
    if engine not in result.engine_results:
        raise ValueError(
            f"Engine {engine!r} not in result. Available: {sorted(result.engine_results)}"
        )
    return result.engine_results[engine]


def _draw_engine(ax, res, legend: bool = True):
    signal = res.signal
    if signal is not None and len(signal):
        ax.plot(signal.times, signal.values, color=_RAW_COLOR, linewidth=0.8,
                alpha=0.7, label="signal")
    smoothed = res.diagnostics.get("smoothed")
    if smoothed is not None and len(smoothed):
        ax.plot(smoothed.times, smoothed.values, color=_SMOOTH_COLOR,
                linewidth=1.4, label="smoothed")
    threshold = res.diagnostics.get("threshold")
    if threshold is not None:
        ax.axhline(threshold, color="#666666", linestyle="--", linewidth=1,
                   label=f"threshold ({threshold:.2f})")
    if res.peaks:
        ax.scatter([p.time for p in res.peaks], [p.value for p in res.peaks],
                   marker=_STEP_MARKER, s=60, color=_STEP_COLOR, zorder=5,
                   label=f"steps (n={len(res.peaks)})")
    if legend:
        ax.legend(loc="upper right", fontsize=8, framealpha=0.8)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)


def plot_result(
    result: "GaitResult",
    engine: Optional[str] = None,
    ax=None,
    figsize=(14, 5),
    title: Optional[str] = None,
):
    """Plot an engine's step signal with threshold and detected steps.

    Parameters
    ----------
    result : GaitResult
        Analysis result (from :func:`cadencekit.analyze`).
    engine : str, optional
        Engine to plot.  Defaults to the adopted engine.
    ax : matplotlib Axes, optional
        If provided, draw on this axes.
    figsize : tuple
        Figure size when creating a new figure.
    title : str, optional
        Plot title. Defaults to "Steps: {engine}".

    Returns
    -------
    matplotlib.figure.Figure
    """
    if result is None:
        raise ValueError("result is required")
    res = _engine_result(result, engine)
    plt = _import_mpl()

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.get_figure()

    _draw_engine(ax, res)
    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Signal (normalised)")
    ax.set_title(title or f"Steps: {res.engine} ({res.step_count} steps, {res.cadence} steps/min)")
    fig.tight_layout()
    return fig


def compare_plot(
    data,
    engines: Sequence[str] = ("separation", "vertical"),
    height_cm: Optional[float] = None,
    figsize=(14, None),
    title: str = "Engine Comparison",
):
    """Run several engines on the same data and plot them stacked.

    Parameters
    ----------
    data : any
        Input accepted by :func:`cadencekit.analyze`.
    engines : list of str
        Engines to compare.
    height_cm : float, optional
        Subject height, when *data* does not carry it.
    figsize : tuple
        Figure width and height. Height auto-scales with number of engines.
    title : str
        Super-title.

    Returns
    -------
    matplotlib.figure.Figure
    """
    from ._core import analyze
    if not engines:
        raise ValueError("engines must contain at least one engine name")

    result = analyze(data, height_cm=height_cm, engines=list(engines))
    plt = _import_mpl()

    names = list(result.engine_results)
    n = len(names)
    h = figsize[1] or 2.5 * n
    fig, axes = plt.subplots(n, 1, figsize=(figsize[0], h), sharex=True)
    if n == 1:
        axes = [axes]

    for ax, name in zip(axes, names):
        res = result.engine_results[name]
        _draw_engine(ax, res, legend=False)
        ax.set_ylabel(name, fontsize=10, fontweight="bold")
        marker = "  (adopted)" if name == result.metrics.engine else ""
        ax.text(0.98, 0.85, f"{res.step_count} steps, {res.cadence} steps/min{marker}",
                transform=ax.transAxes, ha="right", fontsize=8, color="#444")

    axes[-1].set_xlabel("Time (s)")
    fig.suptitle(title, fontsize=13, fontweight="bold")
    fig.tight_layout()
    return fig


def plot_spectrum(
    result: "GaitResult",
    engine: str = "separation",
    ax=None,
    figsize=(8, 4),
):
    """Band-limited magnitude spectrum of an engine's signal.

    Parameters
    ----------
    result : GaitResult
    engine : str
        Engine whose source signal is transformed.
    ax : matplotlib Axes, optional
    figsize : tuple

    Returns
    -------
    matplotlib.figure.Figure
    """
    from ._config import DEFAULT_CONFIG
    from .detectors.spectral_detector import band_spectrum, frequency_band

    res = _engine_result(result, engine)
    if res.signal is None or len(res.signal) < 2:
        raise ValueError(f"Engine {res.engine!r} has no signal to transform")
    plt = _import_mpl()

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.get_figure()

    freqs = frequency_band(DEFAULT_CONFIG)
    mags = band_spectrum(res.signal, freqs)
    ax.plot(freqs, mags, color=_SMOOTH_COLOR, linewidth=1.5)
    dominant = res.diagnostics.get("dominant_frequency")
    if dominant:
        ax.axvline(dominant, color=_STEP_COLOR, linestyle="--", linewidth=1,
                   label=f"dominant {dominant:.2f} Hz ({dominant * 60:.0f} steps/min)")
        ax.legend(fontsize=9)
    ax.set_xlabel("Frequency (Hz)")
    ax.set_ylabel("Magnitude")
    ax.set_title(f"Step Spectrum: {res.engine}")
    ax.set_xlim(float(np.min(freqs)), float(np.max(freqs)))
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    fig.tight_layout()
    return fig


__all__ = ["plot_result", "compare_plot", "plot_spectrum"]
