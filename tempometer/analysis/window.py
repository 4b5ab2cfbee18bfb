"""Selection of the most energetic analysis window."""

import logging

import numpy as np

from tempometer.analysis.models import AnalysisWindow

logger = logging.getLogger(__name__)


def coarse_energy(samples: np.ndarray, stride: int = 1000) -> float:
    """Sum of squares over every *stride*-th sample."""
    picked = np.asarray(samples[::stride], dtype=np.float64)
    return float(np.dot(picked, picked))


def select_analysis_window(
    samples: np.ndarray,
    sr: int,
    window_seconds: float = 30.0,
    step_seconds: float = 2.0,
    stride: int = 1000,
) -> AnalysisWindow:
    """Locate the most energetic *window_seconds* segment of *samples*.

    Buffers no longer than the window are returned whole. Longer buffers are
    scanned in *step_seconds* hops, scoring each candidate with a sub-sampled
    energy sum so the cost does not grow with the window length. The first
    offset with the highest score wins, keeping the choice deterministic.
    """
    n = len(samples)
    window = int(window_seconds * sr)
    if n <= window or window <= 0:
        return AnalysisWindow(start=0, end=n, samples=samples)

    step = max(1, int(step_seconds * sr))
    stride = max(1, stride)

    best_offset = 0
    best_energy = -1.0
    for offset in range(0, n - window + 1, step):
        energy = coarse_energy(samples[offset:offset + window], stride)
        if energy > best_energy:
            best_energy = energy
            best_offset = offset

    logger.debug(
        f"Analysis window {best_offset / sr:.1f}s-{(best_offset + window) / sr:.1f}s "
        f"(energy {best_energy:.4g})"
    )
    return AnalysisWindow(
        start=best_offset,
        end=best_offset + window,
        samples=samples[best_offset:best_offset + window],
    )
