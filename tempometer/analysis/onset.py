"""Onset detection on a low-frequency energy envelope."""

from __future__ import annotations

import logging

import numpy as np
from scipy.signal import convolve

logger = logging.getLogger(__name__)


def onset_window_size(sr: int, window_ms: float = 10.0) -> int:
    """Samples per envelope window (``sr // 100`` for the default 10 ms)."""
    return int(sr * window_ms / 1000.0)


def energy_envelope(audio: np.ndarray, sr: int, window_ms: float = 10.0) -> np.ndarray:
    """RMS energy per fixed-size window.

    The trailing partial window is dropped, so the envelope has
    ``len(audio) // window_size`` entries. Returns an empty array when the
    buffer is shorter than one window.
    """
    size = onset_window_size(sr, window_ms)
    if size <= 0:
        return np.zeros(0)
    n_windows = len(audio) // size
    if n_windows == 0:
        return np.zeros(0)

    frames = np.asarray(audio[:n_windows * size], dtype=np.float64).reshape(n_windows, size)
    return np.sqrt(np.mean(frames ** 2, axis=1))


def local_mean(envelope: np.ndarray, neighborhood: int = 50) -> np.ndarray:
    """Mean of ``envelope[i - neighborhood : i + neighborhood + 1]`` for every i.

    The neighbourhood shrinks at the edges instead of padding with zeros.
    """
    kernel = np.ones(2 * neighborhood + 1)
    sums = convolve(envelope, kernel, mode="same", method="direct")
    counts = convolve(np.ones(len(envelope)), kernel, mode="same", method="direct")
    return sums / counts


def is_local_max(envelope: np.ndarray) -> np.ndarray:
    """True where a value is >= both immediate neighbours (edges compare one side)."""
    mask = np.ones(len(envelope), dtype=bool)
    mask[1:] &= envelope[1:] >= envelope[:-1]
    mask[:-1] &= envelope[:-1] >= envelope[1:]
    return mask


def debounce(times: np.ndarray, min_gap: float = 0.2) -> np.ndarray:
    """Drop events closer than *min_gap* seconds to the previous accepted one."""
    accepted: list[float] = []
    for t in times:
        if not accepted or t - accepted[-1] >= min_gap:
            accepted.append(float(t))
    return np.array(accepted)


def detect_onsets(
    envelope: np.ndarray,
    sr: int,
    window_ms: float = 10.0,
    neighborhood: int = 50,
    threshold_ratio: float = 1.3,
    min_gap: float = 0.2,
    audio: np.ndarray | None = None,
) -> np.ndarray:
    """Pick onsets from an energy envelope.

    A window is an onset when it exceeds *threshold_ratio* times the mean of
    its ±*neighborhood* surroundings and is a local maximum. Accepted onsets
    are at least *min_gap* seconds apart.

    When *audio* (the samples the envelope was computed from) is given, each
    onset is timed at the loudest sample inside its window instead of the
    window start, so inter-onset gaps are not quantised to 10 ms.

    Returns ascending onset times in seconds, possibly empty.
    """
    if len(envelope) == 0:
        return np.zeros(0)

    size = onset_window_size(sr, window_ms)
    # Rounding in the convolution must not turn a silent stretch into a
    # negative threshold.
    threshold = np.maximum(local_mean(envelope, neighborhood), 0.0) * threshold_ratio
    candidates = np.flatnonzero((envelope > threshold) & is_local_max(envelope))

    positions = candidates * size
    if audio is not None and len(candidates) > 0:
        frames = np.abs(np.asarray(audio[:len(envelope) * size], dtype=np.float64))
        frames = frames.reshape(len(envelope), size)
        positions = positions + np.argmax(frames[candidates], axis=1)

    onsets = debounce(positions / sr, min_gap)
    logger.debug(f"{len(candidates)} onset candidates, {len(onsets)} after debounce")
    return onsets


def loudest_window_onsets(
    audio: np.ndarray,
    sr: int,
    fraction: float = 0.5,
    chunk_seconds: float = 0.125,
    min_gap: float = 0.2,
) -> np.ndarray:
    """Onsets from the loudest chunks of the buffer.

    The buffer is cut into *chunk_seconds* chunks and the peak absolute
    amplitude of each is taken. The loudest *fraction* of non-silent chunks is
    selected with a partial partition, and their start times are returned in
    ascending order, debounced by *min_gap*.
    """
    if not 0 < fraction <= 1:
        raise ValueError(f"fraction must be in (0, 1], got {fraction}")
    chunk = max(1, int(round(chunk_seconds * sr)))
    if len(audio) == 0:
        return np.zeros(0)

    starts = np.arange(0, len(audio), chunk)
    peaks = np.maximum.reduceat(np.abs(np.asarray(audio, dtype=np.float64)), starts)

    audible = np.flatnonzero(peaks > 0)
    k = int(len(peaks) * fraction)
    k = min(k, len(audible))
    if k == 0:
        return np.zeros(0)

    if k < len(audible):
        top = audible[np.argpartition(-peaks[audible], k - 1)[:k]]
    else:
        top = audible
    top = np.sort(top)

    onsets = debounce(starts[top] / sr, min_gap)
    logger.debug(f"{k} loudest chunks of {len(peaks)}, {len(onsets)} onsets")
    return onsets
