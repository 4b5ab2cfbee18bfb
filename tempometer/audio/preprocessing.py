"""Audio preprocessing utilities."""

from __future__ import annotations

import numpy as np
from scipy.signal import lfilter


def as_sample_buffer(audio) -> np.ndarray | None:
    """Coerce *audio* to a 1-D float32 buffer.

    Returns ``None`` when the input cannot be treated as a single channel
    (``None``, scalars, or arrays with more than one non-trivial axis).
    Non-finite samples are replaced with silence.
    """
    if audio is None:
        return None
    buffer = np.asarray(audio, dtype=np.float32)
    if buffer.ndim != 1:
        buffer = np.squeeze(buffer)
        if buffer.ndim != 1:
            return None
    if not np.all(np.isfinite(buffer)):
        buffer = np.nan_to_num(buffer, nan=0.0, posinf=0.0, neginf=0.0)
    return buffer


def biquad_lowpass(sr: int, cutoff: float = 150.0, q: float = 1.0) -> tuple[np.ndarray, np.ndarray]:
    """Second-order low-pass coefficients (RBJ audio-EQ cookbook).

    Returns ``(b, a)`` normalised so that ``a[0] == 1``.
    """
    w0 = 2.0 * np.pi * cutoff / sr
    cos_w0 = np.cos(w0)
    alpha = np.sin(w0) / (2.0 * q)

    b = np.array([(1.0 - cos_w0) / 2.0, 1.0 - cos_w0, (1.0 - cos_w0) / 2.0])
    a = np.array([1.0 + alpha, -2.0 * cos_w0, 1.0 - alpha])
    return b / a[0], a / a[0]


def low_pass_filter(
    audio: np.ndarray,
    sr: int,
    cutoff: float = 150.0,
    q: float = 1.0,
) -> np.ndarray:
    """Apply a biquad low-pass filter.

    Parameters
    ----------
    audio:
        Input audio signal.
    sr:
        Sample rate in Hz.
    cutoff:
        Low-pass cutoff frequency in Hz. Defaults to 150 Hz, which keeps
        kick and bass transients.
    q:
        Filter quality factor. Defaults to 1.

    A new array of the same length is always returned. If the cutoff is at or
    above Nyquist the signal passes through unchanged.
    """
    audio = np.asarray(audio, dtype=np.float64)
    if cutoff >= sr / 2:
        return audio.copy()
    b, a = biquad_lowpass(sr, cutoff, q)
    return lfilter(b, a, audio)
