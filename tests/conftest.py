"""Shared test fixtures for tempo analysis tests."""

import numpy as np
import pytest
from fastapi.testclient import TestClient

from tempometer.main import app


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


def generate_click_track(
    bpm: float,
    duration_seconds: float = 10.0,
    sr: int = 22050,
    start: float = 0.0,
    end: float | None = None,
    freq: float = 60.0,
    click_duration: float = 0.03,
) -> np.ndarray:
    """Generate a synthetic kick-like click track.

    Clicks are short decaying sine bursts at *freq* Hz placed every beat
    between *start* and *end* seconds; the rest of the buffer is silent.
    Returns peak-normalized mono audio at the given sample rate.
    """
    n_samples = int(duration_seconds * sr)
    audio = np.zeros(n_samples, dtype=np.float32)
    end = duration_seconds if end is None else end

    beat_interval = 60.0 / bpm  # seconds per beat
    click_samples = int(click_duration * sr)

    t_click = np.arange(click_samples) / sr
    click = np.sin(2 * np.pi * freq * t_click) * np.exp(-t_click * 100)

    beat = 0
    while True:
        time = start + beat * beat_interval
        if time >= end:
            break
        sample_pos = int(round(time * sr))
        stop = min(sample_pos + click_samples, n_samples)
        length = stop - sample_pos
        if length > 0:
            audio[sample_pos:stop] += click[:length]
        beat += 1

    peak = np.max(np.abs(audio))
    if peak > 0:
        audio = audio / peak

    return audio


def generate_impulse_train(
    period: float,
    duration_seconds: float = 20.0,
    sr: int = 44100,
    amplitude: float = 1.0,
) -> np.ndarray:
    """Single-sample impulses every *period* seconds, starting at t=0."""
    n_samples = int(duration_seconds * sr)
    audio = np.zeros(n_samples, dtype=np.float32)
    positions = np.round(np.arange(0.0, duration_seconds, period) * sr).astype(int)
    audio[positions[positions < n_samples]] = amplitude
    return audio


@pytest.fixture
def click_120():
    """Click track at 120 BPM, 12 seconds."""
    return generate_click_track(bpm=120, duration_seconds=12)


@pytest.fixture
def silence():
    """Ten seconds of digital silence."""
    return np.zeros(22050 * 10, dtype=np.float32)
