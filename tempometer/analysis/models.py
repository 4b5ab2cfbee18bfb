"""Core data models for tempo analysis."""

from dataclasses import dataclass, field

import numpy as np


@dataclass
class AnalysisWindow:
    """The segment of a buffer chosen for onset detection."""
    start: int  # sample index, inclusive
    end: int  # sample index, exclusive
    samples: np.ndarray

    def start_time(self, sr: int) -> float:
        return self.start / sr

    def end_time(self, sr: int) -> float:
        return self.end / sr


@dataclass
class TempoAnalysis:
    """Result of a single tempo analysis with diagnostics.

    ``bpm`` is 0 when no tempo could be determined, otherwise it lies in the
    canonical range.
    """
    bpm: int
    raw_bpm: int = 0  # heaviest histogram bin before octave folding
    histogram_weight: float = 0.0
    sample_rate: int = 0
    duration: float = 0.0
    window_start: float = 0.0  # seconds
    window_end: float = 0.0  # seconds
    onsets: np.ndarray = field(default_factory=lambda: np.zeros(0))
    intervals: np.ndarray = field(default_factory=lambda: np.zeros(0))

    @property
    def detected(self) -> bool:
        return self.bpm > 0
