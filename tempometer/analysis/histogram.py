"""Integer-BPM voting histogram."""

from __future__ import annotations

import numpy as np


def interval_to_bpm(interval: np.ndarray | float) -> np.ndarray:
    """Round ``60 / interval`` to the nearest integer BPM, halves rounding up."""
    return np.floor(60.0 / np.asarray(interval, dtype=np.float64) + 0.5).astype(int)


class TempoHistogram:
    """Fixed-range histogram of BPM votes.

    Bins are integer BPM values ``0 .. max_key``. Every vote adds ``1.0`` to
    its own bin and *neighbor_weight* to the bins directly below and above,
    i.e. the votes are convolved with the kernel
    ``[neighbor_weight, 1.0, neighbor_weight]``. Votes outside the range are
    ignored.

    Parameters
    ----------
    max_key:
        Highest BPM bin. ``round(60 / min_interval) + 1`` (183 by default)
        holds the fastest vote the collector can emit plus its upper
        neighbour.
    neighbor_weight:
        Weight given to each adjacent bin.
    """

    def __init__(self, max_key: int = 183, neighbor_weight: float = 0.25) -> None:
        self.max_key = max_key
        self.neighbor_weight = neighbor_weight
        self._counts = np.zeros(max_key + 1, dtype=np.int64)

    @classmethod
    def from_intervals(
        cls,
        intervals: np.ndarray,
        min_interval: float = 0.33,
        neighbor_weight: float = 0.25,
    ) -> TempoHistogram:
        histogram = cls(
            max_key=int(interval_to_bpm(min_interval)) + 1,
            neighbor_weight=neighbor_weight,
        )
        histogram.add_intervals(intervals)
        return histogram

    def add_intervals(self, intervals: np.ndarray) -> None:
        intervals = np.asarray(intervals, dtype=np.float64)
        intervals = intervals[intervals > 0]
        self.add_bpms(interval_to_bpm(intervals))

    def add_bpms(self, bpms: np.ndarray) -> None:
        bpms = np.asarray(bpms, dtype=int)
        bpms = bpms[(bpms >= 0) & (bpms <= self.max_key)]
        np.add.at(self._counts, bpms, 1)

    @property
    def total_votes(self) -> int:
        return int(self._counts.sum())

    @property
    def weights(self) -> np.ndarray:
        """Smoothed weight per BPM bin."""
        kernel = np.array([self.neighbor_weight, 1.0, self.neighbor_weight])
        return np.convolve(self._counts.astype(np.float64), kernel, mode="same")

    def weight(self, bpm: int) -> float:
        if not 0 <= bpm <= self.max_key:
            return 0.0
        return float(self.weights[bpm])

    def best(self) -> tuple[int, float] | None:
        """Heaviest bin as ``(bpm, weight)``; ties go to the smaller BPM.

        Returns ``None`` when no votes were cast.
        """
        if self.total_votes == 0:
            return None
        weights = self.weights
        # argmax returns the first maximum, i.e. the smallest BPM
        bpm = int(np.argmax(weights))
        return bpm, float(weights[bpm])

    def __len__(self) -> int:
        return self.total_votes
