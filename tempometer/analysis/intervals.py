"""Candidate beat periods from pairs of nearby onsets."""

import numpy as np


def collect_intervals(
    onsets: np.ndarray,
    lookahead: int = 5,
    min_interval: float = 0.33,
    max_interval: float = 1.0,
) -> np.ndarray:
    """Collect inter-onset intervals between each onset and its next *lookahead* onsets.

    Only intervals within ``[min_interval, max_interval]`` seconds are kept,
    which restricts candidates to the 60-180 BPM span before they reach the
    histogram. The result is an unordered multiset; repeated values are votes.
    """
    onsets = np.asarray(onsets, dtype=np.float64)
    if len(onsets) < 2:
        return np.zeros(0)

    deltas = [
        onsets[lag:] - onsets[:-lag]
        for lag in range(1, min(lookahead, len(onsets) - 1) + 1)
    ]
    # Onset times are sample / sr floats; round away the representation error
    # so gaps of exactly min_interval or max_interval stay inclusive.
    deltas = np.round(np.concatenate(deltas), 9)
    return deltas[(deltas >= min_interval) & (deltas <= max_interval)]
