"""Octave folding of raw tempo estimates."""

import math


def fold_to_canonical_range(bpm: float, min_bpm: int = 70, max_bpm: int = 185) -> int:
    """Fold *bpm* into ``[min_bpm, max_bpm]`` by doubling or halving.

    Half- and double-tempo detections are musically equivalent, so 70, 140
    and 280 all map into the same canonical octave. Non-positive input has
    no tempo and returns 0.
    """
    if not (bpm > 0 and math.isfinite(bpm)):
        return 0
    while bpm < min_bpm:
        bpm *= 2
    while bpm > max_bpm:
        bpm /= 2
    return int(math.floor(bpm + 0.5))
