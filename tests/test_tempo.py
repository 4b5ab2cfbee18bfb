"""Tests for interval collection, histogram voting and octave folding."""

import numpy as np
import pytest

from tempometer.analysis.histogram import TempoHistogram, interval_to_bpm
from tempometer.analysis.intervals import collect_intervals
from tempometer.analysis.tempo import fold_to_canonical_range


def test_intervals_pair_onsets_within_range():
    intervals = collect_intervals(np.array([0.0, 0.5, 1.0, 1.5]))
    assert sorted(intervals.tolist()) == pytest.approx([0.5, 0.5, 0.5, 1.0, 1.0])


def test_intervals_look_ahead_five_onsets_at_most():
    onsets = np.arange(20) * 0.1
    intervals = collect_intervals(onsets)
    # lags 4 and 5 (0.4 s, 0.5 s) survive; lag 6 is never examined
    assert len(intervals) == 16 + 15
    assert intervals.max() < 0.55


def test_intervals_need_two_onsets():
    assert len(collect_intervals(np.array([]))) == 0
    assert len(collect_intervals(np.array([1.0]))) == 0


def test_intervals_outside_range_are_dropped():
    intervals = collect_intervals(np.array([0.0, 0.25, 2.0, 3.5]))
    assert len(intervals) == 0


def test_intervals_keep_gaps_exactly_at_min_interval():
    # 33 onset windows of 441 samples at 44.1 kHz is exactly 0.33 s
    for i in range(500):
        onsets = np.array([i * 441 / 44100, (i + 33) * 441 / 44100])
        intervals = collect_intervals(onsets)
        assert len(intervals) == 1
        assert intervals[0] == pytest.approx(0.33)


def test_intervals_keep_gaps_exactly_at_max_interval():
    for i in range(500):
        onsets = np.array([i * 441 / 44100, (i + 100) * 441 / 44100])
        intervals = collect_intervals(onsets)
        assert len(intervals) == 1
        assert intervals[0] == pytest.approx(1.0)


def test_interval_to_bpm_bounds():
    assert interval_to_bpm(0.33) == 182
    assert interval_to_bpm(1.0) == 60
    assert interval_to_bpm(0.5) == 120


def test_histogram_smooths_neighbors():
    histogram = TempoHistogram.from_intervals(np.array([0.5, 0.5, 0.5]))
    assert histogram.weight(120) == 3.0
    assert histogram.weight(119) == 0.75
    assert histogram.weight(121) == 0.75
    assert histogram.weight(118) == 0.0
    assert histogram.best() == (120, 3.0)
    assert len(histogram) == 3


def test_histogram_neighbor_weight_can_decide_winner():
    histogram = TempoHistogram()
    histogram.add_bpms(np.array([100, 100, 101, 101, 101, 102, 102]))
    # 101 collects 3 + 0.25 * 4
    assert histogram.best() == (101, 4.0)


def test_histogram_tie_prefers_smaller_bpm():
    histogram = TempoHistogram()
    histogram.add_bpms(np.array([130, 100]))
    assert histogram.best() == (100, 1.0)

    adjacent = TempoHistogram()
    adjacent.add_bpms(np.array([101, 100]))
    assert adjacent.best() == (100, 1.25)


def test_empty_histogram_has_no_winner():
    histogram = TempoHistogram.from_intervals(np.array([]))
    assert histogram.best() is None
    assert histogram.total_votes == 0


def test_histogram_range_matches_fastest_vote():
    assert TempoHistogram().max_key == 183
    assert TempoHistogram.from_intervals(np.array([])).max_key == 183
    assert TempoHistogram().max_key == interval_to_bpm(0.33) + 1


def test_histogram_ignores_out_of_range_votes():
    histogram = TempoHistogram(max_key=183)
    histogram.add_bpms(np.array([500, -3]))
    assert histogram.best() is None


@pytest.mark.parametrize("raw, expected", [
    (140, 140),
    (280, 140),
    (35, 70),
    (70, 70),
    (60, 120),
    (185, 185),
    (186, 93),
    (560, 140),
    (69.6, 139),
])
def test_fold_to_canonical_range(raw, expected):
    assert fold_to_canonical_range(raw) == expected


@pytest.mark.parametrize("raw", [0, -10, float("nan"), float("inf")])
def test_fold_without_tempo_is_zero(raw):
    assert fold_to_canonical_range(raw) == 0
