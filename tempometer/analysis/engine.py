"""Analysis orchestrator - runs the tempo pipeline end to end."""

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from tempometer.analysis.histogram import TempoHistogram
from tempometer.analysis.intervals import collect_intervals
from tempometer.analysis.models import TempoAnalysis
from tempometer.analysis.onset import (
    detect_onsets,
    energy_envelope,
    loudest_window_onsets,
    onset_window_size,
)
from tempometer.analysis.tempo import fold_to_canonical_range
from tempometer.analysis.window import select_analysis_window
from tempometer.audio.loader import load_audio
from tempometer.audio.preprocessing import as_sample_buffer, low_pass_filter
from tempometer.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def _valid_sample_rate(sr) -> bool:
    try:
        return bool(np.isfinite(sr)) and sr > 0 and int(sr) == sr
    except (TypeError, ValueError):
        return False


class TempoEngine:
    """Orchestrates the tempo estimation pipeline.

    The engine holds only its settings, so one instance can serve concurrent
    calls.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings

    def analyze_file(self, file_path: str) -> TempoAnalysis:
        """Decode an audio file and analyze it.

        Raises ``DecodeError`` if the file cannot be decoded.
        """
        s = self.settings
        audio, sr = load_audio(file_path, sr=s.sample_rate, channel=s.channel)
        return self.analyze_audio(audio, sr)

    def analyze_audio(self, audio: np.ndarray, sr: int) -> TempoAnalysis:
        """Estimate the tempo of a single-channel buffer.

        Never raises for array-like input; anything that prevents an estimate
        yields ``bpm == 0``.
        """
        s = self.settings
        buffer = as_sample_buffer(audio)
        if buffer is None or not _valid_sample_rate(sr):
            logger.debug("Degenerate input: no buffer or invalid sample rate")
            return TempoAnalysis(bpm=0)

        sr = int(sr)
        duration = len(buffer) / sr
        window_size = onset_window_size(sr, s.onset_window_ms)
        if window_size < 1 or len(buffer) < window_size:
            logger.debug(f"Degenerate input: {len(buffer)} samples is shorter than one onset window")
            return TempoAnalysis(bpm=0, sample_rate=sr, duration=duration)

        logger.info(f"Analyzing {duration:.1f}s of audio at {sr}Hz")

        # Step 1: Low-pass filter
        filtered = low_pass_filter(buffer, sr, cutoff=s.lowpass_cutoff, q=s.lowpass_q)

        # Step 2: Window selection
        window = select_analysis_window(
            filtered,
            sr,
            window_seconds=s.analysis_window_seconds,
            step_seconds=s.window_step_seconds,
            stride=s.energy_stride,
        )

        # Step 3: Onset detection
        if s.onset_method == "loudest":
            onsets = loudest_window_onsets(
                window.samples,
                sr,
                fraction=s.loudest_fraction,
                chunk_seconds=s.loudest_chunk_seconds,
                min_gap=s.min_onset_gap,
            )
        else:
            envelope = energy_envelope(window.samples, sr, window_ms=s.onset_window_ms)
            onsets = detect_onsets(
                envelope,
                sr,
                window_ms=s.onset_window_ms,
                neighborhood=s.onset_neighborhood,
                threshold_ratio=s.onset_threshold_ratio,
                min_gap=s.min_onset_gap,
                audio=window.samples,
            )

        # Step 4: Interval collection
        intervals = collect_intervals(
            onsets,
            lookahead=s.interval_lookahead,
            min_interval=s.min_interval,
            max_interval=s.max_interval,
        )

        # Step 5: Histogram voting
        histogram = TempoHistogram.from_intervals(
            intervals,
            min_interval=s.min_interval,
            neighbor_weight=s.neighbor_weight,
        )
        best = histogram.best()

        result = TempoAnalysis(
            bpm=0,
            sample_rate=sr,
            duration=duration,
            window_start=window.start_time(sr),
            window_end=window.end_time(sr),
            onsets=onsets,
            intervals=intervals,
        )
        if best is None:
            logger.debug(f"No tempo evidence: {len(onsets)} onsets, no intervals in range")
            return result

        # Step 6: Octave correction
        raw_bpm, weight = best
        result.raw_bpm = raw_bpm
        result.histogram_weight = weight
        result.bpm = fold_to_canonical_range(raw_bpm, s.min_bpm, s.max_bpm)

        logger.info(
            f"  {len(onsets)} onsets, {len(intervals)} intervals, "
            f"raw {raw_bpm} BPM (weight {weight:.2f}) -> {result.bpm} BPM"
        )
        return result

    def analyze_many(
        self,
        buffers: list[tuple[np.ndarray, int]],
        max_workers: int | None = None,
    ) -> list[TempoAnalysis]:
        """Analyze several ``(audio, sr)`` buffers in parallel, preserving order."""
        workers = max_workers or self.settings.max_workers
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(lambda item: self.analyze_audio(*item), buffers))


def detect_bpm(audio: np.ndarray, sr: int, settings: Settings | None = None) -> int:
    """Estimate the tempo of *audio* in BPM.

    Returns 0 when no tempo could be detected, otherwise a value in the
    canonical range (70-185 by default).
    """
    return TempoEngine(settings).analyze_audio(audio, sr).bpm
