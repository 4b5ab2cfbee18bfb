"""Application configuration."""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings with env var overrides."""

    # Decoding
    sample_rate: int | None = Field(default=None, gt=0)  # None keeps the file's native rate
    channel: int = Field(default=0, ge=0)  # first (left) channel of multi-channel sources
    decode_timeout: float = Field(default=30.0, gt=0)

    # Low-pass filter
    lowpass_cutoff: float = Field(default=150.0, gt=0)
    lowpass_q: float = Field(default=1.0, gt=0)

    # Window selection
    analysis_window_seconds: float = Field(default=30.0, gt=0)
    window_step_seconds: float = Field(default=2.0, gt=0)
    energy_stride: int = Field(default=1000, ge=1)

    # Onset detection
    onset_method: Literal["adaptive", "loudest"] = "adaptive"
    onset_window_ms: float = Field(default=10.0, gt=0)
    onset_neighborhood: int = Field(default=50, ge=0)  # windows on each side (~0.5 s)
    onset_threshold_ratio: float = Field(default=1.3, gt=0)
    min_onset_gap: float = Field(default=0.2, ge=0)
    loudest_fraction: float = Field(default=0.5, gt=0, le=1)
    loudest_chunk_seconds: float = Field(default=0.125, gt=0)

    # Intervals / histogram
    interval_lookahead: int = Field(default=5, ge=1)
    min_interval: float = Field(default=0.33, gt=0)
    max_interval: float = Field(default=1.0, gt=0)
    neighbor_weight: float = Field(default=0.25, ge=0)

    # Canonical output range
    min_bpm: int = Field(default=70, gt=0)
    max_bpm: int = Field(default=185, gt=0)

    # Batch / server
    max_workers: int = Field(default=4, ge=1)
    host: str = "0.0.0.0"
    port: int = 8000
    max_upload_mb: int = Field(default=50, gt=0)

    model_config = {"env_prefix": "TEMPOMETER_"}

    @model_validator(mode="after")
    def _check_ranges(self):
        if self.min_interval > self.max_interval:
            raise ValueError("min_interval must not exceed max_interval")
        # Folding by octaves only lands inside the range if it spans one
        if self.max_bpm < 2 * self.min_bpm - 1:
            raise ValueError("max_bpm must be at least 2 * min_bpm - 1")
        return self


settings = Settings()
