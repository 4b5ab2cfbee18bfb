"""Pydantic response models for API."""

from pydantic import BaseModel


class BpmResponse(BaseModel):
    bpm: int  # 0 means no tempo detected
    detected: bool
    raw_bpm: int = 0
    duration: float = 0.0
    sample_rate: int = 0
    window_start: float = 0.0
    window_end: float = 0.0
    onset_count: int = 0
    interval_count: int = 0


class HealthResponse(BaseModel):
    status: str = "ok"
