"""File upload endpoint for tempo detection."""

import asyncio
import logging

from fastapi import APIRouter, UploadFile, File, HTTPException

from tempometer.api.schemas import BpmResponse
from tempometer.analysis.engine import TempoEngine
from tempometer.analysis.models import TempoAnalysis
from tempometer.audio.loader import SUPPORTED_EXTENSIONS, DecodeError, DecodeSession
from tempometer.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


def analysis_to_response(result: TempoAnalysis) -> BpmResponse:
    return BpmResponse(
        bpm=result.bpm,
        detected=result.detected,
        raw_bpm=result.raw_bpm,
        duration=round(result.duration, 3),
        sample_rate=result.sample_rate,
        window_start=round(result.window_start, 3),
        window_end=round(result.window_end, 3),
        onset_count=len(result.onsets),
        interval_count=len(result.intervals),
    )


def _decode_and_analyze(content: bytes, suffix: str) -> TempoAnalysis:
    with DecodeSession(sr=settings.sample_rate, channel=settings.channel) as session:
        audio, sr = session.decode_bytes(content, suffix)
    return TempoEngine(settings).analyze_audio(audio, sr)


@router.post("/bpm", response_model=BpmResponse)
async def detect_tempo(file: UploadFile = File(...)):
    """Detect the tempo of an uploaded audio file."""
    suffix = ""
    if file.filename and "." in file.filename:
        suffix = "." + file.filename.rsplit(".", 1)[-1].lower()
    if suffix and suffix not in SUPPORTED_EXTENSIONS:
        raise HTTPException(400, f"Unsupported format. Use: {', '.join(sorted(SUPPORTED_EXTENSIONS))}")

    content = await file.read()
    if len(content) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(400, f"File too large (max {settings.max_upload_mb} MB)")

    try:
        result = await asyncio.to_thread(_decode_and_analyze, content, suffix or ".wav")
    except DecodeError as e:
        raise HTTPException(422, str(e))
    except Exception:
        logger.exception("Tempo analysis failed")
        raise HTTPException(500, "Analysis failed")

    return analysis_to_response(result)
