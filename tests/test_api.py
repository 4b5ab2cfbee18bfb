"""Tests for the HTTP API."""

import numpy as np
import soundfile as sf

from tests.conftest import generate_click_track


def _wav_bytes(tmp_path, audio, sr=22050):
    wav_path = tmp_path / "test.wav"
    sf.write(str(wav_path), audio, sr)
    return wav_path.read_bytes()


def test_health_endpoint(client):
    """GET /api/health should return ok."""
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_bpm_endpoint_detects_tempo(client, tmp_path):
    payload = _wav_bytes(tmp_path, generate_click_track(bpm=120, duration_seconds=12))

    response = client.post("/api/bpm", files={"file": ("test.wav", payload, "audio/wav")})

    assert response.status_code == 200
    data = response.json()
    assert data["detected"] is True
    assert abs(data["bpm"] - 120) <= 1
    assert data["sample_rate"] == 22050
    assert data["onset_count"] > 0
    assert data["interval_count"] > 0


def test_bpm_endpoint_silence_is_not_an_error(client, tmp_path):
    payload = _wav_bytes(tmp_path, np.zeros(22050 * 3, dtype=np.float32))

    response = client.post("/api/bpm", files={"file": ("quiet.wav", payload, "audio/wav")})

    assert response.status_code == 200
    assert response.json()["bpm"] == 0
    assert response.json()["detected"] is False


def test_bpm_endpoint_rejects_unsupported_extension(client):
    response = client.post("/api/bpm", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 400
    assert "Unsupported format" in response.json()["detail"]


def test_bpm_endpoint_rejects_oversized_file(client, monkeypatch):
    """Upload endpoint should reject files larger than configured limit."""
    from tempometer.config import settings

    monkeypatch.setattr(settings, "max_upload_mb", 1)
    payload = b"x" * (1024 * 1024 + 1)

    response = client.post("/api/bpm", files={"file": ("big.wav", payload, "audio/wav")})

    assert response.status_code == 400
    assert "File too large" in response.json()["detail"]


def test_bpm_endpoint_undecodable_audio(client):
    response = client.post("/api/bpm", files={"file": ("broken.wav", b"not audio", "audio/wav")})
    assert response.status_code == 422


def test_bpm_endpoint_hides_internal_errors(client, monkeypatch):
    """Unexpected failures should not leak exception details."""
    import tempometer.api.upload as upload_module

    def _boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(upload_module, "_decode_and_analyze", _boom)

    response = client.post("/api/bpm", files={"file": ("test.wav", b"audio", "audio/wav")})

    assert response.status_code == 500
    assert response.json()["detail"] == "Analysis failed"
