"""Audio file decoding.

Decoding is the only step around the tempo pipeline that touches the
filesystem. Callers own a :class:`DecodeSession` for the duration of the
decode so temporary files are always released, and :func:`decode_async`
bounds a decode with a timeout.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Union

import librosa
import numpy as np

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".aac", ".aiff", ".aif"}


class DecodeError(RuntimeError):
    """Audio could not be decoded into a sample buffer."""


def select_channel(audio: np.ndarray, channel: int = 0) -> np.ndarray:
    """Return one channel of a ``(channels, samples)`` array.

    Mono input is returned unchanged. An out-of-range *channel* falls back to
    the first channel.
    """
    if audio.ndim == 1:
        return audio
    if not 0 <= channel < audio.shape[0]:
        channel = 0
    return audio[channel]


def load_audio(
    file_path: Union[str, Path],
    sr: int | None = None,
    channel: int = 0,
) -> tuple[np.ndarray, int]:
    """Load an audio file and reduce it to a single channel.

    Parameters
    ----------
    file_path:
        Path to an audio file.
    sr:
        Target sample rate. ``None`` keeps the native rate.
    channel:
        Channel to keep for multi-channel files. Defaults to the first (left).

    Returns
    -------
    tuple[np.ndarray, int]
        A tuple of (audio_array, sample_rate).

    Raises
    ------
    DecodeError
        If the file is missing, has an unsupported extension or fails to
        decode.
    """
    path = Path(file_path)
    if not path.exists():
        raise DecodeError(f"Audio file not found: {path}")
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise DecodeError(
            f"Unsupported format: {path.suffix}. Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )

    try:
        audio, sample_rate = librosa.load(str(path), sr=sr, mono=False)
    except Exception as e:
        logger.warning(f"Decoding {path.name} failed: {e}")
        raise DecodeError(f"Could not decode {path.name}") from e

    audio = select_channel(np.asarray(audio, dtype=np.float32), channel)
    return audio, int(sample_rate)


class DecodeSession:
    """Scoped decoder that owns the temporary files it creates.

    Use as a context manager; every temporary file is removed on exit, even
    when decoding fails::

        with DecodeSession() as session:
            audio, sr = session.decode_bytes(payload, ".mp3")
    """

    def __init__(self, sr: int | None = None, channel: int = 0) -> None:
        self.sr = sr
        self.channel = channel
        self._tmp_paths: list[str] = []
        self._closed = False

    def __enter__(self) -> DecodeSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def decode_file(self, file_path: Union[str, Path]) -> tuple[np.ndarray, int]:
        self._check_open()
        return load_audio(file_path, sr=self.sr, channel=self.channel)

    def decode_bytes(self, data: bytes, suffix: str = ".wav") -> tuple[np.ndarray, int]:
        """Decode an in-memory encoded file via a session-owned temporary file."""
        self._check_open()
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
            self._tmp_paths.append(tmp.name)
            tmp.write(data)
        return self.decode_file(tmp.name)

    def close(self) -> None:
        """Remove all temporary files. Safe to call more than once."""
        while self._tmp_paths:
            path = self._tmp_paths.pop()
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise DecodeError("Decode session is closed")


async def decode_async(
    file_path: Union[str, Path],
    sr: int | None = None,
    channel: int = 0,
    timeout: float | None = 30.0,
) -> tuple[np.ndarray, int]:
    """Decode *file_path* in a worker thread, bounded by *timeout* seconds.

    Cancelling the awaiting task abandons the result. Raises ``DecodeError``
    on failure or timeout.
    """
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(load_audio, file_path, sr, channel),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise DecodeError(f"Decoding {Path(file_path).name} timed out after {timeout}s") from e
