"""Audio encoding helpers for Minuet.

Standardizes WAV output at 48 kHz / 24-bit PCM using soundfile. Waveforms
are float32 arrays in range [-1.0, 1.0].
"""

from __future__ import annotations

import base64
import io
from typing import Tuple

import numpy as np
import soundfile as sf


DEFAULT_SAMPLE_RATE = 48_000
DEFAULT_SUBTYPE = "PCM_24"  # 24-bit
SUPPORTED_SAMPLE_RATES = (16_000, 22_050, 44_100, 48_000)


def validate_format(sample_rate: int, channels: int, subtype: str = DEFAULT_SUBTYPE) -> None:
    if sample_rate not in SUPPORTED_SAMPLE_RATES:
        raise ValueError(
            f"Invalid sample rate: {sample_rate} (expected one of {SUPPORTED_SAMPLE_RATES})"
        )
    if channels not in (1, 2):
        raise ValueError(f"Invalid channel count: {channels} (expected 1 or 2)")
    if subtype != DEFAULT_SUBTYPE:
        raise ValueError(f"Invalid subtype: {subtype} (expected {DEFAULT_SUBTYPE})")


def write_wav_bytes(
    audio: np.ndarray,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    subtype: str = DEFAULT_SUBTYPE,
) -> bytes:
    """Encode audio as WAV bytes.

    Accepts audio as shape (samples,) or (samples, channels).
    """
    if audio.ndim == 1:
        audio = audio.reshape(-1, 1)
    validate_format(sample_rate, audio.shape[1], subtype)

    buf = io.BytesIO()
    sf.write(buf, np.clip(audio, -1.0, 1.0), sample_rate, subtype=subtype, format="WAV")
    return buf.getvalue()


def read_wav_bytes(data: bytes) -> Tuple[np.ndarray, int]:
    """Read WAV from bytes and return (audio, sample_rate)."""
    with io.BytesIO(data) as buf:
        audio, sr = sf.read(buf, dtype="float32", always_2d=True)
    return audio, sr


def wav_to_base64(data: bytes) -> str:
    """Encode WAV bytes for JSON transport."""
    return base64.b64encode(data).decode("utf-8")


__all__ = [
    "DEFAULT_SAMPLE_RATE",
    "DEFAULT_SUBTYPE",
    "SUPPORTED_SAMPLE_RATES",
    "validate_format",
    "write_wav_bytes",
    "read_wav_bytes",
    "wav_to_base64",
]
