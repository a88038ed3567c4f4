"""WAV container: mono 16-bit PCM encode/decode for backend submission."""

from __future__ import annotations

import io
from typing import Union

import numpy as np
import scipy.io.wavfile as wavfile

from voice_authenticity.audio.signal import RawSignal
from voice_authenticity.errors import DecodeError

# 44-byte RIFF/WAVE header for PCM (fmt chunk of 16 bytes, no extensions)
WAV_HEADER_BYTES = 44


def float_to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Clip to [-1, 1] and quantize: negatives scale by 32768, positives by 32767."""
    s = np.clip(np.asarray(samples, dtype=np.float64).reshape(-1), -1.0, 1.0)
    scaled = np.where(s < 0, s * 32768.0, s * 32767.0)
    return np.round(scaled).clip(-32768, 32767).astype("<i2")


def pcm16_to_float(pcm: np.ndarray) -> np.ndarray:
    """Inverse of float_to_pcm16."""
    pcm = np.asarray(pcm).astype(np.float64)
    return np.where(pcm < 0, pcm / 32768.0, pcm / 32767.0).astype(np.float32)


def encode_wav(samples: Union[RawSignal, np.ndarray], sample_rate: int = 16_000) -> bytes:
    """Encode mono float samples as a RIFF/WAVE PCM 16-bit little-endian byte string.

    If a RawSignal is passed, its own sample rate is used.
    """
    if isinstance(samples, RawSignal):
        sample_rate = samples.sample_rate
        samples = samples.samples
    buf = io.BytesIO()
    wavfile.write(buf, int(sample_rate), float_to_pcm16(samples))
    return buf.getvalue()


def decode_wav(data: bytes) -> RawSignal:
    """Decode a WAV byte string into a mono float32 RawSignal.

    Multi-channel files keep the first channel.
    """
    try:
        sr, audio = wavfile.read(io.BytesIO(data))
    except (ValueError, EOFError, OSError) as exc:
        raise DecodeError(f"Could not decode WAV data: {exc}") from exc

    if audio.ndim > 1:
        audio = audio[:, 0]
    if audio.dtype == np.int16:
        samples = pcm16_to_float(audio)
    elif audio.dtype == np.int32:
        samples = (audio.astype(np.float64) / 2**31).astype(np.float32)
    elif audio.dtype == np.uint8:
        samples = ((audio.astype(np.float32) - 128) / 128).astype(np.float32)
    elif np.issubdtype(audio.dtype, np.floating):
        samples = audio.astype(np.float32)
    else:
        raise DecodeError(f"Unsupported WAV sample format: {audio.dtype}")
    return RawSignal(samples, sr)
