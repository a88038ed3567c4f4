"""Audio capture at mono 16 kHz: time-boxed microphone recording and file decoding."""

from __future__ import annotations

import io
import logging
import threading
from pathlib import Path
from typing import BinaryIO, List, Optional, Set, Union

import numpy as np

try:
    import sounddevice as sd
except (ImportError, OSError):
    sd = None  # type: ignore

from voice_authenticity.audio.config import FeatureConfig
from voice_authenticity.audio.signal import RawSignal, concatenate_chunks
from voice_authenticity.audio.wav import encode_wav
from voice_authenticity.errors import DecodeError, DeviceAccessError

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = (
    "Microphone access was denied. Please allow access to the microphone and try again."
)
NO_DEVICE_MESSAGE = "No microphone was found. Please connect a microphone and try again."

AudioSource = Union[str, Path, bytes, BinaryIO]


class AudioCollector:
    """Records or loads mono audio at the configured sample rate.

    record() blocks for at most duration_sec; stop() from another thread
    ends it early. The input stream is closed on every exit path.
    """

    def __init__(self, config: Optional[FeatureConfig] = None):
        self.config = config or FeatureConfig()
        self._lock = threading.Lock()
        self._active: Set[threading.Event] = set()

    def stop(self) -> None:
        """End every recording in progress before its duration elapses."""
        with self._lock:
            for event in self._active:
                event.set()

    def _open_stream(self, device: Optional[int], chunks: List[np.ndarray]):
        if sd is None:
            raise ImportError("sounddevice is required for recording. pip install sounddevice")

        try:
            sd.query_devices(device, kind="input")
        except (ValueError, sd.PortAudioError) as exc:
            logger.error("No input device available: %s", exc)
            raise DeviceAccessError(NO_DEVICE_MESSAGE, reason=DeviceAccessError.NOT_FOUND) from exc

        def callback(indata: np.ndarray, _frames: int, _time: object, status: object) -> None:
            if status:
                logger.debug("Input stream status: %s", status)
            # indata is reused by PortAudio between callbacks
            chunks.append(indata.copy().reshape(-1))

        try:
            return sd.InputStream(
                samplerate=self.config.sample_rate,
                channels=self.config.channels,
                dtype=self.config.dtype,
                device=device,
                callback=callback,
            )
        except sd.PortAudioError as exc:
            logger.error("Could not open input stream: %s", exc)
            raise DeviceAccessError(PERMISSION_DENIED_MESSAGE) from exc

    def record(
        self,
        duration_sec: Optional[float] = None,
        device: Optional[int] = None,
    ) -> RawSignal:
        """Record from the microphone for up to duration_sec seconds.

        Each call owns its chunk buffer and stop event, so overlapping calls
        on one collector do not interfere.

        Args:
            duration_sec: Recording duration (default: config.duration_sec).
            device: Input device index (None = default).

        Returns:
            RawSignal of every delivered chunk, concatenated in arrival order.

        Raises:
            DeviceAccessError: no input device, or access to it was refused.
        """
        duration = self.config.duration_sec if duration_sec is None else duration_sec
        chunks: List[np.ndarray] = []
        done = threading.Event()

        stream = self._open_stream(device, chunks)
        with self._lock:
            self._active.add(done)
        logger.info("Recording %.2fs at %d Hz", duration, self.config.sample_rate)
        try:
            stream.start()
            done.wait(timeout=duration)
        except sd.PortAudioError as exc:
            logger.error("Input stream failed: %s", exc)
            raise DeviceAccessError(PERMISSION_DENIED_MESSAGE) from exc
        finally:
            stream.close()
            with self._lock:
                self._active.discard(done)

        signal = RawSignal(concatenate_chunks(chunks), self.config.sample_rate)
        logger.info("Audio recorded: %.2fs, %d Hz", signal.duration_sec, signal.sample_rate)
        return signal

    def record_fixed(
        self,
        duration_sec: Optional[float] = None,
        device: Optional[int] = None,
    ) -> RawSignal:
        """Record and truncate/pad to exactly config.target_length samples."""
        return self.record(duration_sec, device=device).fit(self.config.target_length)

    def load_file(self, source: AudioSource) -> RawSignal:
        """Decode an encoded audio file (WAV, FLAC, OGG, MP3, ...) to mono at config.sample_rate.

        Args:
            source: Path, raw file bytes or a binary file object.

        Raises:
            FileNotFoundError: path does not exist.
            DecodeError: content could not be decoded.
        """
        import librosa

        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise FileNotFoundError(f"Audio file not found: {path}")
            target: Union[str, BinaryIO] = str(path)
        elif isinstance(source, (bytes, bytearray)):
            target = io.BytesIO(bytes(source))
        else:
            target = source

        try:
            audio, sr = librosa.load(target, sr=self.config.sample_rate, mono=True)
        except Exception as exc:
            logger.error("Audio decoding failed: %s", exc)
            raise DecodeError(f"Could not decode audio file: {exc}") from exc

        if audio.size == 0:
            raise DecodeError("Audio file contains no samples")
        signal = RawSignal(audio, sr)
        logger.info("Audio file loaded: %.2fs, %d Hz", signal.duration_sec, signal.sample_rate)
        return signal

    def record_to_file(
        self,
        filepath: Union[str, Path],
        duration_sec: float,
        device: Optional[int] = None,
    ) -> RawSignal:
        """Record audio and save as mono 16-bit WAV.

        Args:
            filepath: Output path (e.g. .wav).
            duration_sec: Recording duration in seconds.
            device: Input device index (None = default).
        """
        signal = self.record(duration_sec, device=device)
        Path(filepath).write_bytes(encode_wav(signal))
        return signal


def is_recording_supported() -> bool:
    """True when sounddevice is importable and an input device is present."""
    if sd is None:
        return False
    try:
        sd.query_devices(kind="input")
    except (ValueError, sd.PortAudioError):
        return False
    return True
