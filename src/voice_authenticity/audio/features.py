"""Feature extraction: framing, band energies with band deltas, fixed frame count, per-utterance CMVN."""

from __future__ import annotations

from math import gcd
from typing import List, Optional, Union

import numpy as np

from voice_authenticity.audio.config import FeatureConfig
from voice_authenticity.audio.signal import RawSignal, fit_length


def resample(audio: np.ndarray, orig_sr: int, target_sr: int) -> np.ndarray:
    """Polyphase resampling to target_sr; no-op when the rates match."""
    audio = np.asarray(audio, dtype=np.float32).reshape(-1)
    if orig_sr == target_sr or len(audio) == 0:
        return audio
    from scipy.signal import resample_poly

    g = gcd(int(orig_sr), int(target_sr))
    out = resample_poly(audio, int(target_sr) // g, int(orig_sr) // g)
    return np.clip(out, -1.0, 1.0).astype(np.float32)


def segment_frames(signal: np.ndarray, frame_size: int, hop_size: int) -> List[np.ndarray]:
    """Split a signal into overlapping analysis frames.

    Frame i starts at sample i * hop_size. The count is
    floor((len - frame_size) / hop_size) + 1, clamped to >= 0, so a signal
    shorter than frame_size yields no frames.

    Returns:
        List of float32 views, each of length <= frame_size.
    """
    if frame_size <= 0 or hop_size <= 0:
        raise ValueError("frame_size and hop_size must be positive")
    signal = np.asarray(signal, dtype=np.float32).reshape(-1)
    n = len(signal)
    n_frames = max(0, (n - frame_size) // hop_size + 1)
    frames = []
    for i in range(n_frames):
        start = i * hop_size
        end = min(start + frame_size, n)
        frames.append(signal[start:end])
    return frames


def band_energies(frame: np.ndarray, band_count: int) -> np.ndarray:
    """Mean absolute amplitude of band_count contiguous equal-width bins.

    The last bin ends at the frame end and absorbs any remainder.
    Empty bins have energy 0.
    """
    if band_count <= 0:
        raise ValueError("band_count must be positive")
    frame = np.abs(np.asarray(frame, dtype=np.float32).reshape(-1))
    n = len(frame)
    bin_width = n // band_count
    energies = np.zeros(band_count, dtype=np.float32)
    for j in range(band_count):
        start = j * bin_width
        end = n if j == band_count - 1 else min(start + bin_width, n)
        if end > start:
            energies[j] = frame[start:end].mean()
    return energies


def band_deltas(values: np.ndarray) -> np.ndarray:
    """Difference between adjacent bands of the same frame; first entry is 0."""
    values = np.asarray(values, dtype=np.float32)
    deltas = np.zeros_like(values)
    deltas[1:] = values[1:] - values[:-1]
    return deltas


def frame_features(frame: np.ndarray, band_count: int) -> np.ndarray:
    """[energies, deltas, delta-deltas] for one frame, length 3 * band_count."""
    energies = band_energies(frame, band_count)
    d1 = band_deltas(energies)
    d2 = band_deltas(d1)
    return np.concatenate([energies, d1, d2])


def fit_frame_count(features: np.ndarray, target_frame_count: int) -> np.ndarray:
    """Truncate trailing frames or append zero frames to exactly target_frame_count rows."""
    features = np.asarray(features, dtype=np.float32)
    if features.ndim != 2:
        raise ValueError(f"expected (n_frames, n_features), got shape {features.shape}")
    out = np.zeros((target_frame_count, features.shape[1]), dtype=np.float32)
    n = min(features.shape[0], target_frame_count)
    out[:n] = features[:n]
    return out


def normalize_features(features: np.ndarray, eps: float = 1e-8) -> np.ndarray:
    """Per-utterance CMVN: subtract column mean, divide by population std + eps.

    Statistics are taken over the time axis (rows) only.

    Args:
        features: (n_frames, n_features)

    Returns:
        Normalized features, same shape, float32.
    """
    features = np.asarray(features, dtype=np.float64)
    if features.ndim != 2 or features.shape[0] == 0:
        return features.astype(np.float32)
    mean = features.mean(axis=0)
    std = features.std(axis=0)
    return ((features - mean) / (std + eps)).astype(np.float32)


class BandEnergyExtractor:
    """Extract fixed-shape band-energy feature sequences from mono audio.

    Simplified spectral representation (no FFT / Mel / DCT): each frame is
    split into band_count bins of raw samples and summarized by mean absolute
    amplitude. Deltas are taken between neighbouring bands of the same frame.

    Every call allocates its own buffers, so one extractor can be shared.
    """

    def __init__(self, config: Optional[FeatureConfig] = None):
        self.config = config or FeatureConfig()

    def normalize_signal(self, audio: Union[RawSignal, np.ndarray]) -> np.ndarray:
        """Truncate/pad to sample_rate * duration_sec samples.

        A RawSignal at another rate is resampled first; bare arrays are
        assumed to already be at config.sample_rate. Samples are clipped to [-1, 1].
        """
        if isinstance(audio, RawSignal):
            samples = resample(audio.samples, audio.sample_rate, self.config.sample_rate)
        else:
            samples = np.clip(np.asarray(audio, dtype=np.float32).reshape(-1), -1.0, 1.0)
        return fit_length(samples, self.config.target_length)

    def frames(self, audio: Union[RawSignal, np.ndarray]) -> List[np.ndarray]:
        """Analysis frames of the length-normalized signal."""
        return segment_frames(
            self.normalize_signal(audio),
            self.config.frame_size,
            self.config.hop_size,
        )

    def extract(self, audio: Union[RawSignal, np.ndarray]) -> np.ndarray:
        """Feature sequence, shape (target_frame_count, 3 * band_count)."""
        frames = self.frames(audio)
        if frames:
            features = np.stack([frame_features(f, self.config.band_count) for f in frames])
        else:
            features = np.zeros((0, self.config.feature_dim), dtype=np.float32)
        return fit_frame_count(features, self.config.target_frame_count)

    def extract_normalized(self, audio: Union[RawSignal, np.ndarray]) -> np.ndarray:
        """Feature sequence after per-utterance mean/variance normalization."""
        return normalize_features(self.extract(audio), eps=self.config.eps)

    def to_model_input(self, audio: Union[RawSignal, np.ndarray]) -> np.ndarray:
        """Normalized features with a leading batch axis, shape (1, T, F)."""
        return self.extract_normalized(audio)[np.newaxis, ...]
