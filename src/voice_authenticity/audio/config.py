"""Centralized audio and feature extraction configuration.

Encoding standards:
- Audio: mono 16 kHz, 3 s utterances
- Frames: 2048 samples / 512 hop
- Features: 40 band energies + 40 band deltas + 40 band delta-deltas
- Sequence: 94 frames, per-utterance mean/variance normalization
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FeatureConfig:
    """Audio capture and feature extraction configuration."""

    # Recording
    sample_rate: int = 16_000
    channels: int = 1  # mono
    dtype: str = "float32"
    duration_sec: float = 3.0

    # Framing
    frame_size: int = 2048
    hop_size: int = 512

    # Band energies (per frame, plus two band-to-band difference blocks)
    band_count: int = 40

    # Model input: 3 s @ 16 kHz with hop 512 as used at training time
    target_frame_count: int = 94

    # Normalization floor
    eps: float = 1e-8

    @property
    def target_length(self) -> int:
        """Utterance length in samples."""
        return int(self.sample_rate * self.duration_sec)

    @property
    def feature_dim(self) -> int:
        """Length of one feature vector."""
        return 3 * self.band_count

    @property
    def natural_frame_count(self) -> int:
        """Frames produced by a full-length utterance before padding/truncation."""
        return max(0, (self.target_length - self.frame_size) // self.hop_size + 1)

    @property
    def input_shape(self) -> tuple[int, int, int]:
        """Model input shape (batch, frames, features)."""
        return (1, self.target_frame_count, self.feature_dim)
