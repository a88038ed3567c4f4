"""Mono PCM signal container and fixed-duration length policy."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class RawSignal:
    """Single-channel float32 samples tagged with their sample rate.

    Samples are clipped into [-1, 1] on construction.
    """

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        samples = np.asarray(self.samples, dtype=np.float32)
        if samples.ndim > 1:
            # (n_samples, channels) -> first channel
            samples = samples.reshape(samples.shape[0], -1)[:, 0]
        self.samples = np.clip(samples, -1.0, 1.0)
        self.sample_rate = int(self.sample_rate)

    def __len__(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration_sec(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return len(self) / self.sample_rate

    def fit(self, target_length: int) -> "RawSignal":
        """Return a copy truncated or zero-padded to ``target_length`` samples."""
        return RawSignal(fit_length(self.samples, target_length), self.sample_rate)


def fit_length(samples: np.ndarray, target_length: int) -> np.ndarray:
    """Truncate (keeping the start) or zero-pad at the end to exactly target_length.

    Always returns a new float32 array; the input is never modified.
    """
    if target_length < 0:
        raise ValueError(f"target_length must be >= 0, got {target_length}")
    samples = np.asarray(samples, dtype=np.float32).reshape(-1)
    out = np.zeros(target_length, dtype=np.float32)
    n = min(len(samples), target_length)
    out[:n] = samples[:n]
    return out


def concatenate_chunks(chunks: list[np.ndarray]) -> np.ndarray:
    """Join captured chunks in arrival order into one float32 array."""
    if not chunks:
        return np.zeros(0, dtype=np.float32)
    return np.concatenate([np.asarray(c, dtype=np.float32).reshape(-1) for c in chunks])
