"""Audio capture, WAV container and band-energy feature extraction modules."""

from voice_authenticity.audio.config import FeatureConfig
from voice_authenticity.audio.collector import AudioCollector, is_recording_supported
from voice_authenticity.audio.features import (
    BandEnergyExtractor,
    fit_frame_count,
    frame_features,
    normalize_features,
    segment_frames,
)
from voice_authenticity.audio.signal import RawSignal, fit_length
from voice_authenticity.audio.wav import decode_wav, encode_wav

__all__ = [
    "FeatureConfig",
    "AudioCollector",
    "is_recording_supported",
    "BandEnergyExtractor",
    "fit_frame_count",
    "frame_features",
    "normalize_features",
    "segment_frames",
    "RawSignal",
    "fit_length",
    "decode_wav",
    "encode_wav",
]
