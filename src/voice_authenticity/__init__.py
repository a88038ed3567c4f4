"""Voice authenticity - capture, band-energy features, model registry, analysis, backend client."""

from voice_authenticity.errors import (
    DecodeError,
    DeviceAccessError,
    ResourceLoadError,
    TransportError,
    VoiceAuthenticityError,
)

__all__ = [
    "VoiceAuthenticityError",
    "DeviceAccessError",
    "DecodeError",
    "ResourceLoadError",
    "TransportError",
]
