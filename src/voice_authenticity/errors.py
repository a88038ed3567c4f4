"""Error types raised across capture, decoding, model loading and submission."""

from __future__ import annotations

from typing import Optional


class VoiceAuthenticityError(Exception):
    """Base class for all errors raised by this package."""


class DeviceAccessError(VoiceAuthenticityError):
    """Microphone could not be used.

    ``reason`` is ``"permission"`` when access was denied and ``"not_found"``
    when no input device is present.
    """

    PERMISSION = "permission"
    NOT_FOUND = "not_found"

    def __init__(self, message: str, reason: str = PERMISSION):
        super().__init__(message)
        self.reason = reason


class DecodeError(VoiceAuthenticityError):
    """Audio data is malformed or in an unsupported encoding."""


class ResourceLoadError(VoiceAuthenticityError):
    """A required model or metadata artifact is missing or malformed."""

    def __init__(self, message: str, resource: Optional[str] = None):
        super().__init__(message)
        self.resource = resource


class TransportError(VoiceAuthenticityError):
    """Backend submission failed (network error or non-success status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
