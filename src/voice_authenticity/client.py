"""Backend submission: POST a WAV recording to the analysis API and return its JSON verdict."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from voice_authenticity.audio.signal import RawSignal
from voice_authenticity.audio.wav import encode_wav
from voice_authenticity.errors import TransportError
from voice_authenticity.settings import get_settings

logger = logging.getLogger(__name__)


class AnalysisClient:
    """Thin synchronous client for the analysis endpoint.

    One request per call, no retries. transport can be replaced (e.g. with
    httpx.MockTransport) for tests.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        analyze_path: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.analyze_path = analyze_path or settings.ANALYZE_PATH
        self.timeout = settings.REQUEST_TIMEOUT if timeout is None else timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.analyze_path.lstrip('/')}"

    def submit(self, wav_bytes: bytes, filename: str = "recording.wav") -> dict[str, Any]:
        """Upload WAV bytes as multipart field 'audio'.

        Raises:
            TransportError: network failure, non-2xx status or non-JSON body.
        """
        files = {"audio": (filename, wav_bytes, "audio/wav")}
        logger.info("Submitting %d bytes to %s", len(wav_bytes), self.url)
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(self.url, files=files)
        except httpx.HTTPError as exc:
            logger.error("Error sending audio: %s", exc)
            raise TransportError(f"Could not reach analysis server: {exc}") from exc

        if not resp.is_success:
            logger.error("Analysis server returned HTTP %d", resp.status_code)
            raise TransportError(
                f"Analysis server returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise TransportError(
                "Analysis server returned an invalid JSON response",
                status_code=resp.status_code,
            ) from exc

    def submit_signal(self, signal: RawSignal, filename: str = "recording.wav") -> dict[str, Any]:
        """Encode a signal as 16-bit mono WAV and submit it."""
        return self.submit(encode_wav(signal), filename=filename)
