import logging
from typing import Optional

import requests

from ..errors import NetworkError, TranscriptionTimeoutError

logger = logging.getLogger(__name__)

# Multipart field carrying the recorded audio
AUDIO_FIELD_NAME = "audio"


class TranscriptionClient:
    """Uploads one recording to the transcription endpoint."""

    def __init__(self, url: str, timeout: Optional[float] = 30.0):
        self._url = url
        self._timeout = timeout

    @property
    def url(self) -> str:
        return self._url

    def transcribe(
        self,
        audio: bytes,
        filename: str = "recording.wav",
        mime_type: str = "audio/wav",
    ) -> Optional[str]:
        """Send `audio` and return the transcript, or None if the reply has none.

        Raises:
            TranscriptionTimeoutError: no answer within the timeout.
            NetworkError: transport failure, non-success status or malformed reply.
        """
        logger.debug(f"Uploading {len(audio)} bytes of {mime_type} to {self._url}")

        try:
            response = requests.post(
                self._url,
                files={AUDIO_FIELD_NAME: (filename, audio, mime_type)},
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as e:
            raise TranscriptionTimeoutError(
                f"Transcription request timed out after {self._timeout}s"
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Transcription request failed: {e}") from e

        if not response.ok:
            raise NetworkError(
                f"Server error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError("Transcription response is not valid JSON") from e

        text = data.get("text") if isinstance(data, dict) else None
        if text is not None and not isinstance(text, str):
            raise NetworkError(f"Transcription response carries a non-text transcript: {text!r}")

        return text or None
