"""
Configuration classes for voice_capture components.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin, urlparse


@dataclass(frozen=True)
class SpeechRecognitionConfig:
    """
    Configuration shared by the speech recognizers and the recognition service.

    Instances are immutable; build a new one to change a setting.

    Attributes:
        language: BCP-47 language tag handed to the recognition engine.
            Default: 'de-DE'

        continuous: Keep recognizing after the first final utterance.
            Default: True

        interim_results: Deliver partial (non-final) transcripts while the
            user is still speaking. Only the on-device recognizer honours it.
            Default: True

        max_alternatives: Number of alternatives requested per result.
            Default: 1

        use_fallback: Create the remote recognizer so the service can fall
            back to it when on-device recognition is unavailable.
            Default: True

        fallback_api_url: Endpoint receiving the recorded audio.
            Default: '/api/speech-to-text'

        correction_api_url: Endpoint used by `correct_text`.
            Default: '/api/text-correction'

        base_url: Origin that relative endpoint paths are resolved against,
            e.g. 'https://example.org'. If None, endpoints must be absolute.
            Default: None

        timeslice_ms: Length of each recorded audio slice in milliseconds.
            Default: 1000

        upload_timeout: Seconds to wait for the transcription endpoint.
            None waits forever.
            Default: 30.0

        recognition_engine: Name of the on-device engine, as registered in
            `RecognitionEngineFactory`.
            Default: 'vosk'

        model_path: Directory of the on-device model. If None, a model is
            selected from `language`.
            Default: None

        sample_rate: Microphone sample rate in Hz.
            Default: 16000
    """

    language: str = "de-DE"
    continuous: bool = True
    interim_results: bool = True
    max_alternatives: int = 1
    use_fallback: bool = True
    fallback_api_url: str = "/api/speech-to-text"
    correction_api_url: str = "/api/text-correction"
    base_url: Optional[str] = None
    timeslice_ms: int = 1000
    upload_timeout: Optional[float] = 30.0
    recognition_engine: str = "vosk"
    model_path: Optional[str] = None
    sample_rate: int = 16000

    def __post_init__(self):
        """Validate configuration parameters after initialization."""
        if not self.language:
            raise ValueError("language must be a non-empty language tag")

        if self.max_alternatives < 1:
            raise ValueError(
                f"max_alternatives must be at least 1, got {self.max_alternatives}"
            )

        if self.timeslice_ms <= 0:
            raise ValueError(
                f"timeslice_ms must be positive, got {self.timeslice_ms}"
            )

        if self.upload_timeout is not None and self.upload_timeout <= 0:
            raise ValueError(
                f"upload_timeout must be positive or None, got {self.upload_timeout}"
            )

        if self.sample_rate <= 0:
            raise ValueError(
                f"sample_rate must be positive, got {self.sample_rate}"
            )

    def resolve_url(self, url: str) -> str:
        """Return `url` joined onto `base_url` unless it is already absolute."""
        if urlparse(url).scheme or self.base_url is None:
            return url

        return urljoin(self.base_url, url)
