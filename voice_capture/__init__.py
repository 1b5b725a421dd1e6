from .config import SpeechRecognitionConfig
from .dictation import Dictation
from .errors import (
    AlreadyListeningError,
    DeviceError,
    NetworkError,
    ResourceDeniedError,
    SpeechRecognitionError,
    TranscriptionTimeoutError,
    UnsupportedCapabilityError,
)
from .speech_recognition import (
    Backend,
    LocalSpeechRecognizer,
    RemoteSpeechRecognizer,
    SessionState,
    SpeechRecognitionService,
    SpeechRecognizer,
    create_speech_recognition,
)
from .text_correction import correct_text

__all__ = [
    "SpeechRecognitionService",
    "SpeechRecognitionConfig",
    "SpeechRecognizer",
    "LocalSpeechRecognizer",
    "RemoteSpeechRecognizer",
    "Backend",
    "SessionState",
    "Dictation",
    "create_speech_recognition",
    "correct_text",
    "SpeechRecognitionError",
    "UnsupportedCapabilityError",
    "ResourceDeniedError",
    "AlreadyListeningError",
    "DeviceError",
    "NetworkError",
    "TranscriptionTimeoutError",
]
