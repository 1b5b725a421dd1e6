"""Speech recognition package public API.

Two backends implement the `SpeechRecognizer` capture contract:

- `LocalSpeechRecognizer` streams audio to an on-device engine registered
  in `RecognitionEngineFactory` and reports transcripts while listening.
- `RemoteSpeechRecognizer` records audio and uploads it on `stop()`.

`SpeechRecognitionService` picks one of them and can be switched at
runtime. Use

  from voice_capture.speech_recognition import create_speech_recognition

to get a ready-to-use service.
"""

from .local_speech_recognizer import LocalSpeechRecognizer
from .recognition_device import (
    RecognitionAlternative,
    RecognitionDevice,
    RecognitionResult,
    RecognitionResultEvent,
)
from .recognition_engine_factory import RecognitionEngineFactory
from .remote_speech_recognizer import RemoteSpeechRecognizer
from .speech_recognition_service import (
    Backend,
    SpeechRecognitionService,
    create_speech_recognition,
)
from .speech_recognizer import SessionState, SpeechRecognizer
from .transcription_client import TranscriptionClient

__all__ = [
    "Backend",
    "LocalSpeechRecognizer",
    "RecognitionAlternative",
    "RecognitionDevice",
    "RecognitionEngineFactory",
    "RecognitionResult",
    "RecognitionResultEvent",
    "RemoteSpeechRecognizer",
    "SessionState",
    "SpeechRecognitionService",
    "SpeechRecognizer",
    "TranscriptionClient",
    "create_speech_recognition",
]
