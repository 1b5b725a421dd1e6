"""
Exceptions delivered to speech recognition error handlers.
"""


class SpeechRecognitionError(Exception):
    """Base class for every failure reported by this package."""


class UnsupportedCapabilityError(SpeechRecognitionError):
    """No usable backend, or the requested backend lacks platform support."""


class ResourceDeniedError(SpeechRecognitionError):
    """The microphone could not be acquired (denied, missing or busy)."""


class AlreadyListeningError(ResourceDeniedError):
    """A session was started on a backend that is still holding the microphone."""


class DeviceError(SpeechRecognitionError):
    """The recognition or capture device reported a fault mid-session."""


class NetworkError(SpeechRecognitionError):
    """An upload or correction request failed or returned a non-success status."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class TranscriptionTimeoutError(NetworkError):
    """The transcription endpoint did not answer within the upload timeout."""
