import logging
import threading
from typing import List, Optional

from .config import SpeechRecognitionConfig
from .errors import SpeechRecognitionError
from .speech_recognition.speech_recognition_service import SpeechRecognitionService
from .speech_recognition.speech_recognizer import SessionState
from .text_correction import correct_text

logger = logging.getLogger(__name__)


class Dictation:
    """Fill a text field by voice.

    `start()` begins listening; every transcript replaces the draft.
    `finish()` stops, waits for the session to end and returns the draft
    after it went through `correct_text`.

    Example:
        dictation = Dictation()
        if dictation.start():
            input("Press Enter when done")
            note = dictation.finish(timeout=60)
    """

    def __init__(
        self,
        service: Optional[SpeechRecognitionService] = None,
        config: Optional[SpeechRecognitionConfig] = None,
    ):
        self._service = service if service else SpeechRecognitionService(config)
        self._config = config if config else self._service.config

        self._draft = ""
        self._started = False
        self._ended = threading.Event()
        self.errors: List[SpeechRecognitionError] = []

        self._service.on_result(self._handle_result)
        self._service.on_end(self._handle_end)
        self._service.on_error(self._handle_error)

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def service(self) -> SpeechRecognitionService:
        return self._service

    def start(self) -> bool:
        if not self._service.is_supported():
            logger.warning("Dictation unavailable: speech recognition is not supported")
            return False

        self._draft = ""
        self.errors.clear()
        self._ended.clear()
        self._started = True
        self._service.start()

        return True

    def finish(self, timeout: Optional[float] = None) -> str:
        self._service.stop()

        if self._started and not self._ended.wait(timeout):
            logger.warning("Timed out waiting for speech recognition to end")
        self._started = False

        text = self._draft.strip()
        if not text:
            return ""

        return correct_text(text, self._config)

    def _handle_result(self, text: str) -> None:
        self._draft = text

    def _handle_end(self) -> None:
        self._ended.set()

    def _handle_error(self, error: SpeechRecognitionError) -> None:
        self.errors.append(error)

        # A failed start never produces an end event
        if self._service.state in (SessionState.IDLE, SessionState.STOPPED):
            self._ended.set()
