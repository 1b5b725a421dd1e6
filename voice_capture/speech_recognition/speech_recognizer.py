import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

from ..errors import SpeechRecognitionError

logger = logging.getLogger(__name__)

ResultHandler = Callable[[str], None]
EndHandler = Callable[[], None]
ErrorHandler = Callable[[SpeechRecognitionError], None]


class SessionState(Enum):
    IDLE = "idle"
    LISTENING = "listening"
    # Stop requested, shutdown work (e.g. an upload) still pending
    STOPPING = "stopping"
    STOPPED = "stopped"


class SpeechRecognizer(ABC):
    """Capture contract shared by every speech recognition backend.

    Failures after construction never raise out of `start()` or `stop()`;
    they are passed to the error handler as `SpeechRecognitionError`
    instances. Each handler kind has a single slot, so registering a new
    handler replaces the previous one. Without a registered handler the
    event is dropped.
    """

    def __init__(self):
        self._result_handler: Optional[ResultHandler] = None
        self._end_handler: Optional[EndHandler] = None
        self._error_handler: Optional[ErrorHandler] = None

        self._state = SessionState.IDLE
        self._state_lock = threading.RLock()

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...

    @abstractmethod
    def is_supported(self) -> bool: ...

    def on_result(self, handler: Optional[ResultHandler]) -> None:
        self._result_handler = handler

    def on_end(self, handler: Optional[EndHandler]) -> None:
        self._end_handler = handler

    def on_error(self, handler: Optional[ErrorHandler]) -> None:
        self._error_handler = handler

    @property
    def state(self) -> SessionState:
        return self._state

    def is_listening(self) -> bool:
        return self.state is SessionState.LISTENING

    def _emit_result(self, text: str) -> None:
        self._call_handler(self._result_handler, text)

    def _emit_end(self) -> None:
        self._call_handler(self._end_handler)

    def _emit_error(self, error: SpeechRecognitionError) -> None:
        logger.error(f"{self.__class__.__name__}: {error}")
        self._call_handler(self._error_handler, error)

    @staticmethod
    def _call_handler(handler, *args) -> None:
        """Invoke a caller-supplied handler, logging anything it raises."""
        if handler is None:
            return

        try:
            handler(*args)
        except Exception as e:
            logger.error(f"Error in speech recognition handler: {str(e)}")
