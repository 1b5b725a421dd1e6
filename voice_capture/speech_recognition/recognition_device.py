import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecognitionAlternative:
    transcript: str
    confidence: Optional[float] = None


@dataclass(frozen=True)
class RecognitionResult:
    """One recognized utterance with its alternatives, best first."""

    alternatives: Tuple[RecognitionAlternative, ...]
    is_final: bool = True

    def __getitem__(self, index: int) -> RecognitionAlternative:
        return self.alternatives[index]

    def __len__(self) -> int:
        return len(self.alternatives)


@dataclass(frozen=True)
class RecognitionResultEvent:
    """All results of the running session; the last one may be a partial."""

    results: Tuple[RecognitionResult, ...]
    result_index: int = 0


class RecognitionDevice(ABC):
    """Continuous on-device speech recognition facility.

    Settings are plain attributes and are read when `start()` is called.
    Signals are delivered through the `on_result`, `on_end` and `on_error`
    attributes, possibly from an audio thread. `on_error` never implies
    `on_end`; a session ends only through `on_end`.
    """

    def __init__(self):
        self.language: str = "en-US"
        self.continuous: bool = False
        self.interim_results: bool = False
        self.max_alternatives: int = 1

        self.on_result: Optional[Callable[[RecognitionResultEvent], None]] = None
        self.on_end: Optional[Callable[[], None]] = None
        self.on_error: Optional[Callable[[Exception], None]] = None

    @staticmethod
    @abstractmethod
    def name() -> str: ...

    @abstractmethod
    def is_supported(self) -> bool: ...

    @abstractmethod
    def start(self) -> None:
        """Begin a session.

        Raises:
            RuntimeError: a session is already running.
        """

    @abstractmethod
    def stop(self) -> None:
        """Finish the session, flushing the pending utterance, then signal end."""

    def _dispatch_result(self, event: RecognitionResultEvent) -> None:
        self._dispatch(self.on_result, event)

    def _dispatch_end(self) -> None:
        self._dispatch(self.on_end)

    def _dispatch_error(self, error: Exception) -> None:
        self._dispatch(self.on_error, error)

    @staticmethod
    def _dispatch(callback, *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("Recognition device callback raised exception")
