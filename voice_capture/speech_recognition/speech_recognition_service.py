import logging
from dataclasses import replace
from enum import Enum
from typing import Optional

from ..audio_io.capture_device import AudioCaptureDevice
from ..config import SpeechRecognitionConfig
from ..errors import UnsupportedCapabilityError
from .local_speech_recognizer import LocalSpeechRecognizer
from .recognition_device import RecognitionDevice
from .remote_speech_recognizer import RemoteSpeechRecognizer
from .speech_recognizer import SessionState, SpeechRecognizer
from .transcription_client import TranscriptionClient

logger = logging.getLogger(__name__)


class Backend(Enum):
    LOCAL = "local"
    REMOTE = "remote"


class SpeechRecognitionService(SpeechRecognizer):
    """Speech recognition with on-device first and remote transcription as fallback.

    At construction the on-device recognizer is preferred; if it is missing
    or unsupported and `use_fallback` is set, the remote recognizer is used
    when it can capture audio. Every call is delegated to the active
    backend.

    Handlers are registered once on the service and keep working after
    `use_local_implementation()` / `use_remote_implementation()` switch the
    backend. The two backends deliver results differently: on-device
    recognition sends the latest transcript repeatedly while listening,
    remote transcription sends one transcript after `stop()`.
    """

    def __init__(
        self,
        config: Optional[SpeechRecognitionConfig] = None,
        recognition_device: Optional[RecognitionDevice] = None,
        capture_device: Optional[AudioCaptureDevice] = None,
        transcription_client: Optional[TranscriptionClient] = None,
    ):
        super().__init__()
        self._config = config if config else SpeechRecognitionConfig()

        self._local: Optional[LocalSpeechRecognizer] = None
        try:
            self._local = LocalSpeechRecognizer(self._config, device=recognition_device)
        except UnsupportedCapabilityError as e:
            logger.warning(f"On-device speech recognition not available: {e}")

        self._remote: Optional[RemoteSpeechRecognizer] = None
        if self._config.use_fallback:
            self._remote = RemoteSpeechRecognizer(
                self._config,
                capture_device=capture_device,
                transcription_client=transcription_client,
            )

        for recognizer in (self._local, self._remote):
            if recognizer is not None:
                self._forward_events(recognizer)

        if self._local is not None and self._local.is_supported():
            self._active: Optional[SpeechRecognizer] = self._local
        elif self._remote is not None and self._remote.is_supported():
            self._active = self._remote
        else:
            self._active = None

        if self._active is None:
            logger.warning("No speech recognition backend is supported")
        else:
            logger.info(f"Active speech recognition backend: {self.active_backend.value}")

    @property
    def config(self) -> SpeechRecognitionConfig:
        return self._config

    @property
    def active_backend(self) -> Optional[Backend]:
        if self._active is None:
            return None
        if self._active is self._local:
            return Backend.LOCAL
        return Backend.REMOTE

    @property
    def state(self) -> SessionState:
        if self._active is None:
            return SessionState.IDLE
        return self._active.state

    def _forward_events(self, recognizer: SpeechRecognizer) -> None:
        # Backends already logged their errors
        recognizer.on_result(lambda text: self._call_handler(self._result_handler, text))
        recognizer.on_end(lambda: self._call_handler(self._end_handler))
        recognizer.on_error(lambda error: self._call_handler(self._error_handler, error))

    def start(self) -> None:
        active = self._active
        if active is None:
            self._emit_error(
                UnsupportedCapabilityError("No speech recognition backend is available")
            )
            return

        active.start()

    def stop(self) -> None:
        active = self._active
        if active is not None:
            active.stop()

    def is_supported(self) -> bool:
        return self._active is not None

    def is_listening(self) -> bool:
        active = self._active
        return active.is_listening() if active is not None else False

    def use_local_implementation(self) -> bool:
        """Switch to on-device recognition. Returns whether the switch happened."""
        return self._switch_to(self._local, Backend.LOCAL)

    def use_remote_implementation(self) -> bool:
        """Switch to remote transcription. Returns whether the switch happened."""
        return self._switch_to(self._remote, Backend.REMOTE)

    def _switch_to(self, recognizer: Optional[SpeechRecognizer], backend: Backend) -> bool:
        if recognizer is None or not recognizer.is_supported():
            logger.warning(f"Cannot switch to {backend.value} speech recognition: not supported")
            return False

        with self._state_lock:
            active = self._active
            if active is recognizer:
                return True

            if active is not None and active.state in (SessionState.LISTENING, SessionState.STOPPING):
                logger.warning(
                    f"Cannot switch to {backend.value} speech recognition while a session is running"
                )
                return False

            self._active = recognizer

        logger.info(f"Switched speech recognition backend to {backend.value}")
        return True


def create_speech_recognition(
    config: Optional[SpeechRecognitionConfig] = None, **overrides
) -> SpeechRecognitionService:
    """Build a `SpeechRecognitionService`, overriding individual config fields.

    Example:
        service = create_speech_recognition(language="en-US", use_fallback=False)
    """
    config = config if config else SpeechRecognitionConfig()
    if overrides:
        config = replace(config, **overrides)

    return SpeechRecognitionService(config)

