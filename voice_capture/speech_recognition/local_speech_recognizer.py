import logging
from typing import Optional

from ..config import SpeechRecognitionConfig
from ..errors import (
    AlreadyListeningError,
    DeviceError,
    SpeechRecognitionError,
    UnsupportedCapabilityError,
)
from .recognition_device import RecognitionDevice, RecognitionResultEvent
from .recognition_engine_factory import RecognitionEngineFactory
from .speech_recognizer import SessionState, SpeechRecognizer

logger = logging.getLogger(__name__)


class LocalSpeechRecognizer(SpeechRecognizer):
    """Streams microphone audio to an on-device recognition engine.

    Transcripts arrive while the user is speaking. Each device event is
    forwarded as the transcript of the most recent result only, so a
    partial transcript is replaced by the next one instead of being
    appended to it. Result and end events are independent of each other,
    and a device error does not end the session.

    Raises:
        UnsupportedCapabilityError: no recognition engine is installed.
    """

    def __init__(
        self,
        config: Optional[SpeechRecognitionConfig] = None,
        device: Optional[RecognitionDevice] = None,
    ):
        super().__init__()
        self._config = config if config else SpeechRecognitionConfig()

        if device is None:
            engine_name = self._config.recognition_engine
            if not RecognitionEngineFactory.is_available(engine_name):
                raise UnsupportedCapabilityError(
                    f"On-device speech recognition engine '{engine_name}' is not available"
                )
            device = RecognitionEngineFactory.create(
                engine_name,
                model_path=self._config.model_path,
                sample_rate=self._config.sample_rate,
            )

        self._device = device
        self._device.language = self._config.language
        self._device.continuous = self._config.continuous
        self._device.interim_results = self._config.interim_results
        self._device.max_alternatives = self._config.max_alternatives

        self._device.on_result = self._handle_device_result
        self._device.on_end = self._handle_device_end
        self._device.on_error = self._handle_device_error

    def is_supported(self) -> bool:
        return self._device.is_supported()

    def start(self) -> None:
        with self._state_lock:
            previous_state = self._state
            if previous_state is not SessionState.LISTENING:
                self._state = SessionState.LISTENING

        if previous_state is SessionState.LISTENING:
            self._emit_error(AlreadyListeningError("Speech recognition is already listening"))
            return

        logger.info("Starting on-device speech recognition")
        try:
            self._device.start()
        except Exception as e:
            with self._state_lock:
                self._state = previous_state
            if not isinstance(e, SpeechRecognitionError):
                e = DeviceError(f"Failed to start speech recognition: {e}")
            self._emit_error(e)

    def stop(self) -> None:
        if self._state is not SessionState.LISTENING:
            logger.debug("stop() ignored: on-device recognition is not listening")
            return

        logger.info("Stopping on-device speech recognition")
        try:
            self._device.stop()
        except Exception as e:
            with self._state_lock:
                self._state = SessionState.STOPPED
            self._emit_error(DeviceError(f"Failed to stop speech recognition: {e}"))

    def _handle_device_result(self, event: RecognitionResultEvent) -> None:
        if not event.results:
            return

        latest = event.results[-1]
        if len(latest) == 0:
            return

        self._emit_result(latest[0].transcript)

    def _handle_device_end(self) -> None:
        with self._state_lock:
            self._state = SessionState.STOPPED

        logger.info("On-device speech recognition ended")
        self._emit_end()

    def _handle_device_error(self, error: Exception) -> None:
        if not isinstance(error, SpeechRecognitionError):
            error = DeviceError(str(error))

        self._emit_error(error)
