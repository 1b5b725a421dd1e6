import logging
from abc import ABC, abstractmethod

import pyaudio

from ..errors import ResourceDeniedError
from .audio_stream import AudioStream
from .microphone import RATE, MicrophoneStream
from .pyaudio_load_message_suppressor import no_alsa_and_jack_errors
from .recorder import AudioRecorder, MicrophoneRecorder

logger = logging.getLogger(__name__)


class AudioCaptureDevice(ABC):
    """Platform audio capture: permission request plus recorder construction."""

    @abstractmethod
    def is_supported(self) -> bool:
        """Report whether audio can be captured at all. Must not hold the device."""

    @abstractmethod
    def request_stream(self, sample_rate: int = RATE) -> AudioStream:
        """Acquire the input device exclusively.

        Raises:
            ResourceDeniedError: the device is missing, busy or refused.
        """

    @abstractmethod
    def create_recorder(self, stream: AudioStream) -> AudioRecorder: ...


class MicrophoneCaptureDevice(AudioCaptureDevice):
    """Captures from the default pyaudio input device."""

    def is_supported(self) -> bool:
        with no_alsa_and_jack_errors():
            audio_interface = pyaudio.PyAudio()

        try:
            audio_interface.get_default_input_device_info()
            return True
        except (IOError, OSError):
            logger.debug("No default audio input device")
            return False
        finally:
            audio_interface.terminate()

    def request_stream(self, sample_rate: int = RATE) -> MicrophoneStream:
        try:
            return MicrophoneStream(rate=sample_rate, chunk=int(sample_rate / 20))
        except (IOError, OSError) as e:
            raise ResourceDeniedError(f"Microphone unavailable: {e}") from e

    def create_recorder(self, stream: AudioStream) -> MicrophoneRecorder:
        return MicrophoneRecorder(stream)
