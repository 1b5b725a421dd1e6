import logging
from typing import Optional

import pyaudio

from .audio_stream import AudioChunkCallback, AudioStream
from .pyaudio_load_message_suppressor import no_alsa_and_jack_errors

logger = logging.getLogger(__name__)

# Audio recording parameters
RATE = 16000
CHUNK = int(RATE / 20)  # 50ms


class MicrophoneStream(AudioStream):
    """Opens the default input device and pushes audio chunks to a callback.

    The PortAudio handle is acquired in the constructor and held until
    `release()` is called (or the context manager exits).
    """

    def __init__(
        self,
        rate: int = RATE,
        chunk: int = CHUNK,
        on_audio_chunk: Optional[AudioChunkCallback] = None,
    ) -> None:
        self._rate = rate
        self._chunk = chunk
        self._channels = 1
        self._sample_format = pyaudio.paInt16
        self._sample_size = 2
        self._on_audio_chunk = on_audio_chunk

        self._released = False

        with no_alsa_and_jack_errors():
            self._audio_interface = pyaudio.PyAudio()

        try:
            self._audio_stream = self._audio_interface.open(
                format=self._sample_format,
                channels=self._channels,
                rate=self._rate,
                input=True,
                frames_per_buffer=self._chunk,
                # PortAudio calls back from its own thread, so slow consumers
                # never overflow the input device's buffer.
                stream_callback=self._fill_buffer,
                start=False,
            )
        except Exception:
            self._audio_interface.terminate()
            raise

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def rate(self) -> int:
        return self._rate

    @property
    def chunk_size(self) -> int:
        return self._chunk

    @property
    def sample_format(self):
        return self._sample_format

    @property
    def sample_size(self) -> int:
        try:
            return self._audio_interface.get_sample_size(self._sample_format)
        except Exception:
            return self._sample_size

    @property
    def released(self) -> bool:
        return self._released

    def __enter__(self):
        self.resume()

        return self

    def __exit__(self, type, value, traceback):
        self.release()

    def set_audio_callback(self, callback: Optional[AudioChunkCallback]) -> None:
        self._on_audio_chunk = callback

    def _fill_buffer(self, in_data, frame_count, time_info, status_flags):
        """Hand every captured buffer to the registered consumer."""
        if self._on_audio_chunk is None:
            return None, pyaudio.paContinue

        try:
            keep_going = self._on_audio_chunk(in_data)
        except Exception:
            logger.exception("Audio chunk callback raised an exception")
            return None, pyaudio.paContinue

        if keep_going is False:
            return None, pyaudio.paComplete

        return None, pyaudio.paContinue

    def pause(self) -> None:
        if self._released:
            return

        if not self._audio_stream.is_stopped():
            self._audio_stream.stop_stream()

    def resume(self) -> None:
        if self._released:
            raise RuntimeError("Microphone stream has already been released")

        self._audio_stream.start_stream()

    def release(self) -> None:
        if self._released:
            return

        self._released = True
        try:
            if not self._audio_stream.is_stopped():
                self._audio_stream.stop_stream()
            self._audio_stream.close()
        finally:
            self._audio_interface.terminate()
        logger.debug("Microphone released")
