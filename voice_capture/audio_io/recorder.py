"""Timed-slice audio recording on top of an `AudioStream`.

An `AudioRecorder` turns a live input stream into an ordered series of
binary slices, delivered through `on_data_available`, followed by exactly
one `on_stop` signal once recording has been stopped and the last slice
has been flushed.
"""

import logging
import struct
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

from .audio_stream import AudioStream

logger = logging.getLogger(__name__)

# RIFF/data size used when the final length is not known up front.
UNKNOWN_WAV_SIZE = 0xFFFFFFFF


def streaming_wav_header(rate: int, channels: int, sample_size: int) -> bytes:
    """Build a 44-byte PCM WAV header for a stream of unknown length."""
    block_align = channels * sample_size
    return struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        UNKNOWN_WAV_SIZE,
        b"WAVE",
        b"fmt ",
        16,  # fmt chunk size
        1,  # PCM
        channels,
        rate,
        rate * block_align,
        block_align,
        sample_size * 8,
        b"data",
        UNKNOWN_WAV_SIZE,
    )


class RecorderState(Enum):
    INACTIVE = "inactive"
    RECORDING = "recording"


class AudioRecorder(ABC):
    mime_type = "application/octet-stream"
    file_extension = "bin"

    def __init__(self):
        self.on_data_available: Optional[Callable[[bytes], None]] = None
        self.on_stop: Optional[Callable[[], None]] = None

    @property
    @abstractmethod
    def state(self) -> RecorderState: ...

    @abstractmethod
    def start(self, timeslice_ms: int = 1000) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...

    def _emit_data(self, data: bytes) -> None:
        if self.on_data_available is None:
            return
        try:
            self.on_data_available(data)
        except Exception:
            logger.exception("on_data_available callback raised exception")

    def _emit_stop(self) -> None:
        if self.on_stop is None:
            return
        try:
            self.on_stop()
        except Exception:
            logger.exception("on_stop callback raised exception")


class MicrophoneRecorder(AudioRecorder):
    """Records 16-bit PCM from an `AudioStream` as a streamed WAV file.

    The first slice starts with a WAV header, so the concatenation of all
    slices of one recording is a complete `audio/wav` file.

    `stop()` returns immediately; the final slice and the stop signal are
    delivered from a short-lived dispatch thread, the same way a platform
    recorder fires its events after the call that requested them.
    """

    mime_type = "audio/wav"
    file_extension = "wav"

    def __init__(self, stream: AudioStream):
        super().__init__()
        self._stream = stream
        self._state = RecorderState.INACTIVE
        self._pending = bytearray()
        self._slice_bytes = 0
        self._header_sent = False
        self._lock = threading.Lock()
        self._stop_thread: Optional[threading.Thread] = None

    @property
    def state(self) -> RecorderState:
        return self._state

    def _bytes_per_slice(self, timeslice_ms: int) -> int:
        frames = max(1, int(self._stream.rate * timeslice_ms / 1000))
        return frames * self._stream.channels * self._stream.sample_size

    def start(self, timeslice_ms: int = 1000) -> None:
        with self._lock:
            if self._state is RecorderState.RECORDING:
                raise RuntimeError("Recorder is already recording")

            self._slice_bytes = self._bytes_per_slice(timeslice_ms)
            self._pending = bytearray()
            self._header_sent = False
            self._state = RecorderState.RECORDING

        logger.debug(f"Recording slices of {self._slice_bytes} bytes")
        self._stream.set_audio_callback(self._on_audio_chunk)
        self._stream.resume()

    def _take(self, size: int) -> bytes:
        data = bytes(self._pending[:size])
        del self._pending[:size]

        if not self._header_sent:
            self._header_sent = True
            header = streaming_wav_header(
                self._stream.rate, self._stream.channels, self._stream.sample_size
            )
            data = header + data

        return data

    def _on_audio_chunk(self, data: bytes):
        with self._lock:
            if self._state is not RecorderState.RECORDING:
                return False

            self._pending.extend(data)
            slices = []
            while len(self._pending) >= self._slice_bytes:
                slices.append(self._take(self._slice_bytes))

        for audio_slice in slices:
            self._emit_data(audio_slice)

        return True

    def stop(self) -> None:
        with self._lock:
            if self._state is not RecorderState.RECORDING:
                return
            self._state = RecorderState.INACTIVE

        # Returns once PortAudio has no callback in flight.
        self._stream.pause()
        self._stream.set_audio_callback(None)

        # Not a daemon: interpreter exit waits for the tail and the stop signal
        self._stop_thread = threading.Thread(target=self._finish, name="recorder-stop")
        self._stop_thread.start()

    def _finish(self) -> None:
        with self._lock:
            tail = self._take(len(self._pending)) if self._pending else None

        if tail:
            self._emit_data(tail)

        self._emit_stop()
