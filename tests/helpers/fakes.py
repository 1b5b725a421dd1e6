"""Fake platform devices used by the speech recognition tests.

They implement the same interfaces as the pyaudio and Vosk backed devices
but never touch hardware, and they deliver every event synchronously
unless told otherwise.
"""

from typing import List, Optional

from voice_capture.audio_io.audio_stream import AudioStream
from voice_capture.audio_io.capture_device import AudioCaptureDevice
from voice_capture.audio_io.recorder import AudioRecorder, RecorderState
from voice_capture.speech_recognition.recognition_device import (
    RecognitionAlternative,
    RecognitionDevice,
    RecognitionResult,
    RecognitionResultEvent,
)


class FakeRecognitionDevice(RecognitionDevice):
    def __init__(self, supported=True, start_error=None, stop_error=None, end_on_stop=True, **_):
        super().__init__()
        self.supported = supported
        self.start_error = start_error
        self.stop_error = stop_error
        self.end_on_stop = end_on_stop
        self.start_calls = 0
        self.stop_calls = 0
        self.running = False

    @staticmethod
    def name() -> str:
        return "fake"

    def is_supported(self) -> bool:
        return self.supported

    def start(self) -> None:
        self.start_calls += 1
        if self.start_error is not None:
            raise self.start_error
        self.running = True

    def stop(self) -> None:
        self.stop_calls += 1
        if self.stop_error is not None:
            raise self.stop_error
        if self.running and self.end_on_stop:
            self.emit_end()

    # Helpers driving the device from a test ---------------------------------
    def emit_results(self, *transcripts: str, partial_last: bool = False) -> None:
        results = tuple(
            RecognitionResult(
                alternatives=(RecognitionAlternative(text),),
                is_final=not (partial_last and i == len(transcripts) - 1),
            )
            for i, text in enumerate(transcripts)
        )
        self._dispatch_result(RecognitionResultEvent(results=results, result_index=len(results) - 1))

    def emit_end(self) -> None:
        self.running = False
        self._dispatch_end()

    def emit_error(self, error: Exception) -> None:
        self._dispatch_error(error)


class FakeStream(AudioStream):
    def __init__(self, log: Optional[List[str]] = None, rate=16000, channels=1, sample_size=2):
        self._rate = rate
        self._channels = channels
        self._sample_size = sample_size
        self.callback = None
        self.release_count = 0
        self.resumed = False
        self._log = log if log is not None else []

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def rate(self) -> int:
        return self._rate

    @property
    def sample_size(self) -> int:
        return self._sample_size

    def set_audio_callback(self, callback) -> None:
        self.callback = callback

    def resume(self) -> None:
        self.resumed = True

    def pause(self) -> None:
        self.resumed = False

    def release(self) -> None:
        self.release_count += 1
        self._log.append("release")

    def push(self, data: bytes):
        return self.callback(data)


class FakeRecorder(AudioRecorder):
    """Recorder whose slices are pushed by the test.

    With `auto_stop` the stop signal fires inside `stop()`; otherwise the
    test calls `finish()` to deliver it later.
    """

    mime_type = "audio/webm"
    file_extension = "webm"

    def __init__(self, stream, auto_stop=True, start_error=None):
        super().__init__()
        self.stream = stream
        self.auto_stop = auto_stop
        self.start_error = start_error
        self.timeslice_ms = None
        self._state = RecorderState.INACTIVE

    @property
    def state(self) -> RecorderState:
        return self._state

    def start(self, timeslice_ms: int = 1000) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.timeslice_ms = timeslice_ms
        self._state = RecorderState.RECORDING

    def stop(self) -> None:
        self._state = RecorderState.INACTIVE
        if self.auto_stop:
            self.finish()

    def capture(self, data: bytes) -> None:
        self._emit_data(data)

    def finish(self) -> None:
        self._emit_stop()


class FakeCaptureDevice(AudioCaptureDevice):
    def __init__(self, supported=True, deny_error=None, auto_stop=True, recorder_start_error=None):
        self.supported = supported
        self.deny_error = deny_error
        self.auto_stop = auto_stop
        self.recorder_start_error = recorder_start_error
        self.log: List[str] = []
        self.streams: List[FakeStream] = []
        self.recorders: List[FakeRecorder] = []
        self.requested_rates: List[int] = []

    def is_supported(self) -> bool:
        return self.supported

    def request_stream(self, sample_rate: int = 16000) -> FakeStream:
        self.requested_rates.append(sample_rate)
        if self.deny_error is not None:
            raise self.deny_error
        stream = FakeStream(log=self.log, rate=sample_rate)
        self.streams.append(stream)
        return stream

    def create_recorder(self, stream) -> FakeRecorder:
        recorder = FakeRecorder(stream, auto_stop=self.auto_stop, start_error=self.recorder_start_error)
        self.recorders.append(recorder)
        return recorder

    @property
    def recorder(self) -> FakeRecorder:
        return self.recorders[-1]
