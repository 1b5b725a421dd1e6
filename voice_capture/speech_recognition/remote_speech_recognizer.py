import logging
import threading
from functools import partial
from typing import List, Optional

from ..audio_io.audio_stream import AudioStream
from ..audio_io.capture_device import AudioCaptureDevice, MicrophoneCaptureDevice
from ..audio_io.recorder import AudioRecorder
from ..config import SpeechRecognitionConfig
from ..errors import (
    AlreadyListeningError,
    DeviceError,
    NetworkError,
    ResourceDeniedError,
    SpeechRecognitionError,
)
from .speech_recognizer import SessionState, SpeechRecognizer
from .transcription_client import TranscriptionClient

logger = logging.getLogger(__name__)


class _RecordingSession:
    """Microphone, recorder and captured slices of one start/stop cycle."""

    def __init__(self, stream: AudioStream):
        self.stream = stream
        self.recorder: Optional[AudioRecorder] = None
        self.chunks: List[bytes] = []

        self._lock = threading.Lock()
        self._released = False
        self._stop_signalled = False
        self._finished = False

    def append(self, chunk: bytes) -> None:
        with self._lock:
            self.chunks.append(chunk)
        logger.debug(f"Captured audio slice #{len(self.chunks)} ({len(chunk)} bytes)")

    def payload(self) -> bytes:
        with self._lock:
            return b"".join(self.chunks)

    def release(self) -> None:
        """Release the microphone; later calls do nothing."""
        with self._lock:
            if self._released:
                return
            self._released = True

        self.stream.release()

    def mark_stop_signalled(self) -> bool:
        """Return True for the first stop signal only."""
        with self._lock:
            first = not self._stop_signalled
            self._stop_signalled = True
        return first

    def mark_finished(self) -> bool:
        """Return True for the first caller only."""
        with self._lock:
            first = not self._finished
            self._finished = True
        return first


class RemoteSpeechRecognizer(SpeechRecognizer):
    """Records the microphone and has the recording transcribed remotely.

    Nothing is delivered while listening. After `stop()` the buffered
    slices are uploaded as one file and at most one transcript is
    delivered. The end handler fires after the upload has finished (or
    failed) and the microphone has been released, so a result always
    precedes the end of its session.
    """

    def __init__(
        self,
        config: Optional[SpeechRecognitionConfig] = None,
        capture_device: Optional[AudioCaptureDevice] = None,
        transcription_client: Optional[TranscriptionClient] = None,
    ):
        super().__init__()
        self._config = config if config else SpeechRecognitionConfig()
        self._capture_device = capture_device if capture_device else MicrophoneCaptureDevice()
        self._transcription_client = transcription_client or TranscriptionClient(
            url=self._config.resolve_url(self._config.fallback_api_url),
            timeout=self._config.upload_timeout,
        )
        self._session: Optional[_RecordingSession] = None

    def is_supported(self) -> bool:
        return self._capture_device.is_supported()

    def start(self) -> None:
        with self._state_lock:
            if self._state in (SessionState.LISTENING, SessionState.STOPPING):
                error = AlreadyListeningError(
                    f"Recording is still {self._state.value}; stop it first"
                )
            else:
                error = self._open_session()

        if error is not None:
            self._emit_error(error)

    def _open_session(self) -> Optional[SpeechRecognitionError]:
        try:
            stream = self._capture_device.request_stream(self._config.sample_rate)
        except SpeechRecognitionError as e:
            return e
        except Exception as e:
            return ResourceDeniedError(f"Could not access the microphone: {e}")

        session = _RecordingSession(stream)
        try:
            recorder = self._capture_device.create_recorder(stream)
            recorder.on_data_available = session.append
            recorder.on_stop = partial(self._handle_recorder_stop, session)
            session.recorder = recorder
            recorder.start(self._config.timeslice_ms)
        except Exception as e:
            session.release()
            return DeviceError(f"Could not start recording: {e}")

        self._session = session
        self._state = SessionState.LISTENING
        logger.info(f"Recording for remote transcription ({self._config.timeslice_ms}ms slices)")

        return None

    def stop(self) -> None:
        with self._state_lock:
            if self._state is not SessionState.LISTENING:
                logger.debug("stop() ignored: not recording")
                return
            self._state = SessionState.STOPPING
            session = self._session

        logger.info("Recording stopped; waiting for transcription")
        try:
            session.recorder.stop()
        except Exception as e:
            self._emit_error(DeviceError(f"Could not stop recording: {e}"))
            self._finish_session(session)

    def _handle_recorder_stop(self, session: _RecordingSession) -> None:
        if not session.mark_stop_signalled():
            logger.debug("Duplicate stop signal ignored")
            return

        try:
            if session.chunks:
                self._transcribe(session)
            else:
                logger.debug("No audio captured; skipping upload")
        finally:
            self._finish_session(session)

    def _transcribe(self, session: _RecordingSession) -> None:
        recorder = session.recorder
        try:
            text = self._transcription_client.transcribe(
                session.payload(),
                filename=f"recording.{recorder.file_extension}",
                mime_type=recorder.mime_type,
            )
        except SpeechRecognitionError as e:
            self._emit_error(e)
            return
        except Exception as e:
            self._emit_error(NetworkError(f"Transcription failed: {e}"))
            return

        if text:
            self._emit_result(text)
        else:
            logger.info("Transcription response carried no text")

    def _finish_session(self, session: _RecordingSession) -> None:
        if not session.mark_finished():
            return

        session.release()
        with self._state_lock:
            if self._session is session:
                self._session = None
                self._state = SessionState.STOPPED

        logger.info("Remote transcription session ended")
        self._emit_end()
