import json
import logging
import os
import threading
from concurrent.futures import Future
from typing import List, Optional

import vosk

from ..audio_io.microphone import RATE, MicrophoneStream
from ..errors import DeviceError, ResourceDeniedError
from .recognition_device import (
    RecognitionAlternative,
    RecognitionDevice,
    RecognitionResult,
    RecognitionResultEvent,
)

logger = logging.getLogger(__name__)

# Model names in the Vosk catalogue that keep their region subtag
REGIONAL_MODEL_LANGUAGES = ("en-us", "en-in", "pt-br")


def vosk_language(language: str) -> str:
    """Map a BCP-47 tag onto the language keys of the Vosk model catalogue."""
    tag = language.lower().replace("_", "-")
    if tag in REGIONAL_MODEL_LANGUAGES:
        return tag

    return tag.split("-")[0]


class VoskRecognitionDevice(RecognitionDevice):
    """Streams the microphone into a Vosk recognizer.

    Audio is decoded inside the PortAudio callback. Partial hypotheses are
    reported only when they change; each final utterance is appended to the
    session's result list.
    """

    def __init__(self, model_path: Optional[str] = None, sample_rate: int = RATE):
        super().__init__()
        self._model_path = model_path
        self._sample_rate = sample_rate

        self._lock = threading.Lock()
        self._model_future: Optional[Future] = None

        self._active = False
        self._recognizer = None
        self._microphone: Optional[MicrophoneStream] = None
        self._end_thread: Optional[threading.Thread] = None
        self._results: List[RecognitionResult] = []
        self._last_partial = ""

    @staticmethod
    def name() -> str:
        return "vosk"

    def is_supported(self) -> bool:
        if self._model_path is None:
            return True

        return os.path.isdir(self._model_path)

    def _load_model(self):
        """Load the model once; concurrent callers wait for the same load."""
        with self._lock:
            future = self._model_future
            loading = future is None
            if loading:
                future = self._model_future = Future()

        if loading:
            vosk.SetLogLevel(-1)
            try:
                if self._model_path is not None:
                    model = vosk.Model(model_path=self._model_path)
                else:
                    model = vosk.Model(lang=vosk_language(self.language))
            # Vosk calls sys.exit() when no model matches the language
            except (Exception, SystemExit) as e:
                with self._lock:
                    self._model_future = None
                future.set_exception(
                    DeviceError(f"Could not load the Vosk model: {e!r}")
                )
            else:
                future.set_result(model)

        return future.result()

    def start(self) -> None:
        with self._lock:
            if self._active:
                raise RuntimeError("Recognition has already started")
            end_thread = self._end_thread

        model = self._load_model()
        recognizer = vosk.KaldiRecognizer(model, self._sample_rate)
        if self.max_alternatives > 1:
            recognizer.SetMaxAlternatives(self.max_alternatives)

        # A session that ended on its own may still be releasing its microphone
        if end_thread is not None and end_thread is not threading.current_thread():
            end_thread.join()

        try:
            microphone = MicrophoneStream(
                rate=self._sample_rate,
                chunk=int(self._sample_rate / 20),
                on_audio_chunk=self._on_audio_chunk,
            )
        except (IOError, OSError) as e:
            raise ResourceDeniedError(f"Microphone unavailable: {e}") from e

        with self._lock:
            self._recognizer = recognizer
            self._microphone = microphone
            self._results = []
            self._last_partial = ""
            self._active = True

        logger.info(f"Vosk recognition started ({self.language})")
        microphone.resume()

    def stop(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
            recognizer = self._recognizer
            microphone = self._microphone

        try:
            microphone.pause()
            result = self._parse_final(recognizer.FinalResult())
            if result is not None:
                self._publish(result)
        except Exception as e:
            self._dispatch_error(DeviceError(f"Vosk failed to flush: {e}"))
        finally:
            self._release_microphone()
            self._recognizer = None
            logger.info("Vosk recognition stopped")
            self._dispatch_end()

    def _release_microphone(self) -> None:
        with self._lock:
            microphone, self._microphone = self._microphone, None
        if microphone is not None:
            microphone.release()

    def _on_audio_chunk(self, data: bytes) -> bool:
        recognizer = self._recognizer
        if not self._active or recognizer is None:
            return False

        try:
            if recognizer.AcceptWaveform(data):
                result = self._parse_final(recognizer.Result())
                if result is not None:
                    self._publish(result)
                    if not self.continuous:
                        self._end_from_audio_thread()
                        return False
            elif self.interim_results:
                self._publish_partial(recognizer.PartialResult())
        except Exception as e:
            self._dispatch_error(DeviceError(f"Vosk failed to decode audio: {e}"))

        return True

    def _end_from_audio_thread(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
            self._recognizer = None
            microphone, self._microphone = self._microphone, None

            # PortAudio cannot close a stream from inside its own callback
            self._end_thread = threading.Thread(
                target=self._finish_session,
                args=(microphone,),
                name="vosk-session-end",
            )
            self._end_thread.start()

    def _finish_session(self, microphone: Optional[MicrophoneStream]) -> None:
        try:
            if microphone is not None:
                microphone.release()
        except Exception as e:
            self._dispatch_error(DeviceError(f"Could not release the microphone: {e}"))
        finally:
            logger.info("Vosk recognition ended after the first utterance")
            self._dispatch_end()

    def _publish(self, result: RecognitionResult) -> None:
        self._results.append(result)
        self._last_partial = ""
        self._dispatch_result(
            RecognitionResultEvent(
                results=tuple(self._results),
                result_index=len(self._results) - 1,
            )
        )

    def _publish_partial(self, raw: str) -> None:
        text = json.loads(raw).get("partial", "").strip()
        if not text or text == self._last_partial:
            return

        self._last_partial = text
        partial = RecognitionResult(
            alternatives=(RecognitionAlternative(text),),
            is_final=False,
        )
        self._dispatch_result(
            RecognitionResultEvent(
                results=tuple(self._results) + (partial,),
                result_index=len(self._results),
            )
        )

    @staticmethod
    def _parse_final(raw: str) -> Optional[RecognitionResult]:
        payload = json.loads(raw)

        if "alternatives" in payload:
            alternatives = tuple(
                RecognitionAlternative(
                    alternative.get("text", "").strip(),
                    alternative.get("confidence"),
                )
                for alternative in payload["alternatives"]
                if alternative.get("text", "").strip()
            )
        else:
            text = payload.get("text", "").strip()
            alternatives = (RecognitionAlternative(text),) if text else ()

        if not alternatives:
            return None

        return RecognitionResult(alternatives=alternatives, is_final=True)
