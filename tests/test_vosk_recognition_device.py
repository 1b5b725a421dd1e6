import json
import threading
import unittest
from unittest.mock import MagicMock, patch

from voice_capture.config import SpeechRecognitionConfig
from voice_capture.errors import DeviceError, ResourceDeniedError
from voice_capture.speech_recognition.local_speech_recognizer import LocalSpeechRecognizer
from voice_capture.speech_recognition.speech_recognizer import SessionState
from voice_capture.speech_recognition.vosk_recognition_device import (
    VoskRecognitionDevice,
    vosk_language,
)


class TestVoskLanguage(unittest.TestCase):
    def test_mapping(self):
        self.assertEqual(vosk_language("de-DE"), "de")
        self.assertEqual(vosk_language("en-US"), "en-us")
        self.assertEqual(vosk_language("pt_BR"), "pt-br")
        self.assertEqual(vosk_language("fr"), "fr")


@patch("voice_capture.speech_recognition.vosk_recognition_device.MicrophoneStream")
@patch("voice_capture.speech_recognition.vosk_recognition_device.vosk")
class TestVoskRecognitionDevice(unittest.TestCase):

    def setUp(self):
        self.device = VoskRecognitionDevice()
        self.device.language = "de-DE"
        self.device.continuous = True
        self.device.interim_results = True
        self.device.on_result = MagicMock()
        self.device.on_end = MagicMock()
        self.device.on_error = MagicMock()

    def _recognizer(self, mock_vosk):
        return mock_vosk.KaldiRecognizer.return_value

    def test_name_and_support(self, mock_vosk, mock_microphone):
        self.assertEqual(VoskRecognitionDevice.name(), "vosk")
        self.assertTrue(self.device.is_supported())
        self.assertFalse(VoskRecognitionDevice(model_path="/no/such/model").is_supported())

    def test_start_loads_model_by_language(self, mock_vosk, mock_microphone):
        self.device.start()

        mock_vosk.Model.assert_called_once_with(lang="de")
        mock_vosk.KaldiRecognizer.assert_called_once_with(mock_vosk.Model.return_value, 16000)
        self._recognizer(mock_vosk).SetMaxAlternatives.assert_not_called()
        mock_microphone.assert_called_once_with(
            rate=16000, chunk=800, on_audio_chunk=self.device._on_audio_chunk
        )
        mock_microphone.return_value.resume.assert_called_once()

    def test_model_is_loaded_once(self, mock_vosk, mock_microphone):
        self._recognizer(mock_vosk).FinalResult.return_value = json.dumps({"text": ""})
        self.device.start()
        self.device.stop()
        self.device.start()

        mock_vosk.Model.assert_called_once()

    def test_start_with_model_path_and_alternatives(self, mock_vosk, mock_microphone):
        device = VoskRecognitionDevice(model_path="/models/vosk-de")
        device.max_alternatives = 3

        device.start()

        mock_vosk.Model.assert_called_once_with(model_path="/models/vosk-de")
        self._recognizer(mock_vosk).SetMaxAlternatives.assert_called_once_with(3)

    def test_start_twice_raises(self, mock_vosk, mock_microphone):
        self.device.start()

        with self.assertRaises(RuntimeError):
            self.device.start()

    def test_model_load_failure(self, mock_vosk, mock_microphone):
        mock_vosk.Model.side_effect = SystemExit(1)

        with self.assertRaises(DeviceError):
            self.device.start()

        mock_microphone.assert_not_called()

        # A later start retries the load
        mock_vosk.Model.side_effect = None
        self.device.start()
        self.assertEqual(mock_vosk.Model.call_count, 2)

    def test_microphone_denied(self, mock_vosk, mock_microphone):
        mock_microphone.side_effect = OSError("Device unavailable")

        with self.assertRaises(ResourceDeniedError):
            self.device.start()

    def test_partial_results_are_deduplicated(self, mock_vosk, mock_microphone):
        self.device.start()
        recognizer = self._recognizer(mock_vosk)
        recognizer.AcceptWaveform.return_value = False
        recognizer.PartialResult.side_effect = [
            json.dumps({"partial": "hallo"}),
            json.dumps({"partial": "hallo"}),
            json.dumps({"partial": ""}),
            json.dumps({"partial": "hallo welt"}),
        ]

        for _ in range(4):
            self.assertTrue(self.device._on_audio_chunk(b"\x00\x00"))

        events = [c.args[0] for c in self.device.on_result.call_args_list]
        self.assertEqual(len(events), 2)
        self.assertEqual(events[0].results[-1][0].transcript, "hallo")
        self.assertFalse(events[0].results[-1].is_final)
        self.assertEqual(events[1].results[-1][0].transcript, "hallo welt")

    def test_partial_results_disabled(self, mock_vosk, mock_microphone):
        self.device.interim_results = False
        self.device.start()
        self._recognizer(mock_vosk).AcceptWaveform.return_value = False

        self.device._on_audio_chunk(b"\x00\x00")

        self._recognizer(mock_vosk).PartialResult.assert_not_called()
        self.device.on_result.assert_not_called()

    def test_final_results_accumulate(self, mock_vosk, mock_microphone):
        self.device.start()
        recognizer = self._recognizer(mock_vosk)
        recognizer.AcceptWaveform.return_value = True
        recognizer.Result.side_effect = [
            json.dumps({"text": "erste notiz"}),
            json.dumps({"text": ""}),
            json.dumps({"text": "zweite notiz"}),
        ]

        for _ in range(3):
            self.device._on_audio_chunk(b"\x00\x00")

        self.assertEqual(self.device.on_result.call_count, 2)
        event = self.device.on_result.call_args.args[0]
        self.assertEqual([r[0].transcript for r in event.results], ["erste notiz", "zweite notiz"])
        self.assertEqual(event.result_index, 1)
        self.device.on_end.assert_not_called()

    def test_alternatives_are_parsed(self, mock_vosk, mock_microphone):
        self.device.start()
        recognizer = self._recognizer(mock_vosk)
        recognizer.AcceptWaveform.return_value = True
        recognizer.Result.return_value = json.dumps(
            {"alternatives": [{"text": "straße", "confidence": 210.5}, {"text": "strasse", "confidence": 190.0}]}
        )

        self.device._on_audio_chunk(b"\x00\x00")

        result = self.device.on_result.call_args.args[0].results[-1]
        self.assertEqual(len(result), 2)
        self.assertEqual(result[0].transcript, "straße")
        self.assertEqual(result[0].confidence, 210.5)

    def test_single_utterance_mode_ends_after_final_result(self, mock_vosk, mock_microphone):
        self.device.continuous = False
        self.device.start()
        recognizer = self._recognizer(mock_vosk)
        recognizer.AcceptWaveform.return_value = True
        recognizer.Result.return_value = json.dumps({"text": "fertig"})

        microphone = mock_microphone.return_value
        order = []
        microphone.release.side_effect = lambda: order.append("release")
        self.device.on_end.side_effect = lambda: order.append("end")

        self.assertFalse(self.device._on_audio_chunk(b"\x00\x00"))
        self.device._end_thread.join(timeout=1)

        self.device.on_result.assert_called_once()
        self.assertEqual(order, ["release", "end"])

        # No further audio is accepted and stop() has nothing left to do
        self.assertFalse(self.device._on_audio_chunk(b"\x00\x00"))
        self.device.stop()
        self.assertEqual(order, ["release", "end"])

        # The next session does not release the finished one again
        self.device.start()
        microphone.release.assert_called_once()

    def test_single_utterance_end_releases_without_restart(self, mock_vosk, mock_microphone):
        local = LocalSpeechRecognizer(
            SpeechRecognitionConfig(continuous=False), device=self.device
        )
        on_end = MagicMock()
        local.on_end(on_end)
        local.start()
        recognizer = self._recognizer(mock_vosk)
        recognizer.AcceptWaveform.return_value = True
        recognizer.Result.return_value = json.dumps({"text": "ein satz"})

        self.device._on_audio_chunk(b"\x00\x00")
        self.device._end_thread.join(timeout=1)
        local.stop()

        mock_microphone.return_value.release.assert_called_once()
        on_end.assert_called_once_with()
        self.assertEqual(local.state, SessionState.STOPPED)

    def test_start_waits_for_pending_release(self, mock_vosk, mock_microphone):
        self.device.continuous = False
        self.device.start()
        recognizer = self._recognizer(mock_vosk)
        recognizer.AcceptWaveform.return_value = True
        recognizer.Result.return_value = json.dumps({"text": "fertig"})
        released = threading.Event()
        mock_microphone.return_value.release.side_effect = lambda: released.wait(1)

        self.device._on_audio_chunk(b"\x00\x00")
        end_thread = self.device._end_thread
        released.set()
        self.device.start()

        self.assertFalse(end_thread.is_alive())
        mock_microphone.return_value.release.assert_called_once()

    def test_decode_error_is_reported_without_ending(self, mock_vosk, mock_microphone):
        self.device.start()
        self._recognizer(mock_vosk).AcceptWaveform.side_effect = Exception("decoder failure")

        self.assertTrue(self.device._on_audio_chunk(b"\x00\x00"))

        error = self.device.on_error.call_args.args[0]
        self.assertIsInstance(error, DeviceError)
        self.device.on_end.assert_not_called()

    def test_stop_flushes_and_ends(self, mock_vosk, mock_microphone):
        self.device.start()
        self._recognizer(mock_vosk).FinalResult.return_value = json.dumps({"text": "letzter satz"})

        self.device.stop()

        microphone = mock_microphone.return_value
        microphone.pause.assert_called_once()
        microphone.release.assert_called_once()
        self.assertEqual(self.device.on_result.call_args.args[0].results[-1][0].transcript, "letzter satz")
        self.device.on_end.assert_called_once()

        # Stopping twice does nothing
        self.device.stop()
        self.device.on_end.assert_called_once()

    def test_stop_before_start_is_noop(self, mock_vosk, mock_microphone):
        self.device.stop()

        self.device.on_end.assert_not_called()
        self.device.on_error.assert_not_called()


if __name__ == "__main__":
    unittest.main()
