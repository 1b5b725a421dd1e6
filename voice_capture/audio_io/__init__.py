"""Audio I/O module for voice_capture.

This module provides the platform audio capture used by the remote
recognizer and the on-device engines:
- Microphone stream (exclusive pyaudio input)
- Capture device (capability probe and permission request)
- Timed-slice recorder
"""

from .audio_stream import AudioStream
from .capture_device import AudioCaptureDevice, MicrophoneCaptureDevice
from .microphone import MicrophoneStream
from .recorder import (
    AudioRecorder,
    MicrophoneRecorder,
    RecorderState,
    streaming_wav_header,
)

__all__ = [
    "AudioCaptureDevice",
    "AudioRecorder",
    "AudioStream",
    "MicrophoneCaptureDevice",
    "MicrophoneRecorder",
    "MicrophoneStream",
    "RecorderState",
    "streaming_wav_header",
]
