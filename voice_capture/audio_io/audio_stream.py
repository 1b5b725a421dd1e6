from abc import ABC, abstractmethod
from typing import Callable, Optional

# Receives one buffer of raw PCM. Returning False ends the stream.
AudioChunkCallback = Callable[[bytes], Optional[bool]]


class AudioStream(ABC):
    """Abstract interface for an exclusively held audio input.

    Implementations must provide:

    - `rate`: sample rate in Hz
    - `channels`: number of audio channels
    - `sample_size`: bytes per sample (e.g., 2 for 16-bit PCM)
    - `set_audio_callback()`: install the consumer of captured PCM chunks
    - `resume()`: start or resume delivering chunks
    - `pause()`: stop delivering chunks; returns once no callback is running
    - `release()`: give the hardware back; safe to call more than once
    """

    @property
    @abstractmethod
    def channels(self) -> int: ...

    @property
    @abstractmethod
    def rate(self) -> int: ...

    @property
    @abstractmethod
    def sample_size(self) -> int: ...

    @abstractmethod
    def set_audio_callback(self, callback: Optional[AudioChunkCallback]) -> None: ...

    @abstractmethod
    def resume(self) -> None: ...

    @abstractmethod
    def pause(self) -> None: ...

    @abstractmethod
    def release(self) -> None: ...
