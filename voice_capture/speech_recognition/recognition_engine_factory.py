import logging
import threading
from typing import List, Optional, Type

from .recognition_device import RecognitionDevice

logger = logging.getLogger(__name__)


class RecognitionEngineFactory:
    """Registry of the on-device recognition engines importable on this platform.

    Engines are registered at import time only when their libraries are
    installed, so `is_available()` doubles as the platform capability check.
    """

    _engines = {}
    _lock = threading.Lock()

    @classmethod
    def create(cls, engine_name: Optional[str], **kwargs) -> Optional[RecognitionDevice]:
        logger.info(f"Creating recognition engine '{engine_name}'")

        if engine_name is None:
            return None

        with cls._lock:
            if engine_name in cls._engines:
                return cls._engines[engine_name](**kwargs)

        raise RuntimeError(f"Engine '{engine_name}' is not available")

    @classmethod
    def is_available(cls, engine_name: Optional[str]) -> bool:
        with cls._lock:
            return engine_name in cls._engines

    @classmethod
    def register_engine(cls, name: str, engine_class: Type[RecognitionDevice]):
        with cls._lock:
            cls._engines[name] = engine_class

    @classmethod
    def unregister_engine(cls, name: str):
        with cls._lock:
            if name in cls._engines:
                del cls._engines[name]
            else:
                raise KeyError(f"Recognition engine not found: {name}")

    @classmethod
    def list_engines(cls) -> List[str]:
        with cls._lock:
            return list(cls._engines.keys())


# Register available engines (best-effort imports)
try:
    from .vosk_recognition_device import VoskRecognitionDevice

    RecognitionEngineFactory.register_engine(VoskRecognitionDevice.name(), VoskRecognitionDevice)
except ModuleNotFoundError:
    pass
