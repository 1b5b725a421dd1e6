import logging
from contextlib import contextmanager
from ctypes import CFUNCTYPE, c_char_p, c_int, cdll

logger = logging.getLogger(__name__)

ALSA_ERROR_HANDLER_FUNC = CFUNCTYPE(None, c_char_p, c_int, c_char_p, c_int, c_char_p)
JACK_ERROR_HANDLER_FUNC = CFUNCTYPE(None, c_char_p)


def _alsa_error_handler(filename, line, function, err, fmt):  # pragma: no cover
    pass


def _jack_error_handler(err):  # pragma: no cover
    pass


c_alsa_error_handler = ALSA_ERROR_HANDLER_FUNC(_alsa_error_handler)
c_jack_error_handler = JACK_ERROR_HANDLER_FUNC(_jack_error_handler)


def _load_library(name):
    try:
        return cdll.LoadLibrary(name)
    except OSError:
        logger.debug(f"{name} not found; its console messages are not suppressed")
        return None


@contextmanager
def no_alsa_and_jack_errors():
    """Silence the ALSA and JACK probing noise PortAudio prints while initializing.

    Platforms without ALSA or JACK (macOS, Windows) simply skip the library
    that is missing.
    """
    asound = _load_library("libasound.so")
    jack = _load_library("libjack.so")

    if asound is not None:
        asound.snd_lib_error_set_handler(c_alsa_error_handler)
    if jack is not None:
        jack.jack_set_error_function(c_jack_error_handler)

    try:
        yield
    finally:
        if asound is not None:
            asound.snd_lib_error_set_handler(None)
        if jack is not None:
            jack.jack_set_error_function(None)
