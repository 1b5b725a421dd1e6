import logging
from typing import Optional

import requests

from .config import SpeechRecognitionConfig

logger = logging.getLogger(__name__)


def correct_text(
    text: str,
    config: Optional[SpeechRecognitionConfig] = None,
    timeout: Optional[float] = 10.0,
) -> str:
    """Ask the text-correction endpoint to clean up a transcript.

    Any failure (transport error, non-success status, malformed reply)
    is logged and the original `text` is returned unchanged.
    """
    config = config if config else SpeechRecognitionConfig()
    url = config.resolve_url(config.correction_api_url)

    try:
        response = requests.post(url, json={"text": text}, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Text correction failed: {e}")
        return text

    corrected = data.get("correctedText") if isinstance(data, dict) else None
    if not isinstance(corrected, str) or not corrected:
        return text

    return corrected
