import logging
import os
import sys

import dotenv
from colorama import Fore

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from voice_capture import Dictation, SpeechRecognitionConfig

dotenv.load_dotenv()

logging.basicConfig(level=logging.INFO)


# Main function
def main():
    config = SpeechRecognitionConfig(
        language=os.environ.get("DICTATION_LANGUAGE", "de-DE"),
        base_url=os.environ.get("VOICE_CAPTURE_BASE_URL"),
        model_path=os.environ.get("VOSK_MODEL_PATH"),
    )
    dictation = Dictation(config=config)

    if not dictation.start():
        print(f"{Fore.RED}Speech recognition is not available{Fore.RESET}")
        return

    try:
        input(f"{Fore.GREEN}Listening... press Enter when done{Fore.RESET}\n")
    except (EOFError, KeyboardInterrupt):
        pass

    note = dictation.finish(timeout=60)

    for error in dictation.errors:
        print(f"{Fore.YELLOW}{type(error).__name__}: {error}{Fore.RESET}")

    if note:
        print(f"\n{Fore.BLUE}Note:{Fore.RESET} {note}")
    else:
        print("\nNothing was recognized")


if __name__ == "__main__":
    main()
