import logging
import os
import queue
import sys

import dotenv
from colorama import Fore

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from voice_capture import create_speech_recognition

dotenv.load_dotenv()

logging.basicConfig(level=logging.INFO)

# Event queue
events = queue.Queue()


# Main function
def main():
    service = create_speech_recognition(
        base_url=os.environ.get("VOICE_CAPTURE_BASE_URL"),
        model_path=os.environ.get("VOSK_MODEL_PATH"),
    )

    # Uncomment to always record and upload instead of recognizing on-device
    # service.use_remote_implementation()

    service.on_result(lambda text: events.put(("result", text)))
    service.on_end(lambda: events.put(("end", None)))
    service.on_error(lambda error: events.put(("error", error)))

    print(f"Backend: {service.active_backend}")
    service.start()

    try:
        print("Listening... press Ctrl+C to stop")
        while True:
            try:
                kind, value = events.get(timeout=1)
            except queue.Empty:
                continue

            if kind == "result":
                print(f"\r{Fore.GREEN}{value}{Fore.RESET}", end="", flush=True)
            elif kind == "error":
                print(f"\n{Fore.RED}{type(value).__name__}: {value}{Fore.RESET}")
            else:
                print(f"\n{Fore.BLUE}Session ended{Fore.RESET}")
                break

    except (EOFError, KeyboardInterrupt):
        service.stop()

        # Remote transcription delivers its result after stop()
        while True:
            kind, value = events.get(timeout=60)
            if kind == "result":
                print(f"\n{Fore.GREEN}{value}{Fore.RESET}")
            elif kind == "error":
                print(f"\n{Fore.RED}{type(value).__name__}: {value}{Fore.RESET}")
            else:
                break


if __name__ == "__main__":
    main()
