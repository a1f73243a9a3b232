import logging
import os
from dotenv import load_dotenv

from game_engine.dice import DEFAULT_MAX_DICE

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

class Settings:
    def __init__(self):
        self._rejected = set()

    @property
    def LOG_LEVEL(self):
        return os.getenv("LOG_LEVEL", "WARNING").upper()

    @property
    def MAX_DICE(self):
        raw = os.getenv("DICE_MAX_DICE", "")
        if not raw:
            return DEFAULT_MAX_DICE
        try:
            value = int(raw)
        except ValueError:
            value = 0
        if value < 1:
            if raw not in self._rejected:
                self._rejected.add(raw)
                logger.warning(f"Invalid DICE_MAX_DICE={raw!r}, using {DEFAULT_MAX_DICE}")
            return DEFAULT_MAX_DICE
        return value

settings = Settings()
