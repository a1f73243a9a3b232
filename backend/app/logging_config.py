import logging
import sys

from app.config import settings

class ColorFormatter(logging.Formatter):
    """
    Colors each line by level so rejected rolls (WARNING) and CLI failures (ERROR)
    stand out from the per-roll DEBUG trace of the dice engine.
    """
    grey = "\x1b[38;20m"
    blue = "\x1b[34;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"
    line = "%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)"

    COLORS = {
        logging.DEBUG: grey,
        logging.INFO: blue,
        logging.WARNING: yellow,
        logging.ERROR: red,
        logging.CRITICAL: bold_red,
    }

    def __init__(self):
        super().__init__()
        self._formatters = {
            level: logging.Formatter(color + self.line + self.reset)
            for level, color in self.COLORS.items()
        }
        self._plain = logging.Formatter(self.line)

    def format(self, record):
        return self._formatters.get(record.levelno, self._plain).format(record)

def configure_logging(level=None):
    """
    Configures the root logger. game_engine modules log parse and roll details at DEBUG.
    """
    level = level or settings.LOG_LEVEL

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColorFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates on reconfiguration
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    root_logger.addHandler(console_handler)

    return root_logger

# Initialize on import so it's ready immediately
logger = configure_logging()
