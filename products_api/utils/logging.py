import logging
import os

from .config import DEBUG, LOG_DIR, LOG_LEVEL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_log_level(debug: bool, level_name: str) -> int:
    """DEBUG wins; otherwise the named level, falling back to INFO for unknown names."""
    if debug:
        return logging.DEBUG
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


# Create logs directory if it doesn't exist
os.makedirs(LOG_DIR, exist_ok=True)
LOG_FILE = os.path.join(LOG_DIR, "app.log")

logger = logging.getLogger("products-api")
logger.setLevel(resolve_log_level(DEBUG, LOG_LEVEL))

# File and console share one format; guard against duplicates on re-import
if not logger.handlers:
    file_handler = logging.FileHandler(LOG_FILE, mode="a")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)
