import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.config import LOG_FILE, LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging() -> None:
    """
    Configure the root logger once.
    - console handler via basicConfig (skipped if handlers exist)
    - rotating file handler when LOG_FILE is set
    """
    level = getattr(logging, LOG_LEVEL, logging.INFO)
    root_logger = logging.getLogger()

    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)

    if LOG_FILE:
        log_path = Path(LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        already_attached = any(
            isinstance(h, RotatingFileHandler)
            and getattr(h, "baseFilename", None) == str(log_path.resolve())
            for h in root_logger.handlers
        )
        if not already_attached:
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            file_handler.setLevel(level)
            root_logger.addHandler(file_handler)

    root_logger.setLevel(level)
