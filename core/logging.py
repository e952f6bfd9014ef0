import logging
import sys
import json
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

# --- Constants ---
LOGGER_NAME = 'campaign_monitor'
LOG_FILE_NAME = 'campaign_monitor.log'
MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5

class JsonFormatter(logging.Formatter):
    """
    Formats log records as a JSON string.
    """
    def format(self, record):
        log_object = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_object['exc_info'] = self.formatException(record.exc_info)

        return json.dumps(log_object)

def setup_logging(log_level: Union[int, str] = logging.INFO, log_dir: Optional[Path] = None):
    """
    Configures the adapter logger.
    - Console: Human-readable plain text.
    - File: Machine-readable JSON, with rotation (only when log_dir is given).
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())

    adapter_logger = logging.getLogger(LOGGER_NAME)
    adapter_logger.setLevel(log_level)

    # --- Formatters ---
    plain_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(plain_formatter)

    # Clear existing handlers to avoid duplicates
    if adapter_logger.hasHandlers():
        adapter_logger.handlers.clear()

    adapter_logger.addHandler(console_handler)

    # --- Rotating File Handler (JSON) ---
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JsonFormatter())
        adapter_logger.addHandler(file_handler)

    return adapter_logger

def get_logger(name: str) -> logging.Logger:
    """Returns a child of the adapter logger, e.g. ``campaign_monitor.cache``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")

# Handlers are attached by entry points through setup_logging(); importing
# this module never touches the filesystem.
logger = logging.getLogger(LOGGER_NAME)
