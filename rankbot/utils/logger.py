import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from rankbot.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _log_file(log_dir: Path) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f'ufl_records_{datetime.now().strftime("%Y%m%d")}.log'


def setup_logger(name: str, log_dir: Optional[str] = None) -> logging.Logger:
    """
    Return a logger writing to stdout and to the daily records log file.

    Handlers are attached once per logger name, so repeated calls from
    module import and class construction are harmless.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    log_level = logging.DEBUG if Config.DEBUG else logging.INFO
    logger.setLevel(log_level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler always records DEBUG
    file_handler = logging.FileHandler(_log_file(Path(log_dir or Config.LOG_DIR)), encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


def configure_library_logging() -> None:
    """
    Route discord.py logs through the same format at WARNING.

    SQLAlchemy is left alone: its SQL lines come from the engine's own echo
    handler when Config.DEBUG is set.
    """
    library_logger = setup_logger('discord')
    library_logger.setLevel(logging.DEBUG if Config.DEBUG else logging.WARNING)
