"""Logging setup shared by the bot, scheduler and API entry points."""
import logging
import os
import sys
from plantcare.core.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = None, log_file_path: str = None) -> None:
    """Configure root logging to stdout and, optionally, a log file."""
    level = level or settings.log_level
    log_file_path = log_file_path or settings.log_file_path

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file_path:
        directory = os.path.dirname(log_file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(logging.FileHandler(log_file_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )
    # httpx logs every Bot API request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
