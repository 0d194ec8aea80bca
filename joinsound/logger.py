import logging
import logging.handlers
import os
import sys
from pathlib import Path

from joinsound.config import Config

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_RETENTION_DAYS = 30


def _file_handler(logs_dir: Path) -> logging.Handler:
    """joinsound.log, rolled over at midnight into joinsound.log.YYYY-MM-DD."""
    return logging.handlers.TimedRotatingFileHandler(
        filename=logs_dir / "joinsound.log",
        when="midnight",
        backupCount=LOG_RETENTION_DAYS,
        encoding="utf-8",
    )


def setup_logging(logs_dir=None, level=logging.INFO):
    """
    Send root logger output to the console and to a daily log file.

    Calling it again once the root logger has handlers only updates the level.
    """
    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        return

    logs_dir = Path(logs_dir or Config.LOGS_DIR)
    os.makedirs(logs_dir, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in (_file_handler(logs_dir), logging.StreamHandler(sys.stdout)):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.getLogger(__name__).info("Writing logs to %s", logs_dir)
