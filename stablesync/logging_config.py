"""
Application logging configuration.

- General app logs: {log_dir}/app.log (plus console)
- Nightly batch logs: {log_dir}/nightly.log (separate file)
"""

import logging
import sys
from pathlib import Path

from stablesync.config import get_settings

# Logger name used by the nightly batch job (has its own log file)
NIGHTLY_LOGGER_NAME = "stablesync.nightly"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_dir: str | Path | None = None,
    log_level: str | None = None,
) -> None:
    """
    Configure logging at process startup.

    The root logger writes to ``app.log`` and stdout. The nightly logger
    writes only to ``nightly.log`` and does not propagate to root.

    Args:
        log_dir: Directory for log files. Defaults to ``settings.log_dir``.
        log_level: Level name (DEBUG, INFO, WARNING, ERROR). Defaults to
            ``settings.log_level``.
    """
    settings = get_settings()
    dir_path = Path(log_dir or settings.log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    app_file_handler = logging.FileHandler(dir_path / "app.log", encoding="utf-8")
    app_file_handler.setLevel(level)
    app_file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Remove existing handlers to avoid duplicates on reload
    for h in root_logger.handlers[:]:
        root_logger.removeHandler(h)
    root_logger.addHandler(app_file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    nightly_file_handler = logging.FileHandler(dir_path / "nightly.log", encoding="utf-8")
    nightly_file_handler.setLevel(level)
    nightly_file_handler.setFormatter(formatter)

    nightly_logger = logging.getLogger(NIGHTLY_LOGGER_NAME)
    nightly_logger.setLevel(level)
    nightly_logger.propagate = False
    for h in nightly_logger.handlers[:]:
        nightly_logger.removeHandler(h)
    nightly_logger.addHandler(nightly_file_handler)
    nightly_logger.addHandler(console_handler)
