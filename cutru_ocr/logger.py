"""
Logging setup.

Everything logs under the ``cutru_ocr`` logger. Its console handler is a
rich ``RichHandler`` at INFO (DEBUG when DEBUG=1); when LOG_TO_FILE is on
a timestamped file in LOG_DIR receives every DEBUG line as well.

Library modules call ``logging.getLogger(__name__)``; entry points and
processors call ``get_logger()`` once so the handlers exist:

    from cutru_ocr.logger import get_logger
    logger = get_logger("main")
    logger.info("Batch started")
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from .config import get_config

ROOT_LOGGER_NAME = "cutru_ocr"

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _file_handler(log_dir: Path) -> logging.FileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / f"{datetime.now():%Y%m%d_%H%M%S}.log", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
    return handler


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    log_dir: Optional[Path] = None,
    debug: Optional[bool] = None,
    log_to_file: Optional[bool] = None,
) -> logging.Logger:
    """
    Attach the console (and optionally file) handlers to ``name``.

    Arguments left as None come from ``get_config()``. A logger that already
    has handlers is returned untouched.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    config = get_config()
    debug = config.debug if debug is None else debug
    log_to_file = config.log_to_file if log_to_file is None else log_to_file

    # Handlers filter; the logger itself passes everything
    logger.setLevel(logging.DEBUG)

    console = RichHandler(rich_tracebacks=True, show_time=True, show_level=True, show_path=False)
    console.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.addHandler(console)

    if log_to_file:
        file_handler = _file_handler(log_dir or config.logs_dir)
        logger.addHandler(file_handler)
        logger.debug(f"Log file: {file_handler.baseFilename}")

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Return ``name`` as a child of the package logger, setting up handlers
    on first use. ``get_logger("main")`` is ``cutru_ocr.main``.
    """
    setup_logger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Detach and close the package handlers; the next get_logger() rebuilds them."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()


def log_timing(logger: logging.Logger, operation: str, duration_sec: float) -> None:
    """Sub-second timings go to DEBUG, longer ones to INFO."""
    if duration_sec < 1:
        logger.debug(f"{operation}: {duration_sec * 1000:.1f}ms")
        return
    minutes, seconds = divmod(duration_sec, 60)
    if minutes:
        logger.info(f"{operation}: {int(minutes)}m {seconds:.1f}s")
    else:
        logger.info(f"{operation}: {seconds:.2f}s")
