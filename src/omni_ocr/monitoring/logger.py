"""Logging configuration."""

import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from omni_ocr.models.config import OcrSettings, get_settings

# Native OCR bindings that report through the standard logging module
NATIVE_LOGGERS = ("easyocr", "pytesseract", "PIL", "ocrmac", "winocr")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


class InterceptHandler(logging.Handler):
    """Forward standard logging records from native bindings to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip frames inside the logging module so loguru reports the caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    settings: Optional[OcrSettings] = None,
    rotation: str = "10 MB",
    retention: str = "1 week",
) -> None:
    """
    Configure loguru sinks for OCR logging.

    Level and file default to ``OcrSettings.log_level`` and
    ``OcrSettings.log_file`` (``OMNI_OCR_LOG_LEVEL`` / ``OMNI_OCR_LOG_FILE``).

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR); overrides settings
        log_file: Optional log file path; overrides settings
        settings: Settings to read defaults from; process-wide settings when omitted
        rotation: Log rotation size/time
        retention: Log retention period
    """
    settings = settings or get_settings()
    log_level = (log_level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=log_level, colorize=True)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=log_level,
            rotation=rotation,
            retention=retention,
            compression="zip",
        )
        logger.info(f"Logging to file: {log_file}")

    for name in NATIVE_LOGGERS:
        native = logging.getLogger(name)
        native.handlers = [InterceptHandler()]
        native.propagate = False

    logger.info(f"OCR logging initialized at {log_level} level")
