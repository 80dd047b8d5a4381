"""Logging configuration for MsgClassifier"""

import logging
import logging.handlers
from pathlib import Path
from datetime import datetime

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that log every HTTP request at INFO
QUIET_LOGGERS = ("anthropic", "httpx", "httpcore")


def _rotating_handler(filename: Path, level: int, max_bytes: int, backup_count: int,
                      formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_level=logging.INFO, log_dir="logs", console_output=True, file_output=True):
    """
    Configure logging for the application

    The interactive CLI turns console output off so log lines do not land
    in the middle of the inbox display; the files still get everything.

    Args:
        log_level: Logging level or level name (default: INFO)
        log_dir: Directory for log files (default: "logs")
        console_output: Enable console output (default: True)
        file_output: Enable file output (default: True)
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    log_path = Path(log_dir)
    if file_output:
        log_path.mkdir(parents=True, exist_ok=True)
        daily_log = log_path / f"msg_classifier_{datetime.now().strftime('%Y%m%d')}.log"
        root_logger.addHandler(
            _rotating_handler(daily_log, log_level, 10 * 1024 * 1024, 5, formatter)  # 10MB
        )
        root_logger.addHandler(
            _rotating_handler(log_path / "errors.log", logging.ERROR, 5 * 1024 * 1024, 3, formatter)  # 5MB
        )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    logger = get_logger(__name__)
    logger.info("=" * 60)
    logger.info(f"MsgClassifier starting, log level {logging.getLevelName(log_level)}")
    if file_output:
        logger.info(f"Log directory: {log_path.absolute()}")
    logger.info("=" * 60)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name"""
    return logging.getLogger(name)


def preview(text: str, length: int = 50) -> str:
    """Shorten message text before it goes into a log line"""
    if text is None:
        return ""
    return text if len(text) <= length else f"{text[:length]}..."
