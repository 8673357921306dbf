"""Logging setup for CLI runs: console plus a rotating log file per logger."""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from wbs_builder.config.settings import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _rotating_file_handler(log_dir: Path, name: str) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        log_dir / f'{name}.log',
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8',
    )


def configure_logging(name: str, log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Attach console and file handlers to a logger.

    Child loggers (wbs_builder.pipeline, wbs_builder.wbs.reconciler, ...)
    propagate to it, so the CLI configures 'wbs_builder' once. Console
    output goes to stderr; stdout is reserved for --json summaries.

    Args:
        name: Logger name, also used for the log file name
        log_dir: Directory for the log file (defaults to settings.LOG_DIR)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(settings.LOG_LEVEL)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [
        logging.StreamHandler(sys.stderr),
        _rotating_file_handler(Path(log_dir or settings.LOG_DIR), name),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
