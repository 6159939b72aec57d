"""
Logging Configuration for mermaid-fmt.

Provides centralized handler setup for the ``mermaid_fmt`` logger tree.
Records go to stderr; set MERMAID_FMT_LOG_FILE to mirror them to a file.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "mermaid_fmt"

_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _get_log_file() -> Optional[Path]:
    """Get the log file path from the environment, if any."""
    log_file = os.getenv("MERMAID_FMT_LOG_FILE")
    if not log_file:
        return None
    return Path(log_file)


def _create_file_handler(log_path: Path) -> Optional[logging.FileHandler]:
    """
    Create a file handler for the given path.

    Args:
        log_path: Destination file; parent directories are created.

    Returns:
        Configured FileHandler, or None if the file cannot be opened
    """
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
    except OSError as e:
        print(f"Cannot open log file {log_path}: {e}", file=sys.stderr, flush=True)
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    return handler


class FlushingStreamHandler(logging.StreamHandler):
    """StreamHandler that flushes after every emit.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a handler.
    ::: This is stateless.
    """
    def emit(self, record):
        super().emit(record)
        self.flush()


def _create_stderr_handler() -> logging.StreamHandler:
    """Create a stderr handler for console output with auto-flush."""
    handler = FlushingStreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    return handler


def configure_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure the package logger.

    Handlers are attached only once; later calls just adjust the level.

    Args:
        verbose: Log DEBUG records when True, WARNING and above otherwise

    Returns:
        The ``mermaid_fmt`` logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if not logger.handlers:
        logger.propagate = False
        logger.addHandler(_create_stderr_handler())

        log_path = _get_log_file()
        if log_path is not None:
            file_handler = _create_file_handler(log_path)
            if file_handler:
                logger.addHandler(file_handler)

    return logger
