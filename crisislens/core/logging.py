"""
Centralized logging configuration for CrisisLens.

Logging layout:
- Console handler (WARNING by default to keep CLI output clean)
- Optional rotating log files for main, debug and error streams
- Optional session-based timestamped log file
- Session start/end banners
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from datetime import datetime
from typing import Optional

# Log directory (only created when file logging is enabled)
LOG_DIR = Path(os.getenv("CRISISLENS_LOG_DIR", Path.cwd() / "logs"))

MAIN_LOG_NAME = "crisislens.log"
ERROR_LOG_NAME = "crisislens_errors.log"
DEBUG_LOG_NAME = "crisislens_debug.log"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
LOG_FORMAT_SIMPLE = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# File size limits for rotating handlers
MAX_BYTES = 10 * 1024 * 1024  # 10 MB per file
BACKUP_COUNT = 5

_initialized = False
_session_log_file: Optional[Path] = None
_root_logger: Optional[logging.Logger] = None


def _file_logging_enabled() -> bool:
    return os.getenv("CRISISLENS_LOG_TO_FILE", "false").lower() in ("1", "true", "yes")


def setup_logging(
    level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
    enable_console: bool = True,
    enable_file: Optional[bool] = None,
    enable_session_log: bool = False,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure application-wide logging with console and file handlers.

    Args:
        level: Root logger level
        console_level: Console handler level (default WARNING to reduce noise)
        file_level: Debug file handler level
        enable_console: Whether to log to console
        enable_file: Whether to log to rotating files (defaults to CRISISLENS_LOG_TO_FILE)
        enable_session_log: Whether to create a session-specific timestamped log
        log_dir: Override for the log directory

    Returns:
        The root logger instance
    """
    global _session_log_file, _root_logger, _initialized

    if enable_file is None:
        enable_file = _file_logging_enabled()
    directory = Path(log_dir) if log_dir else LOG_DIR

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Only drop handlers we installed ourselves; pytest and uvicorn add their own
    for handler in list(root_logger.handlers):
        if getattr(handler, "_crisislens", False):
            root_logger.removeHandler(handler)
            handler.close()

    detailed_formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    simple_formatter = logging.Formatter(LOG_FORMAT_SIMPLE, datefmt=DATE_FORMAT)
    console_formatter = logging.Formatter("%(levelname)-8s | %(name)s | %(message)s")

    def _install(handler: logging.Handler, handler_level: int, formatter: logging.Formatter):
        handler.setLevel(handler_level)
        handler.setFormatter(formatter)
        handler._crisislens = True
        root_logger.addHandler(handler)

    if enable_console:
        _install(logging.StreamHandler(sys.stdout), console_level, console_formatter)

    if enable_file or enable_session_log:
        directory.mkdir(parents=True, exist_ok=True)

    if enable_file:
        _install(
            RotatingFileHandler(
                directory / MAIN_LOG_NAME, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
            ),
            logging.INFO,
            simple_formatter,
        )
        _install(
            RotatingFileHandler(
                directory / DEBUG_LOG_NAME, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
            ),
            file_level,
            detailed_formatter,
        )
        _install(
            RotatingFileHandler(
                directory / ERROR_LOG_NAME, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
            ),
            logging.ERROR,
            detailed_formatter,
        )

    if enable_session_log:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        _session_log_file = directory / f"session_{timestamp}.log"
        _install(logging.FileHandler(_session_log_file, encoding="utf-8"), logging.DEBUG, detailed_formatter)

    _root_logger = root_logger
    _initialized = True

    _log_session_banner(root_logger, "START")

    return root_logger


def _log_session_banner(logger: logging.Logger, event: str = "START"):
    """Log a session start/end banner for easy identification in logs."""
    banner = ("=" if event == "START" else "-") * 70

    logger.info(banner)
    logger.info(f"CRISISLENS - Session {event}")
    logger.info(f"Timestamp: {datetime.now().isoformat()}")
    if _session_log_file:
        logger.info(f"Session log: {_session_log_file.name}")
    logger.info(banner)


def shutdown_logging():
    """Gracefully shutdown logging with end banner."""
    if _root_logger:
        _log_session_banner(_root_logger, "END")
        logging.shutdown()


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Automatically initializes logging if not already done.
    """
    if not _initialized:
        init_logging()
    return logging.getLogger(name)


def get_session_log_file() -> Optional[Path]:
    """Get the path to the current session's log file."""
    return _session_log_file


def init_logging(console_level: int = logging.WARNING, verbose: bool = False):
    """
    Initialize logging if not already done.

    Args:
        console_level: Console log level (default WARNING)
        verbose: If True, set console to INFO level
    """
    if not _initialized:
        if verbose:
            console_level = logging.INFO
        setup_logging(console_level=console_level)


def set_console_level(level: int):
    """Change console logging level at runtime."""
    if _root_logger:
        for handler in _root_logger.handlers:
            if (
                getattr(handler, "_crisislens", False)
                and isinstance(handler, logging.StreamHandler)
                and getattr(handler, "stream", None) is sys.stdout
            ):
                handler.setLevel(level)
                _root_logger.info(f"Console log level changed to {logging.getLevelName(level)}")
                break


def enable_verbose():
    """Enable verbose console logging (INFO level)."""
    set_console_level(logging.INFO)


def enable_debug():
    """Enable debug console logging (DEBUG level)."""
    set_console_level(logging.DEBUG)


def enable_quiet():
    """Enable quiet console logging (WARNING level only)."""
    set_console_level(logging.WARNING)
