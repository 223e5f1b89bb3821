"""Logging configuration with console and rotating file handlers"""
import glob
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

MAX_SESSION_LOGS = 5


def setup_logging(
    log_file: Optional[str] = "logs/docsearch.log",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
):
    """
    Configure logging with two destinations:
    - Console: Brief logs (INFO by default)
    - File: Detailed logs (DEBUG by default) with rotation

    Rotation policy:
    - New log file on each process start (timestamp-based naming)
    - Keep last 5 session files (auto-cleanup on startup)
    - Auto-rotate when file reaches 10MB

    Args:
        log_file: Base path to log file, or None for console only
        console_level: Console logging level (INFO = brief)
        file_level: File logging level (DEBUG = verbose)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything, filter in handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root_logger.addHandler(console_handler)

    session_log = None
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Keep the newest sessions, the one about to be created included
        log_pattern = str(log_path.parent / f"{log_path.stem}_*.log")
        existing_logs = sorted(glob.glob(log_pattern), reverse=True)
        for old_log in existing_logs[MAX_SESSION_LOGS - 1:]:
            try:
                Path(old_log).unlink()
            except OSError:
                pass

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        session_log = log_path.parent / f"{log_path.stem}_{timestamp}.log"

        file_handler = RotatingFileHandler(
            session_log,
            mode='a',
            maxBytes=10*1024*1024,  # 10MB
            backupCount=10,
            encoding='utf-8'
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root_logger.addHandler(file_handler)

    # Suppress noisy third-party loggers in console (but keep in file)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.info(
        f"Logging configured: console={logging.getLevelName(console_level)}, "
        f"file={session_log or 'disabled'} ({logging.getLevelName(file_level)})"
    )
