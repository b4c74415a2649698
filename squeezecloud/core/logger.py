"""
Logging configuration for squeezecloud.

This module sets up the logging system with multiple outputs:
    - Console: tqdm-compatible, "LEVEL: message"
    - log_full_<ts>.log: Complete log of all events (DEBUG and above)
    - log_errors_<ts>.log: Only ERROR and CRITICAL level messages
    - stream_failures_<ts>.log: Tracks whose playback could not be resolved

File outputs are only created when a log directory is configured; a host
that already owns logging can skip setup_logging() entirely and simply
attach its own handlers to the 'squeezecloud' logger hierarchy.

Usage:
    from squeezecloud.core.logger import setup_logging, get_logger

    setup_logging(config.logging.directory)  # Call once at startup
    logger = get_logger(__name__)            # Get logger for each module

    logger.info("Fetching page")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Log format for console output (compact, tqdm-friendly)
CONSOLE_LOG_FORMAT = "%(levelname)s: %(message)s"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking tqdm progress bars.

    The `dump` command pages through the catalog behind a tqdm bar; plain
    stderr logging would tear the bar apart, tqdm.write() prints above it.
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class StreamFailureHandler(logging.Handler):
    """
    Handler that collects playback resolution failures into a report file.

    It listens for log records carrying stream failure information and
    writes them to stream_failures.log in a simple, human-readable format:

        soundcloud://42 (PLUGIN_SQUEEZECLOUD_STREAM_FAILED)
        No Location header in response from https://api.soundcloud.com/...

    The handler looks for specific extra fields in log records:
        - 'stream_failed_track_uri': The play URI of the track
        - 'stream_failed_kind': The reported error kind token
        - 'stream_failed_message': The failure message

    Only records containing these fields are written to the report.
    Use log_stream_failure() to produce such records.
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "stream_failed_track_uri"):
            return

        if self.report_file is None:
            return

        try:
            uri = getattr(record, "stream_failed_track_uri", "")
            kind = getattr(record, "stream_failed_kind", "")
            message = getattr(record, "stream_failed_message", "")

            self.report_file.write(f"{uri} ({kind})\n")
            self.report_file.write(f"{message}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


def setup_logging(log_dir: Path | None = None, console_level: str = "INFO") -> None:
    """
    Configure the logging system.

    This function should be called ONCE at startup, after the
    configuration is loaded.

    Args:
        log_dir: Directory where log files will be created. If None, only
                 the console handler is installed.
        console_level: Level name for the console handler.

    Behavior:
        1. Configure the root logger level to DEBUG and drop old handlers
        2. Add the console handler (TqdmLoggingHandler)
        3. If log_dir is given, create it and add:
           - full log file handler (DEBUG)
           - error log file handler (ERROR and above)
           - stream failure report handler
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(getattr(logging, console_level.upper(), logging.INFO))
    console_handler.setFormatter(logging.Formatter(CONSOLE_LOG_FORMAT))
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger.addHandler(_file_handler(log_dir / f"log_full_{timestamp}.log", logging.DEBUG))
    root_logger.addHandler(_file_handler(log_dir / f"log_errors_{timestamp}.log", logging.ERROR))

    failures_handler = StreamFailureHandler(log_dir / f"stream_failures_{timestamp}.log")
    failures_handler.open()
    root_logger.addHandler(failures_handler)


def _file_handler(path: Path, level: int) -> logging.FileHandler:
    handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.
              This creates a hierarchy like 'squeezecloud.browse.paginator'.
    """
    return logging.getLogger(name)


def log_stream_failure(
    logger: logging.Logger,
    track_uri: str,
    kind: str,
    message: str
) -> None:
    """
    Log a track whose playback could not be resolved.

    Logs an ERROR level message and attaches the extra fields that
    StreamFailureHandler writes to stream_failures.log.

    Example:
        log_stream_failure(
            logger,
            track_uri="soundcloud://42",
            kind="PLUGIN_SQUEEZECLOUD_STREAM_FAILED",
            message="No Location header"
        )
    """
    logger.error(
        f"Playback failed: {track_uri} - {message}",
        extra={
            "stream_failed_track_uri": track_uri,
            "stream_failed_kind": kind,
            "stream_failed_message": message,
        }
    )


def shutdown_logging() -> None:
    """
    Flush and close all handlers of the root logger.

    Typically called in a finally block at process exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        root_logger.removeHandler(handler)
