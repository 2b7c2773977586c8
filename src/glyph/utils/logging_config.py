# glyph/utils/logging_config.py
"""glyph.utils.logging_config
============================

Logging configuration utility for the glyph editor.
It defines global logger objects and a single setup function, `setup_logging`,
which configures application-wide logging handlers and log levels based on a
supplied configuration dictionary.

Features:
    - Rotating file logging for general application events (`glyph.log` in the
      user config directory unless ``logging.log_file`` names another path).
    - Optional console logging to stderr. Disabled by default because curses
      owns the terminal while the editor runs.
    - Optional separate error log file (error.log next to the main log).
    - Optional key event tracing (keytrace.log) enabled via the GLYPH_KEYTRACE
      environment variable. Every resolved key label and its action lands there.
    - Fallback to the system temp directory when the log directory cannot be created.
    - Safe reconfiguration: clears existing handlers to avoid duplicate logs.
    - Never raises; errors are reported to stderr and logging continues best-effort.

Globals:
    logger: Main application logger ("glyph").
    KEY_LOGGER: Logger for key resolution trace events ("glyph.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Optional


# ======================== Global loggers ========================
logger = logging.getLogger("glyph")  # main application logger
KEY_LOGGER = logging.getLogger("glyph.keyevents")  # key resolution trace

DEFAULT_LOG_NAME = "glyph.log"


def _default_log_dir() -> str:
    return str(Path.home() / ".config" / "glyph")


def _ensure_dir(path: str) -> bool:
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        try:
            os.makedirs(directory)
        except OSError as e_mkdir:
            print(f"Error creating log directory '{directory}': {e_mkdir}", file=sys.stderr)
            return False
    return True


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    Up to four independent handlers are set up:

    1. File handler: rotating log capturing everything from ``file_level``
       (default DEBUG) upward.
    2. Console handler: optional ``stderr`` output at ``console_level``.
    3. Error-file handler: optional rotating ``error.log`` with ERROR and
       CRITICAL events only.
    4. Key-event handler: rotating ``keytrace.log`` attached to
       ``glyph.keyevents`` when ``GLYPH_KEYTRACE`` is ``1/true/yes``.

    Args:
        config (dict | None): Application configuration. Only the
            ``["logging"]`` section is consulted; recognised keys are
            ``log_file``, ``file_level``, ``console_level``,
            ``log_to_console`` and ``separate_error_log``.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})

    log_filename = logging_config.get("log_file") or os.path.join(_default_log_dir(), DEFAULT_LOG_NAME)
    log_filename = os.path.expanduser(log_filename)
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    if not _ensure_dir(log_filename):
        log_filename = os.path.join(tempfile.gettempdir(), DEFAULT_LOG_NAME)
        print(f"Logging to temporary file: '{log_filename}'", file=sys.stderr)
    log_dir = os.path.dirname(log_filename)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)
    except OSError as e_fh:
        print(
            f"Error setting up file logger for '{log_filename}': {e_fh}. File logging may be impaired.",
            file=sys.stderr,
        )

    # Console Handler
    console_handler = None
    if logging_config.get("log_to_console", False):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_log_level = getattr(logging, console_level_str, logging.WARNING)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s"))
        console_handler.setLevel(console_log_level)

    # Optional Separate Error Log File
    error_file_handler = None
    error_log_filename = os.path.join(log_dir, "error.log") if log_dir else "error.log"
    if logging_config.get("separate_error_log", False):
        try:
            error_file_handler = logging.handlers.RotatingFileHandler(
                error_log_filename,
                maxBytes=1 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            error_file_handler.setFormatter(file_formatter)
            error_file_handler.setLevel(logging.ERROR)
        except OSError as e_efh:
            print(
                f"Error setting up separate error log '{error_log_filename}': {e_efh}.",
                file=sys.stderr,
            )

    root_logger = logging.getLogger()
    root_logger.handlers = []  # avoid duplicates on repeated setup

    if file_handler:
        root_logger.addHandler(file_handler)
    if console_handler:
        root_logger.addHandler(console_handler)
    if error_file_handler:
        root_logger.addHandler(error_file_handler)

    root_logger.setLevel(log_file_level)

    # Key Event Logger
    key_event_logger = logging.getLogger("glyph.keyevents")
    key_event_logger.propagate = False
    key_event_logger.setLevel(logging.DEBUG)
    key_event_logger.handlers = []

    if os.environ.get("GLYPH_KEYTRACE", "").lower() in {"1", "true", "yes"}:
        key_trace_filename = os.path.join(log_dir, "keytrace.log") if log_dir else "keytrace.log"
        try:
            key_trace_handler = logging.handlers.RotatingFileHandler(
                key_trace_filename,
                maxBytes=1 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            key_trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            key_event_logger.addHandler(key_trace_handler)
            key_event_logger.disabled = False
            logging.info("Key event tracing enabled, logging to '%s'.", key_trace_filename)
        except OSError as e_keytrace:
            logging.error(f"Failed to set up key trace logging: {e_keytrace}", exc_info=True)
            key_event_logger.disabled = True
    else:
        key_event_logger.addHandler(logging.NullHandler())
        key_event_logger.disabled = True
        logging.debug("Key event tracing is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(
            f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}."
        )
    if console_handler:
        logging.info(
            f"Console logging to stderr at level: {logging.getLevelName(console_handler.level)}."
        )
    if error_file_handler:
        logging.info(f"Error logging to '{error_log_filename}' at level: ERROR.")
