"""
logger.py

Logging configuration for mcnotify.
Provides the central function `setup_logging`, which configures logging for the whole application.

Functions:
- setup_logging: installs rotating file handlers and the console handler.

Usage:
- Import this module and call `setup_logging` once at startup, before the watch loop begins.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from datetime import datetime
from config import LOGGING_ENABLED, LOGGING_LEVEL, GENERAL_LOG_FOLDER, ERROR_LOG_FOLDER, DEBUG_LOG_FOLDER

MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(module)s:%(lineno)d] - %(message)s"

def setup_logging(general_log_folder=GENERAL_LOG_FOLDER, error_log_folder=ERROR_LOG_FOLDER, debug_log_folder=DEBUG_LOG_FOLDER,
                  log_level=LOGGING_LEVEL, app_logger_name=None, enable_logging=LOGGING_ENABLED, stream=None):
    """
    Configures logging for the project.

    Parameters:
    - general_log_folder (str): folder for the general log files.
    - error_log_folder (str): folder for the error log files.
    - debug_log_folder (str, optional): folder for debug log files. None disables the debug log.
    - log_level (str): logging level (e.g. "INFO", "DEBUG").
    - app_logger_name (str, optional): name of a specific logger. Defaults to the root logger.
    - enable_logging (bool): if False no log files are written; the console handler is still installed,
      because it carries the join/leave and notification status lines.
    - stream (optional): stream for the console handler, defaults to sys.stdout.

    Returns:
    - logging.Logger: the configured logger.
    """
    logger = logging.getLogger(app_logger_name) if app_logger_name else logging.getLogger()
    logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    # Konsolen-Handler
    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    if not enable_logging:
        return logger

    # Zeitstempel für die Log-Dateien
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    logger.addHandler(_rotating_handler(general_log_folder, f"mcnotify_{timestamp}.log", logging.INFO, LOG_FORMAT))
    logger.addHandler(_rotating_handler(error_log_folder, f"mcnotify_errors_{timestamp}.log", logging.ERROR, LOG_FORMAT))
    if debug_log_folder:
        logger.addHandler(_rotating_handler(debug_log_folder, f"mcnotify_debug_{timestamp}.log", logging.DEBUG, DEBUG_LOG_FORMAT))

    return logger

def _rotating_handler(folder, filename, level, fmt):
    """Creates `folder` if needed and returns a size-rotated handler writing `filename` into it."""
    os.makedirs(folder, exist_ok=True)
    handler = RotatingFileHandler(os.path.join(folder, filename), maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler
