"""
Logging configuration for daily-review.

Quiet by default; --verbose or DAILY_REVIEW_VERBOSE=1 turns on debug
output to stderr. An operations log in the state directory records
session starts, repairs and migrations regardless of verbosity.
"""

import logging
import sys
import warnings
from logging.handlers import RotatingFileHandler
from pathlib import Path

OPS_LOG_FILENAME = "daily-review-ops.log"


def configure_quiet_mode(quiet: bool = True):
    """
    Configure logging to suppress noisy output.

    Args:
        quiet: If True, suppress warnings and only show dailyreview warnings and errors.
    """
    if quiet:
        warnings.filterwarnings("ignore")
        logging.getLogger("dailyreview").setLevel(logging.WARNING)


def enable_debug_mode():
    """Enable debug-level logging to stderr."""
    warnings.filterwarnings("default")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Add stderr handler if not already present
    if not any(isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
               for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))
        root_logger.addHandler(handler)

    logging.getLogger("dailyreview").setLevel(logging.DEBUG)


def configure_ops_log(state_dir):
    """Configure a persistent operations log for a state directory.

    Writes to {state_dir}/daily-review-ops.log using a rotating file handler
    (1MB max, 3 backups). Returns the handler so it can be removed on close().
    """
    log_path = Path(state_dir) / OPS_LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(log_path),
        maxBytes=1_000_000,
        backupCount=3,
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    review_logger = logging.getLogger("dailyreview")
    review_logger.addHandler(handler)
    # Let INFO through to the ops log even in quiet mode
    if review_logger.level == logging.NOTSET or review_logger.level > logging.INFO:
        review_logger.setLevel(logging.INFO)

    return handler
