"""Logging helpers for telegraf-deploy."""

import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "telegraf-deploy"


def setup_logging(verbose: bool = False, log_path: Optional[Path] = None) -> logging.Logger:
    """Configure logging for a deployment run.

    The console handler writes to stderr so that stdout only carries the
    final summary. The log file always receives the full debug trace.

    Args:
        verbose: Emit the step-by-step trace on the console
        log_path: Transcript file, or None to skip it

    Returns:
        Configured logger instance
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Repeated runs in one process (tests, CliRunner) must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        transcript = logging.FileHandler(log_path, encoding="utf-8")
        transcript.setLevel(logging.DEBUG)
        transcript.setFormatter(formatter)
        logger.addHandler(transcript)

    return logger
