"""Configuration test using the deployed agent's own dry-run mode."""

import logging
import subprocess
from pathlib import Path

from .errors import IOFailure, ValidationFailure

logger = logging.getLogger("telegraf-deploy")

# `telegraf --test` gathers every input once before exiting
TEST_TIMEOUT = 300  # seconds


def run_config_test(binary: Path, base_config: Path, config_dir: Path, timeout: int = TEST_TIMEOUT) -> int:
    """Run `telegraf --test` against the deployed configuration.

    Args:
        binary: Deployed telegraf executable
        base_config: Deployed telegraf.conf
        config_dir: Deployed telegraf.d directory

    Returns:
        The process exit status
    """
    command = [
        str(binary),
        "--config", str(base_config),
        "--config-directory", str(config_dir),
        "--test",
    ]
    logger.info(f"Testing configuration: {' '.join(command)}")

    try:
        result = subprocess.run(command, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError as e:
        raise IOFailure(f"Cannot run {binary}: {e}", binary) from e
    except subprocess.TimeoutExpired:
        logger.error(f"Configuration test timed out after {timeout}s")
        return -1
    except OSError as e:
        raise IOFailure(f"Cannot run {binary}: {e}", binary) from e

    if result.stdout:
        logger.debug(f"telegraf --test stdout:\n{result.stdout.rstrip()}")
    if result.stderr:
        logger.debug(f"telegraf --test stderr:\n{result.stderr.rstrip()}")

    return result.returncode


def validate_configuration(binary: Path, base_config: Path, config_dir: Path) -> None:
    """Raise ValidationFailure unless the configuration test passes."""
    returncode = run_config_test(binary, base_config, config_dir)
    if returncode != 0:
        logger.error(f"Configuration test failed (exit status {returncode}), check the log for details")
        raise ValidationFailure(returncode)
    logger.info("Configuration test passed")
