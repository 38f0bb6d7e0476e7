"""Tests for the telegraf --test configuration check."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from telegraf_deploy.errors import IOFailure, ValidationFailure
from telegraf_deploy.validator import run_config_test, validate_configuration

BINARY = Path("/opt/telegraf/telegraf")
BASE = Path("/opt/telegraf/telegraf.conf")
CONF_DIR = Path("/opt/telegraf/telegraf.d")


def _completed(returncode, stdout="", stderr=""):
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


@patch("telegraf_deploy.validator.subprocess.run")
def test_command_line(mock_run):
    mock_run.return_value = _completed(0, stdout="> cpu,host=a usage=1\n")

    assert run_config_test(BINARY, BASE, CONF_DIR) == 0

    command = mock_run.call_args[0][0]
    assert command == [
        str(BINARY),
        "--config", str(BASE),
        "--config-directory", str(CONF_DIR),
        "--test",
    ]


@patch("telegraf_deploy.validator.subprocess.run")
def test_nonzero_exit_is_validation_failure(mock_run):
    mock_run.return_value = _completed(1, stderr="E! error parsing dns.conf")

    with pytest.raises(ValidationFailure) as exc:
        validate_configuration(BINARY, BASE, CONF_DIR)

    assert exc.value.returncode == 1
    assert exc.value.exit_code == 4


@patch("telegraf_deploy.validator.subprocess.run", side_effect=subprocess.TimeoutExpired("telegraf", 300))
def test_timeout_is_invalid(_):
    with pytest.raises(ValidationFailure):
        validate_configuration(BINARY, BASE, CONF_DIR)


@patch("telegraf_deploy.validator.subprocess.run", side_effect=FileNotFoundError("no such file"))
def test_missing_binary_is_io_failure(_):
    with pytest.raises(IOFailure):
        run_config_test(BINARY, BASE, CONF_DIR)
