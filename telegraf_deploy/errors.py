"""Errors raised by a deployment run.

Every error is fatal to the run and unwinds to the CLI, which maps it to
its exit code.
"""

from pathlib import Path
from typing import Optional


class DeployError(Exception):
    """Base class for fatal deployment errors."""

    exit_code = 1


class IOFailure(DeployError):
    """Copying, creating or reading a file failed."""

    exit_code = 1

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class MissingReferenceDigest(DeployError):
    """The binary's checksum file is absent but a comparison is required."""

    exit_code = 2

    def __init__(self, path: Path):
        super().__init__(f"Reference digest file not found: {path}")
        self.path = path


class RoleDetectionFailure(DeployError):
    """The host could not be queried for its roles and services."""

    exit_code = 3


class ValidationFailure(DeployError):
    """`telegraf --test` rejected the deployed configuration."""

    exit_code = 4

    def __init__(self, returncode: int):
        super().__init__(f"Configuration test failed with exit status {returncode}")
        self.returncode = returncode


class ServiceOperationFailure(DeployError):
    """Installing, starting or restarting the service failed."""

    exit_code = 5

    def __init__(self, action: str, service_name: str, detail: str = ""):
        message = f"Failed to {action} service '{service_name}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.action = action
        self.service_name = service_name
