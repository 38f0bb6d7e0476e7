"""Configuration for a Telegraf deployment run."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional
import logging
import os
import sys
import tempfile

logger = logging.getLogger("telegraf-deploy")

# Subdirectory of the install root holding every config except the base one
CONFIG_SUBDIR = "telegraf.d"
BASE_CONFIG = "telegraf.conf"
SYSTEM_CONFIG = "system.conf"
DIGEST_SUFFIX = ".sha256"

# Service names are interpolated into PowerShell commands
SERVICE_NAME_FORBIDDEN = "'\"`"


def is_windows() -> bool:
    return sys.platform.startswith("win")


def binary_name() -> str:
    """Agent executable name for the current platform."""
    return "telegraf.exe" if is_windows() else "telegraf"


def default_destination() -> Path:
    """Platform "Program Files"-style install root."""
    if is_windows():
        program_files = os.environ.get("ProgramFiles", r"C:\Program Files")
        return Path(program_files) / "telegraf"
    return Path("/opt/telegraf")


def default_log_path() -> Path:
    return Path(tempfile.gettempdir()) / "telegraf-deploy.log"


class ExecutionMode(Enum):
    NORMAL = "normal"
    DRY_RUN = "dry-run"


@dataclass
class ExecutionPolicy:
    """Decides whether a mutating step may run.

    Every component that changes the file system or the service asks
    `allows()` first. In dry-run mode the action is logged and refused;
    with a confirm callback the operator is asked for each action.
    """

    mode: ExecutionMode = ExecutionMode.NORMAL
    confirm: Optional[Callable[[str], bool]] = None

    @property
    def dry_run(self) -> bool:
        return self.mode is ExecutionMode.DRY_RUN

    def allows(self, action: str) -> bool:
        """Check whether `action` should be performed.

        Args:
            action: Human-readable description, e.g. "copy a to b"

        Returns:
            True if the caller should go ahead
        """
        if self.dry_run:
            logger.info(f"Dry run - would {action}")
            return False

        if self.confirm is not None and not self.confirm(action):
            logger.info(f"Declined: {action}")
            return False

        logger.debug(f"Performing: {action}")
        return True


@dataclass
class DeployConfig:
    """Configuration for a deployment run.

    Matches the CLI arguments:
    - --source: Directory holding the binary, its digest and config templates
    - --destination: Install root
    - --install-service: Whether to manage the service at all
    - --service-name: Service name (no whitespace)
    - --service-display-name: Service display name
    - --log-path: Transcript location
    - --dry-run / --confirm / --verbose
    """

    source: Path = field(default_factory=Path.cwd)
    destination: Path = field(default_factory=default_destination)

    # Service management
    install_service: bool = True
    service_name: str = "telegraf"
    service_display_name: str = "Telegraf"

    # Output
    log_path: Optional[Path] = field(default_factory=default_log_path)
    verbose: bool = False

    # Run behavior
    dry_run: bool = False
    confirm: bool = False

    @property
    def binary_source(self) -> Path:
        return self.source / binary_name()

    @property
    def digest_source(self) -> Path:
        """Plain-text SHA-256 of the binary, shipped next to it."""
        return self.source / f"{binary_name()}{DIGEST_SUFFIX}"

    @property
    def binary_destination(self) -> Path:
        return self.destination / binary_name()

    @property
    def base_config_destination(self) -> Path:
        return self.destination / BASE_CONFIG

    @property
    def config_directory(self) -> Path:
        return self.destination / CONFIG_SUBDIR

    @property
    def mode(self) -> ExecutionMode:
        return ExecutionMode.DRY_RUN if self.dry_run else ExecutionMode.NORMAL

    @classmethod
    def from_env(cls) -> "DeployConfig":
        """Create config from environment variables.

        Environment variables:
        - TELEGRAF_DEPLOY_SOURCE: Source directory
        - TELEGRAF_DEPLOY_DESTINATION: Install root
        - TELEGRAF_DEPLOY_INSTALL_SERVICE: Manage the service (default true)
        - TELEGRAF_DEPLOY_SERVICE_NAME: Service name
        - TELEGRAF_DEPLOY_SERVICE_DISPLAY_NAME: Service display name
        - TELEGRAF_DEPLOY_LOG_PATH: Transcript location
        - TELEGRAF_DEPLOY_DRY_RUN: Enable dry-run mode
        - TELEGRAF_DEPLOY_CONFIRM: Ask before each change
        - TELEGRAF_DEPLOY_VERBOSE: Step-by-step trace on the console
        """
        defaults = cls()
        source = os.environ.get("TELEGRAF_DEPLOY_SOURCE")
        destination = os.environ.get("TELEGRAF_DEPLOY_DESTINATION")
        log_path = os.environ.get("TELEGRAF_DEPLOY_LOG_PATH")
        return cls(
            source=Path(source) if source else defaults.source,
            destination=Path(destination) if destination else defaults.destination,
            install_service=_env_flag("TELEGRAF_DEPLOY_INSTALL_SERVICE", True),
            service_name=os.environ.get("TELEGRAF_DEPLOY_SERVICE_NAME", defaults.service_name),
            service_display_name=os.environ.get(
                "TELEGRAF_DEPLOY_SERVICE_DISPLAY_NAME", defaults.service_display_name
            ),
            log_path=Path(log_path) if log_path else defaults.log_path,
            verbose=_env_flag("TELEGRAF_DEPLOY_VERBOSE", False),
            dry_run=_env_flag("TELEGRAF_DEPLOY_DRY_RUN", False),
            confirm=_env_flag("TELEGRAF_DEPLOY_CONFIRM", False),
        )

    def validate(self) -> list[str]:
        """Validate configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.service_name:
            errors.append("service_name is required")
        elif any(ch.isspace() for ch in self.service_name):
            errors.append(f"service_name must not contain whitespace, got: {self.service_name!r}")
        elif any(ch in SERVICE_NAME_FORBIDDEN for ch in self.service_name):
            errors.append(f"service_name must not contain quotes, got: {self.service_name!r}")

        if not self.service_display_name.strip():
            errors.append("service_display_name must not be empty")

        if not self.source.is_dir():
            errors.append(f"source directory does not exist: {self.source}")

        if self.destination.exists() and not self.destination.is_dir():
            errors.append(f"destination exists and is not a directory: {self.destination}")

        return errors


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes")
