"""Service lifecycle for the deployed agent.

States: NotInstalled, Installed-Stopped, Installed-Running.

- NotInstalled -> install, then start
- Installed (any) -> restart, so the new configuration is loaded
"""

import logging
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import psutil

from .config import ExecutionPolicy, is_windows
from .errors import ServiceOperationFailure
from .report import Outcome, RunResult, ServiceAction

logger = logging.getLogger("telegraf-deploy")

SERVICE_TIMEOUT = 120  # seconds


@dataclass
class ServiceState:
    """Observed state of the managed service."""
    name: str
    display_name: str
    installed: bool = False
    running: bool = False

    @property
    def status(self) -> str:
        if not self.installed:
            return "NotInstalled"
        return "Installed-Running" if self.running else "Installed-Stopped"


class ServiceBackend:
    """Platform service manager. Subclasses implement every method."""

    def query(self, name: str, display_name: str) -> ServiceState:
        raise NotImplementedError

    def install(self, state: ServiceState, binary: Path, base_config: Path, config_dir: Path) -> None:
        raise NotImplementedError

    def start(self, name: str) -> None:
        raise NotImplementedError

    def restart(self, name: str) -> None:
        raise NotImplementedError


def _run(action: str, name: str, command: list[str]) -> None:
    """Run a service-manager command, raising on any failure."""
    logger.debug(f"Running: {' '.join(command)}")
    try:
        result = subprocess.run(command, capture_output=True, text=True, timeout=SERVICE_TIMEOUT)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ServiceOperationFailure(action, name, str(e)) from e

    if result.returncode != 0:
        detail = (result.stderr or result.stdout).strip()
        raise ServiceOperationFailure(action, name, f"exit status {result.returncode}: {detail}")


class WindowsServiceBackend(ServiceBackend):
    """Windows Service Control Manager via telegraf's own installer and PowerShell."""

    def query(self, name: str, display_name: str) -> ServiceState:
        state = ServiceState(name=name, display_name=display_name)
        try:
            service = psutil.win_service_get(name)
            status = service.status()
        except psutil.NoSuchProcess:
            return state
        except (OSError, psutil.Error) as e:
            raise ServiceOperationFailure("query", name, str(e)) from e

        state.installed = True
        state.running = status == "running"
        return state

    def install(self, state: ServiceState, binary: Path, base_config: Path, config_dir: Path) -> None:
        _run("install", state.name, [
            str(binary),
            "--service", "install",
            "--service-name", state.name,
            "--service-display-name", state.display_name,
            "--config", str(base_config),
            "--config-directory", str(config_dir),
        ])

    def start(self, name: str) -> None:
        _run("start", name, _powershell(f"Start-Service -Name '{name}'"))

    def restart(self, name: str) -> None:
        # Restart-Service also starts a stopped service
        _run("restart", name, _powershell(f"Restart-Service -Name '{name}' -Force"))


def _powershell(command: str) -> list[str]:
    return ["powershell.exe", "-NoProfile", "-NonInteractive", "-Command", command]


UNIT_TEMPLATE = """[Unit]
Description={display_name}
After=network-online.target
Wants=network-online.target

[Service]
ExecStart={binary} --config {base_config} --config-directory {config_dir}
Restart=on-failure

[Install]
WantedBy=multi-user.target
"""


class SystemdServiceBackend(ServiceBackend):
    """systemd units for non-Windows hosts."""

    def __init__(self, unit_dir: Path = Path("/etc/systemd/system")):
        self.unit_dir = unit_dir

    def query(self, name: str, display_name: str) -> ServiceState:
        state = ServiceState(name=name, display_name=display_name)
        command = ["systemctl", "show", f"{name}.service", "--property=LoadState,ActiveState"]
        try:
            result = subprocess.run(command, capture_output=True, text=True, timeout=SERVICE_TIMEOUT)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ServiceOperationFailure("query", name, str(e)) from e
        if result.returncode != 0:
            raise ServiceOperationFailure("query", name, result.stderr.strip())

        properties = dict(
            line.split("=", 1) for line in result.stdout.splitlines() if "=" in line
        )
        state.installed = properties.get("LoadState") == "loaded"
        state.running = properties.get("ActiveState") == "active"
        return state

    def install(self, state: ServiceState, binary: Path, base_config: Path, config_dir: Path) -> None:
        unit_path = self.unit_dir / f"{state.name}.service"
        unit = UNIT_TEMPLATE.format(
            display_name=state.display_name,
            binary=binary,
            base_config=base_config,
            config_dir=config_dir,
        )
        try:
            unit_path.write_text(unit, encoding="utf-8")
        except OSError as e:
            raise ServiceOperationFailure("install", state.name, str(e)) from e
        _run("install", state.name, ["systemctl", "daemon-reload"])
        _run("install", state.name, ["systemctl", "enable", f"{state.name}.service"])

    def start(self, name: str) -> None:
        _run("start", name, ["systemctl", "start", f"{name}.service"])

    def restart(self, name: str) -> None:
        _run("restart", name, ["systemctl", "restart", f"{name}.service"])


def default_backend() -> ServiceBackend:
    """Service backend for the current platform."""
    if is_windows():
        return WindowsServiceBackend()
    if sys.platform.startswith("linux"):
        return SystemdServiceBackend()
    raise ServiceOperationFailure("manage", "telegraf", f"unsupported platform: {sys.platform}")


class ServiceActivator:
    """Moves the service to Installed-Running after a validated change."""

    def __init__(self, backend: ServiceBackend, policy: ExecutionPolicy, result: RunResult):
        self.backend = backend
        self.policy = policy
        self.result = result

    def activate(
        self,
        state: ServiceState,
        binary: Path,
        base_config: Path,
        config_dir: Path,
    ) -> Optional[ServiceAction]:
        """Install and start, or restart, the service.

        Returns:
            The action taken (or that would be taken in dry-run), None if declined
        """
        logger.info(f"Service '{state.name}' is {state.status}")

        if not state.installed:
            if not self.policy.allows(f"install and start service '{state.name}'"):
                return self._skipped(state, ServiceAction.INSTALLED)
            self.backend.install(state, binary, base_config, config_dir)
            logger.info(f"Installed service '{state.name}'")
            self.backend.start(state.name)
            logger.info(f"Started service '{state.name}'")
            self.result.record(f"service {state.name}", Outcome.CREATED)
            self.result.service_action = ServiceAction.INSTALLED
            return ServiceAction.INSTALLED

        if not self.policy.allows(f"restart service '{state.name}'"):
            return self._skipped(state, ServiceAction.RESTARTED)
        self.backend.restart(state.name)
        logger.info(f"Restarted service '{state.name}'")
        self.result.service_action = ServiceAction.RESTARTED
        return ServiceAction.RESTARTED

    def _skipped(self, state: ServiceState, action: ServiceAction) -> Optional[ServiceAction]:
        if not self.policy.dry_run:
            return None
        if action is ServiceAction.INSTALLED:
            self.result.record(f"service {state.name}", Outcome.CREATED)
        self.result.service_action = action
        return action
