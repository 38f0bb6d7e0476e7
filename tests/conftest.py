import pytest

from telegraf_deploy.config import BASE_CONFIG, SYSTEM_CONFIG, DeployConfig, binary_name
from telegraf_deploy.hashing import file_digest
from telegraf_deploy.roles import ROLE_CONFIGS
from telegraf_deploy.service import ServiceBackend, ServiceState


class FakeServiceBackend(ServiceBackend):
    """Records every call instead of touching the service manager."""

    def __init__(self, installed=False, running=False):
        self.installed = installed
        self.running = running
        self.calls = []

    def query(self, name, display_name):
        self.calls.append(("query", name))
        return ServiceState(name=name, display_name=display_name, installed=self.installed, running=self.running)

    def install(self, state, binary, base_config, config_dir):
        self.calls.append(("install", state.name))
        self.installed = True

    def start(self, name):
        self.calls.append(("start", name))
        self.running = True

    def restart(self, name):
        self.calls.append(("restart", name))
        self.running = True

    @property
    def mutations(self):
        return [call for call in self.calls if call[0] != "query"]


@pytest.fixture
def source_dir(tmp_path):
    """Source directory with a binary, its digest and every config template."""
    source = tmp_path / "source"
    source.mkdir()

    binary = source / binary_name()
    binary.write_bytes(b"\x7fELF fake telegraf binary")
    (source / f"{binary_name()}.sha256").write_text(file_digest(binary) + "\n")

    (source / BASE_CONFIG).write_text("[agent]\n  interval = \"10s\"\n")
    (source / SYSTEM_CONFIG).write_text("[[inputs.cpu]]\n")
    for name in ROLE_CONFIGS:
        (source / name).write_text(f"# {name}\n")

    return source


@pytest.fixture
def deploy_config(tmp_path, source_dir):
    return DeployConfig(
        source=source_dir,
        destination=tmp_path / "dest",
        log_path=tmp_path / "deploy.log",
    )


@pytest.fixture
def fake_backend():
    return FakeServiceBackend()


@pytest.fixture
def backend_factory():
    return FakeServiceBackend
