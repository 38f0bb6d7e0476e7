"""Tests for DeployConfig and ExecutionPolicy."""

from pathlib import Path
from unittest.mock import patch

import pytest

from telegraf_deploy.config import DeployConfig, ExecutionMode, ExecutionPolicy, default_destination


def test_derived_paths(tmp_path):
    config = DeployConfig(source=tmp_path / "src", destination=tmp_path / "dst")

    assert config.base_config_destination == tmp_path / "dst" / "telegraf.conf"
    assert config.config_directory == tmp_path / "dst" / "telegraf.d"
    assert config.digest_source.name == f"{config.binary_source.name}.sha256"


def test_validate_ok(deploy_config):
    assert deploy_config.validate() == []


def test_validate_errors(tmp_path):
    config = DeployConfig(
        source=tmp_path / "missing",
        destination=tmp_path,
        service_name="my service",
        service_display_name=" ",
    )
    errors = config.validate()

    assert len(errors) == 3
    assert any("whitespace" in e for e in errors)


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("TELEGRAF_DEPLOY_SOURCE", str(tmp_path))
    monkeypatch.setenv("TELEGRAF_DEPLOY_SERVICE_NAME", "telegraf-ad")
    monkeypatch.setenv("TELEGRAF_DEPLOY_INSTALL_SERVICE", "false")
    monkeypatch.setenv("TELEGRAF_DEPLOY_DRY_RUN", "1")
    monkeypatch.setenv("TELEGRAF_DEPLOY_CONFIRM", "true")
    monkeypatch.setenv("TELEGRAF_DEPLOY_VERBOSE", "yes")

    config = DeployConfig.from_env()

    assert config.source == tmp_path
    assert config.service_name == "telegraf-ad"
    assert config.install_service is False
    assert config.mode is ExecutionMode.DRY_RUN
    assert config.confirm is True
    assert config.verbose is True


@patch("telegraf_deploy.config.is_windows", return_value=True)
def test_windows_default_destination(_, monkeypatch):
    monkeypatch.setenv("ProgramFiles", r"D:\Apps")
    assert default_destination() == Path(r"D:\Apps") / "telegraf"


def test_policy_modes():
    asked = []

    assert ExecutionPolicy().allows("copy a to b")
    assert not ExecutionPolicy(mode=ExecutionMode.DRY_RUN).allows("copy a to b")
    assert ExecutionPolicy(confirm=lambda action: asked.append(action) or True).allows("copy a to b")
    assert asked == ["copy a to b"]


@pytest.mark.parametrize("name", ["telegraf'", 'tele"graf', "tele`graf"])
def test_validate_rejects_quotes_in_service_name(deploy_config, name):
    deploy_config.service_name = name

    errors = deploy_config.validate()

    assert len(errors) == 1
    assert "quotes" in errors[0]
