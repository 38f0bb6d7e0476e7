#!/usr/bin/env python3
"""Telegraf Deploy - install or update Telegraf on this host.

Usage:
    python -m telegraf_deploy.main --source ./dist --destination "C:\\Program Files\\telegraf"

Or with environment variables:
    TELEGRAF_DEPLOY_SOURCE=./dist telegraf-deploy --dry-run
"""

import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import DeployConfig, ExecutionPolicy, default_destination, default_log_path
from .deploy import run_deployment
from .errors import DeployError
from .report import render_summary
from .utils import setup_logging


def confirm_action(action: str) -> bool:
    """Ask the operator before a mutating step."""
    return click.confirm(f"{action[0].upper()}{action[1:]}?", default=True, err=True)


@click.command()
@click.option("--source", envvar="TELEGRAF_DEPLOY_SOURCE", type=click.Path(path_type=Path), default=None, help="Directory with the binary, its .sha256 file and config templates (default: current directory)")
@click.option("--destination", envvar="TELEGRAF_DEPLOY_DESTINATION", type=click.Path(path_type=Path), default=None, help="Install root (default: Program Files\\telegraf or /opt/telegraf)")
@click.option("--install-service", envvar="TELEGRAF_DEPLOY_INSTALL_SERVICE", type=bool, default=True, show_default=True, help="Install, start or restart the service")
@click.option("--service-name", envvar="TELEGRAF_DEPLOY_SERVICE_NAME", default="telegraf", show_default=True, help="Service name (no whitespace)")
@click.option("--service-display-name", envvar="TELEGRAF_DEPLOY_SERVICE_DISPLAY_NAME", default="Telegraf", show_default=True, help="Service display name")
@click.option("--log-path", envvar="TELEGRAF_DEPLOY_LOG_PATH", type=click.Path(path_type=Path), default=None, help="Transcript file (default: telegraf-deploy.log in the temp directory)")
@click.option("--dry-run", envvar="TELEGRAF_DEPLOY_DRY_RUN", is_flag=True, help="Report what would change without changing anything")
@click.option("--confirm", envvar="TELEGRAF_DEPLOY_CONFIRM", is_flag=True, help="Ask before each change")
@click.option("--verbose", envvar="TELEGRAF_DEPLOY_VERBOSE", is_flag=True, help="Print the step-by-step trace to stderr")
@click.option("--version", is_flag=True, help="Show version and exit")
def main(
    source: Optional[Path],
    destination: Optional[Path],
    install_service: bool,
    service_name: str,
    service_display_name: str,
    log_path: Optional[Path],
    dry_run: bool,
    confirm: bool,
    verbose: bool,
    version: bool,
):
    """Deploy the Telegraf agent and its role configs to this host."""
    if version:
        click.echo(f"telegraf-deploy {__version__}")
        return

    config = DeployConfig(
        source=source or Path.cwd(),
        destination=destination or default_destination(),
        install_service=install_service,
        service_name=service_name,
        service_display_name=service_display_name,
        log_path=log_path or default_log_path(),
        verbose=verbose,
        dry_run=dry_run,
        confirm=confirm,
    )

    try:
        logger = setup_logging(verbose=verbose, log_path=config.log_path)
    except OSError as e:
        click.echo(f"Cannot open log file {config.log_path}: {e}", err=True)
        sys.exit(1)

    logger.info(f"Telegraf Deploy v{__version__}")
    logger.info(f"Source: {config.source}")
    logger.info(f"Destination: {config.destination}")

    # Validate config
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Config error: {error}")
        sys.exit(1)

    policy = ExecutionPolicy(mode=config.mode, confirm=confirm_action if confirm else None)

    try:
        result = run_deployment(config, policy)
    except DeployError as e:
        logger.error(f"Deployment failed: {e}")
        logger.warning(f"See {config.log_path} for the full trace")
        sys.exit(e.exit_code)

    render_summary(result)
    logger.info(f"Run complete: {result.to_dict()}")


if __name__ == "__main__":
    main()
