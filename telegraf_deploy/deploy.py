"""One deployment run: detect, reconcile, validate, activate."""

import logging
from typing import Optional

from .artifacts import artifacts_in_scope, build_artifacts
from .config import CONFIG_SUBDIR, DeployConfig, ExecutionPolicy
from .errors import ValidationFailure
from .reconciler import ArtifactReconciler
from .report import RunResult, ValidationStatus
from .roles import HostFacts, detect_host_facts
from .service import ServiceActivator, ServiceBackend, default_backend
from .validator import validate_configuration

logger = logging.getLogger("telegraf-deploy")


def run_deployment(
    config: DeployConfig,
    policy: Optional[ExecutionPolicy] = None,
    backend: Optional[ServiceBackend] = None,
    facts: Optional[HostFacts] = None,
) -> RunResult:
    """Deploy Telegraf according to `config`.

    Args:
        config: Deployment configuration
        policy: Dry-run / confirm policy (derived from config if omitted)
        backend: Service backend (platform default if omitted)
        facts: Pre-computed host facts (detected from the OS if omitted)

    Returns:
        RunResult with per-item outcomes, validation status and service action

    Raises:
        DeployError: on any fatal condition; files already copied stay in place
    """
    policy = policy or ExecutionPolicy(mode=config.mode)
    result = RunResult(dry_run=policy.dry_run)

    logger.info(f"Deploying from {config.source} to {config.destination} ({policy.mode.value})")

    if facts is None:
        facts = detect_host_facts()

    artifacts = artifacts_in_scope(build_artifacts(config), facts)
    logger.info(f"Artifacts in scope: {', '.join(a.name for a in artifacts)}")

    reconciler = ArtifactReconciler(policy, result, digest_file=config.digest_source)
    reconciler.ensure_directory(config.destination, "install directory")
    reconciler.ensure_directory(config.config_directory, CONFIG_SUBDIR)
    for artifact in artifacts:
        reconciler.reconcile(artifact)

    logger.info(f"Files: created={result.created} updated={result.updated} ignored={result.ignored}")

    state = None
    if config.install_service:
        backend = backend or default_backend()
        state = backend.query(config.service_name, config.service_display_name)

    # A missing service is a reason to act even when no file changed
    first_install = state is not None and not state.installed
    if not result.changed and not first_install:
        logger.info("No changes, skipping configuration test and service activation")
        return result

    if not policy.dry_run and not config.binary_destination.is_file():
        logger.warning(
            f"{config.binary_destination} was not deployed, skipping configuration test and service activation"
        )
        return result

    if policy.dry_run:
        logger.info("Dry run - would test configuration")
    else:
        try:
            validate_configuration(
                config.binary_destination,
                config.base_config_destination,
                config.config_directory,
            )
        except ValidationFailure:
            result.validation = ValidationStatus.FAILED
            raise
        result.validation = ValidationStatus.PASSED

    if state is not None:
        activator = ServiceActivator(backend, policy, result)
        activator.activate(
            state,
            config.binary_destination,
            config.base_config_destination,
            config.config_directory,
        )

    return result
