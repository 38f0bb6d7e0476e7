"""The fixed set of files a deployment manages."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .config import BASE_CONFIG, SYSTEM_CONFIG, DeployConfig
from .roles import ROLE_CONFIGS, HostFacts, select_role_configs


class ArtifactKind(Enum):
    BINARY = "binary"
    CONFIG = "config"


@dataclass(frozen=True)
class ManagedArtifact:
    """A file copied from the source directory into the install tree.

    `applies` is None for artifacts deployed on every host.
    """
    name: str
    source: Path
    destination: Path
    kind: ArtifactKind = ArtifactKind.CONFIG
    applies: Optional[Callable[[HostFacts], bool]] = None

    def in_scope(self, facts: HostFacts) -> bool:
        return self.applies is None or self.applies(facts)


def _role_applies(name: str) -> Callable[[HostFacts], bool]:
    return lambda facts: name in select_role_configs(facts)


def build_artifacts(config: DeployConfig) -> list[ManagedArtifact]:
    """All managed artifacts, in deployment order."""
    artifacts = [
        ManagedArtifact(
            name=config.binary_source.name,
            source=config.binary_source,
            destination=config.binary_destination,
            kind=ArtifactKind.BINARY,
        ),
        ManagedArtifact(
            name=BASE_CONFIG,
            source=config.source / BASE_CONFIG,
            destination=config.base_config_destination,
        ),
        ManagedArtifact(
            name=SYSTEM_CONFIG,
            source=config.source / SYSTEM_CONFIG,
            destination=config.config_directory / SYSTEM_CONFIG,
        ),
    ]

    for name in ROLE_CONFIGS:
        artifacts.append(
            ManagedArtifact(
                name=name,
                source=config.source / name,
                destination=config.config_directory / name,
                applies=_role_applies(name),
            )
        )

    return artifacts


def artifacts_in_scope(artifacts: list[ManagedArtifact], facts: HostFacts) -> list[ManagedArtifact]:
    return [artifact for artifact in artifacts if artifact.in_scope(facts)]
