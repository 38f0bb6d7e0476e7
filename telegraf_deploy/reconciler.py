"""Create / update / skip decisions for managed files."""

import logging
import shutil
from pathlib import Path
from typing import Optional

from .artifacts import ArtifactKind, ManagedArtifact
from .config import ExecutionPolicy
from .errors import IOFailure
from .hashing import binary_matches, digests_match
from .report import Outcome, RunResult

logger = logging.getLogger("telegraf-deploy")


class ArtifactReconciler:
    """Brings destination files in line with their sources.

    Outcomes are recorded on the shared RunResult. In dry-run mode the
    outcome that would have happened is recorded, but nothing is written.
    """

    def __init__(self, policy: ExecutionPolicy, result: RunResult, digest_file: Optional[Path] = None):
        """Initialize reconciler.

        Args:
            policy: Dry-run / confirm policy for mutating steps
            result: Accumulator for outcomes
            digest_file: Reference checksum for the binary artifact
        """
        self.policy = policy
        self.result = result
        self.digest_file = digest_file

    def ensure_directory(self, path: Path, name: str) -> Outcome:
        """Create `path` if missing. Directories are never "updated"."""
        if path.is_dir():
            logger.debug(f"Directory exists: {path}")
            return self._record(name, Outcome.IGNORED)

        if self.policy.allows(f"create directory {path}"):
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise IOFailure(f"Cannot create directory {path}: {e}", path) from e
            logger.info(f"Created directory {path}")
            return self._record(name, Outcome.CREATED)

        return self._record(name, Outcome.CREATED if self.policy.dry_run else Outcome.IGNORED)

    def reconcile(self, artifact: ManagedArtifact) -> Outcome:
        """Apply the create / update / skip decision to one artifact."""
        if not artifact.source.is_file():
            raise IOFailure(f"Source file not found: {artifact.source}", artifact.source)

        if not artifact.destination.exists():
            outcome = Outcome.CREATED
        elif self._matches(artifact):
            logger.debug(f"{artifact.name} is up to date")
            return self._record(artifact.name, Outcome.IGNORED)
        else:
            outcome = Outcome.UPDATED

        verb = "create" if outcome is Outcome.CREATED else "update"
        if self.policy.allows(f"{verb} {artifact.destination} from {artifact.source}"):
            self._copy(artifact)
            logger.info(f"{outcome.value.capitalize()} {artifact.destination}")
            return self._record(artifact.name, outcome)

        return self._record(artifact.name, outcome if self.policy.dry_run else Outcome.IGNORED)

    def _matches(self, artifact: ManagedArtifact) -> bool:
        if artifact.kind is ArtifactKind.BINARY and self.digest_file is not None:
            return binary_matches(self.digest_file, artifact.destination)
        return digests_match(artifact.source, artifact.destination)

    def _copy(self, artifact: ManagedArtifact) -> None:
        try:
            shutil.copy2(artifact.source, artifact.destination)
        except OSError as e:
            raise IOFailure(
                f"Cannot copy {artifact.source} to {artifact.destination}: {e}",
                artifact.destination,
            ) from e

        if artifact.kind is ArtifactKind.BINARY and self.digest_file is not None and self.digest_file.is_file():
            if not binary_matches(self.digest_file, artifact.destination):
                raise IOFailure(
                    f"Copied {artifact.destination} does not match {self.digest_file}",
                    artifact.destination,
                )

    def _record(self, name: str, outcome: Outcome) -> Outcome:
        self.result.record(name, outcome)
        return outcome
