"""Run result accumulator and final summary."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Column, Table


class Outcome(Enum):
    CREATED = "created"
    UPDATED = "updated"
    IGNORED = "ignored"


class ValidationStatus(Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class ServiceAction(Enum):
    INSTALLED = "installed"
    RESTARTED = "restarted"
    NONE = "none"


@dataclass
class RunResult:
    """Everything a run did, in order.

    Each directory, artifact and the service is recorded exactly once.
    """
    dry_run: bool = False
    entries: list[tuple[str, Outcome]] = field(default_factory=list)
    validation: ValidationStatus = ValidationStatus.SKIPPED
    service_action: ServiceAction = ServiceAction.NONE

    def record(self, name: str, outcome: Outcome) -> None:
        self.entries.append((name, outcome))

    def count(self, outcome: Outcome) -> int:
        return sum(1 for _, recorded in self.entries if recorded is outcome)

    @property
    def created(self) -> int:
        return self.count(Outcome.CREATED)

    @property
    def updated(self) -> int:
        return self.count(Outcome.UPDATED)

    @property
    def ignored(self) -> int:
        return self.count(Outcome.IGNORED)

    @property
    def changed(self) -> bool:
        return self.created > 0 or self.updated > 0

    def outcome_of(self, name: str) -> Optional[Outcome]:
        for recorded_name, outcome in self.entries:
            if recorded_name == name:
                return outcome
        return None

    def to_dict(self) -> dict:
        return {
            "dry_run": self.dry_run,
            "created": self.created,
            "updated": self.updated,
            "ignored": self.ignored,
            "validation": self.validation.value,
            "service_action": self.service_action.value,
        }


def render_summary(result: RunResult, console: Optional[Console] = None) -> None:
    """Print the final tally to stdout."""
    console = console or Console()

    if not result.changed and not result.dry_run:
        console.print("Telegraf is already up to date.")
        return

    title = "Changes that would be made (dry run)" if result.dry_run else "Deployment summary"
    table = Table(
        Column("Created", justify="right"),
        Column("Updated", justify="right"),
        Column("Ignored", justify="right"),
        title=title,
        box=box.SIMPLE,
    )
    table.add_row(str(result.created), str(result.updated), str(result.ignored))
    console.print(table)

    if result.validation is not ValidationStatus.SKIPPED:
        console.print(f"Configuration test: {result.validation.value}")
    if result.service_action is not ServiceAction.NONE:
        console.print(f"Service: {result.service_action.value}")
