# OWSYNC Sync Results
# Outcomes of action synchronization and orphan reconciliation

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Outcome(str, Enum):
    """What happened to an action during a pass."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass
class ActionResult:
    """Result of synchronizing one action."""

    name: str
    outcome: Outcome
    fingerprint: str
    remote_fingerprint: Optional[str] = None
    dry_run: bool = False

    @property
    def uploaded(self) -> bool:
        """Check if content was (or, in a dry run, would be) uploaded."""
        return self.outcome != Outcome.UNCHANGED


@dataclass
class DeleteFailure:
    """A failed orphan deletion."""

    name: str
    error: str


@dataclass
class ReconcileResult:
    """Result of deleting orphaned remote actions."""

    orphans: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    already_gone: list[str] = field(default_factory=list)
    failures: list[DeleteFailure] = field(default_factory=list)
    dry_run: bool = False

    @property
    def success(self) -> bool:
        """Check if every orphan is gone."""
        return not self.failures


@dataclass
class DeployResult:
    """Result of a complete deployment run."""

    package: str
    actions: list[ActionResult] = field(default_factory=list)
    reconcile: Optional[ReconcileResult] = None
    dry_run: bool = False

    @property
    def processed_names(self) -> list[str]:
        """Names of all actions processed in this run, in processing order."""
        return [result.name for result in self.actions]

    @property
    def created(self) -> int:
        return sum(1 for r in self.actions if r.outcome == Outcome.CREATED)

    @property
    def updated(self) -> int:
        return sum(1 for r in self.actions if r.outcome == Outcome.UPDATED)

    @property
    def unchanged(self) -> int:
        return sum(1 for r in self.actions if r.outcome == Outcome.UNCHANGED)

    @property
    def success(self) -> bool:
        """Check if the run converged without collected failures."""
        return self.reconcile is None or self.reconcile.success
