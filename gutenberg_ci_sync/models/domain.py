"""
Domain models for a reconciliation pass.

Everything here is created, used, and discarded while processing a single
pull request. Nothing is persisted between runs.

Example:
    Deciding what to send for an upstream pull request::

        pr = PullRequestRecord(
            number=42,
            head_commit_hash="3f786850e387550fdab836ed7e6dc881de23001b",
            head_branch_name="rnmobile/fix-toolbar",
            head_owner_login="WordPress",
        )
        request = DispatchRequest(
            target_ref="trunk",
            mirror_branch_name=mirror_branch_name(pr.number),
            upstream_branch_name=pr.head_branch_name,
        )
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_MIRROR_SOURCE = "gutenberg"


def mirror_branch_name(pr_number: int, source: str = DEFAULT_MIRROR_SOURCE) -> str:
    """Derive the control repository branch that mirrors an upstream PR.

    Args:
        pr_number: Upstream pull request number
        source: Name of the upstream project the branch mirrors

    Returns:
        Branch name of the form ``automated-<source>-update/for-pr-<number>``

    Raises:
        ValueError: If pr_number is not a positive integer
    """
    if isinstance(pr_number, bool) or not isinstance(pr_number, int) or pr_number < 1:
        raise ValueError(f"Pull request number must be a positive integer, got: {pr_number!r}")
    return f"automated-{source}-update/for-pr-{pr_number}"


@dataclass(frozen=True)
class PullRequestRecord:
    """Snapshot of an open upstream pull request."""

    number: int
    head_commit_hash: str
    head_branch_name: str
    head_owner_login: str


@dataclass(frozen=True)
class MirrorState:
    """Commit currently recorded on a mirror branch."""

    commit_hash: str


class MirrorLookupOutcome(str, Enum):
    """Result classes of a mirror state lookup."""

    FOUND = "found"
    """The mirror exists and records a commit hash."""

    NOT_FOUND = "not_found"
    """The mirror has not been created yet."""

    LOOKUP_FAILED = "lookup_failed"
    """The lookup failed; the mirror state is unknown."""


@dataclass(frozen=True)
class MirrorLookupResult:
    """Outcome of reading the mirror state for one branch."""

    branch_name: str
    outcome: MirrorLookupOutcome
    state: MirrorState | None = None
    error: str | None = None

    @classmethod
    def found(cls, branch_name: str, commit_hash: str) -> "MirrorLookupResult":
        return cls(branch_name, MirrorLookupOutcome.FOUND, state=MirrorState(commit_hash))

    @classmethod
    def not_found(cls, branch_name: str) -> "MirrorLookupResult":
        return cls(branch_name, MirrorLookupOutcome.NOT_FOUND)

    @classmethod
    def failed(cls, branch_name: str, error: str) -> "MirrorLookupResult":
        return cls(branch_name, MirrorLookupOutcome.LOOKUP_FAILED, error=error)


@dataclass(frozen=True)
class DispatchRequest:
    """Parameters of a CI workflow dispatch.

    Attributes:
        target_ref: Control repository branch the workflow runs on
        mirror_branch_name: Mirror branch the workflow should update
        upstream_branch_name: Upstream PR branch the mirror should track
    """

    target_ref: str
    mirror_branch_name: str
    upstream_branch_name: str

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON body expected by the workflow dispatch endpoint."""
        return {
            "ref": self.target_ref,
            "inputs": {
                "pr_branch_name": self.mirror_branch_name,
                "gutenberg_branch_name": self.upstream_branch_name,
            },
        }


class TriggerReason(str, Enum):
    """Why a CI trigger is owed for a pull request."""

    MIRROR_MISSING = "mirror_missing"
    MIRROR_STALE = "mirror_stale"
    LOOKUP_FAILED = "lookup_failed"


class ReconcileAction(str, Enum):
    """What the reconciler did for a pull request."""

    SKIPPED_FOREIGN_OWNER = "skipped_foreign_owner"
    IN_SYNC = "in_sync"
    DISPATCHED = "dispatched"
    WOULD_DISPATCH = "would_dispatch"
    DISPATCH_FAILED = "dispatch_failed"
    ERRORED = "errored"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of reconciling one pull request."""

    pr_number: int
    action: ReconcileAction
    mirror_branch: str | None = None
    reason: TriggerReason | None = None
    error: str | None = None


@dataclass
class PassSummary:
    """Results of a whole reconciliation pass, in upstream order."""

    results: list[ReconcileResult] = field(default_factory=list)

    def count(self, action: ReconcileAction) -> int:
        return sum(1 for result in self.results if result.action == action)

    @property
    def dispatched(self) -> int:
        return self.count(ReconcileAction.DISPATCHED)

    @property
    def failed(self) -> int:
        return self.count(ReconcileAction.DISPATCH_FAILED) + self.count(ReconcileAction.ERRORED)

    @property
    def skipped(self) -> int:
        return self.count(ReconcileAction.SKIPPED_FOREIGN_OWNER)

    @property
    def in_sync(self) -> int:
        return self.count(ReconcileAction.IN_SYNC)
