"""Domain models for gutenberg-ci-sync."""

from gutenberg_ci_sync.models.domain import (
    DispatchRequest,
    MirrorLookupOutcome,
    MirrorLookupResult,
    MirrorState,
    PassSummary,
    PullRequestRecord,
    ReconcileAction,
    ReconcileResult,
    TriggerReason,
    mirror_branch_name,
)

__all__ = [
    "DispatchRequest",
    "MirrorLookupOutcome",
    "MirrorLookupResult",
    "MirrorState",
    "PassSummary",
    "PullRequestRecord",
    "ReconcileAction",
    "ReconcileResult",
    "TriggerReason",
    "mirror_branch_name",
]
