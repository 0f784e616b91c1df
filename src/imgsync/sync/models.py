"""
Data types produced and consumed during a single sync pass.

Nothing here outlives a pass except the serialized PassReport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class SyncDecision(Enum):
    """What a pass has to do for one source entry."""

    CREATE = "create"
    UPDATE = "update"
    CURRENT = "current"

    @property
    def needs_transform(self) -> bool:
        return self is not SyncDecision.CURRENT


class ItemAction(Enum):
    """Recorded action for one key in a pass."""

    CREATED = "created"
    UPDATED = "updated"
    CURRENT = "current"
    DELETED = "deleted"
    SKIPPED = "skipped"


_ACTION_FOR_DECISION = {
    SyncDecision.CREATE: ItemAction.CREATED,
    SyncDecision.UPDATE: ItemAction.UPDATED,
    SyncDecision.CURRENT: ItemAction.CURRENT,
}


def action_for(decision: SyncDecision) -> ItemAction:
    return _ACTION_FOR_DECISION[decision]


@dataclass(frozen=True)
class FileEntry:
    """A recognized file in either tree, keyed by its relative path."""

    key: str
    path: Path
    mtime: float


@dataclass
class TreeSnapshot:
    """
    Stat results for one tree plus whatever could not be read.

    Unreadable files and directories are keyed like entries; a directory
    key covers every key below it.
    """

    entries: dict[str, FileEntry] = field(default_factory=dict)
    unreadable_files: dict[str, str] = field(default_factory=dict)
    unreadable_dirs: dict[str, str] = field(default_factory=dict)

    def is_unreadable(self, key: str) -> bool:
        """True when key went unobserved because it or a parent could not be read."""
        if key in self.unreadable_files:
            return True
        return any(key.startswith(f"{prefix}/") for prefix in self.unreadable_dirs)


@dataclass
class ItemOutcome:
    key: str
    action: ItemAction
    success: bool = True
    reason: str | None = None
    bytes_written: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "key": self.key,
            "action": self.action.value,
            "success": self.success,
            "reason": self.reason,
            "bytes_written": self.bytes_written,
        }


@dataclass
class PassSummary:
    created: int = 0
    updated: int = 0
    current: int = 0
    deleted: int = 0
    failed: int = 0

    @property
    def total_changes(self) -> int:
        return self.created + self.updated + self.deleted


@dataclass
class PassReport:
    """Result of one reconcile pass."""

    source_root: str
    artifact_root: str
    started_at: datetime
    dry_run: bool = False
    ended_at: datetime | None = None
    summary: PassSummary = field(default_factory=PassSummary)
    outcomes: list[ItemOutcome] = field(default_factory=list)

    def record(self, outcome: ItemOutcome) -> None:
        """Append an outcome and keep the summary counters in step."""
        self.outcomes.append(outcome)
        if not outcome.success:
            self.summary.failed += 1
            return
        if outcome.action is ItemAction.CREATED:
            self.summary.created += 1
        elif outcome.action is ItemAction.UPDATED:
            self.summary.updated += 1
        elif outcome.action is ItemAction.DELETED:
            self.summary.deleted += 1
        elif outcome.action is ItemAction.SKIPPED:
            return
        else:
            self.summary.current += 1

    @property
    def success(self) -> bool:
        return self.summary.failed == 0

    @property
    def failures(self) -> list[ItemOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    @property
    def bytes_written(self) -> int:
        return sum(outcome.bytes_written for outcome in self.outcomes)

    @property
    def duration_seconds(self) -> float | None:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()

    def keys_with(self, action: ItemAction) -> list[str]:
        return sorted(
            outcome.key
            for outcome in self.outcomes
            if outcome.action is action and outcome.success
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "source_root": self.source_root,
            "artifact_root": self.artifact_root,
            "dry_run": self.dry_run,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_seconds": self.duration_seconds,
            "summary": {
                "created": self.summary.created,
                "updated": self.summary.updated,
                "current": self.summary.current,
                "deleted": self.summary.deleted,
                "failed": self.summary.failed,
            },
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }
