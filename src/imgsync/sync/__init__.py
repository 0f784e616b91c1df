"""
imgsync sync module.

Provides tree enumeration, staleness classification and the reconcile pass.
"""

from imgsync.sync.classify import classify, classify_times
from imgsync.sync.models import (
    FileEntry,
    ItemAction,
    ItemOutcome,
    PassReport,
    PassSummary,
    SyncDecision,
    TreeSnapshot,
)
from imgsync.sync.reconciler import Reconciler
from imgsync.sync.tree import (
    artifact_path_for,
    enumerate_files,
    normalize_key,
    relative_key,
    snapshot_tree,
)

__all__ = [
    "FileEntry",
    "ItemAction",
    "ItemOutcome",
    "PassReport",
    "PassSummary",
    "Reconciler",
    "SyncDecision",
    "TreeSnapshot",
    "artifact_path_for",
    "classify",
    "classify_times",
    "enumerate_files",
    "normalize_key",
    "relative_key",
    "snapshot_tree",
]
