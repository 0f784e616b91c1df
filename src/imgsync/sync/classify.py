"""
Staleness classification by modification time.

Equal timestamps count as current: a pass never redoes work it cannot
prove is needed. Content is not hashed, so touching a source file is
enough to trigger an update.
"""

from __future__ import annotations

import os
from pathlib import Path

from imgsync.sync.models import SyncDecision


def classify_times(source_mtime: float, artifact_mtime: float | None) -> SyncDecision:
    if artifact_mtime is None:
        return SyncDecision.CREATE
    if source_mtime > artifact_mtime:
        return SyncDecision.UPDATE
    return SyncDecision.CURRENT


def classify(
    source_path: Path,
    artifact_path: Path,
    source_mtime: float | None = None,
) -> SyncDecision:
    """
    Decide whether artifact_path has to be (re)built from source_path.

    Raises OSError if the source cannot be stat'ed.
    """
    if source_mtime is None:
        source_mtime = os.stat(source_path).st_mtime
    try:
        artifact_mtime: float | None = os.stat(artifact_path).st_mtime
    except FileNotFoundError:
        artifact_mtime = None
    return classify_times(source_mtime, artifact_mtime)
