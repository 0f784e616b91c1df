"""
imgsync reconciler.

One pass enumerates both trees, re-encodes every source image whose
artifact is missing or older, then deletes the artifacts no source
entry claimed. A failing or unreadable file is recorded and the pass
moves on; only a tree root that cannot be listed aborts a pass.
"""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path

from imgsync.core.config import SyncConfig
from imgsync.core.errors import ArtifactRootError, SourceRootMissingError
from imgsync.core.logging import OperationLogger, get_logger
from imgsync.sync.classify import classify
from imgsync.sync.models import (
    FileEntry,
    ItemAction,
    ItemOutcome,
    PassReport,
    TreeSnapshot,
    action_for,
)
from imgsync.sync.tree import artifact_path_for, enumerate_files, relative_key, snapshot_tree
from imgsync.transform.base import Transformer

logger = get_logger(__name__)


class Reconciler:
    """Keeps the artifact tree mirrored from the source tree."""

    def __init__(self, config: SyncConfig, transformer: Transformer) -> None:
        self.config = config
        self.transformer = transformer

    @property
    def source_root(self) -> Path:
        return self.config.source_root

    @property
    def artifact_root(self) -> Path:
        return self.config.artifact_root

    def ensure_artifact_root(self) -> None:
        try:
            self.artifact_root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArtifactRootError(self.artifact_root, str(exc)) from exc

    def run_pass(self, dry_run: bool = False) -> PassReport:
        """
        Run one full reconcile pass.

        Raises:
            SourceRootMissingError: the source tree cannot be listed.
            ArtifactRootError: the artifact root exists but cannot be listed.
        """
        report = PassReport(
            source_root=str(self.source_root),
            artifact_root=str(self.artifact_root),
            started_at=datetime.now(),
            dry_run=dry_run,
        )

        with OperationLogger(
            "sync pass",
            logger,
            source_root=report.source_root,
            artifact_root=report.artifact_root,
            dry_run=dry_run,
        ) as op:
            try:
                sources = snapshot_tree(self.source_root, self.config.extensions)
            except OSError as exc:
                raise SourceRootMissingError(self.source_root, str(exc)) from exc

            orphan_keys = self._artifact_keys()

            for outcome in self._process_sources(sources.entries.values(), dry_run):
                report.record(outcome)
                # Failed transforms still claim their key
                orphan_keys.discard(outcome.key)

            for outcome in self._unreadable_outcomes(sources):
                report.record(outcome)

            # Artifacts under an unreadable source path are never pruned
            for key in sorted(orphan_keys):
                if sources.is_unreadable(key):
                    logger.info("Keeping artifact of unreadable source", key=key)
                    continue
                report.record(self._prune(key, dry_run))

            report.ended_at = datetime.now()
            op.update(
                created=report.summary.created,
                updated=report.summary.updated,
                current=report.summary.current,
                deleted=report.summary.deleted,
                failed=report.summary.failed,
            )

        if not dry_run:
            self.save_status(report)
        return report

    def save_status(self, report: PassReport) -> None:
        """Persist the pass report to the configured status file."""
        path = self.config.status_file
        if path is None:
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as handle:
                json.dump(report.to_dict(), handle, indent=2)
        except OSError as exc:
            logger.warning("Could not write status file", path=str(path), error=str(exc))

    def load_status(self) -> dict[str, object] | None:
        """Load the last persisted pass report."""
        path = self.config.status_file
        if path is None or not path.exists():
            return None
        with open(path) as handle:
            return json.load(handle)

    def _artifact_keys(self) -> set[str]:
        try:
            paths = enumerate_files(self.artifact_root, self.config.extensions)
        except FileNotFoundError:
            logger.info("Artifact root missing, treating as empty", path=str(self.artifact_root))
            return set()
        except OSError as exc:
            raise ArtifactRootError(self.artifact_root, str(exc)) from exc
        return {relative_key(self.artifact_root, path) for path in paths}

    def _unreadable_outcomes(self, sources: TreeSnapshot) -> list[ItemOutcome]:
        outcomes = []
        for key, reason in sorted(sources.unreadable_files.items()):
            logger.error("Source file unreadable", key=key, reason=reason)
            outcomes.append(
                ItemOutcome(key=key, action=ItemAction.SKIPPED, success=False, reason=reason)
            )
        for key, reason in sorted(sources.unreadable_dirs.items()):
            logger.error("Source directory unreadable", key=f"{key}/", reason=reason)
            outcomes.append(
                ItemOutcome(key=f"{key}/", action=ItemAction.SKIPPED, success=False, reason=reason)
            )
        return outcomes

    def _process_sources(self, entries, dry_run: bool) -> list[ItemOutcome]:
        entries = list(entries)
        if self.config.workers > 1 and not dry_run and len(entries) > 1:
            with ThreadPoolExecutor(
                max_workers=self.config.workers,
                thread_name_prefix="imgsync-transform",
            ) as pool:
                return list(pool.map(lambda entry: self._process(entry, dry_run), entries))
        return [self._process(entry, dry_run) for entry in entries]

    def _process(self, entry: FileEntry, dry_run: bool) -> ItemOutcome:
        artifact = artifact_path_for(self.artifact_root, entry.key)

        try:
            decision = classify(entry.path, artifact, source_mtime=entry.mtime)
        except OSError as exc:
            logger.warning("Could not classify file", key=entry.key, error=str(exc))
            return ItemOutcome(key=entry.key, action=ItemAction.UPDATED, success=False, reason=str(exc))

        action = action_for(decision)
        if not decision.needs_transform:
            logger.debug("Artifact current", key=entry.key, outcome=action.value)
            return ItemOutcome(key=entry.key, action=action)

        if dry_run:
            logger.info("Artifact would be written", key=entry.key, outcome=action.value)
            return ItemOutcome(key=entry.key, action=action)

        try:
            result = self.transformer.transform(entry.path, artifact)
        except Exception as exc:
            logger.error("Transform raised", key=entry.key, outcome=action.value, error=str(exc))
            return ItemOutcome(key=entry.key, action=action, success=False, reason=str(exc))

        if not result.success:
            logger.error(
                "Transform failed",
                key=entry.key,
                outcome=action.value,
                encoder=result.encoder,
                reason=result.reason,
            )
            return ItemOutcome(key=entry.key, action=action, success=False, reason=result.reason)

        logger.info(
            "Artifact written",
            key=entry.key,
            outcome=action.value,
            encoder=result.encoder,
            bytes_written=result.bytes_written,
        )
        return ItemOutcome(key=entry.key, action=action, bytes_written=result.bytes_written)

    def _prune(self, key: str, dry_run: bool) -> ItemOutcome:
        artifact = artifact_path_for(self.artifact_root, key)
        if dry_run:
            logger.info("Artifact would be removed", key=key, outcome=ItemAction.DELETED.value)
            return ItemOutcome(key=key, action=ItemAction.DELETED)

        try:
            artifact.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Could not remove orphaned artifact", key=key, error=str(exc))
            return ItemOutcome(key=key, action=ItemAction.DELETED, success=False, reason=str(exc))

        logger.info("Orphaned artifact removed", key=key, outcome=ItemAction.DELETED.value)
        return ItemOutcome(key=key, action=ItemAction.DELETED)
