"""
Tree enumeration and relative-path keys.

Both trees are walked the same way and joined on forward-slash relative
keys, so keys compare equal whatever separator the platform uses.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePath
from typing import Iterable

from imgsync.core.logging import get_logger
from imgsync.sync.models import FileEntry, TreeSnapshot

logger = get_logger(__name__)


def normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    return frozenset(
        ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions
    )


def normalize_key(raw: str) -> str:
    """Turn a relative path in any separator style into a canonical key."""
    parts = [part for part in raw.replace("\\", "/").split("/") if part not in ("", ".")]
    return "/".join(parts)


def relative_key(root: PurePath, path: PurePath) -> str:
    return normalize_key(path.relative_to(root).as_posix())


def artifact_path_for(artifact_root: Path, key: str) -> Path:
    return artifact_root.joinpath(*key.split("/"))


def enumerate_files(
    root: Path,
    extensions: Iterable[str],
    unreadable: dict[Path, str] | None = None,
) -> list[Path]:
    """
    List every recognized file below root.

    Traversal is iterative, so nesting depth is bounded only by the
    filesystem. Directory symlinks are not followed. Unreadable
    subdirectories are logged and skipped, and reported through
    ``unreadable`` (path to reason) when given; a missing root raises
    FileNotFoundError.
    """
    wanted = normalize_extensions(extensions)
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"Directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    results: list[Path] = []
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    if entry.is_dir(follow_symlinks=False):
                        stack.append(Path(entry.path))
                    elif entry.is_file() and os.path.splitext(entry.name)[1].lower() in wanted:
                        results.append(Path(entry.path))
        except OSError as exc:
            if current == root:
                raise
            logger.warning("Skipping unreadable directory", path=str(current), error=str(exc))
            if unreadable is not None:
                unreadable[current] = str(exc)
    return results


def snapshot_tree(root: Path, extensions: Iterable[str]) -> TreeSnapshot:
    """
    Enumerate root and stat each file, keyed by relative key.

    Files that vanish between listing and stat are left out. Any other
    read failure is kept in the snapshot so the key is not mistaken for
    a deleted one.
    """
    root = Path(root)
    snapshot = TreeSnapshot()
    failed_dirs: dict[Path, str] = {}
    for path in enumerate_files(root, extensions, unreadable=failed_dirs):
        key = relative_key(root, path)
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            logger.debug("File vanished before stat", path=str(path))
            continue
        except OSError as exc:
            logger.warning("Could not read file", path=str(path), error=str(exc))
            snapshot.unreadable_files[key] = str(exc)
            continue
        snapshot.entries[key] = FileEntry(key=key, path=path, mtime=mtime)
    for path, reason in failed_dirs.items():
        snapshot.unreadable_dirs[relative_key(root, path)] = reason
    return snapshot
