"""
imgsync error types.

Only configuration-level failures are raised out of a sync pass; per-file
problems are recorded as item outcomes instead.
"""

from __future__ import annotations

from pathlib import Path


class ImgSyncError(Exception):
    """Base class for imgsync errors."""


class RootUnavailableError(ImgSyncError):
    """One of the two tree roots cannot be listed; the pass cannot run."""

    label = "Root"

    def __init__(self, root: Path, reason: str | None = None) -> None:
        self.root = root
        self.reason = reason
        message = f"{self.label} not available: {root}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class SourceRootMissingError(RootUnavailableError):
    """Raised when the source tree cannot be enumerated at all."""

    label = "Source root"


class ArtifactRootError(RootUnavailableError):
    """Raised when the artifact root exists but cannot be listed."""

    label = "Artifact root"
