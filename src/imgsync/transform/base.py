"""
Transform adapter boundary.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TransformResult:
    """Outcome of converting one source file into its artifact."""

    success: bool
    encoder: str
    reason: str | None = None
    bytes_written: int = 0

    @classmethod
    def failed(cls, encoder: str, reason: str) -> TransformResult:
        return cls(success=False, encoder=encoder, reason=reason)


class Transformer(ABC):
    """Converts a source file into the artifact at the mirrored path."""

    name = "transformer"

    @abstractmethod
    def transform(self, source: Path, artifact: Path) -> TransformResult:
        """
        Write the artifact for source.

        Implementations create missing parent directories and report
        item-level problems through the result instead of raising.
        """
