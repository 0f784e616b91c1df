"""
Pillow-backed image re-encoding.

The encoder is chosen from the source extension. Recognized extensions
without a dedicated encoder fall through to PASSTHROUGH, a plain byte
copy, rather than failing the pass.
"""

from __future__ import annotations

import os
import shutil
import uuid
from collections.abc import Callable
from pathlib import Path

from PIL import Image

from imgsync.core.config import EncodingConfig
from imgsync.core.logging import get_logger
from imgsync.transform.base import Transformer, TransformResult

logger = get_logger(__name__)

PASSTHROUGH = "passthrough"

# Modes the JPEG writer accepts without conversion
_JPEG_MODES = {"RGB", "L", "CMYK"}

Encoder = Callable[[Path, Path], None]


class ImageTransformer(Transformer):
    """Re-encodes images with per-format parameters from EncodingConfig."""

    name = "image"

    def __init__(self, encoding: EncodingConfig | None = None) -> None:
        self.encoding = encoding or EncodingConfig()
        self._encoders: dict[str, tuple[str, Encoder]] = {
            ".jpg": ("jpeg", self._encode_jpeg),
            ".jpeg": ("jpeg", self._encode_jpeg),
            ".png": ("png", self._encode_png),
            ".webp": ("webp", self._encode_webp),
        }

    def encoder_for(self, source: Path) -> str:
        """Name of the encoder that handles source."""
        return self._select(source)[0]

    def transform(self, source: Path, artifact: Path) -> TransformResult:
        encoder_name, encode = self._select(source)
        # Hidden sibling with a suffix the enumerator never recognizes
        staging = artifact.with_name(f".{artifact.name}.{uuid.uuid4().hex[:8]}.tmp")

        try:
            artifact.parent.mkdir(parents=True, exist_ok=True)
            encode(source, staging)
            os.replace(staging, artifact)
            bytes_written = artifact.stat().st_size
        except Exception as exc:
            staging.unlink(missing_ok=True)
            return TransformResult.failed(encoder_name, f"{type(exc).__name__}: {exc}")

        logger.debug(
            "Image encoded",
            source=str(source),
            artifact=str(artifact),
            encoder=encoder_name,
            bytes_written=bytes_written,
        )
        return TransformResult(success=True, encoder=encoder_name, bytes_written=bytes_written)

    def _select(self, source: Path) -> tuple[str, Encoder]:
        return self._encoders.get(source.suffix.lower(), (PASSTHROUGH, self._passthrough))

    def _encode_jpeg(self, source: Path, target: Path) -> None:
        params = self.encoding.jpeg
        with Image.open(source) as img:
            image = img if img.mode in _JPEG_MODES else img.convert("RGB")
            image.save(
                target,
                format="JPEG",
                quality=params.quality,
                optimize=params.optimize,
                progressive=params.progressive,
            )

    def _encode_png(self, source: Path, target: Path) -> None:
        params = self.encoding.png
        with Image.open(source) as img:
            img.save(
                target,
                format="PNG",
                compress_level=params.compress_level,
                optimize=params.optimize,
            )

    def _encode_webp(self, source: Path, target: Path) -> None:
        params = self.encoding.webp
        with Image.open(source) as img:
            img.save(
                target,
                format="WEBP",
                quality=params.quality,
                method=params.method,
                lossless=params.lossless,
            )

    def _passthrough(self, source: Path, target: Path) -> None:
        shutil.copyfile(source, target)
