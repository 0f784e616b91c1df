"""
imgsync configuration management.

Provides centralized configuration with validation using Pydantic.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_EXTENSIONS = [".jpg", ".jpeg", ".png", ".webp"]
DEFAULT_HOME = Path.home() / ".imgsync"


def _expand(v: str | Path) -> Path:
    return Path(v).expanduser().resolve()


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_enabled: bool = True
    console_enabled: bool = True
    json_format: bool = False
    log_directory: Path = Field(default_factory=lambda: DEFAULT_HOME / "logs")

    @field_validator("log_directory", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return _expand(v)


class SyncConfig(BaseModel):
    """Which trees are mirrored and which files take part."""

    source_root: Path = Field(default_factory=lambda: Path("img"))
    artifact_root: Path = Field(default_factory=lambda: Path("compressed_img"))
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    workers: int = Field(default=1, ge=1, le=32)
    status_file: Path | None = None

    @field_validator("source_root", "artifact_root", mode="before")
    @classmethod
    def expand_root(cls, v: str | Path) -> Path:
        return _expand(v)

    @field_validator("status_file", mode="before")
    @classmethod
    def expand_status_file(cls, v: str | Path | None) -> Path | None:
        return None if v is None else _expand(v)

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        normalized: list[str] = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext or ext == ".":
                raise ValueError("extensions must not contain empty entries")
            if not ext.startswith("."):
                ext = f".{ext}"
            if ext not in normalized:
                normalized.append(ext)
        if not normalized:
            raise ValueError("at least one extension is required")
        return normalized


class JpegEncoding(BaseModel):
    """JPEG encoder parameters."""

    quality: int = Field(default=80, ge=1, le=95)
    optimize: bool = True
    progressive: bool = True


class PngEncoding(BaseModel):
    """PNG encoder parameters."""

    compress_level: int = Field(default=9, ge=0, le=9)
    optimize: bool = False


class WebpEncoding(BaseModel):
    """WebP encoder parameters."""

    quality: int = Field(default=80, ge=0, le=100)
    method: int = Field(default=4, ge=0, le=6)
    lossless: bool = False


class EncodingConfig(BaseModel):
    """Per-format encoder parameters, opaque to the sync core."""

    jpeg: JpegEncoding = Field(default_factory=JpegEncoding)
    png: PngEncoding = Field(default_factory=PngEncoding)
    webp: WebpEncoding = Field(default_factory=WebpEncoding)


class ScheduleConfig(BaseModel):
    """When passes run and what happens when they overlap."""

    interval_seconds: float = Field(default=120.0, gt=0)
    run_immediately: bool = True
    overlap_policy: Literal["skip", "queue"] = "skip"


class ImgSyncConfig(BaseModel):
    """Main imgsync configuration."""

    sync: SyncConfig = Field(default_factory=SyncConfig)
    encoding: EncodingConfig = Field(default_factory=EncodingConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> ImgSyncConfig:
        """Load configuration from file or create default."""
        if config_path is None:
            config_path = DEFAULT_HOME / "config.json"

        if config_path.exists():
            with open(config_path) as f:
                data = json.load(f)
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = DEFAULT_HOME / "config.json"

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

    def ensure_directories(self) -> None:
        """Create all required directories."""
        if self.logging.file_enabled:
            self.logging.log_directory.mkdir(parents=True, exist_ok=True)
        if self.sync.status_file:
            self.sync.status_file.parent.mkdir(parents=True, exist_ok=True)


def get_default_config() -> ImgSyncConfig:
    """Get the default configuration."""
    return ImgSyncConfig()


def load_config(config_path: Path | None = None) -> ImgSyncConfig:
    """Load or create configuration."""
    config = ImgSyncConfig.load(config_path)
    config.ensure_directories()
    return config
