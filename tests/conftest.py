"""
Pytest configuration and fixtures for imgsync tests.
"""

import os
import sys
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Generator

import pytest
from PIL import Image

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def source_root(temp_dir: Path) -> Path:
    root = temp_dir / "img"
    root.mkdir()
    return root


@pytest.fixture
def artifact_root(temp_dir: Path) -> Path:
    return temp_dir / "compressed_img"


@pytest.fixture
def make_image() -> Callable[..., Path]:
    """Write a small generated image, creating parent directories."""

    def _make(
        path: Path,
        size: tuple[int, int] = (16, 16),
        color: tuple[int, ...] = (200, 40, 40),
        mode: str = "RGB",
        mtime: float | None = None,
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        fmt = {
            ".jpg": "JPEG",
            ".jpeg": "JPEG",
            ".png": "PNG",
            ".webp": "WEBP",
        }[path.suffix.lower()]
        Image.new(mode, size, color).save(path, format=fmt)
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _make


@pytest.fixture
def set_mtime() -> Callable[[Path, float], None]:
    def _set(path: Path, mtime: float) -> None:
        os.utime(path, (mtime, mtime))

    return _set


@pytest.fixture
def sample_config(temp_dir: Path, source_root: Path, artifact_root: Path) -> "ImgSyncConfig":
    """Create a sample configuration for testing."""
    from imgsync.core.config import ImgSyncConfig

    config = ImgSyncConfig.model_validate(
        {
            "sync": {
                "source_root": str(source_root),
                "artifact_root": str(artifact_root),
                "status_file": str(temp_dir / "state" / "status.json"),
            },
            "logging": {
                "file_enabled": False,
                "console_enabled": False,
                "log_directory": str(temp_dir / "logs"),
            },
        }
    )
    config.ensure_directories()
    return config


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")
