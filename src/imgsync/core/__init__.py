"""
imgsync Core - configuration, logging and error types shared by all layers.
"""

from imgsync.core.config import ImgSyncConfig, load_config
from imgsync.core.errors import (
    ArtifactRootError,
    ImgSyncError,
    RootUnavailableError,
    SourceRootMissingError,
)
from imgsync.core.logging import OperationLogger, get_logger, setup_logging

__all__ = [
    "ArtifactRootError",
    "ImgSyncConfig",
    "ImgSyncError",
    "OperationLogger",
    "RootUnavailableError",
    "SourceRootMissingError",
    "get_logger",
    "load_config",
    "setup_logging",
]
