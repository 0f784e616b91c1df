"""
imgsync - Keeps a compressed image tree mirrored from a source tree.

Runs recurring passes that re-encode new or modified images into the
artifact tree and prune artifacts whose source image was removed.
"""

__version__ = "1.0.0"
__author__ = "imgsync Team"

from imgsync.core.config import ImgSyncConfig
from imgsync.sync.reconciler import Reconciler

__all__ = ["ImgSyncConfig", "Reconciler", "__version__"]
