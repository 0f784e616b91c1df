"""
imgsync transform adapters.

The sync core only calls Transformer.transform and looks at the result.
"""

from imgsync.transform.base import Transformer, TransformResult
from imgsync.transform.images import PASSTHROUGH, ImageTransformer

__all__ = ["ImageTransformer", "PASSTHROUGH", "TransformResult", "Transformer"]
