"""
imgsync CLI Module.

Provides command-line interface for running and scheduling sync passes.
"""

from imgsync.cli.main import main, cli

__all__ = ["main", "cli"]
