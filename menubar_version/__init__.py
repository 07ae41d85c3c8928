"""
Menu Bar Version Checker

A SwiftBar/BitBar plugin that tells you when the host app or the plugin itself can be updated.
"""

__version__ = "0.1.0"

from .cli import main

__all__ = ["main"]
