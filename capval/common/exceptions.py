"""
Exception hierarchy for capval.

All errors raised by adapters and modules derive from CapvalError so that
services can catch them in one place and report them through result dicts.
"""

from __future__ import annotations

__all__ = [
    "CapvalError",
    "ModelError",
    "GenerationError",
    "CheckerError",
]


class CapvalError(Exception):
    """Base exception for capval."""


class ModelError(CapvalError):
    """Raised when an ArchiMate model cannot be read or projected."""


class GenerationError(CapvalError):
    """Raised when a generated ADL file cannot be written."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to write {path}: {message}")


class CheckerError(CapvalError):
    """Raised when the Ampersand checker cannot be launched."""
