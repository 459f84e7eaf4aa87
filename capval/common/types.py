"""
Shared type definitions for validation runs.

This module provides TypedDicts that keep the service and CLI layers
talking about results in the same shape.
"""

from __future__ import annotations

from typing import Any, TypedDict

# =============================================================================
# Base Result Types
# =============================================================================


class BaseResult(TypedDict, total=False):
    """
    Base result structure returned by service functions.
    """

    success: bool  # Whether the operation succeeded
    errors: list[str]  # List of error messages
    stats: dict[str, Any]  # Statistics about the operation


class CheckOutcome(TypedDict, total=False):
    """Outcome of a single Ampersand invocation."""

    exit_code: int | None  # None when the process could not be started
    lines: list[str]  # Relayed error stream, verbatim
    error: str | None  # Launch failure message


class ValidationResult(BaseResult, total=False):
    """
    Result of a validation run (full or partial mode).
    """

    mode: str  # 'full', 'partial' or 'standalone'
    collection: str  # Label of the analysed collection
    selected_rules: list[str] | None  # None means all universal rules
    files: dict[str, str]  # Logical name -> written path
    check: CheckOutcome  # Present when the checker was invoked
    timestamp: str  # ISO timestamp when completed
    duration_ms: int  # Duration in milliseconds


class StandaloneResult(BaseResult, total=False):
    """Result of writing the standalone rules file."""

    path: str
    include: str
