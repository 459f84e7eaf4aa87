"""Ampersand adapter - invoke the external relation-algebra checker.

Usage:
    from capval.adapters.ampersand import AmpersandChecker

    checker = AmpersandChecker("ampersand/ampersand")
    result = checker.check("rules.adl", cwd="output")
"""

from __future__ import annotations

from .manager import AmpersandChecker, CheckResult

__all__ = [
    "AmpersandChecker",
    "CheckResult",
]
