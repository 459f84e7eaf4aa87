"""
Services layer for capval.

Orchestration shared by the CLI and any embedding host: a validation run
turns a Collection into model.adl/rules.adl and checks them with Ampersand.

Usage:
    from capval.services import CapvalSettings, ValidationService

    service = ValidationService(CapvalSettings(output_dir="out"))
    result = service.validate(collection, mode="full")
"""

from __future__ import annotations

from .config_models import CapvalSettings, ValidationMode
from .validation import ValidationService, write_output

__all__ = [
    "CapvalSettings",
    "ValidationMode",
    "ValidationService",
    "write_output",
]
