"""ArchiMate adapter - model instances and Archi file projection.

Usage:
    from capval.adapters.archimate import parse_archimate

    model = parse_archimate("model.archimate")
    collection = model.view_collection("Capabilities")
"""

from __future__ import annotations

from .models import (
    ACCESS,
    AGGREGATION,
    ASSOCIATION,
    BUSINESS_FUNCTION,
    BUSINESS_OBJECT,
    BUSINESS_PROCESS,
    COMPOSITION,
    LEVEL_PROPERTY,
    SERVING,
    Collection,
    Element,
    Relationship,
    View,
    relation_name,
)
from .parser import ArchiModel, parse_archimate, parse_archimate_string

__all__ = [
    # Parser
    "ArchiModel",
    "parse_archimate",
    "parse_archimate_string",
    # Models
    "Collection",
    "Element",
    "Relationship",
    "View",
    "relation_name",
    # Types
    "BUSINESS_FUNCTION",
    "BUSINESS_OBJECT",
    "BUSINESS_PROCESS",
    "ACCESS",
    "AGGREGATION",
    "ASSOCIATION",
    "COMPOSITION",
    "SERVING",
    "LEVEL_PROPERTY",
]
