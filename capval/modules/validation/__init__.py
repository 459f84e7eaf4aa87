"""
Validation module - compile ArchiMate collections into Ampersand contexts.

Pure functions: population generation, rule catalog, rule selection and
rules file assembly. No I/O - all data passed as parameters.

Usage:
    from capval.modules.validation import (
        RelationDialect,
        assemble_rules,
        generate_population,
        select_rules,
    )

    model_adl = generate_population(collection)
    rules_adl = assemble_rules(RelationDialect(), select_rules(collection))
"""

from __future__ import annotations

from .assembler import assemble_rules, rules_header
from .catalog import (
    COVERAGE_REQUIREMENTS,
    INHERITANCE_KINDS,
    MAX_LEVEL,
    SUPPORTED_LEVELS,
    CatalogEntry,
    RelationFamily,
    Rule,
    RuleFamily,
    RuleInstance,
    build_catalog,
    catalog_instances,
    catalog_order,
)
from .population import generate_population
from .selection import (
    ALWAYS_SELECTED,
    LevelProfile,
    compute_level_profile,
    relationship_levels,
    select_from_profile,
    select_rules,
)
from .terms import (
    LevelDialect,
    PropertyTripleDialect,
    RelationDialect,
    escape_text,
)

__all__ = [
    # Population
    "generate_population",
    # Catalog
    "MAX_LEVEL",
    "SUPPORTED_LEVELS",
    "RuleFamily",
    "RelationFamily",
    "RuleInstance",
    "Rule",
    "CatalogEntry",
    "INHERITANCE_KINDS",
    "COVERAGE_REQUIREMENTS",
    "build_catalog",
    "catalog_instances",
    "catalog_order",
    # Selection
    "ALWAYS_SELECTED",
    "LevelProfile",
    "relationship_levels",
    "compute_level_profile",
    "select_from_profile",
    "select_rules",
    # Assembly
    "assemble_rules",
    "rules_header",
    # Terms
    "LevelDialect",
    "RelationDialect",
    "PropertyTripleDialect",
    "escape_text",
]
