"""
Rules file assembly - combine the rule catalog into an ADL context.

The rules context INCLUDEs the population (or a foreign Archi export),
classifies the business types under Element, declares the relations the
rules use and then lists the requested rule bodies in catalog order.
"""

from __future__ import annotations

from collections.abc import Iterable

from capval.adapters.archimate.models import (
    BUSINESS_FUNCTION,
    BUSINESS_OBJECT,
    BUSINESS_PROCESS,
)

from .catalog import RuleInstance, build_catalog, catalog_order
from .terms import (
    ARCHI_OBJECT,
    CONCEPT,
    ELEMENT,
    TEXT,
    LevelDialect,
    escape_text,
    relation,
)

__all__ = [
    "assemble_rules",
    "rules_header",
]


def rules_header(dialect: LevelDialect) -> str:
    """CONTEXT line, INCLUDE, classifications and relation declarations."""
    lines = [
        "CONTEXT Rules",
        "",
        f'INCLUDE "{escape_text(dialect.include)}"',
        "",
    ]
    for concept in (BUSINESS_FUNCTION, BUSINESS_OBJECT, BUSINESS_PROCESS):
        lines.append(f"CLASSIFY {concept} ISA {ELEMENT}")
    lines.append(f"CLASSIFY {ELEMENT} ISA {CONCEPT}")
    lines.append(f"CLASSIFY {CONCEPT} ISA {ARCHI_OBJECT}")
    lines.append("")

    declared = [
        relation("access", BUSINESS_FUNCTION, BUSINESS_OBJECT),
        relation("aggregation", BUSINESS_FUNCTION, BUSINESS_PROCESS),
        relation("composition", BUSINESS_FUNCTION),
        relation("composition", BUSINESS_OBJECT),
        relation("composition", BUSINESS_PROCESS),
        relation("composition", ELEMENT),
        relation("serving", BUSINESS_FUNCTION),
    ]
    lines.extend(f"RELATION {term}" for term in declared)
    lines.append(f"RELATION {relation('name', ARCHI_OBJECT, TEXT)} [UNI]")
    lines.extend(dialect.declarations())
    lines.append("")
    return "\n".join(lines)


def assemble_rules(
    dialect: LevelDialect, selection: Iterable[RuleInstance] | None = None
) -> str:
    """
    Assemble the rules context.

    Args:
        dialect: Level/association addressing and the INCLUDE target
        selection: Rule instances to emit; None emits every universal form

    Returns:
        ADL text of the 'Rules' context

    Raises:
        ValueError: If the selection names an instance outside the catalog
    """
    catalog = build_catalog(dialect)

    if selection is None:
        instances = [i for i in catalog if i.is_universal]
    else:
        order = catalog_order()
        instances = list(dict.fromkeys(selection))
        unknown = [str(i) for i in instances if i not in catalog]
        if unknown:
            raise ValueError(f"Unknown rule instances: {', '.join(unknown)}")
        instances.sort(key=order.__getitem__)

    parts = [rules_header(dialect)]
    parts.extend(catalog[instance].render() for instance in instances)
    parts.append("ENDCONTEXT")
    return "\n".join(parts)
