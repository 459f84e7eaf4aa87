"""
Population generation - serialize a collection as an Ampersand context.

The generated model.adl declares and populates, per element type present,
a univalent `name` relation and a `level` relation, and per observed
(relationship type, source type, target type) triple, one relation holding
the (source id, target id) pairs. Output is deterministic: groups follow
first-seen order and tuples follow collection order.
"""

from __future__ import annotations

from capval.adapters.archimate.models import (
    Collection,
    Element,
    Relationship,
    relation_name,
)

from .terms import LEVEL, TEXT, escape_text

__all__ = [
    "generate_population",
]


def _tuple(source: str, target: str) -> str:
    return f'    ( "{escape_text(source)}" , "{escape_text(target)}" )'


def _block(name: str, signature: str, tuples: list[str], flags: str = "") -> list[str]:
    declaration = f"RELATION {name} [{signature}]"
    if flags:
        declaration += f" {flags}"
    return [
        declaration,
        f"POPULATION {name} [{signature}] CONTAINS [",
        ",\n".join(tuples),
        "]\n",
    ]


def _group_by_type(elements: list[Element]) -> dict[str, list[Element]]:
    groups: dict[str, list[Element]] = {}
    for element in elements:
        groups.setdefault(element.element_type, []).append(element)
    return groups


def _group_by_signature(
    relationships: list[Relationship],
) -> dict[tuple[str, str, str], list[Relationship]]:
    groups: dict[tuple[str, str, str], list[Relationship]] = {}
    for relationship in relationships:
        groups.setdefault(relationship.signature, []).append(relationship)
    return groups


def generate_population(collection: Collection) -> str:
    """
    Generate the model.adl content for a collection.

    Args:
        collection: Deduplicated elements and relationships

    Returns:
        ADL text of the 'Model' context
    """
    lines = ["CONTEXT Model"]
    by_type = _group_by_type(collection.elements)

    for element_type, elements in by_type.items():
        tuples = [_tuple(e.identifier, e.name) for e in elements]
        lines.extend(_block("name", f"{element_type}*{TEXT}", tuples, "[UNI]"))

    for element_type, elements in by_type.items():
        tuples = [_tuple(e.identifier, level) for e in elements for level in e.levels]
        lines.extend(_block("level", f"{element_type}*{LEVEL}", tuples))

    for (rel_type, source_type, target_type), relationships in _group_by_signature(
        collection.relationships
    ).items():
        tuples = [_tuple(r.source.identifier, r.target.identifier) for r in relationships]
        lines.extend(
            _block(relation_name(rel_type), f"{source_type}*{target_type}", tuples)
        )

    lines.append("ENDCONTEXT")
    return "\n".join(lines)
