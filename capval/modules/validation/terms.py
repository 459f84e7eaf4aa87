"""
Relation-algebra term primitives and level-predicate dialects.

All functions are pure: they build Ampersand ADL expression strings from
smaller expression strings. Operator precedence is left to the caller;
use group() wherever a sub-term must be bracketed.

Two dialects decide how a rule refers to decomposition levels and to the
association relation:
- RelationDialect: the population generated by this package (model.adl),
  with a direct level[Element*Level] relation.
- PropertyTripleDialect: a foreign Archi export INCLUDEd as-is, where
  levels are element properties reachable via propOf/key/value.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from capval.adapters.archimate.models import LEVEL_PROPERTY

__all__ = [
    "ARCHI_OBJECT",
    "CONCEPT",
    "ELEMENT",
    "LEVEL",
    "TEXT",
    "escape_text",
    "text",
    "identity",
    "universal",
    "relation",
    "converse",
    "compose",
    "union",
    "intersect",
    "difference",
    "complement",
    "closure",
    "reflexive_closure",
    "group",
    "LevelDialect",
    "RelationDialect",
    "PropertyTripleDialect",
]

ELEMENT = "Element"
CONCEPT = "Concept"
ARCHI_OBJECT = "ArchiObject"
LEVEL = "Level"
TEXT = "Text"


def escape_text(value: str | None) -> str:
    """Escape a string for use inside an ADL double-quoted literal.

    Backslashes are doubled first, then quotes are escaped.
    """
    if not value:
        return ""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def text(value: str) -> str:
    """A quoted ADL atom."""
    return f'"{escape_text(value)}"'


# =============================================================================
# Algebra Primitives
# =============================================================================


def identity(concept: str) -> str:
    """The identity relation on a concept."""
    return f"I[{concept}]"


def universal(concept: str) -> str:
    """Every pair of atoms of a concept."""
    return f"V[{concept}]"


def relation(name: str, source: str, target: str | None = None) -> str:
    """A typed relation reference; homogeneous relations use the short form."""
    if target is None:
        return f"{name}[{source}]"
    return f"{name}[{source}*{target}]"


def converse(term: str) -> str:
    """The term with source and target swapped."""
    return f"{term}~"


def compose(*terms: str) -> str:
    """Relational composition, left to right."""
    return ";".join(terms)


def union(*terms: str) -> str:
    """Pairs in any of the terms."""
    return " \\/ ".join(terms)


def intersect(*terms: str) -> str:
    """Pairs in all of the terms."""
    return " /\\ ".join(terms)


def difference(left: str, right: str) -> str:
    """Pairs in left but not in right."""
    return f"{left}-{right}"


def complement(term: str) -> str:
    """Every pair not in the term."""
    return f"-{term}"


def closure(term: str) -> str:
    """Transitive closure (one or more steps)."""
    return f"{term}+"


def reflexive_closure(term: str) -> str:
    """Reflexive-transitive closure (zero or more steps)."""
    return f"{term}*"


def group(term: str) -> str:
    """Parenthesize a term so it binds as one operand."""
    return f"({term})"


def _level_values(level: str | Sequence[str]) -> str:
    if isinstance(level, str):
        return text(level)
    return group(union(*(text(value) for value in level)))


# =============================================================================
# Dialects
# =============================================================================


class LevelDialect(Protocol):
    """How rules address levels, associations and the included population."""

    include: str

    @property
    def association(self) -> str:
        """Term for the association relation between business objects."""
        ...

    def level(self, level: str | Sequence[str] | None = None) -> str:
        """Homogeneous Element term relating elements sharing a level.

        With a level (or list of levels) the term is restricted to elements
        tagged with that level; without one it relates any two elements
        that share some level.
        """
        ...

    def declarations(self) -> list[str]:
        """Relation declarations specific to this dialect."""
        ...


class RelationDialect:
    """Levels via the generated level[Element*Level] relation."""

    def __init__(self, include: str = "model.adl"):
        self.include = include
        self._level = relation("level", ELEMENT, LEVEL)

    @property
    def association(self) -> str:
        return relation("association", "BusinessObject")

    def level(self, level: str | Sequence[str] | None = None) -> str:
        if level is None:
            return compose(self._level, converse(self._level))
        return compose(self._level, _level_values(level), converse(self._level))

    def declarations(self) -> list[str]:
        return [
            f"RELATION {self.association}",
            f"RELATION {self._level}",
        ]


class PropertyTripleDialect:
    """Levels via Archi property triples: propOf, key and value."""

    def __init__(self, include: str = "model.archimate"):
        self.include = include
        self._prop_of = relation("propOf", "Property", ARCHI_OBJECT)
        self._key = relation("key", "Property", TEXT)
        self._value = relation("value", "Property", TEXT)
        self._type = relation("type", "Relationship", TEXT)

    @property
    def association(self) -> str:
        source = relation("source", "Relationship", "BusinessObject")
        target = relation("target", "Relationship", "BusinessObject")
        is_association = group(
            intersect(
                compose(self._type, text("association"), converse(self._type)),
                identity("Relationship"),
            )
        )
        return group(compose(converse(source), is_association, target))

    def level(self, level: str | Sequence[str] | None = None) -> str:
        key_is_level = group(
            intersect(
                identity("Property"),
                compose(self._key, text(LEVEL_PROPERTY), converse(self._key)),
            )
        )
        parts = [converse(self._prop_of), key_is_level, self._value]
        if level is not None:
            parts.append(_level_values(level))
        parts.extend([converse(self._value), self._prop_of])
        return compose(*parts)

    def declarations(self) -> list[str]:
        return [
            "RELATION source[Relationship*BusinessObject]",
            "RELATION target[Relationship*BusinessObject]",
            f"RELATION {self._type}",
            f"RELATION {self._prop_of} [UNI]",
            f"RELATION {self._key} [UNI]",
            f"RELATION {self._value} [UNI]",
        ]
