"""ArchiMate models for capability validation.

This module defines:
- Core data structures for ArchiMate elements and relationships (instances)
- The Collection, the deduplicated unit of analysis handed to the generators
- Type constants for the element and relationship types the rule catalog uses

Reference: https://pubs.opengroup.org/architecture/archimate3-doc/
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import overload, Literal

__all__ = [
    "BUSINESS_FUNCTION",
    "BUSINESS_OBJECT",
    "BUSINESS_PROCESS",
    "ACCESS",
    "AGGREGATION",
    "ASSOCIATION",
    "COMPOSITION",
    "SERVING",
    "LEVEL_PROPERTY",
    "Element",
    "Relationship",
    "View",
    "Collection",
    "relation_name",
]

# =============================================================================
# Type Constants
# =============================================================================

BUSINESS_FUNCTION = "BusinessFunction"
BUSINESS_OBJECT = "BusinessObject"
BUSINESS_PROCESS = "BusinessProcess"

ACCESS = "Access"
AGGREGATION = "Aggregation"
ASSOCIATION = "Association"
COMPOSITION = "Composition"
SERVING = "Serving"

# Multi-valued property carrying the decomposition levels of an element
LEVEL_PROPERTY = "Level"


def relation_name(relationship_type: str) -> str:
    """Map a relationship type to its Ampersand relation name.

    "Access" -> "access", "Serving" -> "serving".
    """
    if not relationship_type:
        return relationship_type
    return relationship_type[0].lower() + relationship_type[1:]


# =============================================================================
# Instance Models
# =============================================================================


@dataclass
class Element:
    """ArchiMate element.

    Attributes:
        identifier: Unique identifier within the model
        element_type: ArchiMate type without prefix (e.g. "BusinessFunction")
        name: Display name of the element
        properties: Multimap of property key to values, in document order
    """

    identifier: str
    element_type: str
    name: str = ""
    properties: dict[str, list[str]] = field(default_factory=dict)

    def add_property(self, key: str, value: str) -> None:
        """Append a value to the (multi-valued) property `key`."""
        self.properties.setdefault(key, []).append(value)

    @overload
    def prop(self, key: str, multi: Literal[False] = ...) -> str | None: ...

    @overload
    def prop(self, key: str, multi: Literal[True]) -> list[str] | None: ...

    def prop(self, key: str, multi: bool = False) -> str | list[str] | None:
        """Look up a property.

        Returns the first value (or None) by default, or every value when
        `multi` is true (None when the property is absent).
        """
        values = self.properties.get(key)
        if not values:
            return None
        return list(values) if multi else values[0]

    @property
    def levels(self) -> list[str]:
        """All decomposition levels assigned to this element."""
        return self.prop(LEVEL_PROPERTY, multi=True) or []

    @property
    def level(self) -> str | None:
        """The primary (first) decomposition level, if any."""
        return self.prop(LEVEL_PROPERTY)


@dataclass
class Relationship:
    """ArchiMate relationship.

    `source` and `target` are references to elements owned by the model;
    relationships never own their endpoints.
    """

    identifier: str
    relationship_type: str
    source: Element
    target: Element
    name: str = ""

    @property
    def signature(self) -> tuple[str, str, str]:
        """(relationship type, source type, target type)."""
        return (
            self.relationship_type,
            self.source.element_type,
            self.target.element_type,
        )


@dataclass
class View:
    """A diagram in the model, referencing elements and relationships by id."""

    identifier: str
    name: str
    element_ids: list[str] = field(default_factory=list)
    relationship_ids: list[str] = field(default_factory=list)


class Collection:
    """An ordered, id-deduplicated set of elements and relationships.

    This is the unit of analysis: either the whole model or a selection.
    First occurrence wins; iteration order follows insertion order.
    """

    def __init__(
        self,
        elements: Iterable[Element] = (),
        relationships: Iterable[Relationship] = (),
        label: str = "Collection",
    ):
        self.label = label
        self._elements: dict[str, Element] = {}
        self._relationships: dict[str, Relationship] = {}
        for element in elements:
            self.add_element(element)
        for relationship in relationships:
            self.add_relationship(relationship)

    def add_element(self, element: Element) -> bool:
        """Add an element unless its id is already present."""
        if element.identifier in self._elements:
            return False
        self._elements[element.identifier] = element
        return True

    def add_relationship(self, relationship: Relationship) -> bool:
        """Add a relationship unless its id is already present."""
        if relationship.identifier in self._relationships:
            return False
        self._relationships[relationship.identifier] = relationship
        return True

    @property
    def elements(self) -> list[Element]:
        return list(self._elements.values())

    @property
    def relationships(self) -> list[Relationship]:
        return list(self._relationships.values())

    def get_element(self, identifier: str) -> Element | None:
        return self._elements.get(identifier)

    def is_empty(self) -> bool:
        return not self._elements and not self._relationships

    def __len__(self) -> int:
        return len(self._elements) + len(self._relationships)

    def __repr__(self) -> str:
        return (
            f"Collection({self.label!r}, elements={len(self._elements)}, "
            f"relationships={len(self._relationships)})"
        )

    def __str__(self) -> str:
        return self.label
