"""
Parsing of Archi-format .archimate XML files into collections.

Archi format uses:
- Namespace: http://www.archimatetool.com/archimate
- Element type: xsi:type="archimate:BusinessFunction"
- Name and id as attributes: name="Customer" id="abc123"
- Properties as children: <property key="Level" value="1"/>
- Relationships as elements with source/target attributes
- Diagrams (views) as ArchimateDiagramModel elements whose nested
  child objects reference model elements and relationships

The parsed ArchiModel plays the role of the host modeling tool: it hands
out the whole model or a single view as a deduplicated Collection.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from capval.common.exceptions import ModelError

from .models import Collection, Element, Relationship, View

__all__ = [
    "ArchiModel",
    "parse_archimate",
    "parse_archimate_string",
]

logger = logging.getLogger(__name__)

XSI_TYPE = "{http://www.w3.org/2001/XMLSchema-instance}type"
DIAGRAM_TYPES = {"ArchimateDiagramModel", "SketchModel", "CanvasModel"}


def _normalize_type(type_str: str) -> str:
    """
    Normalize a type from the xsi:type attribute.

    - "archimate:BusinessFunction" -> "BusinessFunction"
    - "archimate:AccessRelationship" -> "Access"
    """
    if ":" in type_str:
        type_str = type_str.split(":")[-1]
    if type_str.endswith("Relationship"):
        type_str = type_str[: -len("Relationship")]
    return type_str


def _is_relationship(type_str: str) -> bool:
    return type_str.split(":")[-1].endswith("Relationship")


class ArchiModel:
    """An ArchiMate model read from an Archi file."""

    def __init__(
        self,
        name: str,
        elements: list[Element],
        relationships: list[Relationship],
        views: list[View],
    ):
        self.name = name
        self.elements = elements
        self.relationships = relationships
        self.views = views
        self._elements_by_id = {e.identifier: e for e in elements}
        self._relationships_by_id = {r.identifier: r for r in relationships}

    def collection(self) -> Collection:
        """The whole model as a collection."""
        return Collection(self.elements, self.relationships, label=f"Model '{self.name}'")

    def get_view(self, name: str) -> View:
        """Find a view by name (or id)."""
        for view in self.views:
            if view.name == name or view.identifier == name:
                return view
        raise ModelError(f"View not found: {name}")

    def view_collection(self, name: str) -> Collection:
        """The elements and relationships shown on a view, as a collection."""
        view = self.get_view(name)
        elements = [
            self._elements_by_id[i] for i in view.element_ids if i in self._elements_by_id
        ]
        relationships = [
            self._relationships_by_id[i]
            for i in view.relationship_ids
            if i in self._relationships_by_id
        ]
        return Collection(elements, relationships, label=f"View '{view.name}'")


def _read_properties(node: ET.Element, element: Element) -> None:
    for prop in node:
        if prop.tag in ("property", "properties"):
            key = prop.get("key")
            if key is not None:
                element.add_property(key, prop.get("value", ""))


def _collect_view(node: ET.Element) -> View:
    view = View(identifier=node.get("id", ""), name=node.get("name", ""))
    for child in node.iter():
        element_ref = child.get("archimateElement")
        if element_ref and element_ref not in view.element_ids:
            view.element_ids.append(element_ref)
        relationship_ref = child.get("archimateRelationship")
        if relationship_ref and relationship_ref not in view.relationship_ids:
            view.relationship_ids.append(relationship_ref)
    return view


def _build_model(root: ET.Element) -> ArchiModel:
    if not root.tag.endswith("model"):
        raise ModelError(f"Not an Archi model: root element is {root.tag}")

    elements: list[Element] = []
    views: list[View] = []
    relationship_nodes: list[ET.Element] = []

    for node in root.iter("element"):
        raw_type = node.get(XSI_TYPE, "")
        element_type = _normalize_type(raw_type)
        if element_type in DIAGRAM_TYPES:
            views.append(_collect_view(node))
        elif _is_relationship(raw_type):
            relationship_nodes.append(node)
        elif element_type:
            element = Element(
                identifier=node.get("id", ""),
                element_type=element_type,
                name=node.get("name", ""),
            )
            _read_properties(node, element)
            elements.append(element)

    by_id = {e.identifier: e for e in elements}
    relationship_ids = {node.get("id", "") for node in relationship_nodes}
    relationships: list[Relationship] = []
    for node in relationship_nodes:
        identifier = node.get("id", "")
        endpoint_ids = (node.get("source", ""), node.get("target", ""))
        source, target = (by_id.get(i) for i in endpoint_ids)
        if source is None or target is None:
            nested = [i for i in endpoint_ids if i in relationship_ids]
            if nested:
                # Relationship endpoints have no type or level in the population
                logger.warning(
                    f"Skipping relationship {identifier}: endpoint {nested[0]} is a "
                    "relationship; only element endpoints are validated"
                )
            else:
                logger.warning(f"Skipping relationship {identifier}: unresolved endpoint")
            continue
        relationships.append(
            Relationship(
                identifier=identifier,
                relationship_type=_normalize_type(node.get(XSI_TYPE, "")),
                source=source,
                target=target,
                name=node.get("name", ""),
            )
        )

    model = ArchiModel(root.get("name", ""), elements, relationships, views)
    logger.info(
        f"Parsed model '{model.name}': {len(elements)} elements, "
        f"{len(relationships)} relationships, {len(views)} views"
    )
    return model


def parse_archimate(path: str | Path) -> ArchiModel:
    """
    Parse an Archi-format .archimate file.

    Args:
        path: Path to the .archimate file

    Returns:
        The parsed ArchiModel

    Raises:
        ModelError: If the file is missing or not a valid Archi model
    """
    try:
        tree = ET.parse(path)
    except (OSError, ET.ParseError) as e:
        raise ModelError(f"Could not read model {path}: {e}") from e
    return _build_model(tree.getroot())


def parse_archimate_string(content: str) -> ArchiModel:
    """Parse Archi XML content held in memory."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ModelError(f"Could not parse model: {e}") from e
    return _build_model(root)
