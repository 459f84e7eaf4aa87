"""
Shared pytest fixtures for capval tests.

Fixtures are organized by kind:
- factories: build elements, relationships and collections in a test
- sample data: small ready-made collections and Archi documents
"""

from __future__ import annotations

import pytest

from capval.adapters.archimate.models import (
    LEVEL_PROPERTY,
    Collection,
    Element,
    Relationship,
)

# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_element():
    """Factory for elements carrying zero or more Level properties."""

    def _make(identifier, element_type, *levels, name=None):
        element = Element(identifier, element_type, name if name is not None else identifier)
        for level in levels:
            element.add_property(LEVEL_PROPERTY, level)
        return element

    return _make


@pytest.fixture
def make_relationship():
    """Factory for relationships; ids default to '<type>:<source>-><target>'."""

    def _make(relationship_type, source, target, identifier=None):
        return Relationship(
            identifier=identifier or f"{relationship_type}:{source.identifier}->{target.identifier}",
            relationship_type=relationship_type,
            source=source,
            target=target,
        )

    return _make


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def shared_object_collection(make_element, make_relationship):
    """Two level-0 functions accessing one shared level-0 object, no serving."""
    bf1 = make_element("bf1", "BusinessFunction", "0")
    bf2 = make_element("bf2", "BusinessFunction", "0")
    bo1 = make_element("bo1", "BusinessObject", "0")
    return Collection(
        [bf1, bf2, bo1],
        [
            make_relationship("Access", bf1, bo1),
            make_relationship("Access", bf2, bo1),
        ],
        label="Model 'Shared'",
    )


@pytest.fixture
def layered_collection(make_element, make_relationship):
    """A two-level decomposition of functions, objects and processes."""
    sales = make_element("bf-sales", "BusinessFunction", "0", name="Sales")
    orders = make_element("bf-orders", "BusinessFunction", "1", name="Order Handling")
    billing = make_element("bf-billing", "BusinessFunction", "1", name="Billing")
    customer = make_element("bo-customer", "BusinessObject", "0", name="Customer")
    order = make_element("bo-order", "BusinessObject", "1", name="Order")
    invoice = make_element("bo-invoice", "BusinessObject", "1", name="Invoice")
    fulfil = make_element("bp-fulfil", "BusinessProcess", "0", name="Fulfil Order")
    ship = make_element("bp-ship", "BusinessProcess", "1", name="Ship Order")

    relationships = [
        make_relationship("Composition", sales, orders),
        make_relationship("Composition", sales, billing),
        make_relationship("Composition", customer, order),
        make_relationship("Composition", customer, invoice),
        make_relationship("Composition", fulfil, ship),
        make_relationship("Access", sales, customer),
        make_relationship("Access", orders, order),
        make_relationship("Access", billing, invoice),
        make_relationship("Aggregation", sales, fulfil),
        make_relationship("Aggregation", orders, ship),
        make_relationship("Serving", billing, orders),
        make_relationship("Association", order, invoice),
    ]
    return Collection(
        [sales, orders, billing, customer, order, invoice, fulfil, ship],
        relationships,
        label="Model 'Layered'",
    )


SAMPLE_ARCHIMATE = """<?xml version="1.0" encoding="UTF-8"?>
<archimate:model xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
    xmlns:archimate="http://www.archimatetool.com/archimate"
    name="Sample" id="model-1" version="4.9.0">
  <folder name="Business" id="folder-business" type="business">
    <element xsi:type="archimate:BusinessFunction" name="Sales" id="bf1">
      <property key="Level" value="0"/>
    </element>
    <element xsi:type="archimate:BusinessFunction" name="Billing" id="bf2">
      <property key="Level" value="0"/>
      <property key="Owner" value="Finance"/>
    </element>
    <element xsi:type="archimate:BusinessObject" name="Invoice &quot;A&quot;" id="bo1">
      <property key="Level" value="0"/>
      <property key="Level" value="1"/>
    </element>
    <element xsi:type="archimate:BusinessProcess" name="Invoice Customer" id="bp1"/>
  </folder>
  <folder name="Relations" id="folder-relations" type="relations">
    <element xsi:type="archimate:AccessRelationship" id="r1" source="bf1" target="bo1"/>
    <element xsi:type="archimate:AccessRelationship" id="r2" source="bf2" target="bo1"/>
    <element xsi:type="archimate:AggregationRelationship" id="r3" source="bf2" target="bp1"/>
    <element xsi:type="archimate:ServingRelationship" id="r4" source="bf1" target="missing"/>
  </folder>
  <folder name="Views" id="folder-views" type="diagrams">
    <element xsi:type="archimate:ArchimateDiagramModel" name="Access View" id="view-1">
      <child xsi:type="archimate:DiagramObject" id="d1" archimateElement="bf1">
        <sourceConnection xsi:type="archimate:Connection" id="c1" source="d1"
            target="d3" archimateRelationship="r1"/>
      </child>
      <child xsi:type="archimate:DiagramObject" id="d3" archimateElement="bo1"/>
      <child xsi:type="archimate:DiagramObject" id="d4" archimateElement="bo1"/>
    </element>
  </folder>
</archimate:model>
"""


@pytest.fixture
def sample_archimate_xml():
    """Archi document with two functions, an object, a process and one view."""
    return SAMPLE_ARCHIMATE


@pytest.fixture
def sample_archimate_file(tmp_path, sample_archimate_xml):
    """The sample Archi document written to disk."""
    path = tmp_path / "sample.archimate"
    path.write_text(sample_archimate_xml, encoding="utf-8")
    return path
