"""Tests for ArchiMate instance models and collections."""

from capval.adapters.archimate.models import (
    LEVEL_PROPERTY,
    Collection,
    Element,
    Relationship,
    relation_name,
)


class TestRelationName:
    """Tests for relation_name."""

    def test_lowercases_first_letter(self):
        """Should lower-case only the first character."""
        assert relation_name("Access") == "access"
        assert relation_name("Serving") == "serving"
        assert relation_name("CompositionLike") == "compositionLike"

    def test_empty_string(self):
        """Should pass an empty type through."""
        assert relation_name("") == ""


class TestElement:
    """Tests for Element properties."""

    def test_prop_returns_first_value(self):
        """Should return the first value of a multi-valued property."""
        element = Element("e1", "BusinessFunction")
        element.add_property(LEVEL_PROPERTY, "1")
        element.add_property(LEVEL_PROPERTY, "2")

        assert element.prop(LEVEL_PROPERTY) == "1"
        assert element.prop(LEVEL_PROPERTY, multi=True) == ["1", "2"]

    def test_prop_missing(self):
        """Should return None for an absent property in both modes."""
        element = Element("e1", "BusinessFunction")
        assert element.prop("Owner") is None
        assert element.prop("Owner", multi=True) is None

    def test_prop_multi_returns_copy(self):
        """Mutating the returned list should not change the element."""
        element = Element("e1", "BusinessFunction")
        element.add_property(LEVEL_PROPERTY, "0")
        element.prop(LEVEL_PROPERTY, multi=True).append("3")
        assert element.levels == ["0"]

    def test_levels(self):
        """Should expose all levels and the primary level."""
        element = Element("e1", "BusinessObject")
        assert element.levels == []
        assert element.level is None

        element.add_property(LEVEL_PROPERTY, "2")
        element.add_property(LEVEL_PROPERTY, "3")
        assert element.levels == ["2", "3"]
        assert element.level == "2"


class TestRelationship:
    """Tests for Relationship."""

    def test_signature(self):
        """Should combine relationship type with endpoint types."""
        bf = Element("bf", "BusinessFunction")
        bo = Element("bo", "BusinessObject")
        relationship = Relationship("r1", "Access", bf, bo)
        assert relationship.signature == ("Access", "BusinessFunction", "BusinessObject")

    def test_endpoints_are_references(self):
        """Endpoints should be the model's own element objects."""
        bf = Element("bf", "BusinessFunction")
        relationship = Relationship("r1", "Serving", bf, bf)
        bf.name = "Renamed"
        assert relationship.source.name == "Renamed"


class TestCollection:
    """Tests for Collection deduplication and ordering."""

    def test_first_occurrence_wins(self, make_element):
        """Duplicate ids should keep the first element seen."""
        first = make_element("e1", "BusinessFunction", name="First")
        second = make_element("e1", "BusinessFunction", name="Second")
        collection = Collection([first, second])

        assert len(collection.elements) == 1
        assert collection.get_element("e1").name == "First"

    def test_preserves_insertion_order(self, make_element):
        """Elements should iterate in insertion order."""
        elements = [make_element(i, "BusinessObject") for i in ("c", "a", "b")]
        collection = Collection(elements)
        assert [e.identifier for e in collection.elements] == ["c", "a", "b"]

    def test_deduplicates_relationships(self, make_element, make_relationship):
        """Duplicate relationship ids should be dropped."""
        bf = make_element("bf", "BusinessFunction")
        bo = make_element("bo", "BusinessObject")
        rel = make_relationship("Access", bf, bo, identifier="r1")
        collection = Collection([bf, bo], [rel, rel])

        assert len(collection.relationships) == 1
        assert not collection.add_relationship(rel)

    def test_len_and_empty(self, make_element):
        """Should count elements and relationships."""
        assert Collection().is_empty()
        collection = Collection([make_element("e1", "BusinessObject")])
        assert not collection.is_empty()
        assert len(collection) == 1

    def test_str_is_label(self):
        """Should render as its label."""
        collection = Collection(label="View 'Main'")
        assert str(collection) == "View 'Main'"
        assert "View 'Main'" in repr(collection)
