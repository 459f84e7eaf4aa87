"""Tests for rule selection."""

import logging

from capval.adapters.archimate.models import Collection
from capval.modules.validation.catalog import RelationFamily, RuleFamily, RuleInstance
from capval.modules.validation.selection import (
    ALWAYS_SELECTED,
    LevelProfile,
    compute_level_profile,
    relationship_levels,
    select_from_profile,
    select_rules,
)


def _ids(instances):
    return [str(i) for i in instances]


def _profile(all_levels, **families):
    return LevelProfile(
        by_family={RelationFamily(name): set(levels) for name, levels in families.items()},
        all=set(all_levels),
    )


class TestRelationshipLevels:
    """Tests for relationship_levels."""

    def test_collects_endpoint_levels(self, make_element, make_relationship):
        """Both endpoints of a matching relationship contribute their level."""
        bf = make_element("bf", "BusinessFunction", "1")
        bo = make_element("bo", "BusinessObject", "2")
        collection = Collection([bf, bo], [make_relationship("Access", bf, bo)])

        assert relationship_levels(collection, RelationFamily.ACCESS) == {"1", "2"}
        assert relationship_levels(collection, RelationFamily.AGGREGATION) == set()
        assert relationship_levels(collection) == {"1", "2"}

    def test_uses_first_level_only(self, make_element, make_relationship):
        """Only the primary level of a multi-level element counts."""
        bf = make_element("bf", "BusinessFunction", "0", "3")
        bo = make_element("bo", "BusinessObject", "0")
        collection = Collection([bf, bo], [make_relationship("Access", bf, bo)])

        assert relationship_levels(collection, RelationFamily.ACCESS) == {"0"}

    def test_ignores_missing_levels(self, make_element, make_relationship):
        """Untagged endpoints contribute nothing."""
        bf = make_element("bf", "BusinessFunction")
        bo = make_element("bo", "BusinessObject", "1")
        collection = Collection([bf, bo], [make_relationship("Access", bf, bo)])

        assert relationship_levels(collection, RelationFamily.ACCESS) == {"1"}

    def test_requires_matching_signature(self, make_element, make_relationship):
        """Serving between other types is not the serving family."""
        bp = make_element("bp", "BusinessProcess", "0")
        bf = make_element("bf", "BusinessFunction", "1")
        collection = Collection([bp, bf], [make_relationship("Serving", bp, bf)])

        # bf is alone at level 1, which counts as a trivial self relation
        assert relationship_levels(collection, RelationFamily.SERVING) == {"1"}

    def test_single_element_counts_for_self_families(self, make_element):
        """A level with exactly one element of a self-related type is touched."""
        collection = Collection(
            [
                make_element("bf1", "BusinessFunction", "0"),
                make_element("bf2", "BusinessFunction", "0"),
                make_element("bf3", "BusinessFunction", "2"),
                make_element("bo1", "BusinessObject", "1"),
            ]
        )

        assert relationship_levels(collection, RelationFamily.SERVING) == {"2"}
        assert relationship_levels(collection, RelationFamily.ASSOCIATION) == {"1"}
        # Access relates different types: no trivial levels
        assert relationship_levels(collection, RelationFamily.ACCESS) == set()

    def test_single_element_ignores_unsupported_levels(self, make_element):
        """Only supported levels can be touched trivially."""
        collection = Collection([make_element("bo1", "BusinessObject", "7")])
        assert relationship_levels(collection, RelationFamily.ASSOCIATION) == set()


class TestSelectFromProfile:
    """Tests for select_from_profile."""

    def test_always_selected(self):
        """C0-C3 are present even for an empty profile."""
        assert select_from_profile(LevelProfile()) == list(ALWAYS_SELECTED)

    def test_single_level_vacuity(self):
        """A kind at a single level does not select its C4/C5."""
        selected = _ids(select_from_profile(_profile({"0"}, access={"0"})))
        assert "C4_a" not in selected
        assert "C5_a" not in selected

    def test_multi_level_inheritance(self):
        """A kind spanning two levels selects its C4/C5."""
        selected = _ids(select_from_profile(_profile({"0", "1"}, serving={"0", "1"})))
        assert "C4_v" in selected
        assert "C5_v" in selected
        assert "C4_a" not in selected

    def test_universal_when_levels_match(self):
        """Required families spanning exactly all levels select the universal form."""
        selected = _ids(select_from_profile(_profile({"0", "1"}, access={"0", "1"})))
        assert "C6" in selected
        assert "C7" in selected
        assert "C6_L0" not in selected

    def test_per_level_when_levels_differ(self):
        """A required family missing some levels selects per-level forms."""
        selected = _ids(select_from_profile(_profile({"0", "1", "2"}, access={"1"})))
        assert "C6" not in selected
        assert "C6_L1" in selected
        assert "C6_L0" not in selected
        assert "C6_L2" not in selected

    def test_and_tie_break(self):
        """Two required families at {0,1} and {0,1,2} select only L0 and L1."""
        profile = _profile({"0", "1", "2"}, aggregation={"0", "1"}, serving={"0", "1", "2"})
        selected = [s for s in _ids(select_from_profile(profile)) if s.startswith("C9")]
        assert selected == ["C9_L0", "C9_L1"]

    def test_empty_family_never_universal(self):
        """An absent required family cannot justify the universal form."""
        selected = _ids(select_from_profile(_profile(set())))
        assert "C6" not in selected
        assert "C13" not in selected

    def test_monotonicity(self):
        """Widening a family to the full level set keeps or gains the universal form."""
        narrow = _ids(select_from_profile(_profile({"0", "1"}, access={"0"})))
        wide = _ids(select_from_profile(_profile({"0", "1"}, access={"0", "1"})))
        assert "C6_L0" in narrow
        assert "C6" in wide

        before = _ids(select_from_profile(_profile({"0", "1"}, access={"0", "1"})))
        after = _ids(select_from_profile(_profile({"0", "1", "2"}, access={"0", "1", "2"})))
        assert "C6" in before and "C6" in after

    def test_catalog_order_and_no_duplicates(self):
        """Output is deduplicated and ordered by the catalog."""
        profile = _profile(
            {"0", "1"},
            access={"0", "1"},
            aggregation={"0"},
            association={"0", "1"},
            serving={"1"},
            processComposition={"0", "1"},
        )
        selected = select_from_profile(profile)
        assert len(selected) == len(set(selected))
        assert _ids(selected) == [
            "C0", "C1", "C2", "C3",
            "C4_a", "C5_a", "C4_o", "C5_o",
            "C6", "C7", "C8_L0", "C11",
        ]


class TestSelectRules:
    """Tests for select_rules on collections."""

    def test_shared_object_scenario(self, shared_object_collection):
        """Two functions sharing an object select the shared-object rule."""
        selected = _ids(select_rules(shared_object_collection))

        assert "C11" in selected
        assert "C6" in selected
        assert "C7" in selected
        assert "C4_a" not in selected
        assert selected[:4] == ["C0", "C1", "C2", "C3"]

    def test_deterministic(self, layered_collection):
        """Repeated selection yields the same list."""
        assert select_rules(layered_collection) == select_rules(layered_collection)

    def test_layered_collection(self, layered_collection):
        """Kinds spanning levels 0 and 1 select inheritance rules."""
        profile = compute_level_profile(layered_collection)
        assert profile.all == {"0", "1"}
        assert profile.levels(RelationFamily.ACCESS) == {"0", "1"}

        selected = select_rules(layered_collection)
        assert RuleInstance(RuleFamily.C4, RelationFamily.ACCESS) in selected
        assert RuleInstance(RuleFamily.C6) in selected

    def test_logs_selection(self, shared_object_collection, caplog):
        """Should log the selected ids."""
        with caplog.at_level(logging.INFO, logger="capval"):
            select_rules(shared_object_collection)
        assert "C11" in caplog.text


class TestLevelProfile:
    """Tests for LevelProfile."""

    def test_to_dict_sorts_levels(self):
        """Numeric levels sort numerically, others after them."""
        profile = _profile({"10", "2", "x"}, access={"2", "10"})
        assert profile.to_dict() == {"access": ["2", "10"], "all": ["2", "10", "x"]}

    def test_to_dict_with_non_decimal_digits(self):
        """Superscript digits are not numbers; they sort as plain text."""
        profile = _profile({"1", "²"}, access={"²"})
        assert profile.to_dict() == {"access": ["²"], "all": ["1", "²"]}
