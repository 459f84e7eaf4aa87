"""
Rule catalog - the fixed library of well-formedness rule families C0-C13.

Each family is a pure function of a LevelDialect that yields one or more
Rules of shape `antecedent |- consequent`. Families C6-C13 additionally
have level-scoped variants, built by conjoining the antecedent with
"is tagged at level k" for every supported level.

Rule instances are addressed by RuleInstance values, never by strings:

    RuleInstance(RuleFamily.C6)                     -> "C6"
    RuleInstance(RuleFamily.C6, level="2")          -> "C6_L2"
    RuleInstance(RuleFamily.C4, RelationFamily.ACCESS) -> "C4_a"
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from capval.adapters.archimate.models import (
    ACCESS,
    AGGREGATION,
    ASSOCIATION,
    BUSINESS_FUNCTION,
    BUSINESS_OBJECT,
    BUSINESS_PROCESS,
    COMPOSITION,
    SERVING,
)

from .terms import (
    ARCHI_OBJECT,
    ELEMENT,
    LevelDialect,
    closure,
    complement,
    compose,
    converse,
    difference,
    group,
    identity,
    intersect,
    relation,
    union,
    universal,
)

__all__ = [
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
]

MAX_LEVEL = 4
SUPPORTED_LEVELS: tuple[str, ...] = tuple(str(level) for level in range(MAX_LEVEL + 1))

VIOLATION = (
    f'VIOLATION (TXT "(", SRC name[{ARCHI_OBJECT}*Text], '
    f'TXT ", ", TGT name[{ARCHI_OBJECT}*Text], TXT ")")'
)


class RuleFamily(str, Enum):
    """Rule families, in catalog order."""

    C0 = "C0"  # supported level, parent one level up
    C1 = "C1"  # one parent
    C2 = "C2"  # acyclic
    C3 = "C3"  # shared root/leaf level
    C4 = "C4"  # inherited upward
    C5 = "C5"  # exists downward
    C6 = "C6"  # function accesses object
    C7 = "C7"  # object is accessed
    C8 = "C8"  # process aggregated exactly once
    C9 = "C9"  # function eventually aggregates process
    C10 = "C10"  # association allowed
    C11 = "C11"  # shared object
    C12 = "C12"  # serving mirrored by association
    C13 = "C13"  # connected graph


class RelationFamily(str, Enum):
    """Semantic relationship families the selection engine measures."""

    ACCESS = "access"
    AGGREGATION = "aggregation"
    ASSOCIATION = "association"
    SERVING = "serving"
    PROCESS_COMPOSITION = "processComposition"

    @property
    def signature(self) -> tuple[str, str, str]:
        """(relationship type, source type, target type)."""
        return _SIGNATURES[self]

    @property
    def symbol(self) -> str:
        return _SYMBOLS.get(self, self.value)


_SIGNATURES = {
    RelationFamily.ACCESS: (ACCESS, BUSINESS_FUNCTION, BUSINESS_OBJECT),
    RelationFamily.AGGREGATION: (AGGREGATION, BUSINESS_FUNCTION, BUSINESS_PROCESS),
    RelationFamily.ASSOCIATION: (ASSOCIATION, BUSINESS_OBJECT, BUSINESS_OBJECT),
    RelationFamily.SERVING: (SERVING, BUSINESS_FUNCTION, BUSINESS_FUNCTION),
    RelationFamily.PROCESS_COMPOSITION: (COMPOSITION, BUSINESS_PROCESS, BUSINESS_PROCESS),
}

_SYMBOLS = {
    RelationFamily.ACCESS: "a",
    RelationFamily.AGGREGATION: "g",
    RelationFamily.ASSOCIATION: "o",
    RelationFamily.SERVING: "v",
}

# Relation kinds with upward-inheritance (C4) and downward-existence (C5) rules
INHERITANCE_KINDS: tuple[RelationFamily, ...] = (
    RelationFamily.ACCESS,
    RelationFamily.AGGREGATION,
    RelationFamily.ASSOCIATION,
    RelationFamily.SERVING,
)

_ALL_FAMILIES = (
    RelationFamily.ACCESS,
    RelationFamily.AGGREGATION,
    RelationFamily.ASSOCIATION,
    RelationFamily.PROCESS_COMPOSITION,
    RelationFamily.SERVING,
)

# Relationship families each level-addressed coverage rule depends on
COVERAGE_REQUIREMENTS: dict[RuleFamily, tuple[RelationFamily, ...]] = {
    RuleFamily.C6: (RelationFamily.ACCESS,),
    RuleFamily.C7: (RelationFamily.ACCESS,),
    RuleFamily.C8: (RelationFamily.AGGREGATION,),
    RuleFamily.C9: (RelationFamily.AGGREGATION, RelationFamily.SERVING),
    RuleFamily.C10: _ALL_FAMILIES,
    # Shared access alone is what C11 reports on
    RuleFamily.C11: (RelationFamily.ACCESS,),
    RuleFamily.C12: _ALL_FAMILIES,
    RuleFamily.C13: _ALL_FAMILIES,
}

_INSTANCE_PATTERN = re.compile(r"^(C\d+)(?:_([a-z]))?(?:_L(\d+))?$")


@dataclass(frozen=True)
class RuleInstance:
    """A concrete rule to check: a family, optionally per relation kind or level."""

    family: RuleFamily
    kind: RelationFamily | None = None
    level: str | None = None

    def __str__(self) -> str:
        result = self.family.value
        if self.kind is not None:
            result += f"_{self.kind.symbol}"
        if self.level is not None:
            result += f"_L{self.level}"
        return result

    @property
    def is_universal(self) -> bool:
        return self.level is None

    @classmethod
    def parse(cls, value: str) -> RuleInstance:
        """Parse an identifier such as 'C11', 'C6_L0' or 'C4_v'."""
        match = _INSTANCE_PATTERN.match(value.strip())
        if not match:
            raise ValueError(f"Invalid rule instance: {value}")
        family_id, symbol, level = match.groups()
        try:
            family = RuleFamily(family_id)
        except ValueError:
            raise ValueError(f"Unknown rule family: {family_id}") from None
        kind = None
        if symbol is not None:
            kinds = {k.symbol: k for k in INHERITANCE_KINDS}
            if symbol not in kinds:
                raise ValueError(f"Unknown relation kind: {symbol}")
            kind = kinds[symbol]
        instance = cls(family, kind, level)
        if instance not in catalog_order():
            raise ValueError(f"Rule instance not in catalog: {value}")
        return instance


@dataclass(frozen=True)
class Rule:
    """A single ADL rule: antecedent |- consequent, with its meaning."""

    label: str
    antecedent: str
    consequent: str
    meaning: str

    @property
    def term(self) -> str:
        return f"{self.antecedent} |- {self.consequent}"

    def at_level(self, level: str, dialect: LevelDialect) -> Rule:
        """The same rule restricted to elements tagged with `level`."""
        return Rule(
            label=f"{self.label}_L{level}",
            antecedent=intersect(self.antecedent, dialect.level(level)),
            consequent=self.consequent,
            meaning=f"At level {level}: {self.meaning}",
        )

    def render(self) -> str:
        return (
            f"RULE {self.label}:\n"
            f"    {self.term}\n"
            f"    MEANING {{+ {self.meaning} +}}\n"
            f"    {VIOLATION}\n"
        )


@dataclass(frozen=True)
class CatalogEntry:
    """The rules making up one rule instance."""

    instance: RuleInstance
    rules: tuple[Rule, ...]
    level_variant: bool = False

    @property
    def meaning(self) -> str:
        return self.rules[0].meaning if self.rules else ""

    def render(self) -> str:
        return "\n".join(rule.render() for rule in self.rules)


@dataclass
class _Vocabulary:
    """Relation terms shared by all families for one dialect."""

    dialect: LevelDialect
    a: str = field(init=False)
    g: str = field(init=False)
    o: str = field(init=False)
    v: str = field(init=False)

    def __post_init__(self) -> None:
        self.a = relation("access", BUSINESS_FUNCTION, BUSINESS_OBJECT)
        self.g = relation("aggregation", BUSINESS_FUNCTION, BUSINESS_PROCESS)
        self.o = self.dialect.association
        self.v = relation("serving", BUSINESS_FUNCTION)

    def c(self, concept: str = ELEMENT) -> str:
        return relation("composition", concept)

    def level(self, level: str | list[str] | None = None) -> str:
        return self.dialect.level(level)

    def term(self, kind: RelationFamily) -> str:
        return {
            RelationFamily.ACCESS: self.a,
            RelationFamily.AGGREGATION: self.g,
            RelationFamily.ASSOCIATION: self.o,
            RelationFamily.SERVING: self.v,
        }[kind]

    @property
    def common_process_ancestor(self) -> str:
        """Functions aggregating processes that share a composition ancestor."""
        c_bp = self.c(BUSINESS_PROCESS)
        return compose(self.g, closure(converse(c_bp)), closure(c_bp), converse(self.g))

    def roots(self, concept: str) -> str:
        c = self.c(concept)
        return group(difference(identity(concept), compose(converse(c), c)))

    def leaves(self, concept: str) -> str:
        c = self.c(concept)
        return group(difference(identity(concept), compose(c, converse(c))))


# =============================================================================
# Structural Families (C0-C3)
# =============================================================================


def _c0(t: _Vocabulary) -> list[Rule]:
    el, c = identity(ELEMENT), t.c()
    rules = [
        Rule(
            "C0_supported_level_assigned",
            el,
            t.level(list(SUPPORTED_LEVELS)),
            "Each element has a supported decomposition level assigned.",
        )
    ]
    for parent, level in zip(SUPPORTED_LEVELS, SUPPORTED_LEVELS[1:]):
        has_no_parent = group(difference(el, group(compose(converse(c), c))))
        has_parent_at = group(intersect(el, compose(converse(c), t.level(parent), c)))
        rules.append(
            Rule(
                f"C0_L{level}_composed_by_L{parent}",
                intersect(el, t.level(level)),
                union(has_no_parent, has_parent_at),
                f"Each element at level {level} has no parent or a parent at level {parent}.",
            )
        )
    return rules


def _c1(t: _Vocabulary) -> list[Rule]:
    return [
        Rule(
            "C1_one_parent",
            compose(t.c(), converse(t.c())),
            identity(ELEMENT),
            "Each element has at most one parent.",
        )
    ]


def _c2(t: _Vocabulary) -> list[Rule]:
    return [
        Rule(
            "C2_acyclic",
            closure(t.c()),
            complement(identity(ELEMENT)),
            "No element can be its own ancestor.",
        )
    ]


def _c3(t: _Vocabulary) -> list[Rule]:
    rules = []
    for concept in (BUSINESS_FUNCTION, BUSINESS_OBJECT, BUSINESS_PROCESS):
        roots, leaves = t.roots(concept), t.leaves(concept)
        rules.append(
            Rule(
                f"C3_shared_root_level_{concept}",
                compose(roots, universal(concept), roots),
                t.level(),
                f"All root {concept} elements share the same decomposition level.",
            )
        )
        rules.append(
            Rule(
                f"C3_shared_leaf_level_{concept}",
                compose(leaves, universal(concept), leaves),
                t.level(),
                f"All leaf {concept} elements share the same decomposition level.",
            )
        )
    return rules


# =============================================================================
# Inheritance Families (C4, C5)
# =============================================================================


def _c4(t: _Vocabulary, kind: RelationFamily) -> list[Rule]:
    term, c = t.term(kind), t.c()
    consequent = union(identity(ELEMENT), term)
    if kind is RelationFamily.SERVING:
        consequent = union(consequent, t.common_process_ancestor)
    return [
        Rule(
            f"C4_{kind.value}_inherited_upward",
            compose(c, term, converse(c)),
            consequent,
            f"If two elements have a(n) {kind.value} relationship, "
            "their parents (if any) must as well.",
        )
    ]


def _c5(t: _Vocabulary, kind: RelationFamily) -> list[Rule]:
    term, c = t.term(kind), t.c()
    childless = group(difference(identity(ELEMENT), compose(c, converse(c))))
    return [
        Rule(
            f"C5_{kind.value}_exists_downward",
            term,
            union(compose(c, term, converse(c)), compose(childless, term, childless)),
            f"If two elements have a(n) {kind.value} relationship, "
            "at least one pair of children (if any) must as well.",
        )
    ]


# =============================================================================
# Coverage Families (C6-C13)
# =============================================================================


def _c6(t: _Vocabulary) -> list[Rule]:
    return [
        Rule(
            "C6_function_must_access_object",
            identity(BUSINESS_FUNCTION),
            compose(t.a, converse(t.a)),
            "Each business function must access at least one business object.",
        )
    ]


def _c7(t: _Vocabulary) -> list[Rule]:
    return [
        Rule(
            "C7_object_is_accessed",
            identity(BUSINESS_OBJECT),
            compose(converse(t.a), t.a),
            "Each business object must be accessed by at least one business function.",
        )
    ]


def _c8(t: _Vocabulary) -> list[Rule]:
    return [
        Rule(
            "C8_process_is_aggregated",
            identity(BUSINESS_PROCESS),
            compose(converse(t.g), t.g),
            "Each business process must be aggregated by at least one business function.",
        ),
        Rule(
            "C8_process_aggregated_only_once",
            compose(t.g, converse(t.g)),
            identity(BUSINESS_FUNCTION),
            "Each business process must be aggregated by at most one business function.",
        ),
    ]


def _c9(t: _Vocabulary) -> list[Rule]:
    bf = identity(BUSINESS_FUNCTION)
    return [
        Rule(
            "C9_function_eventually_aggregates_process",
            bf,
            compose(
                group(union(bf, closure(t.v))),
                t.g,
                converse(t.g),
                group(union(bf, closure(converse(t.v)))),
            ),
            "Each business function must either (1) aggregate a business process "
            "or (2) serve another function, potentially through multiple serving "
            "relationships, that aggregates a business process.",
        )
    ]


def _c10(t: _Vocabulary) -> list[Rule]:
    accessors = group(
        union(identity(BUSINESS_FUNCTION), converse(t.v), t.common_process_ancestor)
    )
    return [
        Rule(
            "C10_association_allowed",
            t.o,
            compose(converse(t.a), accessors, t.a),
            "An association relationship between business objects is allowed if "
            "they are accessed (1) by the same business function, (2) by functions "
            "with a serving relationship in the opposite direction, or (3) by "
            "functions that aggregate business processes with a common ancestor.",
        )
    ]


def _c11(t: _Vocabulary) -> list[Rule]:
    shares_object = compose(t.a, converse(t.a))
    return [
        Rule(
            "C11_shared_object",
            shares_object,
            union(
                identity(BUSINESS_FUNCTION),
                compose(group(union(t.v, converse(t.v))), shares_object),
                t.common_process_ancestor,
            ),
            "Business functions that access a common business object must (1) have "
            "a serving relationship to at least one other business function that "
            "accesses the same object, or (2) aggregate business processes with a "
            "common ancestor.",
        )
    ]


def _c12(t: _Vocabulary) -> list[Rule]:
    return [
        Rule(
            "C12_serving_mirrored_by_association",
            t.v,
            compose(
                t.a,
                group(union(identity(BUSINESS_OBJECT), converse(t.o))),
                converse(t.a),
            ),
            "Each serving relationship between business functions must have a "
            "corresponding association relationship between business objects in "
            "the opposite direction.",
        )
    ]


def _c13(t: _Vocabulary) -> list[Rule]:
    c_bp = t.c(BUSINESS_PROCESS)
    connected = closure(group(union(t.o, converse(t.o))))
    return [
        Rule(
            "C13_connected_graph",
            intersect(compose(closure(converse(c_bp)), closure(c_bp)), t.level()),
            compose(
                converse(t.g),
                t.a,
                group(union(identity(BUSINESS_OBJECT), connected)),
                converse(t.a),
                t.g,
            ),
            "At least one business object per descendant of a business process "
            "must be part of a connected graph.",
        )
    ]


_STRUCTURAL: dict[RuleFamily, Callable[[_Vocabulary], list[Rule]]] = {
    RuleFamily.C0: _c0,
    RuleFamily.C1: _c1,
    RuleFamily.C2: _c2,
    RuleFamily.C3: _c3,
}

_LEVELLED: dict[RuleFamily, Callable[[_Vocabulary], list[Rule]]] = {
    RuleFamily.C6: _c6,
    RuleFamily.C7: _c7,
    RuleFamily.C8: _c8,
    RuleFamily.C9: _c9,
    RuleFamily.C10: _c10,
    RuleFamily.C11: _c11,
    RuleFamily.C12: _c12,
    RuleFamily.C13: _c13,
}


def build_catalog(dialect: LevelDialect) -> dict[RuleInstance, CatalogEntry]:
    """
    Build every rule instance for a dialect, in catalog order.

    Args:
        dialect: How levels and associations are addressed

    Returns:
        Mapping of RuleInstance -> CatalogEntry. Universal instances of
        level-addressed families are followed by their level variants.
    """
    t = _Vocabulary(dialect)
    catalog: dict[RuleInstance, CatalogEntry] = {}

    for family, build in _STRUCTURAL.items():
        instance = RuleInstance(family)
        catalog[instance] = CatalogEntry(instance, tuple(build(t)))

    for kind in INHERITANCE_KINDS:
        for family, build in ((RuleFamily.C4, _c4), (RuleFamily.C5, _c5)):
            instance = RuleInstance(family, kind)
            catalog[instance] = CatalogEntry(instance, tuple(build(t, kind)))

    for family, build in _LEVELLED.items():
        rules = build(t)
        instance = RuleInstance(family)
        catalog[instance] = CatalogEntry(instance, tuple(rules), level_variant=True)
        for level in SUPPORTED_LEVELS:
            scoped = RuleInstance(family, level=level)
            catalog[scoped] = CatalogEntry(
                scoped,
                tuple(rule.at_level(level, dialect) for rule in rules),
                level_variant=True,
            )

    return catalog


def catalog_instances() -> list[RuleInstance]:
    """Every rule instance, in catalog order, independent of dialect."""
    instances = [RuleInstance(family) for family in _STRUCTURAL]
    for kind in INHERITANCE_KINDS:
        instances.append(RuleInstance(RuleFamily.C4, kind))
        instances.append(RuleInstance(RuleFamily.C5, kind))
    for family in _LEVELLED:
        instances.append(RuleInstance(family))
        instances.extend(RuleInstance(family, level=level) for level in SUPPORTED_LEVELS)
    return instances


_ORDER: dict[RuleInstance, int] = {
    instance: i for i, instance in enumerate(catalog_instances())
}


def catalog_order() -> dict[RuleInstance, int]:
    """Position of every rule instance in the catalog."""
    return _ORDER
