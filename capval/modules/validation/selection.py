"""
Rule selection - infer which rule instances a collection needs.

The selection looks at which decomposition levels each relationship family
actually touches and decides, per rule family:
- C0-C3 are always selected.
- C4/C5 for a relation kind are selected only when that kind spans more
  than one level.
- C6-C13 are selected universally when every required family touches
  exactly the levels touched by all relationships, otherwise per level
  where every required family is present.

All functions are pure - they take a Collection and return results.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

from capval.adapters.archimate.models import Collection

from .catalog import (
    COVERAGE_REQUIREMENTS,
    INHERITANCE_KINDS,
    SUPPORTED_LEVELS,
    RelationFamily,
    RuleFamily,
    RuleInstance,
    catalog_order,
)

__all__ = [
    "ALWAYS_SELECTED",
    "LevelProfile",
    "relationship_levels",
    "compute_level_profile",
    "select_from_profile",
    "select_rules",
]

logger = logging.getLogger(__name__)

ALWAYS_SELECTED: tuple[RuleInstance, ...] = (
    RuleInstance(RuleFamily.C0),
    RuleInstance(RuleFamily.C1),
    RuleInstance(RuleFamily.C2),
    RuleInstance(RuleFamily.C3),
)


def _level_key(level: str) -> tuple[int, int | str]:
    return (0, int(level)) if level.isdecimal() else (1, level)


@dataclass
class LevelProfile:
    """Levels touched per relationship family, and by any relationship."""

    by_family: dict[RelationFamily, set[str]] = field(default_factory=dict)
    all: set[str] = field(default_factory=set)

    def levels(self, family: RelationFamily) -> set[str]:
        return self.by_family.get(family, set())

    def to_dict(self) -> dict[str, list[str]]:
        """Sorted level lists keyed by family name, plus 'all'."""
        result = {
            f.value: sorted(levels, key=_level_key)
            for f, levels in self.by_family.items()
        }
        result["all"] = sorted(self.all, key=_level_key)
        return result


def relationship_levels(
    collection: Collection, family: RelationFamily | None = None
) -> set[str]:
    """
    Levels touched by the relationships of a family.

    A relationship touches the (first) level of both of its endpoints.
    When the family relates a type to itself, a level holding exactly one
    element of that type counts as touched as well: a single element
    trivially satisfies the self relation.

    Args:
        collection: Collection to inspect
        family: Relationship family, or None for every relationship

    Returns:
        Set of level strings
    """
    levels: set[str] = set()

    if family is None:
        for relationship in collection.relationships:
            levels.update(_endpoint_levels(relationship))
        return levels

    signature = family.signature
    for relationship in collection.relationships:
        if relationship.signature == signature:
            levels.update(_endpoint_levels(relationship))

    _, source_type, target_type = signature
    if source_type == target_type:
        counts = Counter(
            e.level for e in collection.elements if e.element_type == source_type
        )
        levels.update(level for level in SUPPORTED_LEVELS if counts[level] == 1)

    return levels


def _endpoint_levels(relationship) -> list[str]:
    return [
        level
        for level in (relationship.source.level, relationship.target.level)
        if level is not None
    ]


def compute_level_profile(collection: Collection) -> LevelProfile:
    """Compute the level profile for every relationship family."""
    return LevelProfile(
        by_family={f: relationship_levels(collection, f) for f in RelationFamily},
        all=relationship_levels(collection),
    )


def select_from_profile(profile: LevelProfile) -> list[RuleInstance]:
    """
    Select rule instances from a level profile.

    Returns:
        Deduplicated rule instances in catalog order
    """
    selected: list[RuleInstance] = list(ALWAYS_SELECTED)

    for kind in INHERITANCE_KINDS:
        if len(profile.levels(kind)) > 1:
            selected.append(RuleInstance(RuleFamily.C4, kind))
            selected.append(RuleInstance(RuleFamily.C5, kind))
        else:
            logger.debug(f"Skipping C4/C5 for {kind.value}: single level or absent")

    for family, required in COVERAGE_REQUIREMENTS.items():
        if all(
            profile.levels(r) and profile.levels(r) == profile.all for r in required
        ):
            selected.append(RuleInstance(family))
            continue
        for level in [lv for lv in SUPPORTED_LEVELS if lv in profile.all]:
            if all(level in profile.levels(r) for r in required):
                selected.append(RuleInstance(family, level=level))

    order = catalog_order()
    return sorted(dict.fromkeys(selected), key=order.__getitem__)


def select_rules(collection: Collection) -> list[RuleInstance]:
    """
    Determine which rule instances should be checked for a collection.

    Args:
        collection: The elements and relationships under analysis

    Returns:
        Deduplicated rule instances in catalog order
    """
    profile = compute_level_profile(collection)
    selected = select_from_profile(profile)
    logger.info(
        f"Selected {len(selected)} rule instances for {collection}: "
        + ", ".join(str(s) for s in selected)
    )
    return selected
