"""Placement of a newly declared site within the existing forest.

A site declares which other sites it *believes* are its sub-sites. Site
descriptors are authored independently and arrive in any order, so the
resolver rebuilds structure from these possibly one-sided claims as each
site is inserted, without a second pass.

The scan visits every registered site (not just roots) in registration
order and stops at the first match:

* Rule A: the scanned site's hints name the new site, so the new site
  becomes its child.
* Rule B: otherwise, if the new site's hints name the scanned site, the
  scanned site becomes a child of the new site.

Only the first relationship found is established. Ambiguous hint sets are
resolved by registration order, never by collecting all candidates.

Planning is side-effect free; ``SiteIndex`` applies the returned
``Adoption`` only after every check has passed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from polis.index.models import AlreadyHasParent, CycleWouldForm, SiteID
from polis.index.registry import NodeRegistry

logger = logging.getLogger(__name__)


class AdoptionRule(str, Enum):
    """Which side of the hint relation produced a link."""

    adopted_by_existing = "adopted_by_existing"  # Rule A
    adopts_existing = "adopts_existing"  # Rule B


@dataclass(frozen=True)
class Adoption:
    """A single parent/child link planned for an insertion."""

    rule: AdoptionRule
    parent_id: SiteID
    child_id: SiteID


def normalize_hints(hints: Iterable[SiteID] | None) -> frozenset:
    """Hints as a frozenset. A bare string is one hint, not its characters."""
    if hints is None:
        return frozenset()
    if isinstance(hints, (str, bytes)):
        return frozenset([hints])
    return frozenset(hints)


def is_ancestor(registry: NodeRegistry, candidate: SiteID, site_id: SiteID) -> bool:
    """True if *candidate* is *site_id* or sits above it in the forest."""
    seen: set = set()
    current: SiteID | None = site_id
    while current is not None and current not in seen:
        if current == candidate:
            return True
        seen.add(current)
        record = registry.get(current)
        current = record.parent if record is not None else None
    return False


class HierarchyResolver:
    """Decides where a new site attaches, given its hints."""

    def __init__(self, registry: NodeRegistry) -> None:
        self._registry = registry

    def plan(self, site_id: SiteID, hints: frozenset) -> Adoption | None:
        """Return the link to create for *site_id*, or None for a new root.

        Raises ``CycleWouldForm`` for self-referencing hints or any link
        that would close a loop, and ``AlreadyHasParent`` when Rule B
        picks a site that is already attached elsewhere.
        """
        if site_id in hints:
            raise CycleWouldForm(site_id, site_id)

        for record in self._registry:
            if record.id == site_id:
                continue
            if site_id in record.hints:
                adoption = Adoption(AdoptionRule.adopted_by_existing, record.id, site_id)
                break
            if record.id in hints:
                if record.parent is not None:
                    raise AlreadyHasParent(record.id, record.parent, site_id)
                adoption = Adoption(AdoptionRule.adopts_existing, site_id, record.id)
                break
        else:
            return None

        if is_ancestor(self._registry, adoption.child_id, adoption.parent_id):
            raise CycleWouldForm(adoption.child_id, adoption.parent_id)

        logger.debug(
            "planned %s: %r under %r", adoption.rule.value, adoption.child_id, adoption.parent_id
        )
        return adoption
