"""The site hierarchy index: registry, roots and the operations over them."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable

from polis.config.models import IndexConfig
from polis.index.locks import NullLock, ReadWriteLock
from polis.index.models import (
    BrokenLink,
    CycleWouldForm,
    DuplicateInsert,
    HierarchyError,
    SiteID,
    SiteLink,
    SiteNode,
    SiteRecord,
    UnknownNode,
)
from polis.index.paths import resolve_id_path
from polis.index.registry import NodeRegistry
from polis.index.resolver import AdoptionRule, HierarchyResolver, normalize_hints

logger = logging.getLogger(__name__)


class SiteIndex:
    """Forest of observing sites assembled from sub-site hints.

    One instance owns one registry and its root list; pass it explicitly
    to whoever needs it. Inserts and removals are all-or-nothing: a
    ``HierarchyError`` means nothing changed.
    """

    def __init__(self, config: IndexConfig | None = None) -> None:
        self.config = config or IndexConfig()
        self._registry = NodeRegistry()
        self._resolver = HierarchyResolver(self._registry)
        self._roots: list[SiteID] = []
        self._lock = ReadWriteLock() if self.config.thread_safe else NullLock()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert(self, site_id: SiteID, hints: Iterable[SiteID] | None = None) -> SiteNode:
        """Add *site_id*, declaring *hints* as its assumed sub-sites.

        Returns a snapshot of the inserted site. Raises ``CycleWouldForm``,
        ``AlreadyHasParent`` or ``DuplicateInsert``. ``None`` marks a missing
        parent, so it is refused as an id or a hint with ``ValueError``.
        """
        if site_id is None:
            raise ValueError("site id must not be None")
        hint_set = normalize_hints(hints)
        if None in hint_set:
            raise ValueError(f"hints for {site_id!r} must not contain None")
        with self._lock.write():
            try:
                if site_id in hint_set:
                    raise CycleWouldForm(site_id, site_id)
                existing = self._registry.get(site_id)
                if existing is not None:
                    return self._reinsert(existing, hint_set)
                adoption = self._resolver.plan(site_id, hint_set)
            except HierarchyError as e:
                logger.warning("rejected insert of %r: %s", site_id, e)
                raise

            record = self._registry.register(site_id)
            record.hints = hint_set

            if adoption is None or adoption.rule is AdoptionRule.adopts_existing:
                self._roots.append(site_id)
                logger.debug("site %r added as root", site_id)
            if adoption is not None:
                self._attach(adoption.child_id, adoption.parent_id)

            return record.snapshot()

    def _reinsert(self, record: SiteRecord, hints: frozenset) -> SiteNode:
        if self.config.on_duplicate == "reject":
            raise DuplicateInsert(record.id)
        record.hints = record.hints | hints
        logger.debug("merged %d hint(s) into %r", len(hints), record.id)
        return record.snapshot()

    def _attach(self, child_id: SiteID, parent_id: SiteID) -> None:
        child = self._registry.get(child_id)
        parent = self._registry.get(parent_id)
        child.parent = parent_id
        parent.children.append(child_id)
        if child_id in self._roots:
            self._roots.remove(child_id)
        logger.debug("site %r attached under %r", child_id, parent_id)

    def remove(self, site_id: SiteID) -> None:
        """Delete *site_id*; its children become roots."""
        with self._lock.write():
            record = self._registry.get(site_id)
            if record is None:
                raise UnknownNode(site_id)

            if record.parent is None:
                self._roots.remove(site_id)
            else:
                parent = self._registry.get(record.parent)
                if parent is not None:
                    parent.children.remove(site_id)

            for child_id in record.children:
                child = self._registry.get(child_id)
                if child is None:
                    continue
                child.parent = None
                self._roots.append(child_id)

            self._registry.discard(site_id)
            logger.info(
                "removed site %r, promoted %d child(ren) to roots", site_id, len(record.children)
            )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find(self, site_id: SiteID) -> SiteNode | None:
        with self._lock.read():
            record = self._registry.get(site_id)
            return record.snapshot() if record is not None else None

    def find_in_forest(self, site_id: SiteID) -> SiteNode | None:
        """Depth-first search from the roots, ignoring the flat registry index."""
        with self._lock.read():
            for record in self._walk():
                if record.id == site_id:
                    return record.snapshot()
        return None

    def _walk(self):
        """Yield reachable records, pre-order, roots and children in stored order."""
        seen: set = set()
        stack = list(reversed(self._roots))
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            record = self._registry.get(current)
            if record is None:
                continue
            yield record
            stack.extend(reversed(record.children))

    def _require(self, site_id: SiteID) -> SiteRecord:
        record = self._registry.get(site_id)
        if record is None:
            raise UnknownNode(site_id)
        return record

    def parent(self, site_id: SiteID) -> SiteID | None:
        with self._lock.read():
            return self._require(site_id).parent

    def children(self, site_id: SiteID) -> tuple:
        with self._lock.read():
            return tuple(self._require(site_id).children)

    def roots(self) -> tuple:
        with self._lock.read():
            return tuple(self._roots)

    def id_path(self, site_id: SiteID) -> tuple:
        """Ids from the root down to *site_id*, inclusive."""
        with self._lock.read():
            self._require(site_id)
            resolution = resolve_id_path(self._registry, site_id)
        if not resolution.is_complete:
            raise BrokenLink(site_id, resolution.ids, resolution.broken_link)
        return resolution.ids

    def depth(self, site_id: SiteID) -> int:
        return len(self.id_path(site_id))

    def links(self) -> list[SiteLink]:
        """Export ``(id, parent_id, child_ids)`` rows in registration order."""
        with self._lock.read():
            return [
                SiteLink(id=r.id, parent_id=r.parent, child_ids=tuple(r.children))
                for r in self._registry
            ]

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._registry)

    def __contains__(self, site_id: object) -> bool:
        with self._lock.read():
            return site_id in self._registry

    # ------------------------------------------------------------------
    # Consistency
    # ------------------------------------------------------------------

    def verify_forest_matches_registry(self) -> list[str]:
        """Cross-check the forest structure against the registry.

        Returns a list of problems; an empty list means the parent links,
        child lists, root list and registry all agree and every site is
        reachable from exactly one root.
        """
        problems: list[str] = []
        with self._lock.read():
            records = list(self._registry)

            root_counts = Counter(self._roots)
            for site_id, count in root_counts.items():
                if count > 1:
                    problems.append(f"root {site_id!r} listed {count} times")
            expected_roots = {r.id for r in records if r.parent is None}
            for site_id in expected_roots - set(root_counts):
                problems.append(f"parentless site {site_id!r} missing from roots")
            for site_id in set(root_counts) - expected_roots:
                if site_id in self._registry:
                    problems.append(f"root {site_id!r} has a parent")
                else:
                    problems.append(f"root {site_id!r} is not registered")

            claimed = Counter(c for r in records for c in r.children)
            for site_id, count in claimed.items():
                if count > 1:
                    problems.append(f"site {site_id!r} is a child of {count} parents")

            for record in records:
                if record.parent is not None:
                    parent = self._registry.get(record.parent)
                    if parent is None:
                        problems.append(f"site {record.id!r} has unregistered parent {record.parent!r}")
                    elif record.id not in parent.children:
                        problems.append(
                            f"site {record.id!r} missing from children of {record.parent!r}"
                        )
                for child_id in record.children:
                    child = self._registry.get(child_id)
                    if child is None:
                        problems.append(f"site {record.id!r} lists unregistered child {child_id!r}")
                    elif child.parent != record.id:
                        problems.append(
                            f"child {child_id!r} of {record.id!r} points at parent {child.parent!r}"
                        )

            reachable = {r.id for r in self._walk()}
            for record in records:
                if record.id not in reachable:
                    problems.append(f"site {record.id!r} is not reachable from any root")

        return problems
