"""Data models and errors for the site hierarchy index."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

SiteID = Hashable


class HierarchyError(Exception):
    """Base class for recoverable index errors. The index is left untouched."""

    def __init__(self, site_id: SiteID, message: str) -> None:
        self.site_id = site_id
        super().__init__(message)


class CycleWouldForm(HierarchyError):
    """The requested link would make a site its own ancestor."""

    def __init__(self, site_id: SiteID, ancestor_id: SiteID) -> None:
        self.ancestor_id = ancestor_id
        if site_id == ancestor_id:
            msg = f"site {site_id!r} cannot be its own sub-site"
        else:
            msg = f"linking {site_id!r} under {ancestor_id!r} would form a cycle"
        super().__init__(site_id, msg)


class AlreadyHasParent(HierarchyError):
    """A site claimed as sub-site is already attached to another parent."""

    def __init__(self, site_id: SiteID, current_parent: SiteID, claimed_by: SiteID) -> None:
        self.current_parent = current_parent
        self.claimed_by = claimed_by
        super().__init__(
            site_id,
            f"site {site_id!r} already has parent {current_parent!r}; "
            f"refusing to move it under {claimed_by!r}",
        )


class UnknownNode(HierarchyError):
    """Operation on an id that was never inserted (or was removed)."""

    def __init__(self, site_id: SiteID) -> None:
        super().__init__(site_id, f"unknown site {site_id!r}")


class DuplicateInsert(HierarchyError):
    """The id is already registered and the index rejects re-insertion."""

    def __init__(self, site_id: SiteID) -> None:
        super().__init__(site_id, f"site {site_id!r} is already in the index")


class BrokenLink(HierarchyError):
    """A parent link points at storage that no longer exists."""

    def __init__(self, site_id: SiteID, partial_path: tuple, missing_id: SiteID) -> None:
        self.partial_path = partial_path
        self.missing_id = missing_id
        super().__init__(
            site_id,
            f"path of {site_id!r} is broken at missing parent {missing_id!r}",
        )


@dataclass
class SiteRecord:
    """Mutable registry storage for one site. Only the registry creates these."""

    id: SiteID
    parent: SiteID | None = None
    children: list[SiteID] = field(default_factory=list)
    hints: frozenset = frozenset()

    def snapshot(self) -> SiteNode:
        return SiteNode(
            id=self.id,
            parent=self.parent,
            children=tuple(self.children),
            hints=self.hints,
        )


@dataclass(frozen=True)
class SiteNode:
    """Read-only handle on a site, detached from the index storage."""

    id: SiteID
    parent: SiteID | None = None
    children: tuple = ()
    hints: frozenset = frozenset()

    @property
    def is_root(self) -> bool:
        return self.parent is None


class SiteLink(BaseModel):
    """``(id, parent_id, child_ids)`` row handed to persistence layers."""

    model_config = ConfigDict(frozen=True)

    id: Any
    parent_id: Any = None
    child_ids: tuple[Any, ...] = ()
