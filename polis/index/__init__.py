"""Observing-site hierarchy index."""

from collections.abc import Iterable

from polis.index.forest import SiteIndex
from polis.index.locks import NullLock, ReadWriteLock
from polis.index.models import (
    AlreadyHasParent,
    BrokenLink,
    CycleWouldForm,
    DuplicateInsert,
    HierarchyError,
    SiteLink,
    SiteNode,
    SiteRecord,
    UnknownNode,
)
from polis.index.paths import PathResolution, format_id_path, resolve_id_path
from polis.index.registry import NodeRegistry
from polis.index.resolver import Adoption, AdoptionRule, HierarchyResolver


def build_index(entries: Iterable[tuple], **kwargs) -> SiteIndex:
    """Insert ``(site_id, hints)`` pairs, in order, into a fresh index."""
    index = SiteIndex(**kwargs)
    for site_id, hints in entries:
        index.insert(site_id, hints)
    return index


__all__ = [
    "Adoption",
    "AdoptionRule",
    "AlreadyHasParent",
    "BrokenLink",
    "CycleWouldForm",
    "DuplicateInsert",
    "HierarchyError",
    "HierarchyResolver",
    "NodeRegistry",
    "NullLock",
    "PathResolution",
    "ReadWriteLock",
    "SiteIndex",
    "SiteLink",
    "SiteNode",
    "SiteRecord",
    "UnknownNode",
    "build_index",
    "format_id_path",
    "resolve_id_path",
]
