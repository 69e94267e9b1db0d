"""Root-to-site id paths."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from polis.index.models import SiteID
from polis.index.registry import NodeRegistry


@dataclass(frozen=True)
class PathResolution:
    """Ids from the root down to a site.

    ``broken_link`` names a parent id with no storage behind it; ``ids``
    then holds only the part of the path that could be resolved.
    """

    ids: tuple = ()
    broken_link: SiteID | None = None

    @property
    def is_complete(self) -> bool:
        return self.broken_link is None


def resolve_id_path(registry: NodeRegistry, site_id: SiteID) -> PathResolution:
    """Walk parent links from *site_id* up to its root.

    Terminates because the index never lets a cycle form.
    """
    collected: list[SiteID] = []
    current: SiteID | None = site_id
    while current is not None:
        record = registry.get(current)
        if record is None:
            return PathResolution(ids=tuple(reversed(collected)), broken_link=current)
        collected.append(record.id)
        current = record.parent
    return PathResolution(ids=tuple(reversed(collected)))


def format_id_path(ids: Iterable[SiteID], separator: str = "/") -> str:
    """Join a path for display, e.g. ``"root/child/grandchild"``."""
    return separator.join(str(i) for i in ids)
