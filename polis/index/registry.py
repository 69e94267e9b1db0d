"""Flat id -> record store for the site hierarchy index."""

from __future__ import annotations

from collections.abc import Iterator

from polis.index.models import SiteID, SiteRecord


class NodeRegistry:
    """Single source of truth for which site ids exist.

    Records are kept in registration order, which the resolver relies on
    for its first-match scan. This is the only place that allocates
    ``SiteRecord`` storage; everything else refers to sites by id.
    """

    def __init__(self) -> None:
        # dicts preserve insertion order
        self._records: dict[SiteID, SiteRecord] = {}

    def register(self, site_id: SiteID) -> SiteRecord:
        """Return the record for *site_id*, creating an empty one if needed."""
        record = self._records.get(site_id)
        if record is None:
            record = SiteRecord(id=site_id)
            self._records[site_id] = record
        return record

    def get(self, site_id: SiteID) -> SiteRecord | None:
        return self._records.get(site_id)

    def contains(self, site_id: SiteID) -> bool:
        return site_id in self._records

    def discard(self, site_id: SiteID) -> None:
        """Drop the storage for *site_id*. Unknown ids are ignored."""
        self._records.pop(site_id, None)

    def __contains__(self, site_id: object) -> bool:
        return site_id in self._records

    def __iter__(self) -> Iterator[SiteRecord]:
        return iter(list(self._records.values()))

    def __len__(self) -> int:
        return len(self._records)
