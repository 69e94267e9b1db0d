"""Loading site manifests and indexing their declarations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import ValidationError

from polis.config.models import IndexConfig
from polis.index import HierarchyError, SiteIndex
from polis.sites.models import ObservingType, SiteManifest

logger = logging.getLogger(__name__)


@dataclass
class IndexedManifest:
    """An index built from a manifest, plus per-site kinds and rejections."""

    index: SiteIndex
    kinds: dict[str, ObservingType] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    rejected: dict[str, HierarchyError] = field(default_factory=dict)


def load_manifest(path: Path) -> SiteManifest:
    """Read a YAML (or JSON) manifest.

    Accepts either a mapping with a ``sites`` key or a bare list of
    declarations.
    """
    try:
        raw = yaml.safe_load(Path(path).read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Cannot read manifest {path}: {e}") from e

    if raw is None:
        return SiteManifest()
    if isinstance(raw, list):
        raw = {"sites": raw}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid manifest in {path}: expected a mapping or a list")
    try:
        return SiteManifest(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid manifest in {path}: {e}") from e


def index_manifest(manifest: SiteManifest, config: IndexConfig | None = None) -> IndexedManifest:
    """Insert every declaration in manifest order.

    Sites the index rejects are skipped and reported in ``rejected``.
    """
    result = IndexedManifest(index=SiteIndex(config))
    for site in manifest.sites:
        try:
            result.index.insert(site.id, site.assumed_sub_site_ids)
        except HierarchyError as e:
            result.rejected[site.id] = e
            continue
        result.kinds[site.id] = site.type
        result.labels[site.id] = site.label
    if result.rejected:
        logger.warning("%d of %d site(s) rejected", len(result.rejected), len(manifest.sites))
    return result
