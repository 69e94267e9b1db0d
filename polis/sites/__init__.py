"""Site declarations and manifests."""

from polis.sites.loader import IndexedManifest, index_manifest, load_manifest
from polis.sites.models import ObservingType, SiteDeclaration, SiteManifest

__all__ = [
    "IndexedManifest",
    "ObservingType",
    "SiteDeclaration",
    "SiteManifest",
    "index_manifest",
    "load_manifest",
]
