"""POLIS site index - hierarchy of observing facilities built from sub-site hints."""

from polis.config import IndexConfig, PolisConfig, load_config
from polis.index import HierarchyError, SiteIndex, SiteNode, build_index
from polis.sites import ObservingType, SiteDeclaration, SiteManifest, index_manifest, load_manifest

__version__ = "0.1.0"

__all__ = [
    "HierarchyError",
    "IndexConfig",
    "ObservingType",
    "PolisConfig",
    "SiteDeclaration",
    "SiteIndex",
    "SiteManifest",
    "SiteNode",
    "build_index",
    "index_manifest",
    "load_config",
    "load_manifest",
]
