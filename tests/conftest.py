"""Shared test fixtures for the POLIS site index."""

import logging

import pytest

from polis.config.models import IndexConfig, PolisConfig
from polis.index import SiteIndex


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch):
    monkeypatch.delenv("POLIS_CONFIG", raising=False)


@pytest.fixture(autouse=True)
def _reset_polis_logger():
    """The CLI attaches its own handler; undo that between tests."""
    yield
    logger = logging.getLogger("polis")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def index():
    return SiteIndex()


@pytest.fixture
def merging_index():
    return SiteIndex(IndexConfig(on_duplicate="merge"))


@pytest.fixture
def sample_config():
    return PolisConfig()


@pytest.fixture
def observatory_index(index):
    """A small two-root forest.

    ::

        eso             lone
        └── paranal
            ├── vlt-ut1
            └── vlt-ut2
    """
    index.insert("eso", ["paranal"])
    index.insert("paranal", ["vlt-ut1", "vlt-ut2"])
    index.insert("vlt-ut1")
    index.insert("vlt-ut2")
    index.insert("lone")
    return index


@pytest.fixture
def manifest_yaml():
    return """\
sites:
  - id: eso
    type: network
    name: European Southern Observatory
    assumed_sub_site_ids: [paranal, la-silla]
  - id: paranal
    assumed_sub_site_ids: [vlt-ut1]
  - id: vlt-ut1
    type: array
  - id: la-silla
  - id: stray
    assumed_sub_site_ids: [vlt-ut1]
"""


@pytest.fixture
def manifest_file(tmp_path, manifest_yaml):
    path = tmp_path / "sites.yaml"
    path.write_text(manifest_yaml)
    return path
