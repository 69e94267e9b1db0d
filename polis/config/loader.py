"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import PolisConfig

CONFIG_ENV_VAR = "POLIS_CONFIG"


def config_search_paths(cli_path: str | None = None) -> list[Path]:
    """Candidate files, highest priority first: CLI > $POLIS_CONFIG > project > user."""
    paths = []
    if cli_path:
        paths.append(Path(cli_path))
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        paths.append(Path(env_path))
    paths.append(Path("./polis.yaml"))
    paths.append(Path.home() / ".polis" / "config.yaml")
    return paths


def load_config(cli_path: str | None = None) -> PolisConfig:
    """Load the first non-empty config file found, else defaults.

    An explicit *cli_path* that does not exist is an error rather than
    silently falling through to the next candidate.
    """
    if cli_path and not Path(cli_path).is_file():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in config_search_paths(cli_path):
        if not path.is_file():
            continue
        try:
            raw = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if raw is None:
            continue
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid config in {path}: expected a mapping")
        try:
            return PolisConfig(**_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e

    return PolisConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `polis-index config init`
DEFAULT_CONFIG_TEMPLATE = """\
# polis.yaml

# Site hierarchy index
index:
  on_duplicate: "reject"       # reject | merge (merge unions the new sub-site hints)
  thread_safe: true            # false drops the reader/writer lock

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
