from .loader import load_config
from .models import IndexConfig, PolisConfig

__all__ = [
    "IndexConfig",
    "PolisConfig",
    "load_config",
]
