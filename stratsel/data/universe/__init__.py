"""Symbol universe."""

from .loader import UniverseLoader

__all__ = [
    "UniverseLoader",
]
