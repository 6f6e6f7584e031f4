"""Result persistence."""

from .results import ResultStore, ResultStoreError

__all__ = [
    "ResultStore",
    "ResultStoreError",
]
