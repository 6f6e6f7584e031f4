"""Batch scheduling."""

from .batch import BatchScheduler, BatchSummary

__all__ = [
    "BatchScheduler",
    "BatchSummary",
]
