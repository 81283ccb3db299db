"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import ChangesetStore
from .unit_of_work import (
    AdjustmentRepositories,
    AdjustmentUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AdjustmentRepositories",
    "AdjustmentUnitOfWork",
    "ChangesetStore",
    "RepositoryCollection",
    "UnitOfWork",
]
