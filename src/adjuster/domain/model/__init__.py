"""Public domain model surface."""

from __future__ import annotations

from adjuster.domain.model.adjustable import Adjustable, AdjustableMixin
from adjuster.domain.model.changeset import Changeset
from adjuster.domain.model.entity import Entity, new_id

__all__ = [
    "Adjustable",
    "AdjustableMixin",
    "Changeset",
    "Entity",
    "new_id",
]
