"""Errors raised by the adjustment engine and its stores."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from adjuster.domain.model import Adjustable


class AdjusterError(RuntimeError):
    """Base class for adjustment errors."""


class ModelAdjustedError(AdjusterError):
    """Raised when persisting a subject that carries applied, unsaved adjustments."""

    def __init__(self, subject: Adjustable) -> None:
        super().__init__(
            f"Refusing to persist adjusted {subject.adjustable_type} {subject.adjustable_id}; "
            "reload the subject or disable save protection to commit the adjustments"
        )
        self.subject = subject


class UnknownChangesetAttributeError(AdjusterError):
    """Raised when a store has no column for an extra changeset attribute."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Unknown changeset attributes: {', '.join(self.names)}")


class SubjectResolutionError(AdjusterError, LookupError):
    """Raised when a subject type tag cannot be mapped to a registered class."""
