"""Save protection for subjects holding applied adjustments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from adjuster.domain.adjustments.errors import ModelAdjustedError

if TYPE_CHECKING:
    from adjuster.domain.model import Adjustable

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SaveProtection:
    """Gate between a Shadowed subject and durable storage.

    A subject is Clean until the engine overlays a changeset on it, after which it
    is Shadowed for the rest of that instance's life. Persisting a Shadowed subject
    fails while protection is enabled for it; the subject's own override wins over
    ``default`` in both directions.
    """

    default: bool = True

    def is_enabled(self, subject: Adjustable) -> bool:
        override = subject.save_protection
        return self.default if override is None else override

    def blocks(self, subject: Adjustable) -> bool:
        return subject.is_adjusted and self.is_enabled(subject)

    def check(self, subject: Adjustable) -> None:
        if self.blocks(subject):
            log.warning(
                "Blocked persisting adjusted %s %s",
                subject.adjustable_type,
                subject.adjustable_id,
            )
            raise ModelAdjustedError(subject)
