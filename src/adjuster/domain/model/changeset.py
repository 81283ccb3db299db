"""The persisted set of staged field overrides for one subject."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from adjuster.domain.model.entity import Entity

if TYPE_CHECKING:
    from adjuster.domain.adjustments.codec import ChangeMap


@dataclass(eq=False, kw_only=True)
class Changeset(Entity):
    """Zero-or-one pending adjustment for exactly one subject.

    ``changes`` holds either the decoded mapping or its raw JSON text, depending on
    the representation the backing store uses. ``subject_type`` is ``None`` when the
    store is scoped to a single subject kind.
    """

    subject_id: str
    subject_type: str | None = None
    changes: ChangeMap | str = field(default_factory=dict[str, object])
    attributes: dict[str, object] = field(default_factory=dict[str, object])

    @property
    def subject_key(self) -> tuple[str, str | None]:
        return (self.subject_id, self.subject_type)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(subject_id={self.subject_id!r}, "
            f"subject_type={self.subject_type!r}, changes={self.changes!r})"
        )
