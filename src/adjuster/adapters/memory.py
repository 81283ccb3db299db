"""Dict-backed changeset store for tests and hosts without a database."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from adjuster.domain.adjustments.codec import ChangesFormat

if TYPE_CHECKING:
    from adjuster.domain.model import Changeset


class InMemoryChangesetStore:
    """Keeps one changeset per ``(subject_id, subject_type)`` key.

    Stored instances are copies, so callers mutating a returned changeset do not
    change the store until they ``save`` it again. ``lock`` is accepted and
    ignored; concurrent adjusters of the same subject are not serialised.
    """

    def __init__(self, changes_format: ChangesFormat = ChangesFormat.MAPPING) -> None:
        self._changes_format = changes_format
        self._rows: dict[tuple[str, str | None], Changeset] = {}
        self.writes = 0

    @property
    def changes_format(self) -> ChangesFormat:
        return self._changes_format

    def find(
        self,
        subject_id: str,
        subject_type: str | None = None,
        *,
        lock: bool = False,
    ) -> Changeset | None:
        _ = lock
        stored = self._rows.get((subject_id, subject_type))
        return copy.deepcopy(stored) if stored is not None else None

    def save(self, changeset: Changeset) -> Changeset:
        current = self._rows.get(changeset.subject_key)
        if current is not None and current.id != changeset.id:
            raise ValueError(
                f"Subject {changeset.subject_key!r} already owns changeset {current.id}"
            )
        self._rows[changeset.subject_key] = copy.deepcopy(changeset)
        self.writes += 1
        return changeset

    def delete(self, changeset: Changeset) -> None:
        current = self._rows.get(changeset.subject_key)
        if current is not None and current.id == changeset.id:
            del self._rows[changeset.subject_key]
            self.writes += 1

    def list_all(self) -> list[Changeset]:
        return [copy.deepcopy(changeset) for changeset in self._rows.values()]

    def __len__(self) -> int:
        return len(self._rows)


if TYPE_CHECKING:
    from adjuster.domain.ports.persistence import ChangesetStore

    _store_check: ChangesetStore = InMemoryChangesetStore()
