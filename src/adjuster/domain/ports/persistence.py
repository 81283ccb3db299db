"""Ports for persisting changesets."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from adjuster.domain.adjustments.codec import ChangesFormat
    from adjuster.domain.model import Changeset


@runtime_checkable
class ChangesetStore(Protocol):
    """Persistence contract for at most one changeset per subject identity.

    ``changes_format`` tells the engine which representation ``find`` returns and
    ``save`` expects in :attr:`Changeset.changes`.
    """

    @property
    def changes_format(self) -> ChangesFormat: ...

    def find(
        self,
        subject_id: str,
        subject_type: str | None = None,
        *,
        lock: bool = False,
    ) -> Changeset | None:
        """Return the changeset owned by the given subject, if any.

        ``lock`` asks the store to hold the row for a following ``save``/``delete``
        where the backend supports it.
        """
        ...

    def save(self, changeset: Changeset) -> Changeset:
        """Insert or update ``changeset`` and return the persisted instance."""
        ...

    def delete(self, changeset: Changeset) -> None: ...

    def list_all(self) -> Sequence[Changeset]: ...
