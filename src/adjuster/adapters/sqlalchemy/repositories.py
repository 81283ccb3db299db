"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import delete, insert, select, update

from adjuster.adapters.sqlalchemy.mappings import adjustment_table
from adjuster.domain.adjustments.codec import ChangesFormat, decode_changes, encode_changes
from adjuster.domain.adjustments.errors import UnknownChangesetAttributeError

if TYPE_CHECKING:
    from sqlalchemy import Column, CursorResult, RowMapping
    from sqlalchemy.orm import Session

    from adjuster.config.adjuster import AdjusterConfig
    from adjuster.domain.adjustments.codec import ChangeMap
    from adjuster.domain.model import Changeset


class SqlAlchemyChangesetRepository:
    """Persist changesets as rows of the configured adjustments table.

    Statements run on the session's connection, so they join the caller's
    transaction. Autoflush is suspended around them: a Shadowed subject pending in
    the same session must not be flushed as a side effect of reading its changeset.
    """

    def __init__(self, session: Session, config: AdjusterConfig) -> None:
        self.session = session
        self.config = config
        self.table = adjustment_table(config)

    @property
    def changes_format(self) -> ChangesFormat:
        return self.config.changes_format

    def find(
        self,
        subject_id: str,
        subject_type: str | None = None,
        *,
        lock: bool = False,
    ) -> Changeset | None:
        stmt = select(self.table).where(self.table.c.subject_id == subject_id)
        if self.config.polymorphic:
            if subject_type is None:
                raise ValueError("Polymorphic changeset stores need a subject type")
            stmt = stmt.where(self.table.c.subject_type == subject_type)
        if lock:
            stmt = stmt.with_for_update()
        with self.session.no_autoflush:
            row = self.session.execute(stmt.limit(1)).mappings().one_or_none()
        if row is None:
            return None
        return self._to_changeset(row)

    def save(self, changeset: Changeset) -> Changeset:
        values = self._to_values(changeset)
        with self.session.no_autoflush:
            result = cast(
                "CursorResult[Any]",
                self.session.execute(
                    update(self.table).where(self.table.c.id == changeset.id).values(values)
                ),
            )
            if result.rowcount == 0:
                self.session.execute(
                    insert(self.table).values({self.table.c.id: changeset.id, **values})
                )
        return changeset

    def delete(self, changeset: Changeset) -> None:
        with self.session.no_autoflush:
            self.session.execute(delete(self.table).where(self.table.c.id == changeset.id))

    def list_all(self) -> list[Changeset]:
        order = [self.table.c.subject_id]
        if self.config.polymorphic:
            order.insert(0, self.table.c.subject_type)
        with self.session.no_autoflush:
            rows = self.session.execute(select(self.table).order_by(*order)).mappings().all()
        return [self._to_changeset(row) for row in rows]

    def _to_changeset(self, row: RowMapping) -> Changeset:
        columns = self.table.c
        return self.config.changeset_model(
            id=row[columns.id],
            subject_id=row[columns.subject_id],
            subject_type=row[columns.subject_type] if self.config.polymorphic else None,
            changes=row[columns.changes],
            attributes={name: row[columns[name]] for name in self.config.extra_columns},
        )

    def _to_values(self, changeset: Changeset) -> dict[Column[Any], object]:
        unknown = set(changeset.attributes).difference(self.config.extra_columns)
        if unknown:
            raise UnknownChangesetAttributeError(unknown)

        columns = self.table.c
        values: dict[Column[Any], object] = {
            columns.subject_id: changeset.subject_id,
            columns.changes: self._stored_changes(changeset.changes),
        }
        if self.config.polymorphic:
            if changeset.subject_type is None:
                raise ValueError("Polymorphic changesets need a subject type")
            values[columns.subject_type] = changeset.subject_type
        for name in self.config.extra_columns:
            values[columns[name]] = changeset.attributes.get(name)
        return values

    def _stored_changes(self, changes: ChangeMap | str) -> ChangeMap | str:
        return encode_changes(decode_changes(changes), self.changes_format)


if TYPE_CHECKING:
    from adjuster.domain.ports.persistence import ChangesetStore

    _session_stub = cast("Session", object())
    _repo_check: ChangesetStore = SqlAlchemyChangesetRepository(
        _session_stub, cast("AdjusterConfig", object())
    )
