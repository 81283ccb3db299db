"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import inspect

from adjuster.adapters.sqlalchemy.migrations import upgrade_head
from adjuster.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyAdjustmentUnitOfWork,
    is_started,
    startup,
)
from adjuster.config import get_adjuster_config

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from adjuster.config import AdjusterConfig
    from adjuster.domain.adjustments.registry import SubjectRegistry
    from adjuster.domain.model import Adjustable, Changeset

UnitOfWorkFactory = Callable[[], SqlAlchemyAdjustmentUnitOfWork]


log = getLogger(__name__)


def _resolve_unit_of_work(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyAdjustmentUnitOfWork


def migrate(*, database_uri: str | None = None, config: AdjusterConfig | None = None) -> None:
    """Create or upgrade the changeset table."""

    resolved = config or get_adjuster_config()
    log.info("Migrating changeset table %s", resolved.table_name)
    upgrade_head(database_uri=database_uri, config=resolved)


def list_changesets(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> list[Changeset]:
    with _resolve_unit_of_work(unit_of_work_factory)() as uow:
        return list(uow.repositories.changesets.list_all())


def find_changeset(
    subject_id: str,
    subject_type: str | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Changeset | None:
    with _resolve_unit_of_work(unit_of_work_factory)() as uow:
        return uow.repositories.changesets.find(subject_id, subject_type)


def discard_changeset(
    subject_id: str,
    subject_type: str | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> bool:
    """Delete the pending changeset of a subject; return whether one existed."""

    with _resolve_unit_of_work(unit_of_work_factory)() as uow:
        store = uow.repositories.changesets
        changeset = store.find(subject_id, subject_type, lock=True)
        if changeset is None:
            log.info("No changeset stored for %s %s", subject_type or "subject", subject_id)
            return False
        store.delete(changeset)
        uow.commit()
    log.info("Discarded changeset for %s %s", subject_type or "subject", subject_id)
    return True


def subject_for_changeset(
    session: Session,
    changeset: Changeset,
    registry: SubjectRegistry,
) -> Adjustable | None:
    """Load the subject owning ``changeset`` through the registered subject class."""

    subject_cls = registry.resolve(changeset.subject_type)
    primary_key = inspect(subject_cls).primary_key
    if len(primary_key) != 1:
        raise ValueError(f"{subject_cls.__name__} must have a single-column primary key")
    identity = primary_key[0].type.python_type(changeset.subject_id)
    return session.get(subject_cls, identity)
