"""SQLAlchemy table metadata for stored changesets."""

from __future__ import annotations

import logging
import uuid
from functools import cache
from typing import TYPE_CHECKING, Final

from sqlalchemy import JSON, Column, MetaData, String, Table, Text, UniqueConstraint, Uuid

from adjuster.domain.adjustments.codec import ChangesFormat

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.schema import SchemaItem

    from adjuster.config.adjuster import AdjusterConfig

log = logging.getLogger(__name__)

UUIDColumnType = Uuid(as_uuid=True)

NAMING_CONVENTION: Final[dict[str, str]] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def adjustment_columns(config: AdjusterConfig) -> list[SchemaItem]:
    """Return fresh column/constraint objects for the changeset table.

    Column *names* follow the configuration; column *keys* are fixed
    (``subject_id``, ``subject_type``, ``changes``) so repositories address them
    independently of the naming. Polymorphic tables carry an id/type pair, single
    type tables only the id column.
    """

    items: list[SchemaItem] = [
        Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
        Column(config.subject_id_column, String, key="subject_id", nullable=False),
    ]
    if config.subject_type_column is not None:
        items.append(
            Column(config.subject_type_column, String, key="subject_type", nullable=False)
        )

    changes_type = JSON() if config.changes_format is ChangesFormat.MAPPING else Text()
    items.append(Column(config.changes_column, changes_type, key="changes", nullable=False))
    items.extend(Column(name, String, nullable=True) for name in config.extra_columns)
    unique_keys = ["subject_id"]
    if config.subject_type_column is not None:
        unique_keys.append("subject_type")
    items.append(UniqueConstraint(*unique_keys))
    return items


@cache
def adjustment_table(config: AdjusterConfig) -> Table:
    """Return the (cached) table for ``config``, bound to its own metadata."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
    return Table(config.table_name, metadata, *adjustment_columns(config))


def create_all_tables(engine: Engine, config: AdjusterConfig) -> None:
    """Create the changeset table for ``config`` if it does not exist yet."""

    log.info("Creating changeset table %s", config.table_name)
    adjustment_table(config).metadata.create_all(engine)
