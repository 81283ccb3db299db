"""SQLAlchemy-mapped subjects for adapter and app tests."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from functools import cache
from typing import TYPE_CHECKING, ClassVar

from sqlalchemy import Column, Integer, String, Table, Uuid, orm

from adjuster.adapters.sqlalchemy import reset_adjusted_on_reload
from adjuster.domain.model import AdjustableMixin

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

mapper_registry = orm.registry()

fruit_table = Table(
    "fruit",
    mapper_registry.metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("price", Integer, nullable=False),
)

guarded_fruit_table = Table(
    "guarded_fruit",
    mapper_registry.metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("price", Integer, nullable=False),
)


@dataclass(eq=False, kw_only=True)
class StoredFruit(AdjustableMixin):
    ADJUSTABLE_TYPE: ClassVar[str | None] = "fruit"

    name: str
    price: int


@dataclass(eq=False, kw_only=True)
class GuardedFruit(AdjustableMixin):
    ADJUSTABLE_TYPE: ClassVar[str | None] = "guarded_fruit"
    SAVE_PROTECTION: ClassVar[bool | None] = True

    name: str
    price: int


@cache
def start_fruit_mappers() -> orm.registry:
    mapper_registry.map_imperatively(StoredFruit, fruit_table)
    mapper_registry.map_imperatively(GuardedFruit, guarded_fruit_table)
    reset_adjusted_on_reload(StoredFruit)
    reset_adjusted_on_reload(GuardedFruit)
    return mapper_registry


def create_fruit_tables(engine: Engine) -> None:
    start_fruit_mappers()
    mapper_registry.metadata.create_all(engine)
