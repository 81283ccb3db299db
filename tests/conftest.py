from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from adjuster.adapters.memory import InMemoryChangesetStore
from adjuster.adapters.sqlalchemy.migrations import upgrade_head
from adjuster.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyAdjustmentUnitOfWork,
    shutdown,
    startup,
)
from adjuster.config import AdjusterConfig
from adjuster.domain.adjustments import AdjustmentEngine
from tests.helpers.orm import create_fruit_tables

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def adjuster_config() -> AdjusterConfig:
    return AdjusterConfig()


@pytest.fixture
def memory_store() -> InMemoryChangesetStore:
    return InMemoryChangesetStore()


@pytest.fixture
def adjustment_engine(
    memory_store: InMemoryChangesetStore,
    adjuster_config: AdjusterConfig,
) -> AdjustmentEngine:
    return AdjustmentEngine(memory_store, adjuster_config)


@pytest.fixture
def sqlite_engine(adjuster_config: AdjusterConfig) -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_fruit_tables(engine)
    upgrade_head(engine=engine, config=adjuster_config)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
    adjuster_config: AdjusterConfig,
) -> Iterator[Callable[[], SqlAlchemyAdjustmentUnitOfWork]]:
    startup(engine=sqlite_engine, config=adjuster_config, force=True)

    def factory() -> SqlAlchemyAdjustmentUnitOfWork:
        return SqlAlchemyAdjustmentUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
