"""SQLAlchemy-backed unit of work for staging and applying adjustments."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from adjuster.adapters.sqlalchemy.migrations import upgrade_head
from adjuster.adapters.sqlalchemy.protection import install_save_protection
from adjuster.adapters.sqlalchemy.repositories import SqlAlchemyChangesetRepository
from adjuster.config import AdjusterConfig, get_adjuster_config, get_database_config
from adjuster.domain.adjustments.engine import AdjustmentEngine
from adjuster.domain.adjustments.protection import SaveProtection
from adjuster.domain.ports.unit_of_work import AdjustmentRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None
    config: AdjusterConfig | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def adjuster_config(self) -> AdjusterConfig:
        if self.config is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call adjuster.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        return self.config

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call adjuster.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            factory = sessionmaker(bind=self._engine, expire_on_commit=False)
            install_save_protection(
                factory, SaveProtection(default=self.adjuster_config.save_protection)
            )
            self._session_factory = factory
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    config: AdjusterConfig | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, changeset table, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_config = config or get_adjuster_config()
    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    upgrade_head(engine=resolved_engine, config=resolved_config)

    _STATE.config = resolved_config
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def configured_config() -> AdjusterConfig | None:
    return _STATE.config


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE.config = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self.config: AdjusterConfig = _STATE.adjuster_config
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyAdjustmentUnitOfWork(BaseSqlAlchemyUnitOfWork[AdjustmentRepositories]):
    """Unit of work exposing the changeset store and an engine bound to it.

    Host subjects loaded through :attr:`session` share the transaction with the
    changeset rows, and flushing them passes through save protection.
    """

    def __enter__(self) -> SqlAlchemyAdjustmentUnitOfWork:
        super().__enter__()
        return self

    def _build_repositories(self, session: Session) -> AdjustmentRepositories:
        return AdjustmentRepositories(
            changesets=SqlAlchemyChangesetRepository(session, self.config),
        )

    @property
    def adjustments(self) -> AdjustmentEngine:
        return AdjustmentEngine(self.repositories.changesets, self.config)


if TYPE_CHECKING:
    from adjuster.domain.ports.unit_of_work import AdjustmentUnitOfWork

    _uow_check: AdjustmentUnitOfWork = SqlAlchemyAdjustmentUnitOfWork()
