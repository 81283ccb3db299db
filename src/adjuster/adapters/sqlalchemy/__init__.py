"""SQLAlchemy adapter package for adjuster."""

from __future__ import annotations

from .mappings import adjustment_columns, adjustment_table, create_all_tables
from .protection import install_save_protection, reset_adjusted_on_reload
from .repositories import SqlAlchemyChangesetRepository
from .unit_of_work import (
    SqlAlchemyAdjustmentUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAdjustmentUnitOfWork",
    "SqlAlchemyChangesetRepository",
    "StartupError",
    "adjustment_columns",
    "adjustment_table",
    "create_all_tables",
    "install_save_protection",
    "reset_adjusted_on_reload",
    "shutdown",
    "startup",
]
