"""Utilities for managing Alembic migrations within the SQLAlchemy adapter."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from adjuster.config import get_database_config

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent
ADJUSTER_CONFIG_ATTRIBUTE: Final[str] = "adjuster_config"

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from adjuster.config.adjuster import AdjusterConfig


def _build_config(adjuster_config: AdjusterConfig | None) -> Config:
    """Return an Alembic Config pointing at the bundled migration scripts."""

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if adjuster_config is not None:
        config.attributes[ADJUSTER_CONFIG_ATTRIBUTE] = adjuster_config
    return config


def upgrade_head(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    config: AdjusterConfig | None = None,
) -> None:
    """Upgrade the database schema to the latest revision."""

    alembic_config = _build_config(config)
    if engine is not None:
        with engine.begin() as connection:
            alembic_config.attributes["connection"] = connection
            command.upgrade(alembic_config, "head")
        return
    alembic_config.set_main_option("sqlalchemy.url", database_uri or get_database_config().uri)
    command.upgrade(alembic_config, "head")
