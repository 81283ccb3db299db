"""Create the changeset table.

Revision ID: 0001_create_adjustments
Revises:
"""

from __future__ import annotations

from alembic import context, op

from adjuster.adapters.sqlalchemy.mappings import adjustment_columns
from adjuster.adapters.sqlalchemy.migrations import ADJUSTER_CONFIG_ATTRIBUTE
from adjuster.config import AdjusterConfig, get_adjuster_config

revision = "0001_create_adjustments"
down_revision = None
branch_labels = None
depends_on = None


def _adjuster_config() -> AdjusterConfig:
    configured = context.config.attributes.get(ADJUSTER_CONFIG_ATTRIBUTE)
    return configured or get_adjuster_config()


def upgrade() -> None:
    config = _adjuster_config()
    op.create_table(config.table_name, *adjustment_columns(config))


def downgrade() -> None:
    op.drop_table(_adjuster_config().table_name)
