"""demand forecast schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 09:30:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # -- demand_predictions --
    op.create_table(
        "demand_predictions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("batch_id", sa.String(36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("sector", sa.String(32), nullable=False),
        sa.Column("region", sa.String(100), nullable=False),
        sa.Column("timeframe", sa.String(16), nullable=False),
        sa.Column("item_name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(100), nullable=False, server_default="General"),
        sa.Column("subcategory", sa.String(100), nullable=False, server_default=""),
        sa.Column("current_demand", sa.Float(), nullable=False),
        sa.Column("predicted_demand", sa.Float(), nullable=False),
        sa.Column("demand_change_percentage", sa.Float(), nullable=False),
        sa.Column("demand_trend", sa.String(16), nullable=False),
        sa.Column("demand_level", sa.String(16), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("peak_period", sa.String(200), nullable=False, server_default=""),
        sa.Column("reasoning", sa.Text(), nullable=False, server_default=""),
        sa.Column("market_factors", sa.JSON(), nullable=False),
        sa.Column("recommendations", sa.JSON(), nullable=False),
        sa.Column("risk_level", sa.String(8), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_demand_predictions_batch_id", "demand_predictions", ["batch_id"])
    op.create_index(
        "ix_demand_predictions_sector_region",
        "demand_predictions",
        ["sector", "region"],
    )

    # -- demand_alerts --
    op.create_table(
        "demand_alerts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("batch_id", sa.String(36), nullable=False),
        sa.Column("prediction_id", sa.String(36), nullable=True),
        sa.Column("sector", sa.String(32), nullable=False),
        sa.Column("region", sa.String(100), nullable=False),
        sa.Column("item_name", sa.String(200), nullable=False, server_default=""),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("severity", sa.String(16), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_resolved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_demand_alerts_batch_id", "demand_alerts", ["batch_id"])
    op.create_index(
        "ix_demand_alerts_sector_region",
        "demand_alerts",
        ["sector", "region"],
    )


def downgrade() -> None:
    op.drop_index("ix_demand_alerts_sector_region", table_name="demand_alerts")
    op.drop_index("ix_demand_alerts_batch_id", table_name="demand_alerts")
    op.drop_table("demand_alerts")
    op.drop_index("ix_demand_predictions_sector_region", table_name="demand_predictions")
    op.drop_index("ix_demand_predictions_batch_id", table_name="demand_predictions")
    op.drop_table("demand_predictions")
