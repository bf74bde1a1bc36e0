"""Create recipes table

Revision ID: 001_create_recipes
Revises: 
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_create_recipes"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "recipes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("ingredients", sa.JSON, nullable=False),
        sa.Column("steps", sa.JSON, nullable=False),
        sa.Column("image", sa.Text, nullable=True),
        sa.Column("source_url", sa.String(2048), nullable=True),
        sa.Column("cook_time", sa.Integer, nullable=True),
        sa.Column("servings", sa.String(40), nullable=True),
        sa.Column("tags", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_recipes_created_at", "recipes", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_recipes_created_at", table_name="recipes")
    op.drop_table("recipes")
