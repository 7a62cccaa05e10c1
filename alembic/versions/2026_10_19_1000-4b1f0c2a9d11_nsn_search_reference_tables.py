"""nsn_search: reference tables + search_history

Revision ID: 4b1f0c2a9d11
Revises:
Create Date: 2026-10-19 10:00:00.000000

Справочные таблицы в проде загружаются пакетно и могут уже существовать:
создаём только отсутствующие.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4b1f0c2a9d11"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    insp = sa.inspect(bind)

    def has_table(name: str) -> bool:
        return insp.has_table(name)

    # --- PULL2 ---
    if not has_table("pull2"):
        op.create_table(
            "pull2",
            sa.Column("niin", sa.String(9), primary_key=True),
            sa.Column("fsc", sa.String(4), nullable=True),
            sa.Column("itemName", sa.Text(), nullable=True),
            sa.Column("commonName", sa.Text(), nullable=True),
            sa.Column("characteristics", sa.Text(), nullable=True),
            sa.Column("publicationDate", sa.Text(), nullable=True),
        )
        op.create_index("ix_pull2_fsc", "pull2", ["fsc"])
        op.create_index(
            "ix_pull2_niin_pattern", "pull2", ["niin"],
            postgresql_ops={"niin": "text_pattern_ops"},
        )

    # --- NAMES ---
    if not has_table("names"):
        op.create_table(
            "names",
            sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
            sa.Column("niin", sa.String(9), nullable=False),
            sa.Column("item_name", sa.Text(), nullable=True),
            sa.Column("fsc", sa.String(4), nullable=True),
            sa.Column("common_name", sa.Text(), nullable=True),
            sa.Column("characteristics", sa.Text(), nullable=True),
        )
        op.create_index("ix_names_niin", "names", ["niin"])
        op.create_index("ix_names_fsc", "names", ["fsc"])
        op.create_index(
            "ix_names_niin_pattern", "names", ["niin"],
            postgresql_ops={"niin": "text_pattern_ops"},
        )

    # --- PRICES ---
    if not has_table("prices"):
        op.create_table(
            "prices",
            sa.Column("niin", sa.String(9), primary_key=True),
            sa.Column("unitPrice", sa.Text(), nullable=True),
            sa.Column("ui", sa.String(8), nullable=True),
        )
        op.create_index(
            "ix_prices_niin_pattern", "prices", ["niin"],
            postgresql_ops={"niin": "text_pattern_ops"},
        )

    # --- WEIGHTS / DESCRIPTIONS / AACS / FSCS ---
    if not has_table("weights"):
        op.create_table(
            "weights",
            sa.Column("niin", sa.String(9), primary_key=True),
            sa.Column("dss_weight", sa.Text(), nullable=True),
            sa.Column("dss_cube", sa.Text(), nullable=True),
            sa.Column("publication_date", sa.Text(), nullable=True),
        )

    if not has_table("descriptions"):
        op.create_table(
            "descriptions",
            sa.Column("niin", sa.String(9), primary_key=True),
            sa.Column("requirementsStatement", sa.Text(), nullable=True),
            sa.Column("clearTextReply", sa.Text(), nullable=True),
        )

    if not has_table("aacs"):
        op.create_table(
            "aacs",
            sa.Column("niin", sa.String(9), primary_key=True),
            sa.Column("aac", sa.String(1), nullable=True),
        )

    if not has_table("fscs"):
        op.create_table(
            "fscs",
            sa.Column("niin", sa.String(9), primary_key=True),
            sa.Column("fsc", sa.String(4), nullable=True),
        )

    # --- SEARCH_HISTORY ---
    if not has_table("search_history"):
        op.create_table(
            "search_history",
            sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
            sa.Column("user_id", sa.Text(), nullable=False),
            sa.Column("query", sa.Text(), nullable=False),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.text("now()"),
            ),
        )
        op.create_index(
            "ix_search_history_user_created_at",
            "search_history",
            ["user_id", "created_at"],
        )


def downgrade() -> None:
    # справочник не трогаем: он грузится снаружи
    op.drop_index("ix_search_history_user_created_at", table_name="search_history")
    op.drop_table("search_history")
