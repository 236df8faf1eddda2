"""create kpi_weekly_data table

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

_NUMERIC_COLUMNS = (
    "pa_semanal",
    "pa_acumulado_mes",
    "pa_acumulado_ano",
    "meta_pa_semanal",
    "percentual_meta_pa_semana",
    "percentual_meta_pa_ano",
    "pa_emitido",
    "apolices_emitidas",
    "meta_n_semanal",
    "n_semana",
    "n_acumulado_mes",
    "n_acumulado_ano",
    "percentual_meta_n_semana",
    "percentual_meta_n_ano",
    "meta_ois_agendadas",
    "ois_agendadas",
    "ois_realizadas",
    "percentual_ois_realizadas",
    "meta_recs",
    "novas_recs",
    "meta_pcs_c2_agendados",
    "pcs_realizados",
    "c2_realizados",
    "apolice_em_atraso",
    "premio_em_atraso",
    "taxa_inadimplencia_geral",
    "taxa_inadimplencia_assistente",
    "meta_revisitas_agendadas",
    "revisitas_agendadas",
    "revisitas_realizadas",
    "volume_tarefas_trello",
    "videos_treinamento_gravados",
    "delivery_apolices",
    "total_reunioes",
)


def upgrade() -> None:
    op.create_table(
        "kpi_weekly_data",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("period", sa.String(length=64), nullable=False, comment="Canonical period label, e.g. '18/08 a 24/08'"),
        sa.Column("period_start", sa.Date(), nullable=True, comment="First day of the period, resolved once at ingestion"),
        *[sa.Column(name, sa.Float(), nullable=True) for name in _NUMERIC_COLUMNS],
        sa.Column("lista_atrasos_raiza", sa.Text(), nullable=True),
        sa.Column("ticket_medio", sa.Float(), nullable=True),
        sa.Column("conversao_ois", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_kpi_weekly_data"),
        sa.UniqueConstraint("period", name="uq_kpi_weekly_data_period"),
    )
    op.create_index("ix_kpi_weekly_data_period_start", "kpi_weekly_data", ["period_start"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_kpi_weekly_data_period_start", table_name="kpi_weekly_data")
    op.drop_table("kpi_weekly_data")
