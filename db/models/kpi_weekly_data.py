"""
db/models/kpi_weekly_data.py

One row of weekly KPI values, keyed by its period label.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, Float, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class KpiWeeklyData(Base, TimestampMixin):
    __tablename__ = "kpi_weekly_data"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    period: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Canonical period label, e.g. '18/08 a 24/08'",
    )
    period_start: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        comment="First day of the period, resolved once at ingestion",
    )

    pa_semanal: Mapped[float | None] = mapped_column(Float, nullable=True)
    pa_acumulado_mes: Mapped[float | None] = mapped_column(Float, nullable=True)
    pa_acumulado_ano: Mapped[float | None] = mapped_column(Float, nullable=True)
    meta_pa_semanal: Mapped[float | None] = mapped_column(Float, nullable=True)
    percentual_meta_pa_semana: Mapped[float | None] = mapped_column(Float, nullable=True)
    percentual_meta_pa_ano: Mapped[float | None] = mapped_column(Float, nullable=True)
    pa_emitido: Mapped[float | None] = mapped_column(Float, nullable=True)

    apolices_emitidas: Mapped[float | None] = mapped_column(Float, nullable=True)
    meta_n_semanal: Mapped[float | None] = mapped_column(Float, nullable=True)
    n_semana: Mapped[float | None] = mapped_column(Float, nullable=True)
    n_acumulado_mes: Mapped[float | None] = mapped_column(Float, nullable=True)
    n_acumulado_ano: Mapped[float | None] = mapped_column(Float, nullable=True)
    percentual_meta_n_semana: Mapped[float | None] = mapped_column(Float, nullable=True)
    percentual_meta_n_ano: Mapped[float | None] = mapped_column(Float, nullable=True)

    meta_ois_agendadas: Mapped[float | None] = mapped_column(Float, nullable=True)
    ois_agendadas: Mapped[float | None] = mapped_column(Float, nullable=True)
    ois_realizadas: Mapped[float | None] = mapped_column(Float, nullable=True)
    percentual_ois_realizadas: Mapped[float | None] = mapped_column(Float, nullable=True)

    meta_recs: Mapped[float | None] = mapped_column(Float, nullable=True)
    novas_recs: Mapped[float | None] = mapped_column(Float, nullable=True)
    meta_pcs_c2_agendados: Mapped[float | None] = mapped_column(Float, nullable=True)
    pcs_realizados: Mapped[float | None] = mapped_column(Float, nullable=True)
    c2_realizados: Mapped[float | None] = mapped_column(Float, nullable=True)

    apolice_em_atraso: Mapped[float | None] = mapped_column(Float, nullable=True)
    premio_em_atraso: Mapped[float | None] = mapped_column(Float, nullable=True)
    taxa_inadimplencia_geral: Mapped[float | None] = mapped_column(Float, nullable=True)
    taxa_inadimplencia_assistente: Mapped[float | None] = mapped_column(Float, nullable=True)

    meta_revisitas_agendadas: Mapped[float | None] = mapped_column(Float, nullable=True)
    revisitas_agendadas: Mapped[float | None] = mapped_column(Float, nullable=True)
    revisitas_realizadas: Mapped[float | None] = mapped_column(Float, nullable=True)
    volume_tarefas_trello: Mapped[float | None] = mapped_column(Float, nullable=True)
    videos_treinamento_gravados: Mapped[float | None] = mapped_column(Float, nullable=True)
    delivery_apolices: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_reunioes: Mapped[float | None] = mapped_column(Float, nullable=True)

    lista_atrasos_raiza: Mapped[str | None] = mapped_column(Text, nullable=True)
    ticket_medio: Mapped[float | None] = mapped_column(Float, nullable=True)
    conversao_ois: Mapped[float | None] = mapped_column(Float, nullable=True)

    __table_args__ = (
        Index("ix_kpi_weekly_data_period_start", "period_start"),
    )
