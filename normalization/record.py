"""
normalization/record.py

WeeklyRecord and the field table that drives assembly, validation and the
persistence/API projections.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any

NUMBER = "number"
TEXT = "text"


@dataclass(frozen=True)
class FieldSpec:
    """
    One indicator field of a WeeklyRecord.

    ``default`` is None for optional fields. ``derived`` fields are always
    recomputed and never read from a sheet cell.
    """

    name: str
    api_name: str
    kind: str = NUMBER
    default: float | None = None
    cap: float | None = None
    percentage: bool = False
    goal_percentage: bool = False
    derived: bool = False

    @property
    def required(self) -> bool:
        return self.default is not None


FIELD_SPECS: tuple[FieldSpec, ...] = (
    # Premium (PA)
    FieldSpec("pa_semanal", "paSemanal", default=0.0, cap=1_000_000),
    FieldSpec("pa_acumulado_mes", "paAcumuladoMes", default=0.0, cap=5_000_000),
    FieldSpec("pa_acumulado_ano", "paAcumuladoAno", default=0.0, cap=50_000_000),
    FieldSpec("meta_pa_semanal", "metaPASemanal", default=82_000.0, cap=1_000_000),
    FieldSpec(
        "percentual_meta_pa_semana",
        "percentualMetaPASemana",
        default=0.0,
        percentage=True,
        goal_percentage=True,
    ),
    FieldSpec(
        "percentual_meta_pa_ano",
        "percentualMetaPAAno",
        default=0.0,
        percentage=True,
        goal_percentage=True,
    ),
    FieldSpec("pa_emitido", "paEmitido", default=0.0, cap=1_000_000),
    # Policy count (N)
    FieldSpec("apolices_emitidas", "apolicesEmitidas", default=0.0, cap=200),
    FieldSpec("meta_n_semanal", "metaNSemanal", default=5.0, cap=200),
    FieldSpec("n_semana", "nSemana", default=0.0, cap=200),
    FieldSpec("n_acumulado_mes", "nAcumuladoMes", default=0.0, cap=1_000),
    FieldSpec("n_acumulado_ano", "nAcumuladoAno", default=0.0, cap=10_000),
    FieldSpec(
        "percentual_meta_n_semana",
        "percentualMetaNSemana",
        default=0.0,
        percentage=True,
        goal_percentage=True,
    ),
    FieldSpec(
        "percentual_meta_n_ano",
        "percentualMetaNAno",
        default=0.0,
        percentage=True,
        goal_percentage=True,
    ),
    # Innovation opportunities (OI)
    FieldSpec("meta_ois_agendadas", "metaOIsAgendadas", default=8.0, cap=500),
    FieldSpec("ois_agendadas", "oIsAgendadas", default=0.0, cap=500),
    FieldSpec("ois_realizadas", "oIsRealizadas", default=0.0, cap=500),
    FieldSpec(
        "percentual_ois_realizadas",
        "percentualOIsRealizadas",
        default=0.0,
        percentage=True,
        derived=True,
    ),
    # Portfolio review, PCs/C2
    FieldSpec("meta_recs", "metaRECS", cap=500),
    FieldSpec("novas_recs", "novasRECS", cap=500),
    FieldSpec("meta_pcs_c2_agendados", "metaPCsC2Agendados", cap=500),
    FieldSpec("pcs_realizados", "pcsRealizados", cap=500),
    FieldSpec("c2_realizados", "c2Realizados", cap=500),
    # Arrears and delinquency
    FieldSpec("apolice_em_atraso", "apoliceEmAtraso", cap=1_000),
    FieldSpec("premio_em_atraso", "premioEmAtraso", cap=5_000_000),
    FieldSpec("taxa_inadimplencia_geral", "taxaInadimplenciaGeral", percentage=True),
    FieldSpec(
        "taxa_inadimplencia_assistente",
        "taxaInadimplenciaAssistente",
        percentage=True,
    ),
    # Revisits and productivity
    FieldSpec("meta_revisitas_agendadas", "metaRevisitasAgendadas", cap=500),
    FieldSpec("revisitas_agendadas", "revisitasAgendadas", cap=500),
    FieldSpec("revisitas_realizadas", "revisitasRealizadas", cap=500),
    FieldSpec("volume_tarefas_trello", "volumeTarefasTrello", cap=5_000),
    FieldSpec("videos_treinamento_gravados", "videosTreinamentoGravados", cap=500),
    FieldSpec("delivery_apolices", "deliveryApolices", cap=1_000),
    FieldSpec("total_reunioes", "totalReunioes", cap=500),
    FieldSpec("lista_atrasos_raiza", "listaAtrasosRaiza", kind=TEXT),
    FieldSpec("ticket_medio", "ticketMedio", cap=1_000_000),
    FieldSpec("conversao_ois", "conversaoOIs", percentage=True, derived=True),
)

FIELDS_BY_NAME: dict[str, FieldSpec] = {spec.name: spec for spec in FIELD_SPECS}
FIELDS_BY_API_NAME: dict[str, FieldSpec] = {spec.api_name: spec for spec in FIELD_SPECS}


@dataclass
class WeeklyRecord:
    """
    Normalized KPI values for one period.

    ``id``, ``created_at`` and ``updated_at`` are assigned by the storage
    backend and stay None on records that were never persisted.
    """

    period: str
    pa_semanal: float = 0.0
    pa_acumulado_mes: float = 0.0
    pa_acumulado_ano: float = 0.0
    meta_pa_semanal: float = 82_000.0
    percentual_meta_pa_semana: float = 0.0
    percentual_meta_pa_ano: float = 0.0
    pa_emitido: float = 0.0
    apolices_emitidas: float = 0.0
    meta_n_semanal: float = 5.0
    n_semana: float = 0.0
    n_acumulado_mes: float = 0.0
    n_acumulado_ano: float = 0.0
    percentual_meta_n_semana: float = 0.0
    percentual_meta_n_ano: float = 0.0
    meta_ois_agendadas: float = 8.0
    ois_agendadas: float = 0.0
    ois_realizadas: float = 0.0
    percentual_ois_realizadas: float = 0.0
    meta_recs: float | None = None
    novas_recs: float | None = None
    meta_pcs_c2_agendados: float | None = None
    pcs_realizados: float | None = None
    c2_realizados: float | None = None
    apolice_em_atraso: float | None = None
    premio_em_atraso: float | None = None
    taxa_inadimplencia_geral: float | None = None
    taxa_inadimplencia_assistente: float | None = None
    meta_revisitas_agendadas: float | None = None
    revisitas_agendadas: float | None = None
    revisitas_realizadas: float | None = None
    volume_tarefas_trello: float | None = None
    videos_treinamento_gravados: float | None = None
    delivery_apolices: float | None = None
    total_reunioes: float | None = None
    lista_atrasos_raiza: str | None = None
    ticket_medio: float | None = None
    conversao_ois: float | None = None
    period_start: date | None = None
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def indicator_values(self) -> dict[str, Any]:
        return {spec.name: getattr(self, spec.name) for spec in FIELD_SPECS}


METADATA_FIELDS = ("id", "created_at", "updated_at")
RECORD_FIELD_NAMES = tuple(item.name for item in fields(WeeklyRecord))


def compute_derived_fields(record: WeeklyRecord) -> None:
    """
    Fill ticket_medio when the sheet did not provide it and always recompute
    the OI completion percentage from the scheduled/realized counts.
    """

    if record.ticket_medio is None and record.pa_semanal > 0 and record.apolices_emitidas > 0:
        record.ticket_medio = record.pa_semanal / record.apolices_emitidas

    denominator = max(record.meta_ois_agendadas, record.ois_agendadas)
    if denominator > 0:
        completion = round(record.ois_realizadas / denominator * 100, 1)
    else:
        completion = 0.0
    record.percentual_ois_realizadas = completion
    record.conversao_ois = completion
