from __future__ import annotations

import pytest

from normalization.assembler import AssemblyReport, assemble_records, is_blank_cell
from normalization.catalog import load_indicator_catalog
from normalization.layout import detect_layout


@pytest.fixture()
def assemble(matrix_factory):
    def _assemble(rows: list[list[object]], periods: tuple[str, ...] = ("18/08 a 24/08",)):
        matrix = matrix_factory(["Indicador", *periods], rows)
        report = AssemblyReport()
        records = assemble_records(detect_layout(matrix), load_indicator_catalog(), report=report)
        return records, report

    return _assemble


def test_blank_cells() -> None:
    assert is_blank_cell(None)
    assert is_blank_cell("  ")
    assert is_blank_cell(" - ")
    assert not is_blank_cell(0)
    assert not is_blank_cell("0")


def test_last_matching_row_wins(assemble) -> None:
    records, _ = assemble([["PA semanal", "100"], ["PA semanal realizado", "200"]])
    assert records[0].pa_semanal == 200


def test_blank_cell_keeps_default(assemble) -> None:
    records, _ = assemble([["Meta PA semanal", "-"], ["Meta N semanal", ""]])
    assert records[0].meta_pa_semanal == 82_000
    assert records[0].meta_n_semanal == 5


def test_one_record_per_period_column(assemble) -> None:
    records, _ = assemble(
        [["PA semanal", "95.000,00", "120.000,00"], ["N da semana", "6", "8"]],
        periods=("18/08 a 24/08", "25/08 a 31/08"),
    )

    assert [record.period for record in records] == ["18/08 a 24/08", "25/08 a 31/08"]
    assert [record.pa_semanal for record in records] == [95_000, 120_000]
    assert [record.n_semana for record in records] == [6, 8]


def test_implausible_value_is_discarded_and_reported(assemble) -> None:
    records, report = assemble([["N da semana", "7"], ["N semanal", "500"]])

    assert records[0].n_semana == 7
    assert report.implausible == [
        {"period": "18/08 a 24/08", "field": "n_semana", "value": 500.0, "cap": 200}
    ]


def test_negative_value_is_implausible(assemble) -> None:
    records, report = assemble([["PA emitido", "-10"]])
    assert records[0].pa_emitido == 0
    assert len(report.implausible) == 1


def test_text_field(assemble) -> None:
    records, _ = assemble([["Lista de atrasos atribuídos Raiza", "  Cliente A; Cliente B "]])
    assert records[0].lista_atrasos_raiza == "Cliente A; Cliente B"


def test_percentage_field_is_rescaled(assemble) -> None:
    records, report = assemble([["% Meta de PA realizada da semana", "1,47"]])
    assert records[0].percentual_meta_pa_semana == pytest.approx(147)
    assert [event.rule for event in report.rescales] == ["goal_fraction"]


def test_derived_fields(assemble) -> None:
    records, _ = assemble(
        [
            ["PA semanal", "100.000,00"],
            ["Apólices emitidas", "4"],
            ["OIs agendadas", "10"],
            ["OIs realizadas", "3"],
        ]
    )
    record = records[0]

    assert record.ticket_medio == 25_000
    assert record.percentual_ois_realizadas == 30.0
    assert record.conversao_ois == 30.0


def test_sheet_ticket_medio_is_kept(assemble) -> None:
    records, _ = assemble([["PA semanal", "100000"], ["Apólices emitidas", "4"], ["Ticket médio", "30000"]])
    assert records[0].ticket_medio == 30_000


def test_oi_percentage_uses_goal_when_larger(assemble) -> None:
    records, _ = assemble([["OIs agendadas", "4"], ["OIs realizadas", "2"]])
    assert records[0].percentual_ois_realizadas == 25.0


def test_unmatched_numeric_labels_are_counted(assemble) -> None:
    _, report = assemble(
        [
            ["Simples Nacional - Anexo III", "12"],
            ["Simples Nacional - Anexo III", "13"],
            ["Observações gerais", "sem comentários"],
        ]
    )
    assert report.unmatched_labels == {"simples nacional anexo iii": 2}
