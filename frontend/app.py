"""Streamlit dashboard for the weekly KPI service.

Presentation layer only: every read and write goes through the HTTP API.
Run from the project root: PYTHONPATH=. streamlit run frontend/app.py
"""

from __future__ import annotations

import os
from typing import Any, Optional

import pandas as pd
import requests
import streamlit as st

from frontend.formatting import money_label, percent_label

API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000").rstrip("/")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("DASHBOARD_TIMEOUT_SECONDS", "60"))

MONTHS = [
    "Janeiro",
    "Fevereiro",
    "Março",
    "Abril",
    "Maio",
    "Junho",
    "Julho",
    "Agosto",
    "Setembro",
    "Outubro",
    "Novembro",
    "Dezembro",
]
PERFORMANCE_OPTIONS = {
    "Todos": "all",
    "Acima da meta": "above",
    "Abaixo da meta": "below",
    "Na meta (95-105%)": "exact",
}

# ── Page config (must be first Streamlit call) ─────────────────────────────
st.set_page_config(
    page_title="KPI Semanal",
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="expanded",
)


# ── API helpers ────────────────────────────────────────────────────────────
def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body)
    return str(body)


def _call_api(method: str, path: str, **kwargs: Any) -> Optional[dict[str, Any]]:
    """Call the API and surface failures in the UI instead of raising."""
    try:
        response = requests.request(
            method,
            f"{API_BASE_URL}{path}",
            timeout=REQUEST_TIMEOUT_SECONDS,
            **kwargs,
        )
    except requests.RequestException as exc:
        st.error(f"API unreachable at {API_BASE_URL}: {exc}")
        return None

    if response.status_code >= 400:
        st.error(_error_message(response))
        return None
    return response.json()


@st.cache_data(ttl=60, show_spinner=False)
def _fetch_kpis(params: tuple[tuple[str, Any], ...]) -> Optional[dict[str, Any]]:
    return _call_api("GET", "/api/kpi", params=dict(params))


# ── Sidebar ────────────────────────────────────────────────────────────────
with st.sidebar:
    st.title("KPI Semanal")
    st.caption(f"API: {API_BASE_URL}")
    st.divider()

    st.subheader("Filtros")
    period_mode = st.radio("Período", ["Todos", "Últimos 30 dias"], horizontal=True)
    month = st.selectbox("Mês", ["Todos", *MONTHS])
    pa_range = st.slider("PA semanal (R$)", 0, 1_000_000, (0, 1_000_000), step=5_000)
    n_range = st.slider("N semanal", 0, 100, (0, 100))
    performance_pa = st.selectbox("Desempenho PA", list(PERFORMANCE_OPTIONS))
    performance_n = st.selectbox("Desempenho N", list(PERFORMANCE_OPTIONS))
    search = st.text_input("Buscar", placeholder="ex.: acima da meta, agosto, 120000")

    st.divider()
    st.subheader("Dados")
    if st.button("Sincronizar Google Sheets", use_container_width=True):
        with st.spinner("Sincronizando…"):
            synced = _call_api("POST", "/api/sync-sheets")
        if synced:
            st.success(synced.get("message", "Sincronizado."))
            _fetch_kpis.clear()

    uploaded_file = st.file_uploader("Enviar planilha", type=["xlsx", "xls", "csv"])
    if uploaded_file is not None and st.button("Importar planilha", use_container_width=True):
        with st.spinner("Importando…"):
            uploaded = _call_api(
                "POST",
                "/api/upload",
                files={"file": (uploaded_file.name, uploaded_file.getvalue(), uploaded_file.type)},
            )
        if uploaded:
            st.success(uploaded.get("message", "Planilha importada."))
            _fetch_kpis.clear()

    if st.button("Limpar períodos inválidos", use_container_width=True):
        cleaned = _call_api("POST", "/api/cleanup")
        if cleaned:
            st.info(cleaned.get("message", "Limpeza concluída."))
            _fetch_kpis.clear()


# ── Data ───────────────────────────────────────────────────────────────────
params: dict[str, Any] = {
    "period": "last30days" if period_mode == "Últimos 30 dias" else "all",
    "month": month if month != "Todos" else "all",
    "performancePA": PERFORMANCE_OPTIONS[performance_pa],
    "performanceN": PERFORMANCE_OPTIONS[performance_n],
}
if pa_range != (0, 1_000_000):
    params["paMin"], params["paMax"] = pa_range
if n_range != (0, 100):
    params["nMin"], params["nMax"] = n_range
if search.strip():
    params["q"] = search.strip()

payload = _fetch_kpis(tuple(sorted(params.items())))
if payload is None:
    st.stop()

meta: dict[str, Any] = payload.get("_meta") or {}
if meta.get("message"):
    st.info(meta["message"])

records: list[dict[str, Any]] = payload.get("data", [])
if not records:
    st.warning("Nenhum período encontrado para os filtros selecionados.")
    st.stop()

frame = pd.DataFrame(records).set_index("period")
stats: dict[str, Any] = payload.get("stats") or {}
latest = records[-1]


# ── KPI cards ──────────────────────────────────────────────────────────────
st.header(f"Semana {latest['period']}")
cards = st.columns(4)
cards[0].metric("PA semanal", money_label(latest.get("paSemanal")), percent_label(latest.get("percentualMetaPASemana"), suffix=" da meta"))
cards[1].metric("N semanal", f"{latest.get('nSemana', 0):.0f}", percent_label(latest.get("percentualMetaNSemana"), suffix=" da meta"))
cards[2].metric("Apólices emitidas", f"{latest.get('apolicesEmitidas', 0):.0f}")
cards[3].metric("Conversão OIs", f"{latest.get('conversaoOIs', 0):.1f}%")

summary = st.columns(4)
summary[0].metric("Períodos", int(stats.get("count", len(records))))
summary[1].metric("PA médio", money_label(stats.get("avgPA")))
summary[2].metric("Desempenho PA médio", percent_label(stats.get("avgPerformancePA")))
summary[3].metric("PA total", money_label(stats.get("totalPA")))


# ── Charts ─────────────────────────────────────────────────────────────────
tab_pa, tab_n, tab_table = st.tabs(["PA", "N", "Tabela"])

with tab_pa:
    st.line_chart(
        frame[["paSemanal", "metaPASemanal"]].rename(columns={"paSemanal": "PA", "metaPASemanal": "Meta"}),
        use_container_width=True,
    )

with tab_n:
    st.line_chart(
        frame[["nSemana", "metaNSemanal"]].rename(columns={"nSemana": "N", "metaNSemanal": "Meta"}),
        use_container_width=True,
    )

with tab_table:
    st.dataframe(frame, use_container_width=True)
    with st.expander("Resposta bruta"):
        st.json(payload)
