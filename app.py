import logging
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from core import settings
from core.aggregate import compute_aggregates, program_options, scholarship_options
from core.data import RecordStore
from core.filters import (
    ALL,
    PAGE_ADVISOR_DETAIL,
    PAGE_ADVISORS,
    PAGE_ANALYTICS,
    PAGE_DASHBOARD,
    PAGE_PROGRAMS,
    PAGE_STUDENTS,
    ViewState,
)
from core.metrics_advisors import compute_advisor_detail, compute_advisor_roster
from core.metrics_analytics import compute_analytics
from core.metrics_dashboard import compute_dashboard
from core.metrics_programs import compute_program_stats
from core.metrics_students import compute_students
from core.source import LOADING_MESSAGE, load_from_source

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

NAV = {
    "Dashboard": PAGE_DASHBOARD,
    "Data Mahasiswa": PAGE_STUDENTS,
    "Dosen Pembimbing": PAGE_ADVISORS,
    "Statistik Prodi": PAGE_PROGRAMS,
    "Analytics": PAGE_ANALYTICS,
}
NAV_LABELS = {page: label for label, page in NAV.items()}

STUDENT_COLUMNS = {
    "no": "No",
    "nim": "NIM",
    "nama": "Nama",
    "program_studi": "Program Studi",
    "dosen_pembimbing_akademik": "Dosen Pembimbing Akademik",
    "beasiswa": "Beasiswa",
}

PROGRAM_COLUMNS = {
    "no": "No",
    "program_studi": "Program Studi",
    "total": "Jumlah Mahasiswa",
    "kipk": "Mahasiswa KIPK",
    "non_kipk": "Mahasiswa Non-Beasiswa",
}

ADVISOR_COLUMNS = {
    "no": "No",
    "dosen_pembimbing_akademik": "Nama Dosen Pembimbing Akademik",
    "total": "Jumlah Mahasiswa Bimbingan",
    "kipk": "Mahasiswa KIPK",
    "non_kipk": "Mahasiswa Non-Beasiswa",
}

# Widget keys cleared whenever the page changes, mirroring ViewState.show_page.
FILTER_WIDGET_KEYS = ["students_query", "students_program", "students_scholarship", "detail_query", "detail_scholarship", "advisor_query", "stats_program"]


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body


def format_filter_summary(state: ViewState) -> str:
    chips = [
        f"Cari: {state.query}" if state.query else "Cari: -",
        "Prodi: Semua" if state.program == ALL else f"Prodi: {state.program}",
        "Beasiswa: Semua" if state.scholarship == ALL else f"Beasiswa: {state.scholarship}",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, filter_summary_html: Optional[str] = None, export_rows: Optional[List[Dict[str, Any]]] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        st.caption(date.today().strftime("%d/%m/%Y"))
        if export_rows:
            st.download_button(
                "Export CSV",
                data=pd.DataFrame(export_rows).to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    if filter_summary_html:
        st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


def render_table(rows: List[Dict[str, Any]], columns: Dict[str, str], empty_message: str):
    if not rows:
        st.info(empty_message)
        return
    df = pd.DataFrame(rows)
    df = df[[c for c in columns if c in df.columns]].rename(columns=columns)
    st.dataframe(df.fillna("-"), use_container_width=True, hide_index=True)


def render_pagination(table: Dict[str, Any], key: str):
    state: ViewState = st.session_state["view_state"]
    cols = st.columns([1, 3, 1])
    if cols[0].button("❮", key=f"{key}_prev", disabled=not table["has_prev"]):
        state.prev_page()
        st.rerun()
    cols[1].markdown(
        f"<div style='text-align:center'>Page {table['page']} of {table['total_pages']}</div>",
        unsafe_allow_html=True,
    )
    if cols[2].button("❯", key=f"{key}_next", disabled=not table["has_next"]):
        state.next_page()
        st.rerun()


def render_stat_cards(cards: List[Dict[str, Any]]):
    cols = st.columns(len(cards))
    for col, c in zip(cols, cards):
        col.metric(c["label"], f"{c['value']}", f"{c['percentage']}%", delta_color="off")


def _select(label: str, options: List[str], key: str) -> str:
    choices = [ALL] + options
    return st.selectbox(label, choices, key=key, format_func=lambda v: "Semua" if v == ALL else v)


# ---------- Data loading ----------
def run_load(store: RecordStore):
    with st.spinner(LOADING_MESSAGE):
        outcome = load_from_source(store)
    st.session_state["load_outcome"] = outcome
    st.session_state["message_dismissed"] = outcome.ok
    st.session_state["aggregates"] = compute_aggregates(store.get_all())
    st.session_state["aggregates_version"] = store.version


def render_message_banner():
    outcome = st.session_state.get("load_outcome")
    if outcome is None or outcome.ok or st.session_state.get("message_dismissed"):
        return
    cols = st.columns([12, 1])
    if outcome.is_error:
        cols[0].error(outcome.message)
    else:
        cols[0].info(outcome.message)
    if outcome.dismissible and cols[1].button("×", key="dismiss_message"):
        st.session_state["message_dismissed"] = True
        st.rerun()


def on_nav_change():
    state: ViewState = st.session_state["view_state"]
    for key in FILTER_WIDGET_KEYS:
        st.session_state.pop(key, None)
    label = st.session_state.get("nav")
    if label in NAV:
        state.show_page(NAV[label])


def sync_filters(query: str, program: Optional[str], scholarship: Optional[str]):
    state: ViewState = st.session_state["view_state"]
    if query != state.query:
        state.set_query(query)
    if program is not None and program != state.program:
        state.set_program(program)
    if scholarship is not None and scholarship != state.scholarship:
        state.set_scholarship(scholarship)


# ---------- Pages ----------
def render_dashboard_page(state: ViewState, records: pd.DataFrame):
    payload = compute_dashboard(state, records)
    state.sync_page(payload["current_page"])
    render_page_header("Dashboard", "Home / Dashboard")

    kpis = payload["kpis"]
    with card("Ringkasan"):
        tiles = [("Total Mahasiswa", kpis["total_students"], kpis["total_percentage"])]
        tiles += [(p["program_studi"], p["count"], p["percentage"]) for p in kpis["programs"]]
        tiles.append(("Mahasiswa KIPK", kpis["kipk"]["count"], kpis["kipk"]["percentage"]))
        cols = st.columns(len(tiles))
        for col, (label, value, pct) in zip(cols, tiles):
            col.metric(label, f"{value}", f"{pct}%", delta_color="off")
            col.progress(min(1.0, float(pct) / 100.0))

    with card("Statistik Program Studi"):
        render_table(payload["program_table"], PROGRAM_COLUMNS, "Tidak ada data program studi.")

    with card("Data Mahasiswa Terbaru"):
        render_table(payload["students"]["rows"], STUDENT_COLUMNS, "Tidak ada data mahasiswa yang ditemukan.")
        if payload["students"]["total_pages"]:
            render_pagination(payload["students"], "dashboard")


def render_students_page(state: ViewState, records: pd.DataFrame):
    header = st.container()
    programs, scholarships = program_options(records), scholarship_options(records)
    c1, c2, c3 = st.columns([3, 2, 2])
    query = c1.text_input("Cari nama atau NIM", key="students_query")
    with c2:
        program = _select("Program Studi", programs, "students_program")
    with c3:
        scholarship = _select("Beasiswa", scholarships, "students_scholarship")
    sync_filters(query, program, scholarship)

    payload = compute_students(state, records)
    state.sync_page(payload["current_page"])
    with header:
        render_page_header(
            "Data Mahasiswa",
            "Home / Data Mahasiswa",
            format_filter_summary(state),
            export_rows=payload["table"]["rows"],
            export_name="mahasiswa.csv",
        )
    with card(f"Daftar Mahasiswa ({payload['count']})"):
        render_table(payload["table"]["rows"], STUDENT_COLUMNS, payload["message"])
        if not payload["empty"]:
            render_pagination(payload["table"], "students")


def render_advisors_page(state: ViewState, records: pd.DataFrame, aggregates):
    render_page_header("Dosen Pembimbing Akademik", "Home / Dosen Pembimbing")
    query = st.text_input("Cari dosen", key="advisor_query")
    if query != state.advisor_query:
        state.set_advisor_query(query)

    payload = compute_advisor_roster(state, records, aggregates=aggregates)
    with card(f"Daftar Dosen ({payload['count']})"):
        render_table(payload["advisors"], ADVISOR_COLUMNS, payload["message"])
        if payload["advisors"]:
            names = [row["dosen_pembimbing_akademik"] for row in payload["advisors"]]
            chosen = st.selectbox("Lihat mahasiswa bimbingan", names, key="advisor_pick")
            if st.button("Buka detail", key="open_advisor"):
                for key in FILTER_WIDGET_KEYS:
                    st.session_state.pop(key, None)
                state.select_advisor(chosen)
                st.rerun()


def render_advisor_detail_page(state: ViewState, records: pd.DataFrame, aggregates):
    if st.button("← Kembali ke daftar dosen", key="back_to_advisors"):
        for key in FILTER_WIDGET_KEYS:
            st.session_state.pop(key, None)
        state.show_page(PAGE_ADVISORS)
        st.rerun()

    header = st.container()
    c1, c2 = st.columns([3, 2])
    query = c1.text_input("Cari nama atau NIM", key="detail_query")
    with c2:
        scholarship = _select("Beasiswa", scholarship_options(records), "detail_scholarship")
    sync_filters(query, None, scholarship)

    payload = compute_advisor_detail(state, records, aggregates=aggregates)
    state.sync_page(payload["current_page"])
    with header:
        render_page_header(
            payload["advisor"] or "-",
            "Home / Dosen Pembimbing / Mahasiswa Bimbingan",
            export_rows=payload["table"]["rows"],
            export_name="mahasiswa_bimbingan.csv",
        )
    with card("Statistik Bimbingan"):
        render_stat_cards(payload["cards"])
    with card(f"Mahasiswa Bimbingan ({payload['count']})"):
        render_table(payload["table"]["rows"], STUDENT_COLUMNS, payload["message"])
        if not payload["empty"]:
            render_pagination(payload["table"], "detail")


def render_programs_page(state: ViewState, records: pd.DataFrame, aggregates):
    payload = compute_program_stats(state, records, aggregates=aggregates)
    selected = _select("Pilih Program Studi", payload["options"], "stats_program")
    if selected != state.stats_program:
        state.set_stats_program(selected)
        payload = compute_program_stats(state, records, aggregates=aggregates)

    render_page_header("Statistik Program Studi", f"Home / Statistik Prodi / {payload['title']}", export_rows=payload["table"], export_name="statistik_prodi.csv")
    if payload["cards"] is not None:
        with card(payload["title"]):
            render_stat_cards(payload["cards"])
    with card("Statistik Program Studi"):
        render_table(payload["table"], PROGRAM_COLUMNS, "Tidak ada data program studi.")


def render_analytics_page(state: ViewState, records: pd.DataFrame, aggregates):
    render_page_header("Analytics", "Home / Analytics")
    payload = compute_analytics(state, records, aggregates=aggregates)
    if payload["empty"]:
        st.info("Tidak ada data untuk ditampilkan.")
        return
    charts = payload["charts"]
    cols = st.columns(2)
    with cols[0]:
        with card("Distribusi Mahasiswa per Program Studi"):
            if "program_distribution" in charts:
                st.vega_lite_chart(charts["program_distribution"], use_container_width=True)
    with cols[1]:
        with card("Distribusi Mahasiswa Berdasarkan Jenis Beasiswa"):
            if "scholarship_distribution" in charts:
                st.vega_lite_chart(charts["scholarship_distribution"], use_container_width=True)
    if "advisor_workload" in charts:
        with card("Beban Bimbingan Dosen"):
            st.vega_lite_chart(charts["advisor_workload"], use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Dashboard Dosen Pembimbing Akademik", layout="wide")
inject_base_styles()

if "record_store" not in st.session_state:
    st.session_state["record_store"] = RecordStore()
    st.session_state["view_state"] = ViewState()
store: RecordStore = st.session_state["record_store"]
view_state: ViewState = st.session_state["view_state"]

with st.sidebar:
    st.markdown("### Menu")
    # Advisor detail has no menu entry, so the radio shows no selection there.
    st.session_state["nav"] = NAV_LABELS.get(view_state.page)
    st.radio("Menu", list(NAV), index=None, key="nav", on_change=on_nav_change, label_visibility="collapsed")
    st.markdown("---")
    refresh_clicked = st.button("Refresh data", use_container_width=True)
    if store.loaded_at is not None:
        st.caption(f"{len(store)} mahasiswa · dimuat {store.loaded_at:%d/%m/%Y %H:%M} UTC")

if refresh_clicked or "load_outcome" not in st.session_state:
    run_load(store)

if st.session_state.get("aggregates_version") != store.version:
    st.session_state["aggregates"] = compute_aggregates(store.get_all())
    st.session_state["aggregates_version"] = store.version

st.title("Dashboard Dosen Pembimbing Akademik")
render_message_banner()

records_df = store.get_all()
aggregates = st.session_state["aggregates"]

if view_state.page == PAGE_DASHBOARD:
    render_dashboard_page(view_state, records_df)
elif view_state.page == PAGE_STUDENTS:
    render_students_page(view_state, records_df)
elif view_state.page == PAGE_ADVISORS:
    render_advisors_page(view_state, records_df, aggregates)
elif view_state.page == PAGE_ADVISOR_DETAIL:
    render_advisor_detail_page(view_state, records_df, aggregates)
elif view_state.page == PAGE_PROGRAMS:
    render_programs_page(view_state, records_df, aggregates)
else:
    render_analytics_page(view_state, records_df, aggregates)
