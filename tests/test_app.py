from pathlib import Path

from streamlit.testing.v1 import AppTest

from core.data import RecordStore
from core.filters import PAGE_ADVISORS, PAGE_STUDENTS, ViewState
from core.source import LoadOutcome


APP_PATH = str(Path(__file__).resolve().parents[1] / "app.py")


def _run_app(sample_rows, state):
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.session_state["record_store"] = RecordStore(sample_rows)
    at.session_state["view_state"] = state
    at.session_state["load_outcome"] = LoadOutcome(status="ok", record_count=len(sample_rows))
    return at.run()


def test_sidebar_follows_current_page(sample_rows):
    at = _run_app(sample_rows, ViewState(page=PAGE_STUDENTS))
    assert not at.exception
    assert at.radio(key="nav").value == "Data Mahasiswa"


def test_sidebar_returns_from_advisor_detail_to_roster(sample_rows):
    state = ViewState()
    state.select_advisor("Dr. Budi")
    at = _run_app(sample_rows, state)
    assert not at.exception
    assert at.radio(key="nav").value is None

    at.radio(key="nav").set_value("Dosen Pembimbing").run()
    assert not at.exception
    state = at.session_state["view_state"]
    assert state.page == PAGE_ADVISORS
    assert state.advisor is None
    assert at.radio(key="nav").value == "Dosen Pembimbing"
