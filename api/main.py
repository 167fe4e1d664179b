from __future__ import annotations

import logging
import math
import threading
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import LoadStatusResponse, MetaListResponse, ViewStateModel
from core import settings
from core.aggregate import advisor_names, compute_aggregates, program_options, ranked_program_table, scholarship_options
from core.data import RECORD_COLUMNS, RecordStore
from core.filters import PAGE_ADVISOR_DETAIL, PAGE_ADVISORS, PAGES, ViewState, apply_filters, filter_advisor_names, filter_advisor_students
from core.metrics_advisors import compute_advisor_detail, compute_advisor_roster
from core.metrics_analytics import compute_analytics
from core.metrics_dashboard import compute_dashboard
from core.metrics_programs import compute_program_stats
from core.metrics_students import compute_students
from core.source import LoadOutcome, fetch_records, load_from_source


logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Advising Dashboard API", version="0.1.0")
app.state.store = RecordStore()
app.state.fetch = fetch_records
app.state.last_outcome = None
app.state.refresh_lock = threading.Lock()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _status_payload(request: Request) -> Dict[str, Any]:
    store: RecordStore = request.app.state.store
    outcome: Optional[LoadOutcome] = request.app.state.last_outcome
    return LoadStatusResponse(
        status=outcome.status if outcome else "not_loaded",
        message=outcome.message if outcome else "",
        record_count=len(store),
        error_type=outcome.error_type if outcome else None,
        version=store.version,
        loaded_at=store.loaded_at.isoformat() if store.loaded_at else None,
    ).model_dump()


def _refresh(request: Request) -> Optional[LoadOutcome]:
    """Run one load; None when another load is already in flight."""
    lock: threading.Lock = request.app.state.refresh_lock
    if not lock.acquire(blocking=False):
        return None
    try:
        return _load(request)
    finally:
        lock.release()


def _load(request: Request) -> LoadOutcome:
    outcome = load_from_source(request.app.state.store, request.app.state.fetch)
    request.app.state.last_outcome = outcome
    return outcome


def _needs_initial_load(request: Request) -> bool:
    return request.app.state.last_outcome is None and request.app.state.store.version == 0


def _records(request: Request) -> pd.DataFrame:
    # First data request triggers the initial load, like opening the page.
    # Concurrent requests wait for that load instead of reading the empty store.
    if _needs_initial_load(request):
        with request.app.state.refresh_lock:
            if _needs_initial_load(request):
                _load(request)
    return request.app.state.store.get_all()


def _state_from_model(model: ViewStateModel) -> ViewState:
    raw = model.model_dump()
    if raw.get("page") not in PAGES:
        raw["page"] = ViewState().page
    return ViewState(**raw)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/status")
def status(request: Request):
    return _json(_status_payload(request))


@app.post("/refresh")
def refresh(request: Request):
    outcome = _refresh(request)
    if outcome is None:
        return JSONResponse(status_code=409, content={"error": "A refresh is already running.", "type": "RefreshInProgress"})
    payload = _status_payload(request)
    return _json(payload, status_code=502 if outcome.is_error else 200)


@app.get("/meta/programs", response_model=MetaListResponse)
def meta_programs(request: Request):
    try:
        return _json(MetaListResponse(values=program_options(_records(request))).model_dump())
    except Exception as exc:
        logger.exception("meta_programs failed")
        return _error(exc)


@app.get("/meta/scholarships", response_model=MetaListResponse)
def meta_scholarships(request: Request):
    try:
        return _json(MetaListResponse(values=scholarship_options(_records(request))).model_dump())
    except Exception as exc:
        logger.exception("meta_scholarships failed")
        return _error(exc)


@app.get("/meta/advisors", response_model=MetaListResponse)
def meta_advisors(request: Request, q: str = Query(default="")):
    try:
        names = advisor_names(compute_aggregates(_records(request)))
        return _json(MetaListResponse(values=filter_advisor_names(names, q)).model_dump())
    except Exception as exc:
        logger.exception("meta_advisors failed")
        return _error(exc)


@app.post("/dashboard")
def dashboard(request: Request, view: ViewStateModel):
    try:
        return _json(compute_dashboard(_state_from_model(view), _records(request)))
    except Exception as exc:
        logger.exception("dashboard failed")
        return _error(exc)


@app.post("/students")
def students(request: Request, view: ViewStateModel):
    try:
        return _json(compute_students(_state_from_model(view), _records(request)))
    except Exception as exc:
        logger.exception("students failed")
        return _error(exc)


@app.get("/advisors")
def advisors(request: Request, q: str = Query(default="")):
    try:
        state = ViewState(page=PAGE_ADVISORS, advisor_query=q)
        return _json(compute_advisor_roster(state, _records(request)))
    except Exception as exc:
        logger.exception("advisors failed")
        return _error(exc)


@app.post("/advisors/detail")
def advisor_detail(request: Request, view: ViewStateModel):
    try:
        state = _state_from_model(view)
        state.page = PAGE_ADVISOR_DETAIL
        return _json(compute_advisor_detail(state, _records(request)))
    except Exception as exc:
        logger.exception("advisor_detail failed")
        return _error(exc)


@app.post("/programs")
def programs(request: Request, view: ViewStateModel):
    try:
        return _json(compute_program_stats(_state_from_model(view), _records(request)))
    except Exception as exc:
        logger.exception("programs failed")
        return _error(exc)


@app.post("/analytics")
def analytics(request: Request, view: ViewStateModel, top_advisors: int = Query(default=20)):
    try:
        return _json(compute_analytics(_state_from_model(view), _records(request), top_advisors=top_advisors))
    except Exception as exc:
        logger.exception("analytics failed")
        return _error(exc)


@app.post("/export/{page}")
def export_page(request: Request, page: str, view: ViewStateModel):
    records = _records(request)
    state = _state_from_model(view)

    filename = f"{page}.csv"
    if page == "students":
        export_df = apply_filters(records, state.filters())
    elif page in {"advisor-detail", "advisor_detail"}:
        state.page = PAGE_ADVISOR_DETAIL
        export_df = filter_advisor_students(records, state.filters())
        filename = "advisor_detail.csv"
    elif page == "programs":
        export_df = pd.DataFrame(ranked_program_table(compute_aggregates(records)))
    elif page == "all":
        export_df = records
    else:
        export_df = pd.DataFrame(columns=RECORD_COLUMNS)

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
