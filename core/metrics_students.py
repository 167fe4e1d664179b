from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.aggregate import program_options, scholarship_options
from core.filters import StudentFilters, ViewState, apply_filters
from core.pagination import PAGE_SIZE_FULL, paginate


NO_RECORDS_MESSAGE = "Tidak ada data mahasiswa yang ditemukan."


def compute_students(state: ViewState, records: pd.DataFrame) -> Dict[str, Any]:
    base = state.filters()
    filters = StudentFilters(query=base.query, program=base.program, scholarship=base.scholarship)
    filtered = apply_filters(records, filters)
    page = paginate(filtered, state.current_page, PAGE_SIZE_FULL)

    return {
        "view_state": asdict(state),
        "filters": asdict(filters),
        "options": {
            "programs": program_options(records),
            "scholarships": scholarship_options(records),
        },
        "count": len(filtered),
        "empty": page.empty,
        "message": NO_RECORDS_MESSAGE if page.empty else "",
        "table": page.to_dict(),
        "current_page": page.page,
    }
