from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from core.aggregate import KIPK, compute_aggregates, percentage, ranked_program_table
from core.data import BEASISWA, PROGRAM_STUDI
from core.filters import ViewState
from core.pagination import PAGE_SIZE_SUMMARY, paginate


FEATURED_PROGRAMS = [
    "Sistem Informasi",
    "Teknik Informatika",
    "Teknik Multimedia Dan Jaringan",
    "Komputerisasi Akuntansi",
]


def program_counts(df: pd.DataFrame, programs: List[str]) -> List[Dict[str, Any]]:
    total = len(df)
    out = []
    for program in programs:
        count = int(df[PROGRAM_STUDI].eq(program).fillna(False).sum()) if total else 0
        out.append({"program_studi": program, "count": count, "percentage": percentage(count, total)})
    return out


def compute_dashboard(state: ViewState, records: pd.DataFrame) -> Dict[str, Any]:
    """Summary tiles, the ranked program table and a compact roster preview."""
    total = len(records)
    kipk_count = int(records[BEASISWA].eq(KIPK).fillna(False).sum()) if total else 0
    aggregates = compute_aggregates(records)
    preview = paginate(records, state.current_page, PAGE_SIZE_SUMMARY)

    return {
        "view_state": asdict(state),
        "kpis": {
            "total_students": total,
            "total_percentage": 100.0 if total else 0.0,
            "programs": program_counts(records, FEATURED_PROGRAMS),
            "kipk": {"count": kipk_count, "percentage": percentage(kipk_count, total)},
            "advisor_count": len(aggregates.advisors),
        },
        "program_table": ranked_program_table(aggregates),
        "students": preview.to_dict(),
        "current_page": preview.page,
        "empty": total == 0,
    }
