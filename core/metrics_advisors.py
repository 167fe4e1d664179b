from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import pandas as pd

from core.aggregate import Aggregates, AdvisorStats, advisor_names, compute_aggregates, scholarship_options, stat_cards
from core.filters import ViewState, filter_advisor_names, filter_advisor_students
from core.pagination import PAGE_SIZE_FULL, paginate


NO_ADVISORS_MESSAGE = "Tidak ada dosen pembimbing yang ditemukan."
NO_STUDENTS_MESSAGE = "Tidak ada mahasiswa bimbingan yang ditemukan."


def compute_advisor_roster(
    state: ViewState,
    records: pd.DataFrame,
    *,
    aggregates: Optional[Aggregates] = None,
) -> Dict[str, Any]:
    aggregates = aggregates or compute_aggregates(records)
    names = filter_advisor_names(advisor_names(aggregates), state.advisor_query)
    rows = []
    for i, name in enumerate(names):
        stats = aggregates.advisors.get(name, AdvisorStats())
        rows.append({"no": i + 1, "dosen_pembimbing_akademik": name, **stats.as_dict()})

    return {
        "view_state": asdict(state),
        "query": state.advisor_query,
        "advisors": rows,
        "count": len(rows),
        "empty": not rows,
        "message": "" if rows else NO_ADVISORS_MESSAGE,
    }


def compute_advisor_detail(
    state: ViewState,
    records: pd.DataFrame,
    *,
    aggregates: Optional[Aggregates] = None,
) -> Dict[str, Any]:
    """Cards and supervised-student table for the selected advisor.

    The cards always describe the advisor's full roster; the table honours the
    search box and scholarship filter.
    """
    aggregates = aggregates or compute_aggregates(records)
    filters = state.filters()
    advisor = filters.advisor
    supervised = filter_advisor_students(records, filters)
    page = paginate(supervised, state.current_page, PAGE_SIZE_FULL)
    stats = aggregates.advisors.get(advisor) if advisor else None

    return {
        "view_state": asdict(state),
        "advisor": advisor,
        "cards": stat_cards(stats, total_label="Total Dibimbing"),
        "options": {"scholarships": scholarship_options(records)},
        "count": len(supervised),
        "empty": page.empty,
        "message": NO_STUDENTS_MESSAGE if page.empty else "",
        "table": page.to_dict(),
        "current_page": page.page,
    }
