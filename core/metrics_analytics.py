from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import pandas as pd

from core.aggregate import Aggregates, SCHOLARSHIP_FALLBACK, compute_aggregates
from core.charts import SCHOLARSHIP_COLORS, bar_chart, pie_chart, to_vega_spec
from core.filters import ViewState


def compute_analytics(
    state: ViewState,
    records: pd.DataFrame,
    *,
    aggregates: Optional[Aggregates] = None,
    top_advisors: int = 20,
) -> Dict[str, Any]:
    aggregates = aggregates or compute_aggregates(records)

    program_counts = {name: stats.total for name, stats in aggregates.programs.items()}
    scholarship_counts = dict(aggregates.scholarships)
    advisor_counts = dict(
        sorted(
            ((name, stats.total) for name, stats in aggregates.advisors.items()),
            key=lambda item: item[1],
            reverse=True,
        )[: max(0, int(top_advisors))]
    )

    charts: Dict[str, Any] = {}
    program_pie = pie_chart(program_counts, "Distribusi Mahasiswa per Program Studi")
    if program_pie is not None:
        charts["program_distribution"] = to_vega_spec(program_pie)
    scholarship_pie = pie_chart(
        scholarship_counts,
        "Distribusi Mahasiswa Berdasarkan Jenis Beasiswa",
        {**SCHOLARSHIP_COLORS, SCHOLARSHIP_FALLBACK: "#7f8c8d"},
    )
    if scholarship_pie is not None:
        charts["scholarship_distribution"] = to_vega_spec(scholarship_pie)
    workload = bar_chart(
        advisor_counts,
        "Jumlah Mahasiswa Bimbingan per Dosen",
        x_title="Jumlah Mahasiswa",
        y_title="Dosen Pembimbing Akademik",
    )
    if workload is not None:
        charts["advisor_workload"] = to_vega_spec(workload)

    return {
        "view_state": asdict(state),
        "counts": {
            "programs": program_counts,
            "scholarships": scholarship_counts,
            "advisors": advisor_counts,
        },
        "charts": charts,
        "empty": aggregates.total == 0,
    }
