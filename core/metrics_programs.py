from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import pandas as pd

from core.aggregate import (
    Aggregates,
    compute_aggregates,
    normalize_labels,
    program_names,
    ranked_program_table,
    stat_cards,
)
from core.data import PROGRAM_STUDI
from core.filters import ALL, ViewState


def compute_program_stats(
    state: ViewState,
    records: pd.DataFrame,
    *,
    aggregates: Optional[Aggregates] = None,
) -> Dict[str, Any]:
    aggregates = aggregates or compute_aggregates(records)
    selected = state.stats_program if state.stats_program and state.stats_program != ALL else None

    cards = None
    if selected is None:
        table = ranked_program_table(aggregates)
    else:
        # Selection comes from the aggregated names, so match on the fallback label too.
        norm = normalize_labels(records) if not records.empty else records
        subset = records[norm[PROGRAM_STUDI].eq(selected).to_numpy()] if not records.empty else records
        table = ranked_program_table(compute_aggregates(subset))
        cards = stat_cards(aggregates.programs.get(selected), total_label="Jumlah Mahasiswa")

    return {
        "view_state": asdict(state),
        "selected_program": selected,
        "title": selected or "Pilih Prodi",
        "options": program_names(aggregates),
        "cards": cards,
        "table": table,
        "empty": not table,
    }
