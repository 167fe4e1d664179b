"""Grouped statistics over the student records.

All statistics come from one grouped scan of the record frame: records are
counted per (program, advisor, scholarship category) and the advisor, program
and scholarship mappings are derived from that small table.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Set

import pandas as pd

from core.data import BEASISWA, DOSEN, PROGRAM_STUDI, round_half_up


PROGRAM_FALLBACK = "Tidak Diketahui"
SCHOLARSHIP_FALLBACK = "Tidak Diketahui Beasiswa"
KIPK = "KIPK"
NON_KIPK = "Non KIPK"
SCHOLARSHIP_CATEGORIES = [KIPK, NON_KIPK, SCHOLARSHIP_FALLBACK]


@dataclass
class AdvisorStats:
    total: int = 0
    kipk: int = 0
    non_kipk: int = 0
    unknown_scholarship: int = 0

    def add(self, category: str, count: int = 1) -> None:
        self.total += count
        if category == KIPK:
            self.kipk += count
        elif category == NON_KIPK:
            self.non_kipk += count
        else:
            self.unknown_scholarship += count

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class ProgramStats(AdvisorStats):
    unique_advisor_count: int = 0


@dataclass
class Aggregates:
    advisors: Dict[str, AdvisorStats] = field(default_factory=dict)
    programs: Dict[str, ProgramStats] = field(default_factory=dict)
    scholarships: Dict[str, int] = field(default_factory=lambda: {c: 0 for c in SCHOLARSHIP_CATEGORIES})
    total: int = 0


def scholarship_category(value: object) -> str:
    if value is None or pd.isna(value):
        return SCHOLARSHIP_FALLBACK
    return value if value in (KIPK, NON_KIPK) else SCHOLARSHIP_FALLBACK


def normalize_labels(df: pd.DataFrame) -> pd.DataFrame:
    """Apply the fallback labels used by every statistic.

    Missing programs become ``Tidak Diketahui``, missing or unrecognized
    scholarships ``Tidak Diketahui Beasiswa`` and missing advisors an empty
    string (no advisor group).
    """
    out = df.copy()
    out[PROGRAM_STUDI] = out[PROGRAM_STUDI].fillna(PROGRAM_FALLBACK).astype(str)
    out[BEASISWA] = out[BEASISWA].map(scholarship_category).astype(str)
    out[DOSEN] = out[DOSEN].fillna("").astype(str)
    return out


def compute_aggregates(df: pd.DataFrame) -> Aggregates:
    result = Aggregates()
    if df.empty:
        return result

    norm = normalize_labels(df)
    grouped = norm.groupby([PROGRAM_STUDI, DOSEN, BEASISWA], sort=False).size().reset_index(name="count")

    program_advisors: Dict[str, Set[str]] = {}
    for program, advisor, category, count in grouped.itertuples(index=False, name=None):
        count = int(count)
        result.programs.setdefault(program, ProgramStats()).add(category, count)
        advisors = program_advisors.setdefault(program, set())
        if advisor:
            result.advisors.setdefault(advisor, AdvisorStats()).add(category, count)
            advisors.add(advisor)
        result.scholarships[category] = result.scholarships.get(category, 0) + count
        result.total += count

    for program, advisors in program_advisors.items():
        result.programs[program].unique_advisor_count = len(advisors)
    return result


def percentage(value: Optional[float], total: Optional[float]) -> float:
    """``value / total * 100`` to one decimal; 0 when there is nothing to divide by."""
    if not total or value is None or pd.isna(value) or pd.isna(total):
        return 0.0
    return round_half_up(float(value) / float(total) * 100, 1) or 0.0


def collation_key(name: str):
    # "Ana" < "ana" < "Budi" < "zed"
    return (name.casefold(), name)


def advisor_names(aggregates: Aggregates) -> List[str]:
    return sorted(aggregates.advisors, key=collation_key)


def program_names(aggregates: Aggregates) -> List[str]:
    return sorted(aggregates.programs, key=collation_key)


def _distinct_values(series: pd.Series) -> List[str]:
    values = series.dropna().astype(str)
    return sorted({v for v in values if v}, key=collation_key)


def program_options(df: pd.DataFrame) -> List[str]:
    if df.empty:
        return []
    return _distinct_values(df[PROGRAM_STUDI])


def scholarship_options(df: pd.DataFrame) -> List[str]:
    # Only recognized categories are selectable; other labels match "all" alone.
    if df.empty:
        return []
    return list(SCHOLARSHIP_CATEGORIES[:2])


PROGRAM_TABLE_COLUMNS = ["no", "program_studi", "total", "kipk", "non_kipk", "unknown_scholarship", "unique_advisor_count"]


def ranked_program_table(aggregates: Aggregates) -> List[Dict[str, object]]:
    """Programs by descending student count; ties keep discovery order."""
    if not aggregates.programs:
        return []
    table = pd.DataFrame(
        [{"program_studi": name, **stats.as_dict()} for name, stats in aggregates.programs.items()]
    )
    table = table.sort_values("total", ascending=False, kind="stable").reset_index(drop=True)
    table.insert(0, "no", table.index + 1)
    return [
        {k: (v if isinstance(v, str) else int(v)) for k, v in row.items()}
        for row in table[PROGRAM_TABLE_COLUMNS].to_dict(orient="records")
    ]


def stat_cards(stats: Optional[AdvisorStats], *, total_label: str = "Total Dibimbing") -> List[Dict[str, object]]:
    stats = stats or AdvisorStats()
    total = stats.total
    cards = [
        ("total", total_label, total),
        ("kipk", "Mahasiswa KIPK", stats.kipk),
        ("non_kipk", "Mahasiswa Non-Beasiswa", stats.non_kipk),
    ]
    return [
        {"key": key, "label": label, "value": int(value), "percentage": percentage(value, total)}
        for key, label, value in cards
    ]
