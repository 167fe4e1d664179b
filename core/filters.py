from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

import pandas as pd

from core.aggregate import SCHOLARSHIP_CATEGORIES
from core.data import BEASISWA, DOSEN, NAMA, NIM, PROGRAM_STUDI


ALL = "all"

PAGE_DASHBOARD = "dashboard"
PAGE_STUDENTS = "students"
PAGE_ADVISORS = "advisors"
PAGE_ADVISOR_DETAIL = "advisor_detail"
PAGE_PROGRAMS = "programs"
PAGE_ANALYTICS = "analytics"
PAGES = [PAGE_DASHBOARD, PAGE_STUDENTS, PAGE_ADVISORS, PAGE_ADVISOR_DETAIL, PAGE_PROGRAMS, PAGE_ANALYTICS]


@dataclass(frozen=True)
class StudentFilters:
    query: str = ""
    program: Optional[str] = None
    scholarship: Optional[str] = None
    advisor: Optional[str] = None


def _as_choice(value: object) -> Optional[str]:
    """Dropdown value, with "all" and blanks meaning no constraint."""
    if value is None:
        return None
    s = str(value).strip()
    if not s or s.lower() == ALL:
        return None
    return s


def normalize_filters(raw: dict) -> StudentFilters:
    return StudentFilters(
        query=str(raw.get("query") or "").strip(),
        program=_as_choice(raw.get("program")),
        scholarship=_as_choice(raw.get("scholarship")),
        advisor=_as_choice(raw.get("advisor")),
    )


@dataclass
class ViewState:
    """What the user is looking at. Owned by the UI, read by the compute functions."""

    page: str = PAGE_DASHBOARD
    query: str = ""
    program: str = ALL
    scholarship: str = ALL
    advisor: Optional[str] = None
    current_page: int = 1
    advisor_query: str = ""
    stats_program: str = ALL

    def filters(self) -> StudentFilters:
        return normalize_filters(
            {
                "query": self.query,
                "program": self.program,
                "scholarship": self.scholarship,
                "advisor": self.advisor if self.page == PAGE_ADVISOR_DETAIL else None,
            }
        )

    def show_page(self, page: str) -> None:
        if page not in PAGES:
            raise ValueError(f"unknown page {page!r}")
        if page != self.page:
            self.query = ""
            self.program = ALL
            self.scholarship = ALL
        if page != PAGE_ADVISOR_DETAIL:
            self.advisor = None
        if page != PAGE_ADVISORS:
            self.advisor_query = ""
        if page != PAGE_PROGRAMS:
            self.stats_program = ALL
        self.page = page
        self.current_page = 1

    def select_advisor(self, name: str) -> None:
        self.show_page(PAGE_ADVISOR_DETAIL)
        self.advisor = name

    def set_query(self, query: str) -> None:
        self.query = query or ""
        self.current_page = 1

    def set_program(self, program: Optional[str]) -> None:
        self.program = program or ALL
        self.current_page = 1

    def set_scholarship(self, scholarship: Optional[str]) -> None:
        self.scholarship = scholarship or ALL
        self.current_page = 1

    def set_advisor_query(self, query: str) -> None:
        self.advisor_query = query or ""
        self.current_page = 1

    def set_stats_program(self, program: Optional[str]) -> None:
        self.stats_program = program or ALL

    def next_page(self) -> None:
        self.current_page += 1

    def prev_page(self) -> None:
        self.current_page -= 1

    def sync_page(self, page: int) -> None:
        """Store the page the paginator actually rendered."""
        self.current_page = int(page)


def _equals(series: pd.Series, value: str) -> pd.Series:
    return series.eq(value).fillna(False).astype(bool)


def _text_match(df: pd.DataFrame, query: str) -> pd.Series:
    q = query.lower()
    in_name = df[NAMA].astype("string").str.lower().str.contains(q, regex=False, na=False)
    in_nim = df[NIM].astype("string").str.lower().str.contains(q, regex=False, na=False)
    return (in_name | in_nim).astype(bool)


def apply_filters(df: pd.DataFrame, filters: StudentFilters) -> pd.DataFrame:
    """Rows matching every active filter, in their original order."""
    out = df
    if out.empty:
        return out.copy()
    if filters.query:
        out = out[_text_match(out, filters.query)]
    if filters.scholarship is not None:
        if filters.scholarship not in SCHOLARSHIP_CATEGORIES[:2]:
            return out.iloc[0:0].copy()
        out = out[_equals(out[BEASISWA], filters.scholarship)]
    if filters.program is not None:
        out = out[_equals(out[PROGRAM_STUDI], filters.program)]
    if filters.advisor is not None:
        out = out[_equals(out[DOSEN], filters.advisor)]
    return out.copy()


def filter_advisor_students(df: pd.DataFrame, filters: StudentFilters) -> pd.DataFrame:
    # No advisor selected means no students, not everyone.
    if filters.advisor is None:
        return df.iloc[0:0].copy()
    return apply_filters(df, filters)


def filter_advisor_names(names: Iterable[str], query: str) -> List[str]:
    q = (query or "").strip().lower()
    if not q:
        return list(names)
    return [n for n in names if q in n.lower()]
