from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd


logger = logging.getLogger(__name__)

NIM = "nim"
NAMA = "nama"
PROGRAM_STUDI = "program_studi"
DOSEN = "dosen_pembimbing_akademik"
BEASISWA = "beasiswa"

RECORD_COLUMNS = [NIM, NAMA, PROGRAM_STUDI, DOSEN, BEASISWA]

# Spreadsheet headers and camelCase keys both map onto the canonical columns.
SOURCE_COLUMNS = {
    "NIM": NIM,
    "Nim": NIM,
    "nim": NIM,
    "Nama": NAMA,
    "NAMA": NAMA,
    "nama": NAMA,
    "Program Studi": PROGRAM_STUDI,
    "programStudi": PROGRAM_STUDI,
    "program_studi": PROGRAM_STUDI,
    "Prodi": PROGRAM_STUDI,
    "Dosen Pembimbing Akademik": DOSEN,
    "dosenPembimbingAkademik": DOSEN,
    "dosen_pembimbing_akademik": DOSEN,
    "DPA": DOSEN,
    "Beasiswa": BEASISWA,
    "beasiswa": BEASISWA,
}

NULL_TOKENS = {"nan", "none", "null", "<na>", "n/a", "-"}


def normalize_text(value: object) -> Optional[str]:
    """Strip a raw cell to a string, mapping blanks and null-like tokens to None."""
    if value is None:
        return None
    if isinstance(value, float):
        if pd.isna(value):
            return None
        if value.is_integer():
            value = int(value)
    s = str(value).strip()
    if not s or s.lower() in NULL_TOKENS:
        return None
    return s


def empty_frame() -> pd.DataFrame:
    return pd.DataFrame({c: pd.Series(dtype="string") for c in RECORD_COLUMNS})


def _canonical_row(raw: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    row: Dict[str, Optional[str]] = {c: None for c in RECORD_COLUMNS}
    for key, value in raw.items():
        col = SOURCE_COLUMNS.get(str(key).strip())
        if col is None:
            continue
        text = normalize_text(value)
        # Duplicate headers: first non-blank value wins.
        if row[col] is None:
            row[col] = text
    return row


def records_to_frame(records: Iterable[object]) -> pd.DataFrame:
    rows: List[Dict[str, Optional[str]]] = []
    skipped = 0
    for raw in records or []:
        if not isinstance(raw, Mapping):
            skipped += 1
            continue
        rows.append(_canonical_row(raw))
    if skipped:
        logger.warning("Skipped %d non-object rows from the data source", skipped)
    if not rows:
        return empty_frame()
    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    for col in RECORD_COLUMNS:
        df[col] = df[col].astype("string")
    return df.reset_index(drop=True)


def frame_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame rows as plain dicts with missing cells as None."""
    if df.empty:
        return []
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


class RecordStore:
    """Holds the last successfully loaded student records.

    The frame is replaced wholesale by ``load``; readers always get a copy.
    ``load`` is not reentrant, callers serialize it.
    """

    def __init__(self, records: Optional[Sequence[object]] = None) -> None:
        self._frame = empty_frame()
        self.version = 0
        self.loaded_at: Optional[datetime] = None
        if records is not None:
            self.load(records)

    def load(self, records: Sequence[object]) -> None:
        frame = records_to_frame(records)
        self._frame = frame
        self.version += 1
        self.loaded_at = datetime.now(timezone.utc)

    def get_all(self) -> pd.DataFrame:
        return self._frame.copy()

    def records(self) -> List[Dict[str, Any]]:
        return frame_records(self._frame)

    @property
    def empty(self) -> bool:
        return self._frame.empty

    def __len__(self) -> int:
        return len(self._frame)
