import pandas as pd

from core.data import BEASISWA, DOSEN, NAMA, NIM, PROGRAM_STUDI, RECORD_COLUMNS, RecordStore, normalize_text, records_to_frame


def test_records_to_frame_maps_spreadsheet_headers(sample_rows):
    df = records_to_frame(sample_rows)
    assert list(df.columns) == RECORD_COLUMNS
    assert len(df) == 6
    first = df.iloc[0]
    assert first[NIM] == "220101"
    assert first[NAMA] == "Andi Saputra"
    assert first[PROGRAM_STUDI] == "Teknik Informatika"
    assert first[DOSEN] == "Dr. Budi"
    assert first[BEASISWA] == "KIPK"


def test_records_to_frame_accepts_camel_case_keys():
    df = records_to_frame(
        [{"nim": 1, "nama": "A", "programStudi": "TI", "dosenPembimbingAkademik": "Dr. X", "beasiswa": "KIPK", "extra": "x"}]
    )
    assert df.iloc[0][PROGRAM_STUDI] == "TI"
    assert df.iloc[0][DOSEN] == "Dr. X"
    assert "extra" not in df.columns


def test_blank_cells_become_missing(sample_rows):
    df = records_to_frame(sample_rows)
    assert pd.isna(df.iloc[2][BEASISWA])
    assert pd.isna(df.iloc[3][PROGRAM_STUDI])
    assert pd.isna(df.iloc[4][DOSEN])


def test_missing_columns_are_created():
    df = records_to_frame([{"NIM": 5}])
    assert list(df.columns) == RECORD_COLUMNS
    assert pd.isna(df.iloc[0][NAMA])


def test_non_object_rows_are_skipped():
    df = records_to_frame([["not", "a", "record"], {"NIM": 7, "Nama": "Budi"}])
    assert len(df) == 1
    assert df.iloc[0][NIM] == "7"


def test_normalize_text():
    assert normalize_text(None) is None
    assert normalize_text("  ") is None
    assert normalize_text("null") is None
    assert normalize_text(220101.0) == "220101"
    assert normalize_text(" Ana ") == "Ana"


def test_empty_input_gives_empty_frame():
    df = records_to_frame([])
    assert df.empty
    assert list(df.columns) == RECORD_COLUMNS


def test_store_replaces_records_wholesale(sample_rows):
    store = RecordStore(sample_rows)
    assert len(store) == 6
    assert store.version == 1

    store.load(sample_rows[:2])
    assert len(store) == 2
    assert store.version == 2
    assert store.loaded_at is not None


def test_store_get_all_returns_a_copy(store):
    df = store.get_all()
    df.loc[0, NAMA] = "changed"
    df.drop(df.index, inplace=True)
    assert len(store) == 6
    assert store.get_all().iloc[0][NAMA] == "Andi Saputra"


def test_store_records_uses_none_for_missing(store):
    rows = store.records()
    assert rows[2][BEASISWA] is None
    assert rows[0][NIM] == "220101"


def test_new_store_is_empty():
    store = RecordStore()
    assert store.empty
    assert store.version == 0
    assert store.records() == []
