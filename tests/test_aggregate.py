import pandas as pd
import pytest

from core.aggregate import (
    KIPK,
    NON_KIPK,
    PROGRAM_FALLBACK,
    SCHOLARSHIP_FALLBACK,
    Aggregates,
    AdvisorStats,
    advisor_names,
    compute_aggregates,
    normalize_labels,
    percentage,
    program_names,
    program_options,
    ranked_program_table,
    scholarship_options,
    stat_cards,
)
from core.data import BEASISWA, DOSEN, PROGRAM_STUDI, records_to_frame


def _partition_holds(stats):
    return stats.kipk + stats.non_kipk + stats.unknown_scholarship == stats.total


def test_scenario_program_stats():
    df = records_to_frame(
        [
            {"nim": 1, "beasiswa": "KIPK", "programStudi": "TI"},
            {"nim": 2, "beasiswa": "Non KIPK", "programStudi": "TI"},
            {"nim": 3, "programStudi": "SI"},
        ]
    )
    agg = compute_aggregates(df)
    ti, si = agg.programs["TI"], agg.programs["SI"]
    assert (ti.total, ti.kipk, ti.non_kipk, ti.unknown_scholarship) == (2, 1, 1, 0)
    assert (si.total, si.kipk, si.non_kipk, si.unknown_scholarship) == (1, 0, 0, 1)
    assert agg.advisors == {}


def test_partition_is_complete_for_every_key(records):
    agg = compute_aggregates(records)
    assert all(_partition_holds(s) for s in agg.advisors.values())
    assert all(_partition_holds(s) for s in agg.programs.values())
    assert sum(agg.scholarships.values()) == agg.total == 6


def test_missing_labels_use_fallbacks(records):
    agg = compute_aggregates(records)
    assert agg.programs[PROGRAM_FALLBACK].total == 1
    assert agg.scholarships[SCHOLARSHIP_FALLBACK] == 2
    assert agg.programs["Sistem Informasi"].unknown_scholarship == 2


def test_records_without_advisor_are_not_counted_for_advisors(records):
    agg = compute_aggregates(records)
    assert sum(s.total for s in agg.advisors.values()) == 5
    assert "" not in agg.advisors
    assert set(agg.advisors) == {"Dr. Budi", "Ana", "ana"}


def test_advisor_stats(records):
    budi = compute_aggregates(records).advisors["Dr. Budi"]
    assert budi.as_dict() == {"total": 3, "kipk": 1, "non_kipk": 2, "unknown_scholarship": 0}


def test_unique_advisor_count_per_program(records):
    agg = compute_aggregates(records)
    assert agg.programs["Teknik Informatika"].unique_advisor_count == 1
    assert agg.programs["Sistem Informasi"].unique_advisor_count == 1
    assert agg.programs[PROGRAM_FALLBACK].unique_advisor_count == 1


def test_advisor_grouping_is_case_sensitive(records):
    agg = compute_aggregates(records)
    assert agg.advisors["Ana"].total == 1
    assert agg.advisors["ana"].total == 1


def test_empty_records_give_empty_aggregates():
    agg = compute_aggregates(records_to_frame([]))
    assert agg.advisors == {}
    assert agg.programs == {}
    assert agg.total == 0
    assert agg.scholarships == {KIPK: 0, NON_KIPK: 0, SCHOLARSHIP_FALLBACK: 0}


def test_normalize_labels_does_not_touch_input(records):
    norm = normalize_labels(records)
    assert norm.iloc[3][PROGRAM_STUDI] == PROGRAM_FALLBACK
    assert norm.iloc[4][BEASISWA] == SCHOLARSHIP_FALLBACK
    assert norm.iloc[4][DOSEN] == ""
    assert pd.isna(records.iloc[3][PROGRAM_STUDI])


@pytest.mark.parametrize(
    "value,total,expected",
    [(1, 3, 33.3), (2, 3, 66.7), (1, 8, 12.5), (5, 5, 100.0), (0, 7, 0.0), (3, 0, 0.0), (0, 0, 0.0)],
)
def test_percentage(value, total, expected):
    assert percentage(value, total) == expected


def test_percentage_over_zero_total_is_never_nan():
    result = percentage(0, 0)
    assert result == 0
    assert result == result


def test_advisor_names_ordering():
    df = records_to_frame([{"DPA": name} for name in ["Budi", "ana", "Ana", "zed"]])
    assert advisor_names(compute_aggregates(df)) == ["Ana", "ana", "Budi", "zed"]


def test_program_listings_are_sorted(records):
    assert program_options(records) == ["Komputerisasi Akuntansi", "Sistem Informasi", "Teknik Informatika"]
    assert program_names(compute_aggregates(records)) == [
        "Komputerisasi Akuntansi",
        "Sistem Informasi",
        "Teknik Informatika",
        PROGRAM_FALLBACK,
    ]


def test_scholarship_options_list_recognized_categories(records):
    assert scholarship_options(records) == [KIPK, NON_KIPK]
    assert scholarship_options(records_to_frame([])) == []


def test_ranked_program_table_is_stable(records):
    table = ranked_program_table(compute_aggregates(records))
    assert [row["program_studi"] for row in table] == [
        "Teknik Informatika",
        "Sistem Informasi",
        PROGRAM_FALLBACK,
        "Komputerisasi Akuntansi",
    ]
    assert [row["no"] for row in table] == [1, 2, 3, 4]
    assert table[0] == {
        "no": 1,
        "program_studi": "Teknik Informatika",
        "total": 2,
        "kipk": 1,
        "non_kipk": 1,
        "unknown_scholarship": 0,
        "unique_advisor_count": 1,
    }


def test_ranked_program_table_empty():
    assert ranked_program_table(Aggregates()) == []


def test_stat_cards_percentages():
    cards = stat_cards(AdvisorStats(total=3, kipk=1, non_kipk=2), total_label="Jumlah Mahasiswa")
    assert [c["label"] for c in cards] == ["Jumlah Mahasiswa", "Mahasiswa KIPK", "Mahasiswa Non-Beasiswa"]
    assert [c["percentage"] for c in cards] == [100.0, 33.3, 66.7]


def test_stat_cards_for_unknown_key():
    cards = stat_cards(None)
    assert all(c["value"] == 0 and c["percentage"] == 0 for c in cards)
