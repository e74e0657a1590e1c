import numpy as np
import pandas as pd
import pytest
from conftest import row

from covidmap.errors import DuplicateKeyWarning, MalformedRowWarning
from covidmap.features.ratios import add_testing_ratios
from covidmap.ingest.cases_reader import normalize_case_rows
from covidmap.ingest.testing_reader import (
    load_testing_index,
    merge_testing,
    parse_compact_dates,
)


def test_compact_dates():
    out = parse_compact_dates(pd.Series([20200315, "20200316", 20200317.0, "2020-03-18", None]))
    assert out.iloc[:3].tolist() == [
        pd.Timestamp("2020-03-15"),
        pd.Timestamp("2020-03-16"),
        pd.Timestamp("2020-03-17"),
    ]
    assert out.iloc[3:].isna().all()


def test_testing_index_columns(testing_raw):
    idx = load_testing_index(testing_raw)
    assert idx.columns.tolist() == [
        "fips",
        "date",
        "positive",
        "negative",
        "pending",
        "tests",
        "new_positive",
        "new_negative",
        "new_tests",
    ]
    assert idx[["fips", "date"]].apply(tuple, axis=1).tolist() == [
        ("06", pd.Timestamp("2020-03-15")),
        ("06", pd.Timestamp("2020-03-16")),
        ("72", pd.Timestamp("2020-03-15")),
    ]
    assert np.isnan(idx.loc[0, "pending"])
    assert idx.loc[0, "tests"] == 400


def test_total_test_results_column_is_accepted(testing_raw):
    raw = testing_raw.rename(columns={"total": "totalTestResults"})
    idx = load_testing_index(raw)
    assert idx["tests"].tolist() == [400, 660, 50]


def test_duplicate_key_reported_and_last_kept(testing_raw):
    raw = pd.concat([testing_raw, testing_raw.iloc[[0]].assign(positive=111)], ignore_index=True)
    with pytest.warns(DuplicateKeyWarning, match="06@2020-03-15"):
        idx = load_testing_index(raw)
    assert len(idx) == 3
    assert idx.loc[(idx["fips"] == "06") & (idx["date"] == "2020-03-15"), "positive"].item() == 111


def test_rows_without_fips_are_malformed(testing_raw):
    raw = testing_raw.copy()
    raw.loc[2, "fips"] = None
    with pytest.warns(MalformedRowWarning):
        idx = load_testing_index(raw)
    assert set(idx["fips"]) == {"06"}


def test_merge_matches_exact_region_and_date(cases_raw, testing_raw, geo):
    daily = normalize_case_rows(cases_raw, geo)
    merged = merge_testing(daily, load_testing_index(testing_raw))

    assert len(merged) == len(daily)
    hit = row(merged, "Beta", "2020-03-15")
    assert hit["new_positive"] == 100
    assert hit["new_tests"] == 400
    assert hit["new_positive_pct"] == pytest.approx(0.25)
    assert hit["positive_pct"] == pytest.approx(0.25)

    # no testing row: fields stay unset
    miss = row(merged, "Beta", "2020-03-14")
    assert np.isnan(miss["tests"])
    assert np.isnan(miss["positive_pct"])
    assert merged.loc[merged["name"] == "Alpha", "tests"].isna().all()


def test_ratio_with_zero_denominator_is_unset():
    out = add_testing_ratios(pd.DataFrame({"positive": [1.0, 2.0], "tests": [0.0, 4.0]}))
    assert np.isnan(out.loc[0, "positive_pct"])
    assert out.loc[1, "positive_pct"] == 0.5
    assert "new_positive_pct" not in out.columns
