import numpy as np
import pandas as pd
import pytest
from conftest import row

from covidmap.features.deltas import add_deltas
from covidmap.features.national import (
    aggregate_cases,
    aggregate_testing,
    national_population,
)
from covidmap.features.per_capita import (
    add_per_capita,
    attach_population,
    per100k_key,
    value_fields,
)
from covidmap.ingest.cases_reader import normalize_case_rows
from covidmap.ingest.population_reader import resolve_populations
from covidmap.ingest.testing_reader import load_testing_index


def test_deltas_first_row_is_its_own_increment(cases_raw, geo):
    df = add_deltas(normalize_case_rows(cases_raw, geo))
    alpha = df[df["name"] == "Alpha"]
    beta = df[df["name"] == "Beta"]

    assert alpha["new_cases"].tolist() == [10, 5, 0, 5]
    assert alpha["new_deaths"].tolist() == [0, 1, 0, 1]
    assert beta["new_cases"].tolist() == [1, 2, 3]


def test_deltas_match_cumulative_differences(cases_raw, geo):
    df = add_deltas(normalize_case_rows(cases_raw, geo))
    for _, g in df.groupby(["state", "name"]):
        for f in ("cases", "deaths"):
            expected = g[f].diff().fillna(g[f])
            assert g[f"new_{f}"].tolist() == expected.astype("int64").tolist()


def test_deltas_can_go_negative_on_revisions(geo):
    raw = pd.DataFrame(
        {
            "date": ["2020-04-01", "2020-04-02"],
            "state": ["Gamma", "Gamma"],
            "cases": [30, 28],
            "deaths": [1, 1],
        }
    )
    df = add_deltas(normalize_case_rows(raw, geo))
    assert df["new_cases"].tolist() == [30, -2]


def test_per_capita_from_population(cases_raw, pop_raw, geo):
    df = add_deltas(normalize_case_rows(cases_raw, geo))
    df = add_per_capita(attach_population(df, resolve_populations(pop_raw, geo)), value_fields(False))

    alpha = df[df["name"] == "Alpha"]
    np.testing.assert_allclose(alpha["new_cases_p100k"], alpha["new_cases"].astype(float))
    beta = df[df["name"] == "Beta"]
    np.testing.assert_allclose(beta["cases_p100k"], beta["cases"] / 2.0)
    assert not df["no_population"].any()
    assert per100k_key("tests") not in df.columns


def test_missing_or_zero_population_leaves_rates_unset(cases_raw, geo):
    df = add_deltas(normalize_case_rows(cases_raw, geo))
    pop = pd.Series({"01": 0.0}, name="pop")
    df = add_per_capita(attach_population(df, pop), value_fields(False))

    assert df["no_population"].all()
    assert df["pop"].isna().all()
    assert df["new_cases_p100k"].isna().all()


def test_national_cases_do_not_zero_fill(cases_raw, geo):
    nat = aggregate_cases(normalize_case_rows(cases_raw, geo))

    assert set(nat["fips"]) == {"00"}
    assert set(nat["name"]) == {"national"}
    # only Alpha reports on 2020-03-13
    assert nat["cases"].tolist() == [10, 16, 18, 26]
    assert nat["deaths"].tolist() == [0, 1, 1, 3]


def test_national_testing_covers_every_testing_row(testing_raw):
    nat = aggregate_testing(load_testing_index(testing_raw), fips="US")

    assert nat["date"].tolist() == [pd.Timestamp("2020-03-15"), pd.Timestamp("2020-03-16")]
    assert nat["new_tests"].tolist() == [450, 260]
    assert nat["new_positive"].tolist() == [105, 50]
    # no pending values on 03-15: summed as 0
    assert nat["pending"].tolist() == [0, 10]
    assert set(nat["fips"]) == {"US"}


def test_national_population_precedence(pop_raw, geo):
    pop = resolve_populations(pop_raw, geo)
    region_fips = pd.Series(["01", "06", "06"], dtype="string")

    assert national_population(pop, region_fips)["00"] == 300000
    assert national_population(pop, region_fips, total=5)["00"] == 5

    with_total = pd.concat([pop, pd.Series({"00": 123.0})])
    assert national_population(with_total, region_fips)["00"] == 123


def test_national_series_feeds_delta_and_per_capita(cases_raw, pop_raw, geo):
    cases = normalize_case_rows(cases_raw, geo)
    pop = resolve_populations(pop_raw, geo)
    nat = aggregate_cases(cases)
    nat = add_deltas(nat)
    nat = add_per_capita(
        attach_population(nat, national_population(pop, cases["fips"])), value_fields(False)
    )

    assert nat["new_cases"].tolist() == [10, 6, 2, 8]
    assert row(nat, "national", "2020-03-13")["new_cases_p100k"] == pytest.approx(10 / 3)
