"""
End-to-end build of per-region daily series from raw datasets:

  raw case rows -> normalized rows -> (+ testing) -> deltas -> population
  -> per-100k, with a synthetic national series built alongside the states.

A Dataset is built once per raw-data fetch and never modified; a new fetch
produces a new Dataset.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import pandas as pd

from covidmap.features.deltas import add_deltas
from covidmap.features.national import (
    NATIONAL_FIPS,
    NATIONAL_NAME,
    aggregate_cases,
    aggregate_testing,
    national_population,
)
from covidmap.features.per_capita import add_per_capita, attach_population, value_fields
from covidmap.filters import FilterOptions
from covidmap.ingest.cases_reader import normalize_case_rows
from covidmap.ingest.geo import GeoTables
from covidmap.ingest.population_reader import resolve_populations
from covidmap.ingest.testing_reader import load_testing_index, merge_testing
from covidmap.window.dates import dates_to_show


def build_series(
    daily: pd.DataFrame, pop: pd.Series, testing: Optional[pd.DataFrame] = None
) -> pd.DataFrame:
    out = daily
    if testing is not None:
        out = merge_testing(out, testing)
    out = add_deltas(out)
    out = attach_population(out, pop)
    return add_per_capita(out, value_fields(testing is not None))


@dataclass(frozen=True)
class Dataset:
    series: pd.DataFrame
    national: Optional[pd.DataFrame]
    first_date: pd.Timestamp
    last_date: pd.Timestamp
    with_testing: bool

    def dates(self, time: str) -> pd.DatetimeIndex:
        return dates_to_show(self.last_date, time, self.first_date)

    def dates_for(self, options: FilterOptions) -> pd.DatetimeIndex:
        return self.dates(options.time)

    def for_state(self, state: str) -> pd.DataFrame:
        return self.series[self.series["state"] == state].reset_index(drop=True)


def _bounds(*frames: Optional[pd.DataFrame]):
    dates = pd.concat([f["date"] for f in frames if f is not None and len(f)])
    return dates.min(), dates.max()


def process_states(
    cases_raw: pd.DataFrame,
    pop_raw: pd.DataFrame,
    testing_raw: Optional[pd.DataFrame] = None,
    geo: Optional[GeoTables] = None,
    national: Optional[Dict[str, Any]] = None,
    on_malformed: str = "skip",
) -> Dataset:
    """
    State series (with testing data when given) plus the national series.

    ``national`` may set ``fips``, ``name`` and a fixed ``population`` for the
    synthetic region.
    """
    geo = geo if geo is not None else GeoTables()
    cases = normalize_case_rows(cases_raw, geo, level="states", on_malformed=on_malformed)
    pop = resolve_populations(pop_raw, geo)
    testing = (
        load_testing_index(testing_raw, on_malformed=on_malformed)
        if testing_raw is not None
        else None
    )
    return build_states(cases, pop, testing, national)


def build_states(
    cases: pd.DataFrame,
    pop: pd.Series,
    testing: Optional[pd.DataFrame] = None,
    national: Optional[Dict[str, Any]] = None,
) -> Dataset:
    """Same as process_states, from already-normalized case, population and testing tables."""
    national = national or {}
    nat_fips = str(national.get("fips", NATIONAL_FIPS))
    nat_name = national.get("name", NATIONAL_NAME)

    states = build_series(cases, pop, testing)
    us = build_series(
        aggregate_cases(cases, nat_fips, nat_name),
        national_population(pop, cases["fips"], nat_fips, national.get("population")),
        aggregate_testing(testing, nat_fips) if testing is not None else None,
    )
    first, last = _bounds(states, us)
    return Dataset(states, us, first, last, testing is not None)


def process_counties(
    cases_raw: pd.DataFrame,
    pop_raw: pd.DataFrame,
    geo: Optional[GeoTables] = None,
    on_malformed: str = "skip",
) -> Dataset:
    """County series; there is no county-level testing data."""
    geo = geo if geo is not None else GeoTables()
    cases = normalize_case_rows(cases_raw, geo, level="counties", on_malformed=on_malformed)
    return build_counties(cases, resolve_populations(pop_raw, geo))


def build_counties(cases: pd.DataFrame, pop: pd.Series) -> Dataset:
    counties = build_series(cases, pop)
    first, last = _bounds(counties)
    return Dataset(counties, None, first, last, False)
