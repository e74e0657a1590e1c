"""Synthetic national region: per-date sums over all regions.

Case and testing totals are two independent passes. Case totals cover the
regions present in the case data on each date; testing totals cover every
region with a testing row on that date. Neither pass zero-fills regions that
have not started reporting.
"""
from typing import Optional

import numpy as np
import pandas as pd

from covidmap.ingest.cases_reader import CASE_FIELDS, REGION_KEYS
from covidmap.ingest.testing_reader import TESTING_FIELDS

NATIONAL_FIPS = "00"
NATIONAL_NAME = "national"


def _const(value: str, n: int) -> pd.api.extensions.ExtensionArray:
    return pd.array([value] * n, dtype="string")


def aggregate_cases(
    cases: pd.DataFrame, fips: str = NATIONAL_FIPS, name: str = NATIONAL_NAME
) -> pd.DataFrame:
    """Sum cumulative cases/deaths across regions per date."""
    out = cases.groupby("date", sort=True)[list(CASE_FIELDS)].sum().reset_index()
    out["state"] = _const(name, len(out))
    out["name"] = _const(name, len(out))
    out["fips"] = _const(fips, len(out))
    return out[REGION_KEYS + ["fips", "date", *CASE_FIELDS]]


def aggregate_testing(testing: pd.DataFrame, fips: str = NATIONAL_FIPS) -> pd.DataFrame:
    """Sum every testing field across regions per date; missing values count as 0."""
    out = testing.groupby("date", sort=True)[list(TESTING_FIELDS)].sum().reset_index()
    out["fips"] = _const(fips, len(out))
    return out[["fips", "date", *TESTING_FIELDS]]


def national_population(
    pop: pd.Series,
    region_fips: pd.Series,
    fips: str = NATIONAL_FIPS,
    total: Optional[float] = None,
) -> pd.Series:
    """
    Population table holding only the national id.

    Precedence: an explicit total, then the table's own entry for the national
    id, then the sum of known populations of the regions reporting cases.
    """
    if total is not None:
        value = float(total)
    elif fips in pop.index and pd.notna(pop[fips]) and pop[fips] > 0:
        value = float(pop[fips])
    else:
        ids = pd.Index(region_fips.dropna().unique())
        known = pop.reindex(ids).dropna()
        value = float(known.sum()) if len(known) else np.nan
    return pd.Series({fips: value}, name="pop", dtype=float)
