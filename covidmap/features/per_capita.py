"""Population join and per-100k variants of the value fields."""
from typing import Mapping, Tuple, Union

import pandas as pd

P100K_SUFFIX = "_p100k"

CASE_VALUE_FIELDS = ("cases", "deaths", "new_cases", "new_deaths")
TESTING_VALUE_FIELDS = (
    "positive",
    "negative",
    "pending",
    "tests",
    "new_positive",
    "new_negative",
    "new_tests",
)


def per100k_key(field: str) -> str:
    return f"{field}{P100K_SUFFIX}"


def value_fields(with_testing: bool) -> Tuple[str, ...]:
    return CASE_VALUE_FIELDS + (TESTING_VALUE_FIELDS if with_testing else ())


def attach_population(
    df: pd.DataFrame, pop: Union[pd.Series, Mapping[str, float]]
) -> pd.DataFrame:
    """Adds `pop` (NaN when unknown or zero) and the `no_population` flag."""
    out = df.copy()
    p = out["fips"].map(pop).astype(float)
    out["pop"] = p.where(p > 0)
    out["no_population"] = out["pop"].isna()
    return out


def add_per_capita(df: pd.DataFrame, fields) -> pd.DataFrame:
    """
    <field>_p100k = field / (pop / 100000) for every value field present.

    Rows without a population get NaN rather than 0: an unknown rate is not
    a zero rate.
    """
    out = df.copy()
    factor = out["pop"].astype(float) / 1e5
    factor = factor.where(factor > 0)
    for f in fields:
        if f in out.columns:
            out[per100k_key(f)] = out[f].astype(float) / factor
    return out
