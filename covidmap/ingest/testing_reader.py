"""
Load the daily state testing dataset (COVID Tracking Project layout) into a
table keyed by (fips, date), and merge it into daily case series.

Raw dates are compact YYYYMMDD numerals; they are normalized to the same
midnight timestamps the case data uses before indexing.
"""

import warnings
from pathlib import Path

import pandas as pd

from covidmap.errors import DuplicateKeyWarning
from covidmap.features.ratios import RATIO_FIELDS, add_testing_ratios
from covidmap.ingest.geo import normalize_fips
from covidmap.ingest.validate import drop_malformed

TESTING_FIELDS = (
    "positive",
    "negative",
    "pending",
    "tests",
    "new_positive",
    "new_negative",
    "new_tests",
)

# raw column(s) -> standardized field, first present wins
RENAME_MAP = {
    "positive": ("positive",),
    "negative": ("negative",),
    "pending": ("pending",),
    "tests": ("total", "totalTestResults"),
    "new_positive": ("positiveIncrease",),
    "new_negative": ("negativeIncrease",),
    "new_tests": ("totalTestResultsIncrease",),
}


def parse_compact_dates(s: pd.Series) -> pd.Series:
    """20200315 / "20200315" / 20200315.0 -> Timestamp('2020-03-15'); NaT otherwise."""
    num = pd.to_numeric(s, errors="coerce")
    num = num.where(num % 1 == 0)
    text = num.astype("Int64").astype("string")
    return pd.to_datetime(text, format="%Y%m%d", errors="coerce")


def load_testing_index(raw: pd.DataFrame, on_malformed: str = "skip") -> pd.DataFrame:
    """
    Returns columns [fips, date, positive, negative, pending, tests,
    new_positive, new_negative, new_tests], unique on (fips, date).

    Missing numeric values stay NaN. A repeated (fips, date) key is reported
    with a DuplicateKeyWarning and the later row is kept.
    """
    for c in ("fips", "date"):
        if c not in raw.columns:
            raise ValueError(
                f"Expected column '{c}' in testing data; got {raw.columns.tolist()}"
            )

    df = pd.DataFrame(
        {"fips": normalize_fips(raw["fips"]), "date": parse_compact_dates(raw["date"])},
        index=raw.index,
    )
    for field, sources in RENAME_MAP.items():
        col = next((c for c in sources if c in raw.columns), None)
        df[field] = (
            pd.to_numeric(raw[col], errors="coerce").astype(float)
            if col is not None
            else float("nan")
        )

    bad = df[["fips", "date"]].isna().any(axis=1)
    df = drop_malformed(df, bad, "testing data", on_malformed)

    dup = df.duplicated(["fips", "date"], keep="last")
    if dup.any():
        keys = df.loc[dup, ["fips", "date"]].head(5)
        sample = ", ".join(f"{f}@{d:%Y-%m-%d}" for f, d in keys.itertuples(index=False))
        warnings.warn(
            f"testing data: {int(dup.sum())} row(s) share a (fips, date) key with a "
            f"later row; keeping the later one ({sample})",
            DuplicateKeyWarning,
            stacklevel=2,
        )
        df = df.loc[~dup]

    return df.sort_values(["fips", "date"]).reset_index(drop=True)


def merge_testing(daily: pd.DataFrame, testing: pd.DataFrame) -> pd.DataFrame:
    """
    Left-join testing fields onto daily rows by exact (fips, date) and
    recompute the ratio fields. Rows without a testing match keep NaN.
    """
    left = daily.drop(
        columns=[c for c in TESTING_FIELDS + RATIO_FIELDS if c in daily.columns]
    )
    out = left.merge(
        testing[["fips", "date", *TESTING_FIELDS]],
        on=["fips", "date"],
        how="left",
        validate="many_to_one",
    )
    return add_testing_ratios(out)


def load_testing_json(json_path: str | Path, on_malformed: str = "skip") -> pd.DataFrame:
    raw = pd.read_json(
        Path(json_path), dtype={"fips": str, "date": str}, convert_dates=False
    )
    return load_testing_index(raw, on_malformed=on_malformed)
