"""
Load daily cumulative case/death rows (NYT layout) into a tidy long table:
columns: [state, name, fips, date, cases, deaths]

`name` is the region label (the state itself for state-level data, the county
for county-level data). One row per (state, name, date), chronologically
ordered within each region.
"""

from pathlib import Path
from typing import Optional

import pandas as pd

from covidmap.ingest.geo import GeoTables, resolve_fips
from covidmap.ingest.validate import drop_malformed

REGION_KEYS = ["state", "name"]
CASE_FIELDS = ("cases", "deaths")
LEVELS = ("states", "counties")


def _label(s: pd.Series) -> pd.Series:
    out = s.astype("string").str.strip()
    return out.mask((out == "").fillna(False).astype(bool))


def normalize_case_rows(
    raw: pd.DataFrame,
    geo: Optional[GeoTables] = None,
    level: str = "states",
    on_malformed: str = "skip",
) -> pd.DataFrame:
    if level not in LEVELS:
        raise ValueError(f"level must be one of {LEVELS}; got {level!r}")
    geo = geo if geo is not None else GeoTables()
    counties = level == "counties"

    need = ["date", "state", "cases", "deaths"] + (["county"] if counties else [])
    missing = [c for c in need if c not in raw.columns]
    if missing:
        raise ValueError(
            f"Expected columns {missing} in case data; got {raw.columns.tolist()}"
        )

    df = pd.DataFrame(
        {
            "state": _label(raw["state"]),
            "name": _label(raw["county"] if counties else raw["state"]),
            "date": pd.to_datetime(
                raw["date"].astype("string").str.strip(),
                format="%Y-%m-%d",
                errors="coerce",
            ),
            "cases": pd.to_numeric(raw["cases"], errors="coerce"),
            "deaths": pd.to_numeric(raw["deaths"], errors="coerce"),
        },
        index=raw.index,
    )
    fips = (
        raw["fips"]
        if "fips" in raw.columns
        else pd.Series(pd.NA, index=raw.index, dtype="string")
    )
    df["fips"] = resolve_fips(fips, raw["county"] if counties else None, geo)

    bad = df[["state", "name", "date", "cases", "deaths"]].isna().any(axis=1)
    df = drop_malformed(df, bad, f"{level} case data", on_malformed)

    for c in CASE_FIELDS:
        df[c] = df[c].astype("int64")

    # later rows win for a repeated (region, date)
    df = df.drop_duplicates(REGION_KEYS + ["date"], keep="last")
    df = df.sort_values(REGION_KEYS + ["date"], kind="mergesort")
    return df[REGION_KEYS + ["fips", "date", *CASE_FIELDS]].reset_index(drop=True)


def load_cases_csv(
    csv_path: str | Path,
    geo: Optional[GeoTables] = None,
    level: str = "states",
    on_malformed: str = "skip",
) -> pd.DataFrame:
    p = Path(csv_path)
    raw = pd.read_csv(p, dtype={"fips": "string", "date": "string"})
    return normalize_case_rows(raw, geo=geo, level=level, on_malformed=on_malformed)
