"""Daily increments from cumulative counts."""
import pandas as pd

from covidmap.ingest.cases_reader import CASE_FIELDS, REGION_KEYS


def new_key(field: str) -> str:
    return f"new_{field}"


def add_deltas(
    df: pd.DataFrame, fields=CASE_FIELDS, keys=REGION_KEYS
) -> pd.DataFrame:
    """
    new_<field> = field - previous row's field, per region in date order.

    A region's first row has no predecessor, so its increment is the
    cumulative value itself (baseline of zero), never zero.
    """
    out = df.sort_values([*keys, "date"], kind="mergesort").copy()
    for f in fields:
        prev = out.groupby(list(keys), sort=False, dropna=False)[f].shift(1)
        out[new_key(f)] = out[f] - prev.fillna(0).astype(out[f].dtype)
    return out.reset_index(drop=True)
