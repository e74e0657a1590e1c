"""
Collapse each region's windowed rows into one map row.

Count fields are the window total of the daily increments (summing the
cumulative columns would count the same cases once per day). `new_*` fields
become the average daily increment over the window. Ratios and per-100k
values are recomputed from the aggregated numbers, never averaged.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from covidmap.features.per_capita import add_per_capita, value_fields
from covidmap.features.ratios import add_testing_ratios
from covidmap.ingest.cases_reader import REGION_KEYS

# map field -> daily increment it totals
SUM_FROM = {"cases": "new_cases", "deaths": "new_deaths"}
MEAN_FIELDS = ("new_cases", "new_deaths")
TESTING_SUM_FROM = {
    "tests": "new_tests",
    "positive": "new_positive",
    "negative": "new_negative",
    # no daily pending increment in the testing source; totals to 0
    "pending": "new_pending",
}
TESTING_MEAN_FIELDS = ("new_tests", "new_positive", "new_negative")


def _has_testing(frame: pd.DataFrame) -> bool:
    return "tests" in frame.columns


def summarize_map(
    frame: pd.DataFrame, with_testing: Optional[bool] = None, keys=REGION_KEYS
) -> pd.DataFrame:
    """
    One row per region with at least one windowed row; regions with none are
    absent (drawn as "no data").
    """
    if with_testing is None:
        with_testing = _has_testing(frame)
    sums = dict(SUM_FROM, **(TESTING_SUM_FROM if with_testing else {}))
    means = MEAN_FIELDS + (TESTING_MEAN_FIELDS if with_testing else ())

    aggs = {"fips": ("fips", "first"), "pop": ("pop", "first")}
    for out, src in sums.items():
        aggs[out] = (src, "sum")
    for f in means:
        aggs[f] = (f, "mean")

    work = frame.copy()
    for _, src in aggs.values():
        if src not in work.columns:
            work[src] = np.nan

    summary = (
        work.groupby(list(keys), sort=True, dropna=False)
        .agg(**aggs)
        .reset_index()
    )
    if with_testing:
        summary = add_testing_ratios(summary)

    summary["pop"] = summary["pop"].astype(float)
    summary["no_population"] = ~(summary["pop"] > 0)
    return add_per_capita(summary, value_fields(with_testing))


def _fips_key(v: Any):
    s = str(v).strip()
    return int(s) if s.isdigit() else s


def join_features(
    summary: pd.DataFrame,
    features: Iterable[Mapping[str, Any]],
    fips_remapping: Optional[Mapping[str, str]] = None,
) -> List[Dict[str, Any]]:
    """
    Attach summary values to boundary features by region id.

    Features are passed through untouched; only their ``id`` is read. Alias
    ids (e.g. NYC boroughs) pick up their canonical region's values.
    Features without a summary row get ``no_data=True``.
    """
    remap = {_fips_key(k): _fips_key(v) for k, v in (fips_remapping or {}).items()}
    by_fips = {
        _fips_key(row["fips"]): row
        for row in summary.to_dict("records")
        if pd.notna(row["fips"])
    }

    joined = []
    for feature in features:
        fid = feature.get("id")
        key = _fips_key(fid)
        data = by_fips.get(remap.get(key, key))
        joined.append({"id": fid, "feature": feature, "no_data": data is None, **(data or {})})
    return joined
