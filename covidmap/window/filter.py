"""Window filter and extent tracker.

Selects each region's rows on an ordered list of requested dates and
tracks the [min, max] of every charted field across all matched rows, which
gives the shared y-domain for a render pass.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from covidmap.features.per_capita import per100k_key, value_fields
from covidmap.ingest.cases_reader import REGION_KEYS

Extent = Tuple[Any, Any]


@dataclass(frozen=True)
class WindowResult:
    frame: pd.DataFrame  # matched rows, with `i` = position in `dates`
    extents: Dict[str, Extent]
    regions: pd.DataFrame  # every region, `has_data` False when nothing matched
    dates: pd.DatetimeIndex


def extent_keys(with_testing: bool) -> List[str]:
    fields = list(value_fields(with_testing))
    return ["date"] + fields + [per100k_key(f) for f in fields]


def _day_numbers(values) -> np.ndarray:
    return pd.DatetimeIndex(values).normalize().to_numpy().astype("datetime64[D]").astype("int64")


def _scalar(v):
    if isinstance(v, np.generic):
        return v.item()
    return v


def column_extent(values: pd.Series) -> Extent:
    vals = values.dropna()
    if vals.empty:
        return (None, None)
    return (_scalar(vals.min()), _scalar(vals.max()))


def compute_extents(frame: pd.DataFrame, keys: Sequence[str]) -> Dict[str, Extent]:
    return {
        k: column_extent(frame[k]) if k in frame.columns else (None, None)
        for k in keys
    }


def region_table(series: pd.DataFrame, matched: pd.DataFrame, keys=REGION_KEYS) -> pd.DataFrame:
    aggs = {"fips": ("fips", "first")}
    if "pop" in series.columns:
        aggs["pop"] = ("pop", "first")
    if "no_population" in series.columns:
        aggs["no_population"] = ("no_population", "any")
    regions = series.groupby(list(keys), sort=False, dropna=False).agg(**aggs)
    seen = pd.MultiIndex.from_frame(matched[list(keys)]) if len(keys) > 1 else matched[keys[0]]
    regions["has_data"] = regions.index.isin(seen)
    return regions.reset_index()


def filter_window(
    series: pd.DataFrame,
    dates: Sequence,
    with_testing: Optional[bool] = None,
    keys=REGION_KEYS,
) -> WindowResult:
    """
    Keep, per region, the rows whose date exactly matches a requested date.

    Requested dates without a row are skipped (no interpolation, no zero
    fill). `i` is the date's position in ``dates`` so bars stay aligned
    across charts with gaps. When a date is requested twice, its first
    position is used.
    """
    if with_testing is None:
        with_testing = "tests" in series.columns
    dates = pd.DatetimeIndex(dates).normalize()

    want = pd.Series(np.arange(len(dates)), index=_day_numbers(dates))
    want = want[~want.index.duplicated(keep="first")]

    pos = pd.Series(_day_numbers(series["date"]), index=series.index).map(want)
    matched = series.loc[pos.notna()].copy()
    matched["i"] = pos[pos.notna()].astype("int64")
    matched = matched.sort_values([*keys, "date"], kind="mergesort").reset_index(drop=True)

    return WindowResult(
        frame=matched,
        extents=compute_extents(matched, extent_keys(with_testing)),
        regions=region_table(series, matched, keys),
        dates=dates,
    )


def region_extent(
    frame: pd.DataFrame, region: Tuple[str, ...], field: str, keys=REGION_KEYS
) -> Extent:
    """Extent of one region's matched rows, for independently scaled charts."""
    mask = np.ones(len(frame), dtype=bool)
    for k, v in zip(keys, region):
        mask &= (frame[k] == v).fillna(False).to_numpy(dtype=bool)
    if field not in frame.columns:
        return (None, None)
    return column_extent(frame.loc[mask, field])


def rank_regions(
    frame: pd.DataFrame, regions: pd.DataFrame, field: str, keys=REGION_KEYS
) -> pd.DataFrame:
    """
    Order regions for the chart grid, largest first.

    Daily ``new*`` fields rank by the sum of the windowed values; other fields
    by the last non-null windowed value. Regions with no value get
    ``sort_val`` -1. Ties keep the order of ``regions``.
    """
    keys = list(keys)
    ranked = regions.copy()
    if field not in frame.columns:
        ranked["sort_val"] = -1.0
        return ranked

    vals = frame.loc[frame[field].notna(), keys + ["date", field]]
    g = vals.sort_values("date", kind="mergesort").groupby(keys, sort=False, dropna=False)[field]
    by_region = g.sum() if field.startswith("new") else g.last()

    ranked = ranked.merge(by_region.rename("sort_val").reset_index(), on=keys, how="left")
    ranked["sort_val"] = ranked["sort_val"].astype(float).fillna(-1.0)
    return ranked.sort_values("sort_val", ascending=False, kind="mergesort").reset_index(drop=True)
