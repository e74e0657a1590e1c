"""
Window the built series and write the chart/map tables for one render.

Inputs:
  - data/processed/{states,national,counties}_series.parquet

Outputs:
  - artifacts/tables/map_<level>_<time>.csv      (one row per region)
  - artifacts/tables/window_<level>_<time>.csv   (windowed rows with `i`)
  - artifacts/tables/extents_<level>_<time>.json (field -> [min, max])
"""

import argparse
import json

import pandas as pd

from covidmap.filters import FilterOptions
from covidmap.labels import map_title
from covidmap.utils.io import load_yaml, resolve_paths
from covidmap.window.dates import TIME_KEYS, dates_to_show
from covidmap.window.filter import filter_window, rank_regions
from covidmap.window.map_summary import summarize_map
from covidmap.window.scales import chart_y_domain


def build_argparser() -> argparse.Namespace:
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default="configs/data.yaml")
    ap.add_argument("--level", choices=["states", "national", "counties"], default="states")
    ap.add_argument("--state", default="all", help="restrict counties to one state")
    ap.add_argument("--time", choices=TIME_KEYS, default="14d")
    ap.add_argument("--field", default="new_cases")
    ap.add_argument("--per100k", action="store_true")
    ap.add_argument("--log", action="store_true")
    ap.add_argument("--independent-y", action="store_true")
    return ap.parse_args()


def main() -> int:
    args = build_argparser()
    cfg = load_yaml(args.config)
    paths = resolve_paths(cfg)

    options = FilterOptions.from_mapping(
        {
            "state": args.state,
            "field": args.field,
            "time": args.time,
            "log": "1" if args.log else "0",
            "per100k": "1" if args.per100k else "0",
            "consistentY": "0" if args.independent_y else "1",
        }
    )

    series = pd.read_parquet(paths["processed"] / f"{args.level}_series.parquet")
    if args.level == "counties" and options.state != "all":
        series = series[series["state"] == options.state].reset_index(drop=True)
    if series.empty:
        raise SystemExit(f"[ERR] no rows for level={args.level} state={options.state}")

    dates = dates_to_show(series["date"].max(), options.time, series["date"].min())
    result = filter_window(series, dates)
    summary = summarize_map(result.frame)

    tag = f"{args.level}_{options.time}"
    out_map = paths["tables"] / f"map_{tag}.csv"
    out_win = paths["tables"] / f"window_{tag}.csv"
    out_ext = paths["tables"] / f"extents_{tag}.json"
    summary.to_csv(out_map, index=False)
    result.frame.to_csv(out_win, index=False)
    with open(out_ext, "w", encoding="utf-8") as f:
        json.dump(
            {k: [None if v is None else str(v) if k == "date" else v for v in ext]
             for k, ext in result.extents.items()},
            f,
            indent=2,
        )

    missing = result.regions.loc[~result.regions["has_data"], "name"].tolist()
    print(f"[map] {map_title(options.value_field, options.time)}")
    print(
        f"[map] window {dates[0]:%Y-%m-%d}→{dates[-1]:%Y-%m-%d} ({len(dates)} days), "
        f"{len(summary):,} regions with data, {len(missing):,} without"
    )
    print(f"[map] y-domain for {options.value_field}: {chart_y_domain(result, options)}")
    top = rank_regions(result.frame, result.regions, options.value_field).head(5)
    print("[map] top regions: " + ", ".join(f"{n} ({v:,.1f})" for n, v in zip(top["name"], top["sort_val"])))
    print(f"[map] summary → {out_map}")
    print(f"[map] window rows → {out_win}")
    print(f"[map] extents → {out_ext}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
