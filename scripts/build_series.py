"""
Builds per-region daily series from the raw case, testing and population files.

Outputs:
  - data/processed/states_series.parquet
  - data/processed/national_series.parquet
  - data/processed/counties_series.parquet
  - data/processed/states_sample.csv  (first 200 rows)

Notes:
  * Malformed rows are dropped (or fatal with on_malformed: raise in configs/data.yaml).
  * Duplicate testing rows for one (fips, date) are reported; the later row wins.
"""

import argparse
import sys
import warnings
from pathlib import Path

import pandas as pd

from covidmap.ingest.cases_reader import load_cases_csv
from covidmap.ingest.geo import GeoTables
from covidmap.ingest.population_reader import load_population_csv
from covidmap.ingest.testing_reader import load_testing_json
from covidmap.pipeline import build_counties, build_states
from covidmap.utils.io import load_yaml, resolve_paths


def build_argparser() -> argparse.Namespace:
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default="configs/data.yaml")
    ap.add_argument(
        "--skip-counties", action="store_true", help="only build states + national"
    )
    return ap.parse_args()


def _report(caught, tag: str) -> None:
    for w in caught:
        print(f"[WARN] {tag}: {w.message}", file=sys.stderr)


def _summary(df: pd.DataFrame, what: str) -> None:
    regions = df[["state", "name"]].drop_duplicates()
    no_pop = df.loc[df["no_population"], ["state", "name"]].drop_duplicates()
    print(
        f"[build_series] {what}: {len(regions):,} regions, {len(df):,} rows, "
        f"{df['date'].min():%Y-%m-%d} → {df['date'].max():%Y-%m-%d}"
        + (f", {len(no_pop):,} without population" if len(no_pop) else "")
    )


def main() -> int:
    args = build_argparser()
    cfg = load_yaml(args.config)
    paths = resolve_paths(cfg)
    geo = GeoTables.from_config(cfg.get("geography"))
    on_malformed = cfg.get("on_malformed", "skip")
    processed = paths["processed"]

    # --- states + national ---
    print(f"[build_series] Cases file: {paths['cases_states'].name}")
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        cases = load_cases_csv(paths["cases_states"], geo, "states", on_malformed)
        pop = load_population_csv(paths["pop_states"], geo)
        testing = None
        if paths["testing_states"].exists():
            print(f"[build_series] Testing file: {paths['testing_states'].name}")
            testing = load_testing_json(paths["testing_states"], on_malformed)
        else:
            print(f"[WARN] no testing file at {paths['testing_states']}", file=sys.stderr)
        states = build_states(cases, pop, testing, national=cfg.get("national"))
    _report(caught, "states")
    _summary(states.series, "States")
    _summary(states.national, "National")

    out_states = processed / "states_series.parquet"
    out_nat = processed / "national_series.parquet"
    states.series.to_parquet(out_states, index=False)
    states.national.to_parquet(out_nat, index=False)
    states.series.head(200).to_csv(processed / "states_sample.csv", index=False)
    print(f"[build_series] Saved: {out_states} ({len(states.series):,} rows)")
    print(f"[build_series] Saved: {out_nat} ({len(states.national):,} rows)")

    # --- counties ---
    if args.skip_counties:
        return 0
    if not Path(paths["cases_counties"]).exists():
        print(f"[WARN] no county file at {paths['cases_counties']}", file=sys.stderr)
        return 0
    print(f"[build_series] Cases file: {paths['cases_counties'].name}")
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        cases_cty = load_cases_csv(paths["cases_counties"], geo, "counties", on_malformed)
        counties = build_counties(cases_cty, load_population_csv(paths["pop_counties"], geo))
    _report(caught, "counties")
    _summary(counties.series, "Counties")

    out_cty = processed / "counties_series.parquet"
    counties.series.to_parquet(out_cty, index=False)
    print(f"[build_series] Saved: {out_cty} ({len(counties.series):,} rows)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
