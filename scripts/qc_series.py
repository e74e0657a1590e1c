"""Quick QC for data/processed/*_series.parquet"""
import argparse
from pathlib import Path

import numpy as np
import pandas as pd

from covidmap.features.per_capita import per100k_key, value_fields

PROCESSED = Path("data/processed")
KEYS = ["state", "name"]


def check(df: pd.DataFrame) -> list[str]:
    issues = []

    for col in ["date", "cases", "deaths"]:
        n = df[col].isna().sum()
        if n:
            issues.append(f"{col} has {n} NA")

    dups = df.duplicated(KEYS + ["date"]).sum()
    if dups:
        issues.append(f"{dups} duplicate rows on (region, date)")

    mono = df.groupby(KEYS)["date"].apply(lambda s: s.is_monotonic_increasing)
    if not mono.all():
        issues.append(f"non-chronological regions: {mono[~mono].index.tolist()[:10]}")

    # increments against cumulative
    for f in ("cases", "deaths"):
        prev = df.groupby(KEYS)[f].shift(1).fillna(0)
        bad = (df[f"new_{f}"] != df[f] - prev).sum()
        if bad:
            issues.append(f"new_{f} disagrees with {f} deltas on {bad} rows")
        neg = (df[f"new_{f}"] < 0).sum()
        if neg:
            print(f"[qc] note: {neg} negative new_{f} (source revisions)")

    # per-100k against population
    with_testing = "tests" in df.columns
    factor = df["pop"] / 1e5
    for f in value_fields(with_testing):
        key = per100k_key(f)
        if key not in df.columns:
            continue
        ok = np.isclose(df[key], df[f] / factor, equal_nan=True)
        if not ok.all():
            issues.append(f"{key} off on {(~ok).sum()} rows")

    return issues


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--level", choices=["states", "national", "counties"], default="states")
    args = ap.parse_args()

    df = pd.read_parquet(PROCESSED / f"{args.level}_series.parquet")
    print(f"[qc] rows={len(df):,} regions={len(df[KEYS].drop_duplicates())} "
          f"range={df['date'].min():%Y-%m-%d}→{df['date'].max():%Y-%m-%d}")

    no_pop = df.loc[df["no_population"], "name"].unique()
    if len(no_pop):
        print(f"[qc] regions without population: {sorted(no_pop)[:20]}")

    issues = check(df)
    print("[qc] OK" if not issues else "[qc] Issues:")
    for m in issues:
        print(" -", m)


if __name__ == "__main__":
    main()
