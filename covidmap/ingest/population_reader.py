"""Resolve region populations: fips -> population, honoring fips remapping and
population overrides."""

from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from covidmap.ingest.geo import GeoTables, normalize_fips

POP_COLUMNS = ("pop", "population")


def resolve_populations(raw: pd.DataFrame, geo: Optional[GeoTables] = None) -> pd.Series:
    """
    Returns a float Series named ``pop`` indexed by canonical fips.

    Alias ids are redirected to their canonical id before lookup, and an
    override for the canonical id always beats the file's value. Rows whose
    population does not parse stay in the table as NaN ("no population
    data", which is not zero).
    """
    geo = geo if geo is not None else GeoTables()
    pop_col = next((c for c in POP_COLUMNS if c in raw.columns), None)
    if "fips" not in raw.columns or pop_col is None:
        raise ValueError(
            f"Expected 'fips' and one of {POP_COLUMNS} in population data; "
            f"got {raw.columns.tolist()}"
        )

    fips = normalize_fips(raw["fips"])
    if geo.fips_remapping:
        fips = fips.replace(dict(geo.fips_remapping))
    values = np.trunc(pd.to_numeric(raw[pop_col], errors="coerce")).astype(float)

    table = pd.Series(values.to_numpy(), index=pd.Index(fips, name="fips"), name="pop")
    table = table[table.index.notna()]
    # several aliases can land on one canonical id; the last row wins
    table = table[~table.index.duplicated(keep="last")]

    overrides = pd.Series(
        dict(geo.population_overrides), dtype=float, name="pop"
    ).rename_axis("fips")
    table = pd.concat([table[~table.index.isin(overrides.index)], overrides])
    table.index = table.index.astype("string")
    return table.sort_index().rename("pop")


def load_population_csv(csv_path: str | Path, geo: Optional[GeoTables] = None) -> pd.Series:
    raw = pd.read_csv(Path(csv_path), dtype={"fips": "string"})
    return resolve_populations(raw, geo=geo)
