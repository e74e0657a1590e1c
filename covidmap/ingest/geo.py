"""Geographic id tables (label -> fips exceptions, fips remapping, population
overrides) and fips normalization shared by the readers."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import pandas as pd

KANSAS_CITY_FIPS = "29999"

# https://github.com/nytimes/covid-19-data#geographic-exceptions
DEFAULT_LABEL_TO_FIPS = {
    "New York City": "36061",
    "Kansas City": KANSAS_CITY_FIPS,
}

DEFAULT_POPULATION_OVERRIDES = {
    # Kansas City, MO is not a county; it overlaps the four below, whose
    # populations here exclude the city portion.
    KANSAS_CITY_FIPS: 505604,
    "29037": 85,  # Cass County, MO
    "29095": 313870,  # Jackson County, MO
    "29047": 137446,  # Clay County, MO
    "29165": 54202,  # Platte County, MO
    # New York City, sum of the five boroughs
    "36061": 8336817,
}

# NYC boroughs collapse onto New York County
DEFAULT_FIPS_REMAPPING = {
    "36005": "36061",  # Bronx
    "36047": "36061",  # Kings
    "36081": "36061",  # Queens
    "36085": "36061",  # Richmond
}


@dataclass(frozen=True)
class GeoTables:
    label_to_fips: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_LABEL_TO_FIPS)
    )
    fips_remapping: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_FIPS_REMAPPING)
    )
    population_overrides: Mapping[str, int] = field(
        default_factory=lambda: dict(DEFAULT_POPULATION_OVERRIDES)
    )

    @classmethod
    def empty(cls) -> "GeoTables":
        return cls(label_to_fips={}, fips_remapping={}, population_overrides={})

    @classmethod
    def from_config(cls, cfg: Optional[Dict[str, Any]]) -> "GeoTables":
        """Build tables from the ``geography`` config section.

        Sections missing from the config keep the built-in defaults; a section
        given as an empty mapping disables it.
        """
        if not cfg:
            return cls()
        base = cls()
        label_to_fips = cfg.get("label_to_fips", base.label_to_fips) or {}
        remapping = cfg.get("fips_remapping", base.fips_remapping) or {}
        overrides = cfg.get("population_overrides", base.population_overrides) or {}
        return cls(
            label_to_fips={str(k): str(v) for k, v in label_to_fips.items()},
            fips_remapping={str(k): str(v) for k, v in remapping.items()},
            population_overrides={str(k): int(v) for k, v in overrides.items()},
        )

    def canonical(self, fips: str) -> str:
        return self.fips_remapping.get(fips, fips)


def _is_true(mask: pd.Series) -> pd.Series:
    return mask.fillna(False).astype(bool)


def normalize_fips(s: pd.Series) -> pd.Series:
    """Clean a column of region ids into zero-padded strings.

    Numeric ids read as floats lose their ``.0``; 1-digit state and 4-digit
    county numerals get their leading zero back. Blank ids become <NA>.
    """
    out = s.astype("string").str.strip()
    out = out.str.replace(r"\.0$", "", regex=True)
    out = out.mask(_is_true(out == ""))
    digits = _is_true(out.str.fullmatch(r"\d+"))
    short = digits & _is_true(out.str.len().isin([1, 4]))
    return out.where(~short, "0" + out)


def resolve_fips(
    fips: pd.Series, labels: Optional[pd.Series], geo: GeoTables
) -> pd.Series:
    """Fill missing ids from the label exception table, then remap aliases.

    Ids found in neither table pass through unchanged.
    """
    out = normalize_fips(fips)
    if labels is not None and geo.label_to_fips:
        from_label = labels.map(dict(geo.label_to_fips)).astype("string")
        out = out.fillna(from_label)
    if geo.fips_remapping:
        out = out.replace(dict(geo.fips_remapping))
    return out
