"""Render options passed explicitly into window, map and scale computations."""
import re
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

from covidmap.features.per_capita import per100k_key, value_fields
from covidmap.labels import TIME_LABELS

# attribute -> short key used in saved links / query strings
QUERY_KEYS = {
    "state": "state",
    "field": "field",
    "time": "time",
    "use_log": "log",
    "per100k": "per100k",
    "consistent_y": "consistentY",
}

TESTING_CHART_FIELDS = ("tests", "new_tests")
# base fields only; per100k selects the `_p100k` variant
CHART_FIELDS = value_fields(with_testing=True)


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


@dataclass(frozen=True)
class FilterOptions:
    state: str = "all"
    field: str = "new_cases"
    time: str = "14d"
    use_log: bool = False
    per100k: bool = False
    consistent_y: bool = True

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "FilterOptions":
        """
        Build options from loosely typed values (query-string style).

        Booleans arrive as "1"/"0", camelCase field names are accepted,
        unknown fields or time windows fall back to the defaults. Log scale
        is turned off for testing fields.
        """
        defaults = cls()
        kwargs = {}
        for f in fields(cls):
            v = values.get(QUERY_KEYS[f.name], values.get(f.name))
            if v is None:
                continue
            default = getattr(defaults, f.name)
            if isinstance(default, bool):
                v = v == "1" if isinstance(v, str) else bool(v)
            elif f.name == "state":
                v = str(v).replace("+", " ")
            elif f.name == "field":
                v = _snake(str(v))
                if v not in CHART_FIELDS:
                    continue
            elif f.name == "time" and v not in TIME_LABELS:
                continue
            kwargs[f.name] = v

        opts = cls(**kwargs)
        if opts.is_testing_field and opts.use_log:
            opts = replace(opts, use_log=False)
        return opts

    @property
    def is_testing_field(self) -> bool:
        return self.field in TESTING_CHART_FIELDS

    @property
    def value_field(self) -> str:
        """Column to chart: the per-100k variant when per100k is on."""
        return per100k_key(self.field) if self.per100k else self.field

    def to_mapping(self) -> dict:
        out = {}
        for attr, key in QUERY_KEYS.items():
            v = getattr(self, attr)
            out[key] = ("1" if v else "0") if isinstance(v, bool) else v
        return out
