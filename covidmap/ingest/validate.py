"""Row-level validation shared by the raw dataset readers."""

import warnings

import pandas as pd

from covidmap.errors import DatasetUnusableError, MalformedRowError, MalformedRowWarning

ON_MALFORMED = ("skip", "raise")


def drop_malformed(
    df: pd.DataFrame, bad: pd.Series, dataset: str, on_malformed: str = "skip"
) -> pd.DataFrame:
    """Drop rows flagged in ``bad``.

    on_malformed="skip" drops them with a MalformedRowWarning,
    on_malformed="raise" fails on the first one. Either way a dataset whose
    rows are all malformed (or that has no rows) is unusable.
    """
    if on_malformed not in ON_MALFORMED:
        raise ValueError(f"on_malformed must be one of {ON_MALFORMED}; got {on_malformed!r}")

    bad = bad.fillna(True).astype(bool)
    n_bad = int(bad.sum())
    if n_bad and on_malformed == "raise":
        first = df.index[bad.to_numpy()][0]
        raise MalformedRowError(
            f"{dataset}: {n_bad} malformed row(s), first at index {first}"
        )
    if len(df) == 0 or n_bad == len(df):
        raise DatasetUnusableError(
            f"{dataset}: no usable rows ({n_bad} malformed of {len(df)})"
        )
    if n_bad:
        warnings.warn(
            f"{dataset}: dropped {n_bad} malformed row(s) of {len(df)}",
            MalformedRowWarning,
            stacklevel=3,
        )
    return df.loc[~bad.to_numpy()].copy()
