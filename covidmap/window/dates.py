"""Trailing date windows ending at the latest date with data."""
from typing import Optional

import pandas as pd

TIME_DAYS = {"7d": 7, "14d": 14, "1mo": 30}
TIME_KEYS = tuple(TIME_DAYS) + ("all",)


def days_to_show(time: str, last_date, first_date=None) -> int:
    if time in TIME_DAYS:
        return TIME_DAYS[time]
    if time == "all":
        if first_date is None:
            raise ValueError("time='all' needs the dataset's first recorded date")
        span = pd.Timestamp(last_date).normalize() - pd.Timestamp(first_date).normalize()
        return max(span.days + 1, 1)
    raise ValueError(f"time must be one of {TIME_KEYS}; got {time!r}")


def dates_to_show(last_date, time: str = "14d", first_date: Optional[object] = None) -> pd.DatetimeIndex:
    """Consecutive calendar days, oldest first, ending at ``last_date``."""
    last = pd.Timestamp(last_date).normalize()
    n = days_to_show(time, last, first_date)
    return pd.date_range(end=last, periods=n, freq="D")
