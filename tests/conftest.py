import pandas as pd
import pytest

from covidmap.ingest.geo import GeoTables


@pytest.fixture
def geo():
    return GeoTables.empty()


@pytest.fixture
def cases_raw():
    # Alpha starts a day before Beta
    return pd.DataFrame(
        {
            "date": [
                "2020-03-13",
                "2020-03-14",
                "2020-03-15",
                "2020-03-16",
                "2020-03-14",
                "2020-03-15",
                "2020-03-16",
            ],
            "state": ["Alpha"] * 4 + ["Beta"] * 3,
            "fips": ["01"] * 4 + ["06"] * 3,
            "cases": [10, 15, 15, 20, 1, 3, 6],
            "deaths": [0, 1, 1, 2, 0, 0, 1],
        }
    )


@pytest.fixture
def pop_raw():
    return pd.DataFrame({"fips": ["01", "06"], "pop": [100000, 200000]})


@pytest.fixture
def testing_raw():
    # "72" has testing rows but no case rows
    return pd.DataFrame(
        {
            "date": [20200315, 20200316, 20200315],
            "fips": ["06", "06", "72"],
            "positive": [100, 150, 5],
            "negative": [300, 500, 45],
            "pending": [None, 10, None],
            "total": [400, 660, 50],
            "positiveIncrease": [100, 50, 5],
            "negativeIncrease": [300, 200, 45],
            "totalTestResultsIncrease": [400, 260, 50],
        }
    )


def row(df: pd.DataFrame, name: str, date: str) -> pd.Series:
    hit = df[(df["name"] == name) & (df["date"] == pd.Timestamp(date))]
    assert len(hit) == 1
    return hit.iloc[0]
