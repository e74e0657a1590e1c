"""Display labels for fields and time windows."""
from covidmap.features.per_capita import per100k_key

DATA_POINT_LABELS = {
    "cases": "Total Cases",
    "deaths": "Total Deaths",
    "tests": "Total Tests",
    "positive": "Total Positive",
    "pending": "Total Pending",
    "negative": "Total Negative",
    "new_cases": "New Cases",
    "new_deaths": "New Deaths",
    "new_tests": "New Tests",
    "new_positive": "New Positive",
    "new_negative": "New Negative",
    "pop": "Est. Population",
}
DATA_POINT_LABELS.update({per100k_key(k): v for k, v in list(DATA_POINT_LABELS.items())})

# on the map, daily "new" fields are window averages
MAP_DATA_POINT_LABELS = {
    k: (f"Avg {v.replace('New', 'Daily')}" if k.startswith("new_") else v)
    for k, v in DATA_POINT_LABELS.items()
}

TIME_LABELS = {
    "7d": "Last 7 days",
    "14d": "Last 14 days",
    "1mo": "Last 30 days",
    "all": "All-time",
}


def map_title(field: str, time: str) -> str:
    return f"Map of {MAP_DATA_POINT_LABELS[field]}, {TIME_LABELS[time]}"
