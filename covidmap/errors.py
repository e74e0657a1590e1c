"""Errors and warning categories raised while ingesting raw datasets.

Only the ingestion readers raise these. Window filtering and map
summaries operate on already-normalized series and never raise them.
"""


class MalformedRowError(ValueError):
    """A raw row is missing a required field or carries an unparseable date."""


class DatasetUnusableError(ValueError):
    """No row of a raw dataset survived validation."""


class MalformedRowWarning(UserWarning):
    """Malformed rows were dropped from a raw dataset."""


class DuplicateKeyWarning(UserWarning):
    """Two rows of a keyed dataset share the same (fips, date) key."""
