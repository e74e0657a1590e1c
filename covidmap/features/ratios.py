"""Testing ratio fields (share of tests that came back positive, etc.)."""
import pandas as pd

# ratio column -> (numerator, denominator)
RATIOS = {
    "positive_pct": ("positive", "tests"),
    "negative_pct": ("negative", "tests"),
    "pending_pct": ("pending", "tests"),
    "new_positive_pct": ("new_positive", "new_tests"),
    "new_negative_pct": ("new_negative", "new_tests"),
}
RATIO_FIELDS = tuple(RATIOS)


def safe_ratio(num: pd.Series, den: pd.Series) -> pd.Series:
    """num / den, NaN where the denominator is zero or missing."""
    den = den.astype(float)
    return num.astype(float) / den.where(den != 0)


def add_testing_ratios(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    for key, (num, den) in RATIOS.items():
        if num in out.columns and den in out.columns:
            out[key] = safe_ratio(out[num], out[den])
    return out
