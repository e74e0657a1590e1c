"""Numeric y-axis domains for the bar charts."""
from typing import Optional, Tuple

from covidmap.filters import FilterOptions
from covidmap.window.filter import Extent, WindowResult, region_extent


def y_domain(extent: Optional[Extent], options: FilterOptions) -> Tuple[float, float]:
    """
    [0, max] with a floor on the max (10, or 0.1 per 100k) so flat series
    still get a usable axis. On a log scale the lower bound steps down by
    powers of ten until it sits below the smallest observed value.
    """
    lo, hi = extent if extent is not None else (None, None)
    floor = 0.1 if options.per100k else 10
    top = max(hi if hi is not None else 0, floor)
    if not options.use_log:
        return (0.0, float(top))

    smallest = max(lo, 0) if lo is not None else 0
    smallest = smallest or (0.01 if options.per100k else 1)
    bottom = 1.0
    while bottom >= smallest:
        bottom /= 10
    return (bottom, float(top))


def chart_y_domain(
    result: WindowResult, options: FilterOptions, region: Optional[Tuple[str, ...]] = None
) -> Tuple[float, float]:
    """Shared domain for every chart, or the region's own when consistent_y is off."""
    field = options.value_field
    if options.consistent_y or region is None:
        extent = result.extents.get(field, (None, None))
    else:
        extent = region_extent(result.frame, region, field)
    return y_domain(extent, options)
