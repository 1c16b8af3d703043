"""County GDP transform layer.

Pure functions over immutable county records: growth-rate derivation,
display formatting, sorting, filtering and aggregation. Nothing here
mutates its input; every call returns a freshly built list or value.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.data import GDP_UNIT, CountyRecord, GDPFigures, load_counties, load_prefectures
from core.filters import FilterOptions, SortDirection, SortKey


logger = logging.getLogger(__name__)

UNKNOWN_PREFECTURE = "未知"

# (label, lower bound inclusive, upper bound exclusive), in percent
GROWTH_BUCKETS: Tuple[Tuple[str, float, float], ...] = (
    ("< 0%", -math.inf, 0.0),
    ("0–5%", 0.0, 5.0),
    ("5–10%", 5.0, 10.0),
    ("≥ 10%", 10.0, math.inf),
)


@dataclass(frozen=True)
class FormattedCounty(CountyRecord):
    growth_rate: float
    growth_rate_formatted: str
    region_rank: str
    gdp_unit: str


@dataclass(frozen=True)
class Statistics:
    total_gdp_2023: float
    total_gdp_2022: float
    overall_growth_rate: float
    avg_per_capita_gdp: float
    positive_growth_count: int
    negative_growth_count: int
    total_count: int
    is_empty: bool


def _growth(current: float, prior: float) -> float:
    try:
        rate = (current - prior) / prior * 100
    except ZeroDivisionError:
        return 0.0
    return rate if math.isfinite(rate) else 0.0


def calculate_growth_rate(gdp: GDPFigures) -> float:
    """Year-over-year growth in percent; 0.0 when the prior year is zero."""
    return _growth(gdp.year2023, gdp.year2022)


def format_county_data(county: CountyRecord, prefectures: Optional[Mapping[str, str]] = None) -> FormattedCounty:
    prefectures = load_prefectures() if prefectures is None else prefectures
    prefecture_name = prefectures.get(county.prefecture)
    if prefecture_name is None:
        logger.warning("County %s (%s) has unmapped prefecture %r", county.code, county.name, county.prefecture)
        prefecture_name = UNKNOWN_PREFECTURE

    growth_rate = calculate_growth_rate(county.gdp)
    return FormattedCounty(
        code=county.code,
        name=county.name,
        prefecture=county.prefecture,
        rank=county.rank,
        gdp=county.gdp,
        per_capita_gdp=county.per_capita_gdp,
        growth_rate=growth_rate,
        growth_rate_formatted=f"{growth_rate:.2f}%",
        region_rank=f"{prefecture_name}{county.rank}",
        gdp_unit=GDP_UNIT,
    )


def get_all_formatted_counties(
    records: Optional[Iterable[CountyRecord]] = None,
    prefectures: Optional[Mapping[str, str]] = None,
) -> List[FormattedCounty]:
    records = load_counties() if records is None else records
    prefectures = load_prefectures() if prefectures is None else prefectures
    return [format_county_data(c, prefectures) for c in records]


def get_all_prefectures(prefectures: Optional[Mapping[str, str]] = None) -> List[Dict[str, str]]:
    prefectures = load_prefectures() if prefectures is None else prefectures
    return [{"code": code, "name": name} for code, name in prefectures.items()]


SORT_FIELDS: Dict[str, Callable[[FormattedCounty], float]] = {
    "gdp2023": lambda c: c.gdp.year2023,
    "gdp2022": lambda c: c.gdp.year2022,
    "growthRate": lambda c: c.growth_rate,
    "perCapitaGDP": lambda c: c.per_capita_gdp,
}


def sort_counties(
    data: Sequence[FormattedCounty],
    sort_by: SortKey = "gdp2023",
    direction: SortDirection = "desc",
) -> List[FormattedCounty]:
    field = SORT_FIELDS.get(sort_by)
    if field is None:
        logger.warning("Unknown sort key %r, falling back to gdp2023", sort_by)
        field = SORT_FIELDS["gdp2023"]
    logger.debug("Sorting %d counties by %s %s", len(data), sort_by, direction)

    # Ties on the value always resolve by code ascending, whatever the direction.
    if direction == "asc":
        result = sorted(data, key=lambda c: (field(c), c.code))
    else:
        result = sorted(data, key=lambda c: (-field(c), c.code))

    duplicates = sorted(code for code, n in Counter(c.code for c in result).items() if n > 1)
    if duplicates:
        logger.error("Duplicate county codes after sort: %s", duplicates)
    logger.debug("Sorted codes: %s", [c.code for c in result])
    return result


def filter_counties(data: Sequence[FormattedCounty], options: Optional[FilterOptions] = None) -> List[FormattedCounty]:
    options = options or FilterOptions()
    if options.is_empty():
        return list(data)

    def keep(county: FormattedCounty) -> bool:
        if options.prefecture and county.prefecture != options.prefecture:
            return False
        if options.growth_rate_min is not None and county.growth_rate < options.growth_rate_min:
            return False
        if options.growth_rate_max is not None and county.growth_rate > options.growth_rate_max:
            return False
        if options.gdp_min is not None and county.gdp.year2023 < options.gdp_min:
            return False
        return True

    return [c for c in data if keep(c)]


def apply_view(
    data: Sequence[FormattedCounty],
    options: Optional[FilterOptions] = None,
    sort_by: SortKey = "gdp2023",
    direction: SortDirection = "desc",
) -> List[FormattedCounty]:
    return sort_counties(filter_counties(data, options), sort_by, direction)


def top_counties(data: Sequence[FormattedCounty], n: int, sort_by: SortKey = "gdp2023") -> List[FormattedCounty]:
    if n <= 0:
        return []
    return sort_counties(data, sort_by, "desc")[:n]


def get_statistics(data: Sequence[FormattedCounty]) -> Statistics:
    total_count = len(data)
    total_2023 = math.fsum(c.gdp.year2023 for c in data)
    total_2022 = math.fsum(c.gdp.year2022 for c in data)
    per_capita_sum = math.fsum(c.per_capita_gdp for c in data)
    return Statistics(
        total_gdp_2023=total_2023,
        total_gdp_2022=total_2022,
        overall_growth_rate=_growth(total_2023, total_2022),
        avg_per_capita_gdp=per_capita_sum / total_count if total_count else 0.0,
        positive_growth_count=sum(1 for c in data if c.growth_rate > 0),
        negative_growth_count=sum(1 for c in data if c.growth_rate < 0),
        total_count=total_count,
        is_empty=total_count == 0,
    )


def growth_distribution(
    data: Sequence[FormattedCounty],
    buckets: Sequence[Tuple[str, float, float]] = GROWTH_BUCKETS,
) -> List[Dict[str, object]]:
    counts = {label: 0 for label, _, _ in buckets}
    for county in data:
        for label, lower, upper in buckets:
            if lower <= county.growth_rate < upper:
                counts[label] += 1
                break
    return [{"band": label, "count": counts[label]} for label, _, _ in buckets]
