from typing import Dict, List

import pytest

from core.data import CountyRecord, GDPFigures
from core.gdp import FormattedCounty, get_all_formatted_counties


def make_county(code: str, gdp_2023: float, gdp_2022: float, *, prefecture: str = "320500", rank: int = 1, per_capita_gdp: float = 100000.0, name: str = "") -> CountyRecord:
    return CountyRecord(
        code=code,
        name=name or f"县{code}",
        prefecture=prefecture,
        rank=rank,
        gdp=GDPFigures(year2023=gdp_2023, year2022=gdp_2022),
        per_capita_gdp=per_capita_gdp,
    )


@pytest.fixture
def prefectures() -> Dict[str, str]:
    return {"320500": "苏州市", "320200": "无锡市", "321100": "镇江市"}


@pytest.fixture
def pair(prefectures) -> List[FormattedCounty]:
    """County A grows 25%, county B is flat."""
    records = [
        make_county("A", 100, 80, prefecture="320500", rank=1, per_capita_gdp=200000),
        make_county("B", 50, 50, prefecture="320200", rank=1, per_capita_gdp=100000),
    ]
    return get_all_formatted_counties(records, prefectures)


@pytest.fixture
def sample(prefectures) -> List[FormattedCounty]:
    records = [
        make_county("320583", 5140.6, 5006.7, prefecture="320500", rank=1, per_capita_gdp=245286),
        make_county("320281", 4948.9, 4754.2, prefecture="320200", rank=1, per_capita_gdp=276812),
        make_county("320582", 3512.0, 3302.3, prefecture="320500", rank=2, per_capita_gdp=239108),
        make_county("321181", 1393.5, 1437.6, prefecture="321100", rank=1, per_capita_gdp=141872),
        make_county("321183", 810.2, 790.5, prefecture="321100", rank=2, per_capita_gdp=125634),
        make_county("321182", 600.1, 620.4, prefecture="321100", rank=3, per_capita_gdp=175029),
        make_county("320282", 1200.0, 1200.0, prefecture="320200", rank=2, per_capita_gdp=96154),
        # same 2023 GDP as 320282 to exercise the code tie-break
        make_county("320281X", 1200.0, 1100.0, prefecture="320200", rank=3, per_capita_gdp=96154),
    ]
    return get_all_formatted_counties(records, prefectures)
