import logging

import pandas as pd
import pytest

from core.data import (
    CountyRecord,
    GDPFigures,
    counties_frame,
    format_gdp,
    format_percent,
    load_counties,
    load_prefectures,
    records_from_frame,
    round_half_up,
)
from core.gdp import get_all_formatted_counties


HEADER = "code,name,prefecture,rank,gdp_2023,gdp_2022,per_capita_gdp\n"


@pytest.mark.unit
class TestBundledDataset:
    def test_codes_are_unique(self):
        counties = load_counties()
        assert counties
        codes = [c.code for c in counties]
        assert len(codes) == len(set(codes))

    def test_every_prefecture_is_mapped(self):
        prefectures = load_prefectures()
        assert all(c.prefecture in prefectures for c in load_counties())

    def test_codes_keep_leading_digits_as_strings(self):
        county = load_counties()[0]
        assert isinstance(county.code, str)
        assert isinstance(county.prefecture, str)
        assert isinstance(county.gdp, GDPFigures)

    def test_format_all_bundled_counties(self):
        formatted = get_all_formatted_counties()
        assert len(formatted) == len(load_counties())
        assert all(not c.region_rank.startswith("未知") for c in formatted)


@pytest.mark.unit
class TestLoaders:
    def test_load_counties_from_file(self, tmp_path):
        path = tmp_path / "counties.csv"
        path.write_text(HEADER + "001,甲县,0100,1,10.5,10,5000\n002,乙县,0100,2,8,,\n", encoding="utf-8")
        counties = load_counties(path)
        assert counties[0] == CountyRecord(
            code="001",
            name="甲县",
            prefecture="0100",
            rank=1,
            gdp=GDPFigures(year2023=10.5, year2022=10.0),
            per_capita_gdp=5000.0,
        )
        assert counties[1].gdp.year2022 == 0.0
        assert counties[1].per_capita_gdp == 0.0

    def test_duplicate_and_blank_codes_are_dropped(self, tmp_path, caplog):
        path = tmp_path / "counties.csv"
        path.write_text(HEADER + "001,甲县,0100,1,10,9,1\n001,重复,0100,1,99,9,1\n,无码,0100,3,1,1,1\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="core.data"):
            counties = load_counties(path)
        assert [(c.code, c.name) for c in counties] == [("001", "甲县")]
        assert "duplicate" in caplog.text
        assert "without a code" in caplog.text

    def test_load_prefectures_from_file(self, tmp_path):
        path = tmp_path / "prefectures.csv"
        path.write_text("code,name\n0100,甲市\n0200,乙市\n", encoding="utf-8")
        assert dict(load_prefectures(path)) == {"0100": "甲市", "0200": "乙市"}

    def test_cached_prefectures_are_read_only(self):
        prefectures = load_prefectures()
        with pytest.raises(TypeError):
            del prefectures["320500"]
        with pytest.raises(TypeError):
            prefectures["320500"] = "x"
        assert load_prefectures()["320500"] == "苏州市"
        assert all(not c.region_rank.startswith("未知") for c in get_all_formatted_counties())

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_counties(tmp_path / "missing.csv")

    def test_records_from_camel_case_frame(self):
        df = pd.DataFrame(
            [{"code": "9", "name": "丙县", "prefecture": "0100", "rank": 1, "year2023": 3, "year2022": 2, "perCapitaGDP": 7}]
        )
        (record,) = records_from_frame(df)
        assert record.gdp == GDPFigures(3.0, 2.0)
        assert record.per_capita_gdp == 7.0

    def test_records_with_both_header_spellings(self):
        df = pd.DataFrame(
            [
                {
                    "code": "9",
                    "name": "丙县",
                    "prefecture": "0100",
                    "rank": 1,
                    "year2023": 99,
                    "gdp_2023": 3,
                    "gdp_2022": 2,
                    "year2022": 98,
                    "per_capita_gdp": 7,
                }
            ]
        )
        (record,) = records_from_frame(df)
        assert record.gdp == GDPFigures(3.0, 2.0)
        assert record.per_capita_gdp == 7.0


@pytest.mark.unit
class TestFrameAndFormatting:
    def test_counties_frame(self, pair):
        df = counties_frame(pair)
        assert df["code"].tolist() == ["A", "B"]
        assert df["gdp_2023"].tolist() == [100, 50]
        assert df["growth_rate_formatted"].tolist() == ["25.00%", "0.00%"]
        assert df["region_rank"].tolist() == ["苏州市1", "无锡市1"]

    def test_empty_frame_has_columns(self):
        df = counties_frame([])
        assert df.empty
        assert "gdp_2023" in df.columns

    def test_formatters(self):
        assert format_gdp(1234.567) == "1,234.57 亿元"
        assert format_gdp(None) == "N/A"
        assert format_percent(15.3846) == "15.38%"
        assert format_percent(2.675) == "2.68%"
        assert format_gdp(0.125) == "0.13 亿元"
        assert round_half_up(2.675, 2) == 2.68
        assert round_half_up(None) is None
