from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
COUNTIES_PATH = DATA_DIR / "counties.csv"
PREFECTURES_PATH = DATA_DIR / "prefectures.csv"

GDP_UNIT = "亿元"

COUNTY_COLUMNS = {
    "code": "code",
    "name": "name",
    "prefecture": "prefecture",
    "rank": "rank",
    "gdp_2023": "gdp_2023",
    "gdp_2022": "gdp_2022",
    "per_capita_gdp": "per_capita_gdp",
    # camelCase headers from JSON-style exports
    "perCapitaGDP": "per_capita_gdp",
    "year2023": "gdp_2023",
    "year2022": "gdp_2022",
}
NUMERIC_COLUMNS = ["rank", "gdp_2023", "gdp_2022", "per_capita_gdp"]


@dataclass(frozen=True)
class GDPFigures:
    year2023: float
    year2022: float


@dataclass(frozen=True)
class CountyRecord:
    code: str
    name: str
    prefecture: str
    rank: int
    gdp: GDPFigures
    per_capita_gdp: float


def _read_csv(path: Path, str_cols: Iterable[str]) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Bundled data file not found: {path}")
    return pd.read_csv(path, dtype={c: str for c in str_cols}, encoding="utf-8")


def coerce_str_safe(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            series = df[col].astype("string").str.strip()
            series = series.replace({"nan": pd.NA, "None": pd.NA, "": pd.NA})
            df[col] = series
    return df


def drop_duplicate_columns(df: pd.DataFrame) -> pd.DataFrame:
    return df.loc[:, ~df.columns.duplicated()]


def numericize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


@lru_cache(maxsize=4)
def load_prefectures(path: Path = PREFECTURES_PATH) -> Mapping[str, str]:
    df = _read_csv(path, ["code", "name"])
    df = coerce_str_safe(df, ["code", "name"]).dropna(subset=["code"])
    df = df.drop_duplicates(subset=["code"], keep="first")
    mapping = {str(r["code"]): ("" if pd.isna(r["name"]) else str(r["name"])) for _, r in df.iterrows()}
    logger.info("Loaded %d prefectures from %s", len(mapping), path.name)
    return MappingProxyType(mapping)


def records_from_frame(df: pd.DataFrame) -> Tuple[CountyRecord, ...]:
    # canonical headers win over their camelCase aliases
    aliases = {k: v for k, v in COUNTY_COLUMNS.items() if k in df.columns and k != v and v not in df.columns}
    df = df.rename(columns=aliases)
    df = drop_duplicate_columns(df).copy()
    for col in COUNTY_COLUMNS.values():
        if col not in df.columns:
            df[col] = pd.NA
    df = coerce_str_safe(df, ["code", "name", "prefecture"])
    df = numericize(df, NUMERIC_COLUMNS)

    missing_code = int(df["code"].isna().sum())
    if missing_code:
        logger.warning("Dropping %d county rows without a code", missing_code)
        df = df.dropna(subset=["code"]).copy()

    duplicated = df["code"].duplicated(keep="first")
    if duplicated.any():
        logger.warning("Dropping duplicate county codes: %s", sorted(df.loc[duplicated, "code"].unique().tolist()))
        df = df[~duplicated].copy()

    df[NUMERIC_COLUMNS] = df[NUMERIC_COLUMNS].fillna(0)
    return tuple(
        CountyRecord(
            code=str(r["code"]),
            name="" if pd.isna(r["name"]) else str(r["name"]),
            prefecture="" if pd.isna(r["prefecture"]) else str(r["prefecture"]),
            rank=int(r["rank"]),
            gdp=GDPFigures(year2023=float(r["gdp_2023"]), year2022=float(r["gdp_2022"])),
            per_capita_gdp=float(r["per_capita_gdp"]),
        )
        for _, r in df.iterrows()
    )


@lru_cache(maxsize=4)
def load_counties(path: Path = COUNTIES_PATH) -> Tuple[CountyRecord, ...]:
    df = _read_csv(path, ["code", "prefecture"])
    records = records_from_frame(df)
    logger.info("Loaded %d counties from %s", len(records), path.name)
    return records


def counties_frame(data: Iterable[object]) -> pd.DataFrame:
    """Flatten county records (raw or formatted) into one row per county."""
    rows: List[Dict[str, object]] = []
    for county in data:
        row: Dict[str, object] = {
            "code": county.code,
            "name": county.name,
            "prefecture": county.prefecture,
            "rank": county.rank,
            "gdp_2023": county.gdp.year2023,
            "gdp_2022": county.gdp.year2022,
            "per_capita_gdp": county.per_capita_gdp,
        }
        for extra in ("growth_rate", "growth_rate_formatted", "region_rank", "gdp_unit"):
            if hasattr(county, extra):
                row[extra] = getattr(county, extra)
        rows.append(row)
    return pd.DataFrame(rows, columns=None if rows else list(dict.fromkeys(COUNTY_COLUMNS.values())))


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_gdp(value: object, decimals: int = 2) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"{round_half_up(value, decimals):,.{decimals}f} {GDP_UNIT}"


def format_percent(value: object, decimals: int = 2) -> str:
    """Format a value already in percentage units, e.g. 12.3456 -> '12.35%'."""
    if value is None or pd.isna(value):
        return "N/A"
    return f"{round_half_up(value, decimals):.{decimals}f}%"
