"""
Shared fixtures: synthetic NYPD CSV exports and monthly count frames.
"""
from typing import Dict, List

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from nypd_shootings.aggregate import MONTH_DTYPE, MONTH_LABELS

CSV_COLUMNS = [
    "INCIDENT_KEY",
    "OCCUR_DATE",
    "OCCUR_TIME",
    "BORO",
    "PRECINCT",
    "JURISDICTION_CODE",
    "LOCATION_DESC",
    "STATISTICAL_MURDER_FLAG",
    "PERP_AGE_GROUP",
    "PERP_SEX",
    "PERP_RACE",
    "VIC_AGE_GROUP",
    "VIC_SEX",
    "VIC_RACE",
    "X_COORD_CD",
    "Y_COORD_CD",
    "Latitude",
    "Longitude",
    "Lon_Lat",
]

DEFAULT_ROW = {
    "INCIDENT_KEY": "100",
    "OCCUR_DATE": "01/05/2020",
    "OCCUR_TIME": "23:15:00",
    "BORO": "BRONX",
    "PRECINCT": "44",
    "JURISDICTION_CODE": "0",
    "LOCATION_DESC": "(null)",
    "STATISTICAL_MURDER_FLAG": "false",
    "PERP_AGE_GROUP": "25-44",
    "PERP_SEX": "M",
    "PERP_RACE": "BLACK",
    "VIC_AGE_GROUP": "18-24",
    "VIC_SEX": "M",
    "VIC_RACE": "BLACK",
    "X_COORD_CD": "1,006,343",
    "Y_COORD_CD": "234,270",
    "Latitude": "40.8095",
    "Longitude": "-73.9229",
    "Lon_Lat": "POINT (-73.9229 40.8095)",
}


def _csv_text(rows: List[Dict[str, str]]) -> str:
    records = [{**DEFAULT_ROW, **row} for row in rows]
    return pd.DataFrame(records, columns=CSV_COLUMNS).to_csv(index=False)


@pytest.fixture
def csv_text():
    """Factory: list of per-row overrides -> CSV text with the full schema."""
    return _csv_text


@pytest.fixture
def csv_file(tmp_path):
    """Factory: list of per-row overrides -> path of a CSV file on disk."""

    def _write(rows: List[Dict[str, str]], name: str = "shootings.csv"):
        path = tmp_path / name
        path.write_text(_csv_text(rows), encoding="utf-8")
        return path

    return _write


def _monthly(counts: List[float], start: str = "2015-01-01") -> pd.DataFrame:
    months = pd.date_range(start, periods=len(counts), freq="MS")
    return pd.DataFrame(
        {
            "month_start": months,
            "month": pd.Categorical([MONTH_LABELS[m - 1] for m in months.month], dtype=MONTH_DTYPE),
            "year": months.year.astype(int),
            "incidents": counts,
        }
    )


@pytest.fixture
def monthly_frame():
    """Factory: counts -> contiguous monthly frame starting at ``start``."""
    return _monthly


def incident_rows(start: str, months: int, duplicate_every: int = 3) -> List[Dict[str, str]]:
    """Rows for ``months`` consecutive months, with some multi-participant incidents."""
    rows: List[Dict[str, str]] = []
    key = 1000
    for month_start in pd.date_range(start, periods=months, freq="MS"):
        for day in range(1, 3 + month_start.month % 4 + 1):
            key += 1
            date = month_start.replace(day=day * 2).strftime("%m/%d/%Y")
            rows.append({"INCIDENT_KEY": str(key), "OCCUR_DATE": date})
            if key % duplicate_every == 0:
                rows.append({"INCIDENT_KEY": str(key), "OCCUR_DATE": date, "VIC_SEX": "F"})
    return rows


@pytest.fixture
def incident_rows_factory():
    return incident_rows
