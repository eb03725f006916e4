from __future__ import annotations

import logging
from typing import List

import pandas as pd

from .config import AggregationConfig

log = logging.getLogger(__name__)

INCIDENT_COLUMNS = ["incident_key", "occur_date"]
MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
MONTH_DTYPE = pd.CategoricalDtype(MONTH_LABELS, ordered=True)
MONTHLY_COLUMNS = ["month_start", "month", "year", "incidents"]


def project_incidents(df: pd.DataFrame) -> pd.DataFrame:
    return df.loc[:, INCIDENT_COLUMNS].copy()


def dedupe_incidents(df: pd.DataFrame) -> pd.DataFrame:
    deduped = df.drop_duplicates().reset_index(drop=True)
    dropped = len(df) - len(deduped)
    if dropped:
        log.info("Collapsed %s duplicate incident rows", dropped)
    return deduped


def sort_incidents(df: pd.DataFrame) -> pd.DataFrame:
    return df.sort_values(INCIDENT_COLUMNS[::-1], kind="mergesort").reset_index(drop=True)


def add_calendar_fields(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    dt = df["occur_date"]
    df["month"] = pd.Categorical(dt.dt.month.map(lambda m: MONTH_LABELS[m - 1]), dtype=MONTH_DTYPE)
    df["month_start"] = dt.dt.to_period("M").dt.to_timestamp()
    df["year"] = dt.dt.year.astype(int)
    return df


def clean_incidents(raw: pd.DataFrame) -> pd.DataFrame:
    """Reduce raw participant rows to one row per (incident_key, occur_date)."""
    incidents = sort_incidents(dedupe_incidents(project_incidents(raw)))
    incidents = add_calendar_fields(incidents)
    log.info(
        "Cleaned %s raw rows into %s incidents (%s distinct keys)",
        len(raw),
        len(incidents),
        incidents["incident_key"].nunique(),
    )
    return incidents


def _empty_monthly() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "month_start": pd.Series(dtype="datetime64[ns]"),
            "month": pd.Series(dtype=MONTH_DTYPE),
            "year": pd.Series(dtype=int),
            "incidents": pd.Series(dtype=int),
        }
    )


def count_monthly(incidents: pd.DataFrame, config: AggregationConfig | None = None) -> pd.DataFrame:
    config = config or AggregationConfig()
    if incidents.empty:
        return _empty_monthly()
    monthly = (
        incidents.groupby(["month_start", "month", "year"], observed=True)
        .size()
        .reset_index(name="incidents")
        .sort_values("month_start")
        .reset_index(drop=True)
    )
    monthly["incidents"] = monthly["incidents"].astype(int)
    gaps = missing_months(monthly)
    if config.zero_fill:
        monthly = zero_fill_months(monthly)
        if gaps:
            log.info("Zero-filled %s empty month(s)", len(gaps))
    elif gaps:
        log.warning(
            "%s month(s) have no incidents and are absent from the series: %s",
            len(gaps),
            ", ".join(f"{month:%Y-%m}" for month in gaps),
        )
    return monthly[MONTHLY_COLUMNS]


def calendar_range(monthly: pd.DataFrame) -> pd.DatetimeIndex:
    if monthly.empty:
        return pd.DatetimeIndex([])
    return pd.date_range(monthly["month_start"].min(), monthly["month_start"].max(), freq="MS")


def missing_months(monthly: pd.DataFrame) -> List[pd.Timestamp]:
    observed = pd.DatetimeIndex(monthly["month_start"])
    return [month for month in calendar_range(monthly) if month not in observed]


def zero_fill_months(monthly: pd.DataFrame) -> pd.DataFrame:
    full = calendar_range(monthly)
    filled = (
        monthly.set_index("month_start")["incidents"]
        .reindex(full, fill_value=0)
        .rename_axis("month_start")
        .reset_index()
    )
    filled["month"] = pd.Categorical(
        filled["month_start"].dt.month.map(lambda m: MONTH_LABELS[m - 1]), dtype=MONTH_DTYPE
    )
    filled["year"] = filled["month_start"].dt.year.astype(int)
    filled["incidents"] = filled["incidents"].astype(int)
    return filled[MONTHLY_COLUMNS]


def monthly_profile(monthly: pd.DataFrame) -> pd.DataFrame:
    profile = (
        monthly.groupby("month", observed=False)["incidents"]
        .agg(["mean", "min", "max"])
        .reset_index()
        .rename(columns={"mean": "mean_incidents", "min": "min_incidents", "max": "max_incidents"})
    )
    return profile


def yearly_totals(monthly: pd.DataFrame) -> pd.DataFrame:
    return (
        monthly.groupby("year")["incidents"]
        .sum()
        .reset_index()
        .sort_values("year")
        .reset_index(drop=True)
    )
