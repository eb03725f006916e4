"""
Tests for incident dedupe and monthly counting.
"""
import logging

import pandas as pd

from nypd_shootings.aggregate import (
    add_calendar_fields,
    clean_incidents,
    count_monthly,
    dedupe_incidents,
    missing_months,
    monthly_profile,
    project_incidents,
    yearly_totals,
)
from nypd_shootings.config import AggregationConfig
from nypd_shootings.ingest import parse_incidents, read_raw_frame


def _raw(csv_text, rows):
    return parse_incidents(read_raw_frame(csv_text(rows)))


def test_participant_rows_collapse_to_one_incident(csv_text):
    """Three rows for incident 100 on the same date become one incident."""
    raw = _raw(
        csv_text,
        [
            {"INCIDENT_KEY": "100", "OCCUR_DATE": "01/05/2020", "VIC_SEX": "M"},
            {"INCIDENT_KEY": "100", "OCCUR_DATE": "01/05/2020", "VIC_SEX": "F", "PERP_AGE_GROUP": "<18"},
            {"INCIDENT_KEY": "100", "OCCUR_DATE": "01/05/2020", "VIC_RACE": "WHITE"},
        ],
    )
    incidents = clean_incidents(raw)

    assert len(incidents) == 1
    assert incidents.loc[0, "incident_key"] == 100
    assert incidents.loc[0, "occur_date"] == pd.Timestamp("2020-01-05")


def test_dedupe_is_idempotent(csv_text, incident_rows_factory):
    raw = _raw(csv_text, incident_rows_factory("2020-01-01", 6))
    once = dedupe_incidents(project_incidents(raw))
    twice = dedupe_incidents(once)
    pd.testing.assert_frame_equal(once, twice)


def test_dedupe_keeps_one_pair_per_reported_date(csv_text):
    """An id reported on two dates keeps one pair per date, never more."""
    raw = _raw(
        csv_text,
        [
            {"INCIDENT_KEY": "7", "OCCUR_DATE": "03/01/2019"},
            {"INCIDENT_KEY": "7", "OCCUR_DATE": "03/01/2019"},
            {"INCIDENT_KEY": "7", "OCCUR_DATE": "03/02/2019"},
            {"INCIDENT_KEY": "7", "OCCUR_DATE": "03/02/2019"},
        ],
    )
    incidents = clean_incidents(raw)
    assert len(incidents) == 2
    assert incidents["occur_date"].is_monotonic_increasing
    assert not incidents.duplicated(subset=["incident_key", "occur_date"]).any()


def test_monthly_counts_sum_to_incidents(csv_text, incident_rows_factory):
    raw = _raw(csv_text, incident_rows_factory("2019-06-01", 14))
    incidents = clean_incidents(raw)
    monthly = count_monthly(incidents)

    assert monthly["incidents"].sum() == len(incidents)
    assert len(incidents) < len(raw)
    assert monthly["month_start"].is_monotonic_increasing
    assert not monthly["month_start"].duplicated().any()
    assert len(monthly) == 14


def test_calendar_fields():
    df = pd.DataFrame(
        {"incident_key": [1, 2], "occur_date": pd.to_datetime(["2015-03-31", "2016-12-01"])}
    )
    out = add_calendar_fields(df)
    assert out["month"].astype(str).tolist() == ["Mar", "Dec"]
    assert out["month_start"].tolist() == [pd.Timestamp("2015-03-01"), pd.Timestamp("2016-12-01")]
    assert out["year"].tolist() == [2015, 2016]
    assert "month" not in df.columns


def test_empty_month_is_absent(csv_text):
    """A month without incidents is left out rather than reported as zero."""
    raw = _raw(
        csv_text,
        [
            {"INCIDENT_KEY": "1", "OCCUR_DATE": "01/10/2015"},
            {"INCIDENT_KEY": "2", "OCCUR_DATE": "02/10/2015"},
            {"INCIDENT_KEY": "3", "OCCUR_DATE": "04/10/2015"},
            {"INCIDENT_KEY": "4", "OCCUR_DATE": "04/11/2015"},
        ],
    )
    monthly = count_monthly(clean_incidents(raw))

    assert monthly["month"].astype(str).tolist() == ["Jan", "Feb", "Apr"]
    assert monthly["incidents"].tolist() == [1, 1, 2]
    assert missing_months(monthly) == [pd.Timestamp("2015-03-01")]


def test_zero_fill_inserts_empty_months(csv_text):
    raw = _raw(
        csv_text,
        [
            {"INCIDENT_KEY": "1", "OCCUR_DATE": "01/10/2015"},
            {"INCIDENT_KEY": "3", "OCCUR_DATE": "04/10/2015"},
        ],
    )
    monthly = count_monthly(clean_incidents(raw), AggregationConfig(zero_fill=True))

    assert monthly["month"].astype(str).tolist() == ["Jan", "Feb", "Mar", "Apr"]
    assert monthly["incidents"].tolist() == [1, 0, 0, 1]
    assert monthly["year"].tolist() == [2015] * 4
    assert missing_months(monthly) == []


def test_count_monthly_on_empty_input():
    empty = add_calendar_fields(
        pd.DataFrame({"incident_key": pd.Series(dtype="Int64"), "occur_date": pd.Series(dtype="datetime64[ns]")})
    )
    monthly = count_monthly(empty)
    assert monthly.empty
    assert list(monthly.columns) == ["month_start", "month", "year", "incidents"]


def test_profile_and_yearly_totals(monthly_frame):
    monthly = monthly_frame([10, 20] + [5] * 10 + [30, 40] + [5] * 10)

    profile = monthly_profile(monthly).set_index("month")
    assert profile.loc["Jan", "mean_incidents"] == 20
    assert profile.loc["Feb", "max_incidents"] == 40
    assert profile.loc["Feb", "min_incidents"] == 20

    totals = yearly_totals(monthly)
    assert totals["year"].tolist() == [2015, 2016]
    assert totals["incidents"].tolist() == [80, 120]


def test_collapsed_duplicates_are_logged_at_info(csv_text, caplog):
    raw = _raw(csv_text, [{"INCIDENT_KEY": "5"}, {"INCIDENT_KEY": "5", "VIC_SEX": "F"}])
    with caplog.at_level(logging.INFO, logger="nypd_shootings.aggregate"):
        dedupe_incidents(project_incidents(raw))

    records = [r for r in caplog.records if "duplicate" in r.getMessage()]
    assert [r.levelno for r in records] == [logging.INFO]
    assert "Collapsed 1 duplicate" in records[0].getMessage()
