from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

import pandas as pd

from .aggregate import missing_months, monthly_profile, yearly_totals
from .decompose import seasonal_strength, trend_strength


def compute_metrics(
    raw: pd.DataFrame,
    incidents: pd.DataFrame,
    monthly: pd.DataFrame,
    decomposed: pd.DataFrame,
) -> Dict[str, object]:
    profile = monthly_profile(monthly).dropna(subset=["mean_incidents"])
    busiest = profile.loc[profile["mean_incidents"].idxmax()]
    quietest = profile.loc[profile["mean_incidents"].idxmin()]
    peak = monthly.loc[monthly["incidents"].idxmax()]
    totals = yearly_totals(monthly)
    metrics = {
        "raw_rows": int(len(raw)),
        "unique_incident_keys": int(incidents["incident_key"].nunique()),
        "incidents": int(len(incidents)),
        "date_min": str(incidents["occur_date"].min().date()),
        "date_max": str(incidents["occur_date"].max().date()),
        "months": int(len(monthly)),
        "zero_months": int((monthly["incidents"] == 0).sum()),
        "missing_months": [f"{month:%Y-%m}" for month in missing_months(monthly)],
        "peak_month": {"month": f"{peak['month_start']:%Y-%m}", "incidents": int(peak["incidents"])},
        "busiest_calendar_month": {
            "month": str(busiest["month"]),
            "mean_incidents": round(float(busiest["mean_incidents"]), 2),
        },
        "quietest_calendar_month": {
            "month": str(quietest["month"]),
            "mean_incidents": round(float(quietest["mean_incidents"]), 2),
        },
        "yearly_totals": {str(int(row.year)): int(row.incidents) for row in totals.itertuples()},
        "seasonal_strength": round(seasonal_strength(decomposed), 4),
        "trend_strength": round(trend_strength(decomposed), 4),
    }
    return metrics


def format_yearly(totals: Dict[str, int]) -> str:
    return ", ".join(f"{year} ({count:,})" for year, count in totals.items())


def build_summary_markdown(metrics: Dict[str, object], outputs: Dict[str, str]) -> str:
    busiest = metrics["busiest_calendar_month"]
    quietest = metrics["quietest_calendar_month"]
    peak = metrics["peak_month"]
    gaps = metrics["missing_months"]
    md_lines = [
        "# NYPD Shooting Incidents: Monthly Seasonality",
        "",
        "## Dataset Snapshot",
        f"- **Raw rows:** {metrics['raw_rows']:,} ({metrics['unique_incident_keys']:,} unique incident keys)",
        f"- **Incident-date pairs after dedupe:** {metrics['incidents']:,}",
        f"- **Coverage:** {metrics['date_min']} to {metrics['date_max']} ({metrics['months']} months)",
        f"- **Months without incidents:** {metrics['zero_months']}"
        + (f"; absent from the series: {', '.join(gaps)}" if gaps else ""),
        "",
        "## Seasonality",
        f"- Busiest calendar month on average: {busiest['month']} ({busiest['mean_incidents']:.1f} incidents)",
        f"- Quietest calendar month on average: {quietest['month']} ({quietest['mean_incidents']:.1f} incidents)",
        f"- Single worst month: {peak['month']} with {peak['incidents']:,} incidents",
        f"- Seasonal strength {metrics['seasonal_strength']:.2f}, trend strength {metrics['trend_strength']:.2f}",
        f"- Yearly totals: {format_yearly(metrics['yearly_totals'])}",
        "",
        "## Files Generated",
    ]
    md_lines.extend(f"- {name}: `{path}`" for name, path in outputs.items())
    return "\n".join(md_lines) + "\n"


def save_json(payload: Dict[str, object], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2))
