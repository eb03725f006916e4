"""Additive seasonal-trend decomposition of the monthly incident counts.

The heavy lifting is statsmodels' STL (loess-based). This module only makes
sure the series it hands over is a regular monthly axis, since STL assigns
seasonal positions by index and would silently misalign a gapped series.
"""
from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from statsmodels.tsa.seasonal import STL

from .aggregate import missing_months
from .config import DecompositionConfig
from .errors import ValidationError

log = logging.getLogger(__name__)

COMPONENT_COLUMNS = ["observed", "trend", "seasonal", "remainder"]


def validate_config(config: DecompositionConfig) -> None:
    if config.period < 2:
        raise ValidationError(f"Seasonal period must be at least 2, got {config.period}")
    for name, window in (("seasonal", config.seasonal_window), ("trend", config.trend_window)):
        if window is None:
            continue
        if window < 3 or window % 2 == 0:
            raise ValidationError(f"The {name} window must be an odd integer >= 3, got {window}")
    if config.trend_window is not None and config.trend_window <= config.period:
        raise ValidationError(
            f"The trend window must be longer than the period ({config.period}), got {config.trend_window}"
        )


def assert_contiguous(monthly: pd.DataFrame) -> None:
    months = pd.DatetimeIndex(monthly["month_start"])
    if months.has_duplicates:
        dupes = sorted(set(months[months.duplicated()]))
        raise ValidationError(
            "Monthly series has duplicate months: " + ", ".join(f"{m:%Y-%m}" for m in dupes)
        )
    if not months.is_monotonic_increasing:
        raise ValidationError("Monthly series is not in calendar order")
    gaps = missing_months(monthly)
    if gaps:
        log.warning("Refusing to decompose a series with %s missing month(s)", len(gaps))
        raise ValidationError(
            "Monthly series has gaps at "
            + ", ".join(f"{m:%Y-%m}" for m in gaps)
            + "; zero-fill the series or restrict the date range",
            missing=gaps,
        )


def decompose_monthly(monthly: pd.DataFrame, config: DecompositionConfig | None = None) -> pd.DataFrame:
    config = config or DecompositionConfig()
    validate_config(config)
    assert_contiguous(monthly)
    if len(monthly) < 2 * config.period:
        raise ValidationError(
            f"Need at least {2 * config.period} months to decompose, got {len(monthly)}"
        )

    series = pd.Series(
        monthly["incidents"].astype(float).to_numpy(),
        index=pd.DatetimeIndex(monthly["month_start"], freq="MS"),
        name="incidents",
    )
    result = STL(
        series,
        period=config.period,
        seasonal=config.seasonal_window,
        trend=config.trend_window,
        robust=config.robust,
    ).fit()

    decomposed = pd.DataFrame(
        {
            "month_start": series.index,
            "observed": series.to_numpy(),
            "trend": np.asarray(result.trend, dtype=float),
            "seasonal": np.asarray(result.seasonal, dtype=float),
        }
    )
    decomposed["remainder"] = decomposed["observed"] - decomposed["trend"] - decomposed["seasonal"]
    log.info(
        "Decomposed %s months (period=%s, seasonal window=%s)",
        len(decomposed),
        config.period,
        config.seasonal_window,
    )
    return decomposed


def _strength(component: pd.Series, remainder: pd.Series) -> float:
    combined = float(np.var(component + remainder))
    if combined == 0:
        return 0.0
    return max(0.0, 1.0 - float(np.var(remainder)) / combined)


def seasonal_strength(decomposed: pd.DataFrame) -> float:
    return _strength(decomposed["seasonal"], decomposed["remainder"])


def trend_strength(decomposed: pd.DataFrame) -> float:
    return _strength(decomposed["trend"], decomposed["remainder"])
