"""Fetch the NYPD shooting CSV and enforce its column schema.

Every value is read as text first and then parsed column by column. A value
that does not fit its declared type stops the run with a ``ParseError``;
nothing is coerced to missing behind the caller's back.
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple
from urllib.parse import urlparse

import numpy as np
import pandas as pd
import requests

from .config import IngestConfig
from .errors import FetchError, ParseError

log = logging.getLogger(__name__)

DATE_FORMAT = "%m/%d/%Y"
TIME_FORMAT = "%H:%M:%S"
MISSING_MARKERS = {"", "(null)"}
INTEGER_PATTERN = r"[+-]?\d+"
BOOLEAN_VALUES = {
    "true": True,
    "t": True,
    "y": True,
    "1": True,
    "false": False,
    "f": False,
    "n": False,
    "0": False,
}


class ColumnSpec(NamedTuple):
    source: str
    field: str
    kind: str
    required: bool = False


SCHEMA: List[ColumnSpec] = [
    ColumnSpec("INCIDENT_KEY", "incident_key", "integer", required=True),
    ColumnSpec("OCCUR_DATE", "occur_date", "date", required=True),
    ColumnSpec("OCCUR_TIME", "occur_time", "time"),
    ColumnSpec("BORO", "boro", "category"),
    ColumnSpec("PRECINCT", "precinct", "integer"),
    ColumnSpec("JURISDICTION_CODE", "jurisdiction_code", "integer"),
    ColumnSpec("LOCATION_DESC", "location_desc", "category"),
    ColumnSpec("STATISTICAL_MURDER_FLAG", "statistical_murder_flag", "boolean"),
    ColumnSpec("PERP_AGE_GROUP", "perp_age_group", "category"),
    ColumnSpec("PERP_SEX", "perp_sex", "category"),
    ColumnSpec("PERP_RACE", "perp_race", "category"),
    ColumnSpec("VIC_AGE_GROUP", "vic_age_group", "category"),
    ColumnSpec("VIC_SEX", "vic_sex", "category"),
    ColumnSpec("VIC_RACE", "vic_race", "category"),
    ColumnSpec("X_COORD_CD", "x_coord_cd", "float"),
    ColumnSpec("Y_COORD_CD", "y_coord_cd", "float"),
    ColumnSpec("Latitude", "latitude", "float"),
    ColumnSpec("Longitude", "longitude", "float"),
]


def is_url(source: str | Path) -> bool:
    return urlparse(str(source)).scheme in {"http", "https"}


def fetch_csv_text(source: str | Path, config: IngestConfig | None = None) -> str:
    config = config or IngestConfig()
    if is_url(source):
        log.info("Downloading shooting incidents from %s", source)
        try:
            response = requests.get(str(source), timeout=config.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            code = exc.response.status_code if exc.response is not None else "unknown"
            raise FetchError(f"HTTP {code} while downloading {source}") from exc
        except requests.exceptions.RequestException as exc:
            raise FetchError(f"Could not reach {source}: {exc}") from exc
        return response.content.decode("utf-8-sig")

    path = Path(source).expanduser()
    log.info("Reading shooting incidents from %s", path)
    try:
        return path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise FetchError(f"Could not read {path}: {exc}") from exc


def read_raw_frame(text: str, limit: int | None = None) -> pd.DataFrame:
    """Split CSV text into a frame of untouched strings."""
    try:
        return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, nrows=limit)
    except pd.errors.EmptyDataError as exc:
        raise ParseError("<file>", reason="source CSV is empty") from exc
    except pd.errors.ParserError as exc:
        raise ParseError("<file>", reason=f"malformed CSV: {exc}") from exc


def _blank_to_na(series: pd.Series) -> pd.Series:
    stripped = series.astype("string").str.strip()
    return stripped.mask(stripped.isin(MISSING_MARKERS))


def _raise_on_bad(present: pd.Series, bad: pd.Series, original: pd.Series, column: str) -> None:
    mask = (present & bad).fillna(False).to_numpy(dtype=bool)
    if mask.any():
        position = int(np.flatnonzero(mask)[0])
        raise ParseError(column, row=position + 1, value=original.iloc[position])


def parse_integer(series: pd.Series, column: str) -> pd.Series:
    values = _blank_to_na(series)
    # Digits only: "1e3" and "44.0" are not integer spellings.
    _raise_on_bad(values.notna(), ~values.str.fullmatch(INTEGER_PATTERN), series, column)
    return pd.to_numeric(values, errors="coerce").astype("Int64")


def parse_float(series: pd.Series, column: str) -> pd.Series:
    values = _blank_to_na(series)
    parsed = pd.to_numeric(values.str.replace(",", "", regex=False), errors="coerce")
    _raise_on_bad(values.notna(), parsed.isna() | ~np.isfinite(parsed), series, column)
    return parsed.astype("Float64")


def parse_date(series: pd.Series, column: str) -> pd.Series:
    values = _blank_to_na(series)
    parsed = pd.to_datetime(values, format=DATE_FORMAT, errors="coerce")
    _raise_on_bad(values.notna(), parsed.isna(), series, column)
    return parsed


def parse_time(series: pd.Series, column: str) -> pd.Series:
    values = _blank_to_na(series)
    parsed = pd.to_datetime(values, format=TIME_FORMAT, errors="coerce")
    _raise_on_bad(values.notna(), parsed.isna(), series, column)
    return parsed - parsed.dt.normalize()


def parse_boolean(series: pd.Series, column: str) -> pd.Series:
    values = _blank_to_na(series)
    parsed = values.str.lower().map(BOOLEAN_VALUES)
    _raise_on_bad(values.notna(), parsed.isna(), series, column)
    return parsed.astype("boolean")


def parse_category(series: pd.Series, column: str) -> pd.Series:
    return _blank_to_na(series)


PARSERS: Dict[str, Callable[[pd.Series, str], pd.Series]] = {
    "integer": parse_integer,
    "float": parse_float,
    "date": parse_date,
    "time": parse_time,
    "boolean": parse_boolean,
    "category": parse_category,
}


def parse_incidents(raw: pd.DataFrame) -> pd.DataFrame:
    """Apply ``SCHEMA`` to a frame of strings and return the typed rows.

    Columns outside the schema are carried through as stripped strings,
    renamed to snake case.
    """
    missing = [spec.source for spec in SCHEMA if spec.source not in raw.columns]
    if missing:
        raise ParseError(missing[0], reason=f"missing required column(s): {', '.join(missing)}")

    raw = raw.reset_index(drop=True)
    typed: Dict[str, pd.Series] = {}
    for spec in SCHEMA:
        parsed = PARSERS[spec.kind](raw[spec.source], spec.source)
        if spec.required:
            blank = parsed.isna().to_numpy(dtype=bool)
            if blank.any():
                position = int(np.flatnonzero(blank)[0])
                raise ParseError(
                    spec.source,
                    row=position + 1,
                    value=raw[spec.source].iloc[position],
                    reason=f"missing value in required column {spec.source!r} (data row {position + 1})",
                )
        typed[spec.field] = parsed

    known = {spec.source for spec in SCHEMA}
    for column in raw.columns:
        if column not in known:
            typed[column.strip().lower().replace(" ", "_")] = _blank_to_na(raw[column])

    frame = pd.DataFrame(typed)
    log.info("Parsed %s raw rows across %s columns", len(frame), frame.shape[1])
    return frame


def load_incidents(config: IngestConfig | None = None) -> pd.DataFrame:
    config = config or IngestConfig()
    text = fetch_csv_text(config.source, config)
    return parse_incidents(read_raw_frame(text, limit=config.limit))
