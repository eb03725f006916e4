from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    import pandas as pd


class ShootingReportError(Exception):
    """Base class for every failure that aborts a report run."""


class FetchError(ShootingReportError):
    """The source URL or file could not be read."""


class ParseError(ShootingReportError):
    def __init__(self, column: str, row: int | None = None, value: object = None, reason: str | None = None):
        self.column = column
        self.row = row
        self.value = value
        if reason is None:
            reason = f"could not parse {value!r} in column {column!r} (data row {row})"
        super().__init__(reason)


class ValidationError(ShootingReportError):
    def __init__(self, message: str, missing: Sequence[pd.Timestamp] | None = None):
        self.missing: List[pd.Timestamp] = list(missing or [])
        super().__init__(message)
