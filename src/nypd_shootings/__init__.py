"""Monthly seasonality report over the NYPD Shooting Incident dataset."""

from .errors import FetchError, ParseError, ShootingReportError, ValidationError

__all__ = [
    "FetchError",
    "ParseError",
    "ShootingReportError",
    "ValidationError",
]

__version__ = "0.1.0"
