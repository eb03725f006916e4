from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_SOURCE_URL = (
    "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"
)
DEFAULT_OUTPUT_DIR = BASE_DIR / "reports"
SEASONAL_PERIOD = 12


@dataclass(frozen=True)
class IngestConfig:
    source: str = DEFAULT_SOURCE_URL
    limit: int | None = None
    timeout: float = 60.0


@dataclass(frozen=True)
class AggregationConfig:
    # Off by default: months without incidents are simply absent.
    zero_fill: bool = False


@dataclass(frozen=True)
class DecompositionConfig:
    period: int = SEASONAL_PERIOD
    seasonal_window: int = 11
    trend_window: int | None = None
    robust: bool = False


@dataclass(frozen=True)
class PlotConfig:
    style: str = "whitegrid"
    context: str = "notebook"
    dpi: int = 150
    figsize: Tuple[float, float] = (12, 5)
    decomposition_figsize: Tuple[float, float] = (12, 10)


@dataclass(frozen=True)
class ReportConfig:
    ingest: IngestConfig = field(default_factory=IngestConfig)
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    decomposition: DecompositionConfig = field(default_factory=DecompositionConfig)
    plots: PlotConfig = field(default_factory=PlotConfig)
    output_dir: Path = DEFAULT_OUTPUT_DIR

    @property
    def figures_dir(self) -> Path:
        return Path(self.output_dir) / "figures"

    @property
    def monthly_path(self) -> Path:
        return Path(self.output_dir) / "monthly_incidents.parquet"

    @property
    def decomposition_path(self) -> Path:
        return Path(self.output_dir) / "monthly_decomposition.parquet"

    @property
    def metrics_path(self) -> Path:
        return Path(self.output_dir) / "shooting_metrics.json"

    @property
    def summary_path(self) -> Path:
        return Path(self.output_dir) / "summary.md"
