from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from .aggregate import clean_incidents, count_monthly
from .config import (
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SOURCE_URL,
    AggregationConfig,
    DecompositionConfig,
    IngestConfig,
    ReportConfig,
)
from .decompose import decompose_monthly
from .errors import ShootingReportError
from .ingest import load_incidents
from .plots import render_figures
from .report import build_summary_markdown, compute_metrics, save_json

log = logging.getLogger(__name__)


def run_pipeline(config: ReportConfig | None = None) -> Dict[str, object]:
    config = config or ReportConfig()
    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    raw_df = load_incidents(config.ingest)
    incidents = clean_incidents(raw_df)
    monthly = count_monthly(incidents, config.aggregation)
    decomposed = decompose_monthly(monthly, config.decomposition)

    monthly.to_parquet(config.monthly_path, index=False)
    decomposed.to_parquet(config.decomposition_path, index=False)

    figures = render_figures(monthly, decomposed, config.figures_dir, config.plots)
    metrics = compute_metrics(raw_df, incidents, monthly, decomposed)
    outputs = {
        "monthly_counts": str(config.monthly_path),
        "decomposition": str(config.decomposition_path),
        **{f"figure_{name}": path for name, path in figures.items()},
    }
    payload = metrics | {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "source": str(config.ingest.source),
        "decomposition_settings": {
            "period": config.decomposition.period,
            "seasonal_window": config.decomposition.seasonal_window,
            "trend_window": config.decomposition.trend_window,
            "robust": config.decomposition.robust,
            "zero_fill": config.aggregation.zero_fill,
        },
        "outputs": outputs,
    }
    save_json(payload, config.metrics_path)
    config.summary_path.write_text(build_summary_markdown(metrics, outputs))
    log.info("Report written to %s", output_dir)
    return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Monthly seasonality report for NYPD shooting incidents."
    )
    parser.add_argument(
        "--source",
        default=DEFAULT_SOURCE_URL,
        help="CSV URL or local path (default: NYC Open Data export).",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Optional row limit for debugging.",
    )
    parser.add_argument(
        "--out-dir",
        default=str(DEFAULT_OUTPUT_DIR),
        help="Directory for figures, parquet files and the summary.",
    )
    parser.add_argument(
        "--seasonal-window",
        type=int,
        default=DecompositionConfig.seasonal_window,
        help="Odd loess window for the seasonal smoother.",
    )
    parser.add_argument(
        "--trend-window",
        type=int,
        default=None,
        help="Odd loess window for the trend smoother (statsmodels default if omitted).",
    )
    parser.add_argument(
        "--robust",
        action="store_true",
        help="Use robust STL iterations to downweight outlying months.",
    )
    parser.add_argument(
        "--zero-fill",
        action="store_true",
        help="Insert zero counts for months without incidents instead of failing.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = ReportConfig(
        ingest=IngestConfig(source=args.source, limit=args.limit),
        aggregation=AggregationConfig(zero_fill=args.zero_fill),
        decomposition=DecompositionConfig(
            seasonal_window=args.seasonal_window,
            trend_window=args.trend_window,
            robust=args.robust,
        ),
        output_dir=Path(args.out_dir),
    )
    try:
        run_pipeline(config)
    except ShootingReportError as exc:
        log.error("%s: %s", type(exc).__name__, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
