"""
Report Pipeline Orchestrator

One linear batch run:
1. Extract: storm events (downloaded/decompressed when missing), the
   curated event type lookup, the monthly CPI series
2. Transform: inflation ratios, tidy events, top-N aggregates
3. Load: tables, bar charts, markdown report

Each input is loaded once by the orchestrator and passed explicitly to the
stages that use it; no stage reloads or caches data on its own.
"""

import os
from datetime import date
from dataclasses import dataclass, field
from typing import Dict, Optional, Any
import logging
import polars as pl

# Extract layer imports
from src.extract.data_fetcher import (
    ensure_storm_data,
    load_raw_storm_data,
    load_event_type_lookup,
    fetch_raw_cpi_data,
)

# Transform layer imports
from src.transformation.inflation import compute_inflation_ratios
from src.transformation.transformers import (
    DEFAULT_TOP_N,
    determine_base_year,
    build_tidy_events,
    aggregate_all_metrics,
    get_summary_stats,
    describe_metrics,
)
from src.transformation.event_types import find_unmatched_labels
from src.transformation.validators import (
    validate_raw_storm_data,
    validate_event_type_lookup,
    validate_data_quality,
    validate_aggregate,
)

# Load layer imports
from src.load.local_storage import save_tidy_events, save_aggregates, save_csv
from src.load.plots import plot_all_aggregates
from src.load.report_writer import render_report, write_report

from src.coreutils.env import get_report_settings

logger = logging.getLogger(__name__)


@dataclass
class ReportResult:
    """In-memory outputs of one report run"""

    base_year: int
    inflation: pl.DataFrame
    tidy_events: pl.DataFrame
    aggregates: Dict[str, pl.DataFrame]
    summary_stats: Dict[str, Any]
    quality: Dict[str, Any]
    report_text: str
    files: Dict[str, Any] = field(default_factory=dict)


class ReportPipeline:
    """Orchestrates the storm impact report"""

    def __init__(
        self,
        data_dir: Optional[str] = None,
        output_dir: Optional[str] = None,
        lookup_path: Optional[str] = None,
        storm_data_url: Optional[str] = None,
        cpi_series_url: Optional[str] = None,
        top_n: int = DEFAULT_TOP_N,
        render_plots: bool = True,
        save_outputs: bool = True,
        report_date: Optional[date] = None,
    ):
        """
        Initialize the report pipeline

        Args:
            data_dir: Directory holding StormData.csv(.bz2) (env REPORT_DATA_DIR)
            output_dir: Directory for tables, charts and report (env REPORT_OUTPUT_DIR)
            lookup_path: Event type lookup CSV (env EVENT_TYPE_LOOKUP_PATH)
            storm_data_url: Storm data archive URL (env STORM_DATA_URL)
            cpi_series_url: CPI series CSV URL (env CPI_SERIES_URL)
            top_n: Rank cut-off of the aggregates
            render_plots: If false, skip the bar charts
            save_outputs: If false, keep everything in memory
            report_date: Date printed in the report header (defaults to today)
        """
        settings = get_report_settings()
        self.data_dir = data_dir or settings["data_dir"]
        self.output_dir = output_dir or settings["output_dir"]
        self.lookup_path = lookup_path or settings["lookup_path"]
        self.storm_data_url = storm_data_url or settings["storm_data_url"]
        self.cpi_series_url = cpi_series_url or settings["cpi_series_url"]
        self.top_n = top_n
        self.render_plots = render_plots
        self.save_outputs = save_outputs
        self.report_date = report_date

    def load_inputs(self) -> Dict[str, pl.DataFrame]:
        """
        Load the three report inputs once

        Returns:
            Dict: raw_events, event_type_lookup, cpi
        """
        logger.info("🔄 Step 1: Loading inputs...")

        lookup_df = load_event_type_lookup(self.lookup_path)
        validate_event_type_lookup(lookup_df)

        csv_path = ensure_storm_data(self.data_dir, self.storm_data_url)
        raw_df = load_raw_storm_data(csv_path)
        validate_raw_storm_data(raw_df)

        cpi_df = fetch_raw_cpi_data(self.cpi_series_url)

        logger.info(
            f"✅ Loaded {raw_df.height} events, {lookup_df.height} lookup entries, "
            f"{cpi_df.height} CPI observations"
        )
        return {"raw_events": raw_df, "event_type_lookup": lookup_df, "cpi": cpi_df}

    def build_report(
        self,
        raw_df: pl.DataFrame,
        lookup_df: pl.DataFrame,
        cpi_df: pl.DataFrame,
    ) -> ReportResult:
        """
        Transform the loaded inputs and render the outputs

        Args:
            raw_df: Raw storm events
            lookup_df: Curated event type lookup
            cpi_df: Monthly CPI observations

        Returns:
            ReportResult: tables, stats and written files
        """
        logger.info("🔄 Step 2: Transforming data...")
        base_year = determine_base_year(raw_df)
        inflation_df = compute_inflation_ratios(cpi_df, base_year)
        tidy_df = build_tidy_events(raw_df, inflation_df, lookup_df)
        quality = validate_data_quality(tidy_df)

        aggregates = aggregate_all_metrics(tidy_df, self.top_n)
        for metric, aggregate_df in aggregates.items():
            validate_aggregate(aggregate_df, tidy_df, metric)

        stats = get_summary_stats(tidy_df)
        logger.info(
            f"✅ Tidy events: {stats['total_events']} records, "
            f"{stats['matched_share']:.2%} with a canonical event type"
        )

        logger.info("🔄 Step 3: Rendering outputs...")
        files: Dict[str, Any] = {}
        figures: Dict[str, str] = {}
        if self.render_plots:
            files["figures"] = plot_all_aggregates(aggregates, self.output_dir)
            figures = {
                metric: os.path.relpath(path, self.output_dir)
                for metric, path in files["figures"].items()
            }

        report_text = render_report(
            stats,
            describe_metrics(tidy_df),
            aggregates,
            figures,
            base_year,
            self.report_date,
        )

        if self.save_outputs:
            files["tidy_events"] = save_tidy_events(tidy_df, self.output_dir)
            files["aggregates"] = save_aggregates(aggregates, self.output_dir)
            files["unmatched_labels"] = save_csv(
                find_unmatched_labels(tidy_df),
                os.path.join(self.output_dir, "unmatched_labels.csv"),
            )
            files["report"] = write_report(
                report_text, os.path.join(self.output_dir, "report.md")
            )
        else:
            logger.info("🔍 Outputs not saved (save_outputs=False)")

        return ReportResult(
            base_year=base_year,
            inflation=inflation_df,
            tidy_events=tidy_df,
            aggregates=aggregates,
            summary_stats=stats,
            quality=quality,
            report_text=report_text,
            files=files,
        )

    def run(self) -> ReportResult:
        """
        Run the complete report

        Returns:
            ReportResult: tables, stats and written files
        """
        logger.info("🚀 Starting Storm Impact Report Pipeline")
        logger.info("=" * 50)

        try:
            inputs = self.load_inputs()
            result = self.build_report(
                inputs["raw_events"], inputs["event_type_lookup"], inputs["cpi"]
            )
            logger.info("🎉 Storm Impact Report Pipeline completed successfully!")
            return result

        except Exception as e:
            logger.error(f"❌ Report pipeline failed: {e}")
            raise
