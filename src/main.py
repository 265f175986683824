"""
Main Entry Point - Storm Impact Report

Runs the complete report from the command line.
"""

import sys
import os
import logging
from datetime import date

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.orchestration.pipeline import ReportPipeline
from src.transformation.transformers import DEFAULT_TOP_N
from src.coreutils.env import get_report_settings
from src.coreutils.logging import setup_logging, resolve_log_level

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description="Storm Impact Report")
    parser.add_argument("--data-dir", help="Directory holding StormData.csv(.bz2)")
    parser.add_argument("--output-dir", help="Directory for tables, charts and report")
    parser.add_argument("--lookup", help="Event type lookup CSV")
    parser.add_argument(
        "--top-n",
        type=int,
        default=DEFAULT_TOP_N,
        help="Number of event types per aggregate (ties at the cut-off are kept)",
    )
    parser.add_argument(
        "--no-plots", action="store_true", help="Skip rendering bar charts"
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Keep results in memory (no tables or report written)",
    )
    parser.add_argument(
        "--report-date",
        type=date.fromisoformat,
        help="Date printed in the report header (YYYY-MM-DD, default today)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)

    settings = get_report_settings()
    setup_logging(resolve_log_level(settings["log_level"], args.verbose))

    pipeline = ReportPipeline(
        data_dir=args.data_dir,
        output_dir=args.output_dir,
        lookup_path=args.lookup,
        top_n=args.top_n,
        render_plots=not args.no_plots,
        save_outputs=not args.no_save,
        report_date=args.report_date,
    )

    try:
        result = pipeline.run()
    except Exception as e:
        logger.error(f"❌ Pipeline failed: {e}")
        return 1

    for metric, df in result.aggregates.items():
        logger.info(f"Top event types by {metric}:\n{df}")
    logger.info("✅ Pipeline completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
