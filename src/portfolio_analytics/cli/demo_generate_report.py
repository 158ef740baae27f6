"""CLI demo that builds a PortfolioReport JSON from a holdings CSV."""
# Example:
#
# python -m portfolio_analytics.cli.demo_generate_report \
#   --portfolio-file data/sample_portfolio.csv --as-of-date 2024-06-30 \
#   --include-tax --include-dividends --output-report out/sample_report.json
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional
import argparse
import json
import logging
import sys

from portfolio_analytics.services.holdings_loader_service import load_portfolio_snapshot_from_csv
from portfolio_analytics.services.metrics_aggregator_service import build_portfolio_report
from portfolio_analytics.services.tax_income_service import (
    compute_dividend_income_summary,
    compute_tax_optimization_summary,
)

logger = logging.getLogger(__name__)

DEFAULT_PORTFOLIO_CSV = Path("data") / "sample_portfolio.csv"


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a portfolio analytics report as JSON.")
    parser.add_argument("--portfolio-file", dest="portfolio_file", type=str, default=None,
                        help=f"Path to a holdings CSV (default {DEFAULT_PORTFOLIO_CSV}).")
    parser.add_argument("--portfolio-name", dest="portfolio_name", type=str, default=None,
                        help="Display name for the portfolio. Defaults to the file name.")
    parser.add_argument("--as-of-date", dest="as_of_date", type=str, default=None,
                        help="Snapshot date (YYYY-MM-DD). Also the reference date for holding periods.")
    parser.add_argument("--output-report", dest="output_report", type=str, default=None,
                        help="If provided, write the JSON to this path instead of stdout.")
    parser.add_argument("--include-tax", dest="include_tax", action="store_true",
                        help="Add the tax optimization summary to the output.")
    parser.add_argument("--include-dividends", dest="include_dividends", action="store_true",
                        help="Add the dividend income summary to the output.")
    parser.add_argument("--log-level", dest="log_level", default="INFO",
                        choices=("DEBUG", "INFO", "WARNING", "ERROR"))
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    as_of_date = None
    if args.as_of_date:
        try:
            as_of_date = datetime.strptime(args.as_of_date, "%Y-%m-%d").date()
        except ValueError:
            logger.error("Could not parse --as-of-date=%s. Use YYYY-MM-DD.", args.as_of_date)
            return 2

    csv_path = Path(args.portfolio_file) if args.portfolio_file else DEFAULT_PORTFOLIO_CSV
    try:
        snapshot = load_portfolio_snapshot_from_csv(
            csv_path,
            portfolio_name=args.portfolio_name,
            as_of_date=as_of_date,
        )
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Could not load holdings: %s", exc)
        return 1

    report = build_portfolio_report(snapshot)
    # model_dump(mode="json") turns dates into ISO strings
    output = {"report": report.model_dump(mode="json")}

    if args.include_tax:
        tax = compute_tax_optimization_summary(snapshot.holdings, snapshot.as_of_date)
        output["tax_optimization"] = tax.model_dump(mode="json")
    if args.include_dividends:
        dividends = compute_dividend_income_summary(snapshot.holdings)
        output["dividend_income"] = dividends.model_dump(mode="json")

    output_json = json.dumps(output, indent=2)
    if args.output_report:
        out_path = Path(args.output_report)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(output_json, encoding="utf-8")
        logger.info("Wrote portfolio report to %s", out_path)
    else:
        print(output_json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
