"""
main.py
--------
Entry point for the Subscription Detection Engine.

Reads a transaction export, detects recurring charges, and writes the
subscription table to the outputs/ folder.

Usage (from the project root):
    python main.py

    # With optional arguments:
    python main.py --input path/to/transactions.csv
    python main.py --input export.json --as-of 2024-06-01
    python main.py --log-level DEBUG
"""

import sys
import os
import argparse
import logging
import pandas as pd
from datetime import datetime

# Ensure project root is on path (for runs from any working directory)
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from pipeline import SubscriptionPipeline
from core.loader import load_transactions
from core.models import SubscriptionSummary, frequency_label, billing_period, upcoming_charges
from config.config_loader import get_input_config, get_output_config, get_logging_config


logger = logging.getLogger("main")


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Subscription Detection Engine: find recurring charges in a transaction history."
    )
    parser.add_argument(
        "--input", type=str, default=None,
        help="Path to input transactions CSV or JSON. Defaults to the config input path in project root."
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Output directory. Defaults to outputs/ in project root."
    )
    parser.add_argument(
        "--as-of", type=str, default=None,
        help="Reference date (YYYY-MM-DD) for the upcoming charges list. Defaults to today."
    )
    parser.add_argument(
        "--within-days", type=int, default=None,
        help="Only list upcoming charges due within this many days of --as-of."
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Defaults to config value (INFO)."
    )
    return parser.parse_args(argv)


# =============================================================================
# MAIN
# =============================================================================

def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    log_cfg = get_logging_config()
    logging.basicConfig(
        level=args.log_level or log_cfg["level"],
        format=log_cfg["format"],
        datefmt=log_cfg["datefmt"],
    )

    # --- Resolve paths ---
    output_cfg = get_output_config()
    input_path = args.input or os.path.join(PROJECT_ROOT, get_input_config()["default_path"])
    output_dir = args.output_dir or os.path.join(PROJECT_ROOT, output_cfg["directory"])

    # --- Load transactions ---
    logger.info(f"Loading transactions from: {input_path}")
    if not os.path.exists(input_path):
        logger.error(f"Input file not found: {input_path}")
        return 1

    try:
        transactions = load_transactions(input_path)
    except ValueError as e:
        logger.error(f"Could not load transactions: {e}")
        return 1

    # --- Run pipeline ---
    pipeline = SubscriptionPipeline()
    summary = pipeline.run(transactions)

    # --- Output: Subscription table ---
    os.makedirs(output_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_path = os.path.join(output_dir, f"{output_cfg['filename_prefix']}_{timestamp}.csv")
    pipeline.to_dataframe(summary).to_csv(output_path, index=False)
    logger.info(f"Subscriptions saved to: {output_path}")

    # --- Print summary ---
    as_of = pd.Timestamp(args.as_of).to_pydatetime() if args.as_of else datetime.now()
    _print_summary(summary, as_of, args.within_days)

    return 0


def _print_summary(summary: SubscriptionSummary, as_of: datetime, within_days: int | None = None):
    """Prints a clean summary table to the console."""
    print("\n" + "=" * 80)
    print("  SUBSCRIPTION SUMMARY")
    print("=" * 80)

    print(f"\n    Active subscriptions:  {summary.count:>12,}")
    print(f"    Monthly total:         ${summary.monthly_total:>12,.2f}")
    print(f"    Yearly total:          ${summary.yearly_total:>12,.2f}")
    if summary.skipped_transactions:
        print(f"    Skipped (bad date):    {summary.skipped_transactions:>12,}")

    if not summary.subscriptions:
        print("\n  No recurring subscriptions detected. Add more transactions to improve detection.\n")
        return

    print("\n  Detected Subscriptions:")
    print("  " + "-" * 76)
    for s in summary.subscriptions:
        print(
            f"    {s.name[:28]:28s}  {frequency_label(s.frequency):9s}  {s.occurrences:>3} charges  "
            f"last {s.last_charge:%Y-%m-%d}  next {s.next_estimated:%Y-%m-%d}  "
            f"${s.amount:,.2f} per {billing_period(s.frequency)}"
        )

    upcoming = upcoming_charges(summary.subscriptions, as_of, within_days)
    print(f"\n  Upcoming charges from {as_of:%Y-%m-%d}:")
    print("  " + "-" * 76)
    if not upcoming:
        print("    None.")
    for s in upcoming:
        print(f"    {s.next_estimated:%Y-%m-%d}  {s.name[:40]:40s}  ${s.amount:>10,.2f}")
    print("=" * 80 + "\n")


if __name__ == "__main__":
    sys.exit(main())
