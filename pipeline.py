"""
pipeline.py
------------
Main orchestration layer. Wires together:
    1. RecurringChargeDetector  →  produces Subscriptions
    2. Cost roll-ups            →  monthly / yearly equivalent totals
    3. Output serialization     →  flat DataFrame for CSV export

This is the single entry point for running the engine. Everything else
is internal machinery.

Usage:
    from pipeline import SubscriptionPipeline

    pipeline = SubscriptionPipeline()
    summary = pipeline.run(transactions)
    table = pipeline.to_dataframe(summary)
"""

import pandas as pd
import logging
from typing import Iterable, List

from core.models import Transaction, Subscription, SubscriptionSummary, frequency_label, billing_period
from core.recurring_charge_detector import RecurringChargeDetector
from core.cost_rollup import compute_totals, monthly_equivalent, yearly_equivalent, cost_share
from config.config_loader import get_output_config

logger = logging.getLogger(__name__)


OUTPUT_COLUMNS = [
    "name", "frequency", "frequency_label", "amount", "billing_period",
    "monthly_equivalent", "yearly_equivalent", "cost_share_pct",
    "occurrences", "last_charge", "next_estimated",
    "transaction_ids", "account_ids",
]


class SubscriptionPipeline:
    """
    End-to-end subscription detection pipeline.

    Holds no results between runs: each call to run() recomputes everything
    from the transactions passed in.
    """

    def __init__(self):
        self.output_config = get_output_config()
        self.detector = RecurringChargeDetector()

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def run(self, transactions: Iterable[Transaction] | pd.DataFrame) -> SubscriptionSummary:
        """
        Run detection and cost roll-ups.

        Args:
            transactions: Iterable of Transaction or a transactions DataFrame.

        Returns:
            SubscriptionSummary with subscriptions ordered by amount descending.
        """
        if not isinstance(transactions, pd.DataFrame):
            transactions = list(transactions)
        logger.info(f"Pipeline starting. Input: {len(transactions):,} transactions.")

        # --- Stage 1: Recurring charge detection ---
        subscriptions, skipped = self.detector.detect_with_skipped(transactions)
        if skipped:
            logger.warning(f"{skipped:,} transactions skipped due to unparsable dates.")
        logger.info(f"Stage 1 complete. Subscriptions: {len(subscriptions):,}.")

        # --- Stage 2: Cost roll-ups ---
        monthly_total, yearly_total = compute_totals(subscriptions)
        logger.info(f"Stage 2 complete. Monthly total: {monthly_total:,.2f}. Yearly total: {yearly_total:,.2f}.")

        return SubscriptionSummary(
            subscriptions=subscriptions,
            monthly_total=monthly_total,
            yearly_total=yearly_total,
            skipped_transactions=skipped,
        )

    def run_detection_only(self, transactions: Iterable[Transaction] | pd.DataFrame) -> List[Subscription]:
        """Run only Stage 1. Useful for debugging."""
        return self.detector.detect(transactions)

    # -------------------------------------------------------------------------
    # OUTPUT SERIALIZATION
    # -------------------------------------------------------------------------

    def to_dataframe(self, summary: SubscriptionSummary) -> pd.DataFrame:
        """
        Flattens a summary's subscriptions into one row each, in the
        summary's order. Dates are formatted, ids pipe-joined.
        """
        if not summary.subscriptions:
            return pd.DataFrame(columns=OUTPUT_COLUMNS)

        date_format = self.output_config["date_format"]
        decimals = self.output_config["amount_decimals"]

        rows = []
        for s in summary.subscriptions:
            rows.append({
                "name": s.name,
                "frequency": s.frequency,
                "frequency_label": frequency_label(s.frequency),
                "amount": round(s.amount, decimals),
                "billing_period": billing_period(s.frequency),
                "monthly_equivalent": round(monthly_equivalent(s), decimals),
                "yearly_equivalent": round(yearly_equivalent(s), decimals),
                "cost_share_pct": round(cost_share(s, summary.subscriptions), 1),
                "occurrences": s.occurrences,
                "last_charge": s.last_charge.strftime(date_format),
                "next_estimated": s.next_estimated.strftime(date_format),
                "transaction_ids": "|".join(str(x) for x in s.transaction_ids),
                "account_ids": "|".join(str(x) for x in s.account_ids),
            })

        return pd.DataFrame(rows, columns=OUTPUT_COLUMNS)
