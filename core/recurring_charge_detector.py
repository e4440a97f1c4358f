"""
recurring_charge_detector.py
-----------------------------
Recurring charge ("subscription") detection engine.

Answers one question for a snapshot of transactions:

    "Which payees charge this user a consistent amount on a regular schedule?"

Output: a Subscription per qualifying group, highest amount first.

Design decisions:
    - Grouping key is the normalized description (see core/normalizer.py).
      Only expenses (amount > 0) take part; refunds and income never do.
    - A group is accepted only when the amount spread (max - min) is within
      20% of the mean AND the mean gap between charges lands inside one of
      four fixed day bands. Both thresholds are fixed constants, not config,
      so the same input always yields the same result.
    - The detector holds no state between calls. Every call recomputes the
      full result from the transactions it is given.
"""

import logging
from typing import Iterable, List

import numpy as np
import pandas as pd

from core.models import Transaction, Subscription, WEEKLY, MONTHLY, QUARTERLY, YEARLY
from core.normalizer import normalize_description
from core.projection import project_next_charge
from core.cost_rollup import sort_subscriptions
from core.loader import to_transactions

logger = logging.getLogger(__name__)


MIN_OCCURRENCES = 2
AMOUNT_SPREAD_TOLERANCE = 0.2

# Inclusive day bands on the mean gap between consecutive charges.
FREQUENCY_BANDS = (
    (WEEKLY, 5, 9),
    (MONTHLY, 25, 35),
    (QUARTERLY, 85, 95),
    (YEARLY, 350, 380),
)


class RecurringChargeDetector:
    """
    Detects recurring charges in a transaction snapshot.

    Usage:
        detector = RecurringChargeDetector()
        subscriptions = detector.detect(transactions)
    """

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def detect(self, transactions: Iterable[Transaction] | pd.DataFrame) -> List[Subscription]:
        """
        Run recurring charge detection.

        Args:
            transactions: Iterable of Transaction, or a DataFrame with columns
                id, account_id, date, description, amount (category optional).

        Returns:
            List of Subscription sorted by amount descending.
        """
        subscriptions, _ = self.detect_with_skipped(transactions)
        return subscriptions

    def detect_with_skipped(
        self, transactions: Iterable[Transaction] | pd.DataFrame
    ) -> tuple[List[Subscription], int]:
        """
        Same as detect(), but also returns how many transactions were left
        out because their date could not be parsed.
        """
        df, skipped = self._prepare(transactions)

        if df.empty:
            return [], skipped

        results: List[Subscription] = []

        for key, group in self._group(df):
            subscription = self._build_subscription(key, group)
            if subscription is not None:
                results.append(subscription)

        return sort_subscriptions(results), skipped

    # -------------------------------------------------------------------------
    # INTERNAL: DATA PREPARATION
    # -------------------------------------------------------------------------

    def _prepare(self, transactions: Iterable[Transaction] | pd.DataFrame) -> tuple[pd.DataFrame, int]:
        """
        Parses dates, drops rows whose date cannot be parsed, and attaches
        the normalized description key. Input order is preserved.
        """
        if isinstance(transactions, pd.DataFrame):
            transactions = to_transactions(transactions)

        rows = []
        skipped = 0

        for txn in transactions:
            parsed = _parse_date(txn.date)
            if parsed is None:
                logger.warning(f"Skipping transaction {txn.id!r}: unparsable date {txn.date!r}.")
                skipped += 1
                continue

            rows.append({
                "txn": txn,
                "key": normalize_description(txn.description),
                "date": parsed,
                "amount": float(txn.amount),
            })

        df = pd.DataFrame(rows, columns=["txn", "key", "date", "amount"])
        return df, skipped

    def _group(self, df: pd.DataFrame):
        """
        Yields (key, group) for expense groups with enough members to show
        recurrence, in order of each key's first appearance.
        """
        expenses = df[df["amount"] > 0]

        for key, group in expenses.groupby("key", sort=False):
            if len(group) < MIN_OCCURRENCES:
                continue
            yield key, group

    # -------------------------------------------------------------------------
    # INTERNAL: SUBSCRIPTION CONSTRUCTION
    # -------------------------------------------------------------------------

    def _build_subscription(self, key: str, group: pd.DataFrame) -> Subscription | None:
        """
        Builds a Subscription from a single description group.

        Returns None if the amounts are inconsistent or the charge interval
        matches no known frequency.
        """
        group = group.sort_values("date", kind="mergesort")

        # --- Amount consistency ---
        amounts = group["amount"].values
        mean_amt = float(np.mean(amounts)) if len(amounts) else 0.0
        spread = float(np.max(amounts) - np.min(amounts)) if len(amounts) else 0.0

        if spread > AMOUNT_SPREAD_TOLERANCE * mean_amt:
            logger.debug(f"Rejected '{key}': spread {spread:.2f} exceeds 20% of mean {mean_amt:.2f}.")
            return None

        # --- Interval consistency ---
        frequency = self._classify_frequency(group)
        if frequency is None:
            logger.debug(f"Rejected '{key}': no frequency band matches.")
            return None

        last_charge = group["date"].iloc[-1].to_pydatetime()

        return Subscription(
            name=key,
            amount=mean_amt,
            frequency=frequency,
            last_charge=last_charge,
            next_estimated=project_next_charge(last_charge, frequency),
            occurrences=len(group),
            transactions=group["txn"].tolist(),
        )

    # -------------------------------------------------------------------------
    # INTERNAL: FREQUENCY CLASSIFICATION
    # -------------------------------------------------------------------------

    def _classify_frequency(self, group: pd.DataFrame) -> str | None:
        """
        Classifies the mean whole-day gap between consecutive charges.

        Logic:
            1. Sort dates and take whole-day gaps (elapsed time, floored).
            2. Average the gaps.
            3. Return the frequency whose inclusive band holds the average,
               or None if no band does.
        """
        dates = group["date"].sort_values(kind="mergesort").values
        gaps = np.diff(dates).astype("timedelta64[D]").astype(float)

        if len(gaps) == 0:
            return None

        mean_gap = float(np.mean(gaps))

        for frequency, min_gap, max_gap in FREQUENCY_BANDS:
            if min_gap <= mean_gap <= max_gap:
                return frequency

        return None


def _parse_date(value) -> pd.Timestamp | None:
    """
    Parses a calendar timestamp. Returns None when the value is missing or
    cannot be read as a date. Timezone-aware values are converted to naive UTC.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None

    try:
        parsed = pd.to_datetime(value)
    except (ValueError, TypeError, OverflowError):
        return None

    if parsed is None or pd.isna(parsed):
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert("UTC").tz_localize(None)

    return parsed
