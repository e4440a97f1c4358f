"""
models.py
----------
Core domain models. These are the typed contracts between engine layers.

- Transaction: Input record. Immutable; the engine never mutates or stores it.

- Subscription: Output of the detection layer. One per recurring charge
  pattern. Derived on every run, never persisted.

- SubscriptionSummary: Output of the pipeline. Ordered subscriptions plus
  the monthly / yearly cost roll-ups.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

from config.config_loader import get_display_config


WEEKLY = "weekly"
MONTHLY = "monthly"
QUARTERLY = "quarterly"
YEARLY = "yearly"

FREQUENCIES = (WEEKLY, MONTHLY, QUARTERLY, YEARLY)


@dataclass(frozen=True)
class Transaction:
    """
    A single account transaction as supplied by the caller.

    amount sign convention: positive = money leaving the account (expense),
    negative = money entering (refund, income).
    """

    id: str
    account_id: str
    date: Any                        # datetime, date, pd.Timestamp or ISO string
    description: str
    amount: float
    category: Optional[str] = None   # Optional label. Carried through, never used for detection.


@dataclass
class Subscription:
    """
    A detected recurring charge.

    Produced by RecurringChargeDetector for each normalized-description group
    that passes the amount and interval checks.
    """

    name: str                        # Normalization key
    amount: float                    # Mean of member amounts
    frequency: str                   # "weekly" | "monthly" | "quarterly" | "yearly"
    last_charge: datetime
    next_estimated: datetime
    occurrences: int                 # Always >= 2

    # Evidence, ascending by date
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def transaction_ids(self) -> list[str]:
        return [t.id for t in self.transactions]

    @property
    def account_ids(self) -> list[str]:
        """Distinct account ids in first-seen order."""
        return list(dict.fromkeys(t.account_id for t in self.transactions))


@dataclass
class SubscriptionSummary:
    """Full result of one pipeline run."""

    subscriptions: list[Subscription] = field(default_factory=list)
    monthly_total: float = 0.0
    yearly_total: float = 0.0
    skipped_transactions: int = 0    # Inputs dropped for unparsable dates

    @property
    def count(self) -> int:
        return len(self.subscriptions)


# =============================================================================
# DISPLAY HELPERS
# =============================================================================

def frequency_label(frequency: str) -> str:
    """Human-readable frequency, e.g. "monthly" -> "Monthly"."""
    labels = get_display_config()["frequency_labels"]
    return labels.get(frequency, frequency.capitalize())


def billing_period(frequency: str) -> str:
    """The period a subscription's amount is charged per, e.g. "quarter"."""
    periods = get_display_config()["billing_periods"]
    if frequency not in periods:
        raise ValueError(f"Unknown frequency '{frequency}'. Expected one of {FREQUENCIES}.")
    return periods[frequency]


def upcoming_charges(
    subscriptions: list[Subscription],
    as_of: datetime,
    within_days: int | None = None,
) -> list[Subscription]:
    """
    Subscriptions whose next estimated charge falls on or after `as_of`
    (and, if given, no later than `within_days` after it), soonest first.
    """
    horizon = as_of + timedelta(days=within_days) if within_days is not None else None

    upcoming = [
        s for s in subscriptions
        if s.next_estimated >= as_of and (horizon is None or s.next_estimated <= horizon)
    ]
    return sorted(upcoming, key=lambda s: s.next_estimated)
