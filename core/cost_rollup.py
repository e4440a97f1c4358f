"""
cost_rollup.py
---------------
Re-expresses subscription costs on a common time basis and orders the
detected subscriptions for output.

Conversion factors (fixed):

    frequency   per month      per year
    weekly      x 4.33         x 52
    monthly     x 1            x 12
    quarterly   / 3            x 4
    yearly      / 12           x 1
"""

from core.models import Subscription, WEEKLY, MONTHLY, QUARTERLY, YEARLY


MONTHLY_FACTORS = {
    WEEKLY: 4.33,
    MONTHLY: 1.0,
    QUARTERLY: 1.0 / 3.0,
    YEARLY: 1.0 / 12.0,
}

YEARLY_FACTORS = {
    WEEKLY: 52.0,
    MONTHLY: 12.0,
    QUARTERLY: 4.0,
    YEARLY: 1.0,
}


def monthly_equivalent(subscription: Subscription) -> float:
    return subscription.amount * MONTHLY_FACTORS.get(subscription.frequency, 0.0)


def yearly_equivalent(subscription: Subscription) -> float:
    return subscription.amount * YEARLY_FACTORS.get(subscription.frequency, 0.0)


def compute_totals(subscriptions: list[Subscription]) -> tuple[float, float]:
    """
    Returns (monthly_total, yearly_total) over all subscriptions.
    An empty list gives (0.0, 0.0).
    """
    monthly_total = sum((monthly_equivalent(s) for s in subscriptions), 0.0)
    yearly_total = sum((yearly_equivalent(s) for s in subscriptions), 0.0)
    return monthly_total, yearly_total


def cost_share(subscription: Subscription, subscriptions: list[Subscription]) -> float:
    """
    Percentage of the combined monthly-equivalent cost taken by one
    subscription. Returns 0.0 when the combined cost is zero.
    """
    monthly_total, _ = compute_totals(subscriptions)
    if monthly_total <= 0:
        return 0.0
    return monthly_equivalent(subscription) / monthly_total * 100


def sort_subscriptions(subscriptions: list[Subscription]) -> list[Subscription]:
    """Highest amount first. Ties keep their incoming order."""
    return sorted(subscriptions, key=lambda s: s.amount, reverse=True)
