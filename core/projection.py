"""
projection.py
--------------
Projects the next expected charge date for a detected subscription.

Weekly charges advance a fixed 7 days. Monthly, quarterly and yearly charges
advance by calendar months, so a charge on the 31st lands on the last day of
a shorter month instead of spilling into the next one.
"""

from datetime import datetime

import pandas as pd

from core.models import WEEKLY, MONTHLY, QUARTERLY, YEARLY, FREQUENCIES


_MONTHS_AHEAD = {
    MONTHLY: 1,
    QUARTERLY: 3,
    YEARLY: 12,
}


def project_next_charge(last_charge: datetime, frequency: str) -> datetime:
    """
    Returns the next estimated charge date after `last_charge`.

    Raises:
        ValueError: If frequency is not one of the known frequencies.
    """
    last = pd.Timestamp(last_charge)

    if frequency == WEEKLY:
        next_charge = last + pd.Timedelta(days=7)
    elif frequency in _MONTHS_AHEAD:
        next_charge = last + pd.DateOffset(months=_MONTHS_AHEAD[frequency])
    else:
        raise ValueError(f"Unknown frequency '{frequency}'. Expected one of {FREQUENCIES}.")

    return next_charge.to_pydatetime()
