# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Premium due-date arithmetic.

Renewals are computed from the reconciliation instant, not from the previous
due date. Month arithmetic is calendar-based: the day of month is kept and
clamped to the last day of a shorter target month (Jan 31 + 1 month is
Feb 28 or 29).
"""

from datetime import datetime

from beartype import beartype
from dateutil.relativedelta import relativedelta

from ..models.application import PaymentFrequency

_MONTHS_PER_PERIOD = {
    PaymentFrequency.MONTHLY: 1,
    PaymentFrequency.YEARLY: 12,
}


@beartype
def add_months(moment: datetime, months: int) -> datetime:
    """Shift ``moment`` by whole calendar months, keeping the time of day."""
    return moment + relativedelta(months=months)


@beartype
def next_due_date(now: datetime, frequency: PaymentFrequency) -> datetime:
    """Next premium due date for a payment made at ``now``."""
    return add_months(now, _MONTHS_PER_PERIOD[frequency])
