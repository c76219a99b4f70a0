"""Recurring-charge detection by merchant amount consistency"""

import math
from collections import defaultdict
from typing import Dict, List, Optional, Sequence
from insights_gateway.domain.models import RecurringCharge, Transaction

MIN_OCCURRENCES = 3
MAX_VARIATION = 0.15  # stddev / mean
REFERENCE_MONTHS = 3


def coefficient_of_variation(amounts: Sequence[float]) -> Optional[float]:
    """Population stddev / mean, or None when the mean is zero"""
    if not amounts:
        return None
    mean = sum(amounts) / len(amounts)
    if mean == 0:
        return None
    variance = sum((a - mean) ** 2 for a in amounts) / len(amounts)
    return math.sqrt(variance) / mean


def find_recurring_charges(transactions: List[Transaction]) -> List[RecurringCharge]:
    """
    Group transactions by merchant and keep groups that look recurring.

    A group is recurring when it has at least 3 members and its amounts vary
    by less than 15% of their mean. Frequency is normalized to a 3-month
    window (4 charges -> 1.33/month). Groups are ordered newest-first before
    the last date is read, so caller ordering does not matter.
    """
    groups: Dict[str, List[Transaction]] = defaultdict(list)
    for txn in transactions:
        if txn.merchant:
            groups[txn.merchant].append(txn)

    recurring = []
    for merchant in sorted(groups):
        txns = sorted(groups[merchant], key=lambda t: t.date, reverse=True)
        if len(txns) < MIN_OCCURRENCES:
            continue

        amounts = [t.amount for t in txns]
        variation = coefficient_of_variation(amounts)
        if variation is None or variation >= MAX_VARIATION:
            continue

        recurring.append(
            RecurringCharge(
                merchant=merchant,
                amount=sum(amounts) / len(amounts),
                frequency=len(txns) / REFERENCE_MONTHS,
                last_date=txns[0].date,
            )
        )

    return recurring
