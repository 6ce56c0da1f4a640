#!/usr/bin/env python3
"""
Sui Gas Estimator

Puts a transaction's net gas cost in context by comparing it with the
average cost of similar transactions.
"""

from typing import Mapping, Optional, Tuple

from sui_utils import AVERAGE_GAS_COSTS
from sui_models import GasEstimate

# Absolute thresholds (SUI) checked before the ratio to average
VERY_CHEAP_THRESHOLD = 0.001
CHEAP_THRESHOLD = 0.01

# (upper ratio bound, tier, label, tip); the last tier has no upper bound
RATIO_TIERS: Tuple[Tuple[Optional[float], str, str, Optional[str]], ...] = (
    (1.5, 'normal', 'Normal', None),
    (3.0, 'expensive', 'Expensive', 'Consider batching transactions to save gas'),
    (None, 'very_expensive', 'Very expensive',
     'This transaction used significantly more gas than typical. Check for optimization opportunities.'),
)


def get_average_cost(transaction_type: str, averages: Mapping[str, float] = AVERAGE_GAS_COSTS) -> float:
    """Average cost for a transaction type, falling back to the 'default' bucket"""
    return averages.get(transaction_type) or averages.get('default') or 0.01


def estimate_gas_cost(cost: float, transaction_type: str,
                      averages: Mapping[str, float] = AVERAGE_GAS_COSTS) -> GasEstimate:
    """
    Bucket a gas cost into one of five tiers.

    Args:
        cost: Net gas cost in SUI (may be negative when rebates exceed cost)
        transaction_type: Key into the averages table (e.g. 'swap', 'transfer')
        averages: Average cost per transaction type, in SUI

    Returns:
        GasEstimate with tier, comparison string and optional tip
    """
    avg_cost = get_average_cost(transaction_type, averages)
    ratio = cost / avg_cost
    percent = f"{ratio * 100:.0f}% of average"

    if cost < VERY_CHEAP_THRESHOLD:
        return GasEstimate(cost=cost, tier='very_cheap', comparison=f"Extremely cheap ({percent})")
    if cost < CHEAP_THRESHOLD:
        return GasEstimate(cost=cost, tier='cheap', comparison=f"Cheap ({percent})")

    for upper, tier, label, tip in RATIO_TIERS:
        if upper is None or ratio < upper:
            break
    return GasEstimate(cost=cost, tier=tier, comparison=f"{label} ({percent})", tip=tip)
