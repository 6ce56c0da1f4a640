#!/usr/bin/env python3
"""
Sui Transaction Timeline

Creates a numbered, step-by-step breakdown of what a transaction did. Steps
are appended in a fixed order and only when triggered, so an empty input
gives an empty timeline.
"""

from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from sui_models import GasInfo, MoveCallInfo, ObjectChange, TimelineStep

# (call keywords, action, description, icon, details), in timeline order
CALL_STEPS: Tuple[Tuple[Tuple[str, ...], str, str, str, Tuple[str, ...]], ...] = (
    (('flashloan', 'borrow'), 'Borrow Flashloan', 'Borrowed assets for flashloan', '⚡',
     ('Temporary borrowing without collateral',)),
    (('swap', 'trade'), 'Execute Swap', 'Swapped tokens', '🔄', ()),
    (('liquidity', 'add_liquidity'), 'Add Liquidity', 'Added liquidity to pool', '💧', ()),
    (('remove_liquidity',), 'Remove Liquidity', 'Removed liquidity from pool', '💧', ()),
    (('repay', 'return'), 'Repay Flashloan', 'Repaid borrowed assets', '💳',
     ('Returned flashloan with interest',)),
    (('mint', 'create'), 'Mint Assets', 'Created new assets', '✨', ()),
)

SWAP_ACTION = 'Execute Swap'
MAX_TRANSFER_DETAILS = 3


def _plural(count: int, noun: str = 'object') -> str:
    return f"{count} {noun}{'s' if count > 1 else ''}"


def generate_timeline(move_call: Optional[MoveCallInfo],
                      object_changes: Sequence[ObjectChange],
                      gas: Optional[GasInfo] = None) -> Tuple[TimelineStep, ...]:
    """
    Build the ordered step list for a transaction.

    Args:
        move_call: The transaction's first Move call, if any
        object_changes: Interpreted object changes
        gas: Gas info; a Pay Gas step is added when the net display cost is positive

    Returns:
        Tuple of TimelineStep numbered 1..N
    """
    # (action, description, icon, details) before numbering
    steps: List[Tuple[str, str, str, Tuple[str, ...]]] = []
    call_name = move_call.fully_qualified_name.lower() if move_call else ''

    transfers = [c for c in object_changes if c.kind == 'transferred']
    created = [c for c in object_changes if c.kind == 'created']
    mutated = [c for c in object_changes if c.kind == 'mutated']
    transfer_details = tuple(t.description for t in transfers[:MAX_TRANSFER_DETAILS])

    swap_reports_transfers = False
    if call_name:
        for keywords, action, description, icon, details in CALL_STEPS:
            if not any(keyword in call_name for keyword in keywords):
                continue
            if action == SWAP_ACTION and transfers and all('Coin' in t.display_type for t in transfers):
                # The swap step already covers the coins that moved
                details = transfer_details
                swap_reports_transfers = True
            steps.append((action, description, icon, details))

    if transfers and not swap_reports_transfers:
        steps.append(('Transfer Assets', f"Transferred {_plural(len(transfers))}", '➡️', transfer_details))

    if created:
        steps.append(('Create Objects', f"Created {_plural(len(created))}", '✨', ()))

    if mutated and 'mutate' not in call_name:
        steps.append(('Update State', f"Modified {_plural(len(mutated))}", '🔄', ()))

    if gas is not None and Decimal(gas.net_total_display) > 0:
        steps.append(('Pay Gas', f"Paid {gas.net_total_display} SUI for gas", '⛽', ('Transaction finalized',)))

    return tuple(
        TimelineStep(ordinal=index, action=action, description=description, icon=icon, details=details)
        for index, (action, description, icon, details) in enumerate(steps, start=1)
    )
