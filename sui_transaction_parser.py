#!/usr/bin/env python3
"""
Sui Transaction Parser

Turns the validated raw pieces of a Sui transaction (object deltas, balance
deltas, events, gas fields and the call payload) into typed, described records.
Every function here is pure and never raises on unrecognized values.
"""

import re
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Optional, Mapping, Sequence, Tuple

from sui_utils import (
    TOKEN_DISPLAY_NAMES, STATIC_PRICES, MIST_PER_SUI,
    format_address, format_usd, logger
)
from sui_models import (
    RawObjectChange, RawBalanceChange, RawEvent, RawCallPayload, RawGasCost,
    ObjectChange, Action, MoveCallInfo, EventInfo, GasInfo, BalanceChange
)

# e.g. 0x2::coin::Coin<0x2::sui::SUI>
COIN_TYPE_PATTERN = re.compile(r'::coin::Coin<.*::(\w+)::(\w+)>')
GENERIC_TYPE_PATTERN = re.compile(r'(\w+)<.*>')
# balanceChanges report the bare coin type, e.g. 0x2::sui::SUI
BARE_COIN_TYPE_PATTERN = re.compile(r'^\w+::\w+::(\w+)$')

ACTION_ICONS: Mapping[str, str] = MappingProxyType({
    'transferred': '➡️',
    'created': '✨',
    'mutated': '🔄',
    'deleted': '🗑️',
    'wrapped': '📦',
    'published': '🚀',
})
DEFAULT_ACTION_ICON = '📦'

PROGRAMMABLE_TRANSACTION = 'ProgrammableTransaction'


def get_token_display_name(symbol: str, token_names: Mapping[str, str] = TOKEN_DISPLAY_NAMES) -> str:
    """Resolve a coin symbol to its display name, falling back to the symbol itself"""
    return token_names.get(symbol.upper(), symbol)


def format_object_type(object_type: str, token_names: Mapping[str, str] = TOKEN_DISPLAY_NAMES) -> str:
    """
    Shorten a fully qualified Move type for display.

    Examples:
        0x2::coin::Coin<0x2::sui::SUI>  -> "SUI Coin"
        0xdee9::pool::Pool<A, B>        -> "Pool"
        0x3::staking_pool::staked_sui   -> "Staked Sui"
    """
    match = COIN_TYPE_PATTERN.search(object_type)
    if match:
        return f"{get_token_display_name(match.group(2), token_names)} Coin"

    # Generic types like Pool<X, Y>; type parameters are not resolved further
    if '<' in object_type:
        match = GENERIC_TYPE_PATTERN.search(object_type)
        if match:
            return match.group(1)

    parts = object_type.split('::')
    if len(parts) >= 3:
        name = parts[-1].split('<')[0]
        name = name.replace('_', ' ')
        return re.sub(r'\b(\w)', lambda m: m.group(1).upper(), name)

    return object_type


def describe_object_change(kind: str, display_type: str, recipient: Optional[str] = None) -> str:
    """Build the human-readable description for one object change"""
    if kind == 'created':
        if 'Coin' in display_type:
            return f"Minted new {display_type}"
        elif 'NFT' in display_type:
            return f"Created new NFT: {display_type}"
        return f"Created new {display_type}"
    elif kind == 'mutated':
        if 'Coin' in display_type:
            return f"Updated {display_type} balance"
        elif 'Pool' in display_type or 'LP' in display_type:
            return f"Updated liquidity pool: {display_type}"
        return f"Modified {display_type}"
    elif kind == 'deleted':
        return f"Burned/destroyed {display_type}"
    elif kind == 'transferred':
        short_recipient = format_address(recipient or 'unknown')
        if 'Coin' in display_type:
            return f"Sent {display_type} to {short_recipient}"
        return f"Transferred {display_type} to {short_recipient}"
    elif kind == 'wrapped':
        return f"Wrapped {display_type} into NFT"
    elif kind == 'published':
        return "Deployed new smart contract package"

    logger.warning(f"Unrecognized object change kind {kind!r} for {display_type}")
    return f"Changed {display_type} ({kind or 'unknown'})"


def parse_object_changes(changes: Sequence[RawObjectChange],
                         token_names: Mapping[str, str] = TOKEN_DISPLAY_NAMES) -> Tuple[ObjectChange, ...]:
    """Interpret raw object deltas, one ObjectChange per delta, order preserved"""
    parsed = []
    for change in changes:
        display_type = 'Unknown'
        if change.object_type:
            display_type = format_object_type(change.object_type, token_names)
        if change.kind == 'published':
            display_type = 'Smart Contract'

        parsed.append(ObjectChange(
            kind=change.kind,
            display_type=display_type,
            description=describe_object_change(change.kind, display_type, change.recipient),
            object_id=change.object_id,
            owner=change.owner,
        ))
    return tuple(parsed)


def generate_actions(object_changes: Sequence[ObjectChange]) -> Tuple[Action, ...]:
    """Collapse object changes into one Action per kind, in first-occurrence order"""
    actions: Dict[str, Action] = {}
    for change in object_changes:
        if change.kind not in actions:
            actions[change.kind] = Action(
                kind=change.kind,
                description=change.description,
                icon=ACTION_ICONS.get(change.kind, DEFAULT_ACTION_ICON),
            )
    return tuple(actions.values())


def parse_move_call(payload: RawCallPayload) -> Optional[MoveCallInfo]:
    """
    Extract the first Move call of a programmable transaction.

    Only the first call is surfaced; later calls in the same block are ignored.
    """
    if payload.kind != PROGRAMMABLE_TRANSACTION:
        return None

    for command in payload.commands:
        if command is not None:
            package = format_address(command.package)
            return MoveCallInfo(
                package=package,
                module=command.module,
                function=command.function,
                fully_qualified_name=f"{package}::{command.module}::{command.function}",
                package_id=command.package,
            )
    return None


def parse_events(events: Sequence[RawEvent],
                 token_names: Mapping[str, str] = TOKEN_DISPLAY_NAMES) -> Tuple[EventInfo, ...]:
    parsed = []
    for event in events:
        event_type = format_object_type(event.type, token_names)
        parsed.append(EventInfo(type=event_type, description=f"Event: {event_type}"))
    return tuple(parsed)


def parse_gas_info(gas: RawGasCost) -> GasInfo:
    """Carry the raw gas components; the net total is derived by GasInfo itself"""
    return GasInfo(computation=gas.computation, storage=gas.storage, rebate=gas.rebate)


def format_balance_coin_type(coin_type: str, token_names: Mapping[str, str] = TOKEN_DISPLAY_NAMES) -> str:
    """
    Display type for a balance change's coin type.

    Bare coin types (0x2::sui::SUI) read as "<DisplayName> Coin", the same
    display type the Coin<...> object gets; anything else is formatted as usual.
    """
    match = BARE_COIN_TYPE_PATTERN.match(coin_type)
    if match:
        return f"{get_token_display_name(match.group(1), token_names)} Coin"
    return format_object_type(coin_type, token_names)


def calculate_usd_value(display_type: str, amount_sui: float,
                        prices: Mapping[str, float] = STATIC_PRICES) -> float:
    """Approximate USD value from the static price table (0 for unknown coins)"""
    return amount_sui * prices.get(display_type, 0)


def parse_balance_changes(balance_changes: Sequence[RawBalanceChange],
                          token_names: Mapping[str, str] = TOKEN_DISPLAY_NAMES,
                          prices: Mapping[str, float] = STATIC_PRICES) -> Tuple[BalanceChange, ...]:
    """Interpret signed balance deltas with direction and an approximate fiat value"""
    parsed = []
    for change in balance_changes:
        display_type = format_balance_coin_type(change.coin_type, token_names)
        magnitude = Decimal(abs(change.amount)) / Decimal(MIST_PER_SUI)
        usd_value = calculate_usd_value(display_type, float(magnitude), prices)

        parsed.append(BalanceChange(
            coin_display_type=display_type,
            amount=change.amount,
            amount_display=f"{magnitude:.6f}",
            direction='increase' if change.amount > 0 else 'decrease',
            approx_fiat_value=format_usd(usd_value),
            approx_fiat_usd=usd_value,
            owner=change.owner,
        ))
    return tuple(parsed)
