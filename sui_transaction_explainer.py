#!/usr/bin/env python3
"""
Sui Transaction Explainer

Explains a single Sui transaction in human terms: what moved, what was created
or destroyed, which Move function was called, what it cost, and a short
narrative with educational notes.

Usage:
    python3 sui_transaction_explainer.py <digest-or-explorer-url> [--json] [-o FILE]
    python3 sui_transaction_explainer.py --from-file tx.json
"""

import argparse
import json
import sys
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, List, Optional, Any, Mapping, Sequence, Tuple

from sui_utils import (
    TOKEN_DISPLAY_NAMES, STATIC_PRICES, AVERAGE_GAS_COSTS,
    SuiToolError, format_address, format_timestamp, logger
)
from sui_base import SuiTool
from sui_models import (
    RawTransaction, TransactionExplanation, MoveCallInfo, ObjectChange,
    BalanceChange, GasInfo, ProtocolClassification
)
from sui_transaction_parser import (
    parse_object_changes, generate_actions, parse_move_call, parse_events,
    parse_gas_info, parse_balance_changes
)
from sui_transaction_categorizer import ClassificationRule, DEFAULT_RULES, categorize_transaction
from sui_gas_estimator import estimate_gas_cost
from sui_transaction_timeline import generate_timeline
from sui_transaction_reader import SuiTransactionReader

# Version number (semantic versioning: MAJOR.MINOR.PATCH)
__version__ = "1.0.0"

FALLBACK_SUMMARY = "Transaction executed successfully."

PORTFOLIO_UP_REMARK = ("💰 Your portfolio value increased from this transaction. This could be from trading "
                       "profits, staking rewards, or receiving tokens.")
PORTFOLIO_DOWN_REMARK = ("📉 Your portfolio value decreased from this transaction. This is normal for trades, "
                         "fees, or when sending tokens to others.")
LP_REMARK = ("🔄 Liquidity Pool (LP) tokens represent your share in a trading pool. When you provide "
             "liquidity, you earn fees from trades that happen in that pool.")
CREATION_REMARK = ("✨ Creating new objects on Sui is gas-efficient. The network's object-centric model makes "
                   "it easy to create and manage digital assets.")
REBATE_REMARK = ("⚡ Sui's gas model is unique - you can earn SUI from storage rebates when you delete "
                 "objects, making some transactions actually profitable!")

VERY_CHEAP_GAS = Decimal('0.001')


def _unique(values: Sequence[str]) -> List[str]:
    """Distinct values in first-seen order"""
    return list(dict.fromkeys(values))


def _plural(count: int, noun: str = 'object') -> str:
    return f"{count} {noun}{'s' if count > 1 else ''}"


def generate_summary(move_call: Optional[MoveCallInfo],
                     object_changes: Sequence[ObjectChange],
                     classification: ProtocolClassification) -> str:
    """
    One-line summary of the transaction.

    Leads with the protocol description when the call was recognized, then
    describes coin movement, and falls back to object counts.
    """
    parts = []

    if move_call:
        if not classification.generic:
            parts.append(classification.description)
        else:
            parts.append(f"Called {move_call.module}::{move_call.function}")

    coin_transfers = [c for c in object_changes if 'Coin' in c.display_type and c.kind == 'transferred']
    coin_mutations = [c for c in object_changes if 'Coin' in c.display_type and c.kind == 'mutated']

    if coin_transfers:
        coin_types = _unique([c.display_type for c in coin_transfers])
        if len(coin_types) == 1:
            parts.append(f"Transferred {coin_types[0]}")
        elif len(coin_types) == 2:
            # Two coin types moving is read as a swap; this is a heuristic, not verified on-chain
            parts.append(f"Swapped {coin_types[0]} for {coin_types[1]}")
        else:
            parts.append(f"Transferred {len(coin_types)} different tokens")
    elif coin_mutations:
        coin_types = _unique([c.display_type for c in coin_mutations])
        if len(coin_types) == 1:
            parts.append(f"Updated {coin_types[0]} balance")
        else:
            parts.append(f"Updated {len(coin_types)} token balances")
    else:
        transfers = sum(1 for c in object_changes if c.kind == 'transferred')
        created = sum(1 for c in object_changes if c.kind == 'created')
        mutated = sum(1 for c in object_changes if c.kind == 'mutated')
        if transfers:
            parts.append(f"{_plural(transfers)} transferred")
        if created:
            parts.append(f"{_plural(created)} created")
        if mutated:
            parts.append(f"{_plural(mutated)} modified")

    if not parts:
        return FALLBACK_SUMMARY
    return ', '.join(parts)


def generate_detailed_explanation(move_call: Optional[MoveCallInfo],
                                  object_changes: Sequence[ObjectChange],
                                  classification: ProtocolClassification,
                                  gas: GasInfo) -> Optional[str]:
    """Longer narrative: protocol, then object changes, then gas. None if there is nothing to say."""
    explanations = []

    if move_call and classification.narrative:
        explanations.append(classification.narrative)

    coin_changes = [c for c in object_changes if 'Coin' in c.display_type]
    has_transfers = any(c.kind == 'transferred' for c in object_changes)
    has_mutations = any(c.kind == 'mutated' for c in object_changes)

    if has_transfers and coin_changes:
        coin_types = _unique([c.display_type for c in coin_changes])
        if len(coin_types) == 2:
            explanations.append(f"You swapped {coin_types[0]} for {coin_types[1]}. This transaction involved "
                                f"exchanging one type of token for another at the current market rate.")
        elif len(coin_types) == 1:
            explanations.append(f"You transferred {coin_types[0]} to another address. The tokens have been "
                                f"moved from your wallet to the recipient's wallet.")
    elif has_mutations and coin_changes:
        explanations.append("Your token balances were updated. This typically happens when you receive "
                            "tokens, make a purchase, or when your staking rewards are distributed.")

    total_cost = Decimal(gas.net_total_display)
    if total_cost < 0:
        explanations.append("Great news! You actually earned SUI from this transaction due to storage rebates. "
                            "Sui's unique gas model can reward users when they free up storage space.")
    elif total_cost == 0:
        pass
    elif total_cost < VERY_CHEAP_GAS:
        explanations.append("This transaction was very cost-effective, costing less than $0.01. Sui's "
                            "efficient architecture keeps transaction costs low for users.")
    else:
        explanations.append(f"This transaction cost {gas.net_total_display} SUI in gas fees. The cost covers "
                            f"computation and storage, with any storage rebates deducted from the total.")

    if not explanations:
        return None
    return ' '.join(explanations)


def generate_educational_content(move_call: Optional[MoveCallInfo],
                                 object_changes: Sequence[ObjectChange],
                                 balance_changes: Sequence[BalanceChange],
                                 classification: ProtocolClassification) -> Tuple[str, ...]:
    """Educational remarks tailored to the protocol and the changes, always ending with the rebate note"""
    content = []

    if move_call and classification.tip:
        content.append(classification.tip)

    if balance_changes:
        total_value = sum(change.signed_fiat_usd for change in balance_changes)
        if total_value > 0:
            content.append(PORTFOLIO_UP_REMARK)
        elif total_value < 0:
            content.append(PORTFOLIO_DOWN_REMARK)

    if any('LP' in c.display_type for c in object_changes):
        content.append(LP_REMARK)

    if any(c.kind == 'created' for c in object_changes):
        content.append(CREATION_REMARK)

    content.append(REBATE_REMARK)
    return tuple(content)


class SuiTransactionExplainer(SuiTool):
    def __init__(self, rpc_url: Optional[str] = None,
                 headers: Optional[Dict[str, str]] = None,
                 token_names: Optional[Mapping[str, str]] = None,
                 prices: Optional[Mapping[str, float]] = None,
                 gas_averages: Optional[Mapping[str, float]] = None,
                 rules: Optional[Sequence[ClassificationRule]] = None,
                 reader: Optional[SuiTransactionReader] = None) -> None:
        """
        Initialize the explainer.

        Lookup tables default to the configured ones; replacements are copied
        into read-only mappings so one explainer never sees another's tables.
        """
        super().__init__(rpc_url, headers)
        self.token_names: Mapping[str, str] = (
            MappingProxyType(dict(token_names)) if token_names is not None else TOKEN_DISPLAY_NAMES)
        self.prices: Mapping[str, float] = (
            MappingProxyType(dict(prices)) if prices is not None else STATIC_PRICES)
        self.gas_averages: Mapping[str, float] = (
            MappingProxyType(dict(gas_averages)) if gas_averages is not None else AVERAGE_GAS_COSTS)
        self.rules: Tuple[ClassificationRule, ...] = tuple(rules) if rules is not None else DEFAULT_RULES
        self.reader = reader or SuiTransactionReader(self.rpc_url, self.headers)

    def explain(self, response: Dict[str, Any]) -> TransactionExplanation:
        """
        Explain a raw sui_getTransactionBlock result.

        Raises:
            IncompleteTransactionError: If effects or call-context data is missing
        """
        return self.explain_raw(RawTransaction.from_response(response))

    def explain_raw(self, raw: RawTransaction) -> TransactionExplanation:
        """Run the interpretation pipeline over a validated transaction"""
        logger.debug(f"Explaining transaction {raw.digest}")

        object_changes = parse_object_changes(raw.object_changes, self.token_names)
        actions = generate_actions(object_changes)
        move_call = parse_move_call(raw.payload)
        classification = categorize_transaction(move_call, object_changes, self.rules)
        gas = parse_gas_info(raw.gas)
        gas_estimate = estimate_gas_cost(float(gas.net_total_sui), classification.gas_key, self.gas_averages)
        balance_changes = parse_balance_changes(raw.balance_changes, self.token_names, self.prices)
        events = parse_events(raw.events, self.token_names)

        timeline = generate_timeline(move_call, object_changes, gas)
        summary = generate_summary(move_call, object_changes, classification)
        narrative = generate_detailed_explanation(move_call, object_changes, classification, gas)
        educational_content = generate_educational_content(move_call, object_changes, balance_changes,
                                                           classification)

        return TransactionExplanation(
            digest=raw.digest,
            sender=raw.sender,
            summary=summary,
            success=raw.success,
            gas=gas,
            classification=classification,
            gas_estimate=gas_estimate,
            timestamp=raw.timestamp_ms,
            narrative=narrative,
            status_error=raw.status_error,
            move_call=move_call,
            actions=actions,
            object_changes=object_changes,
            events=events,
            balance_changes=balance_changes,
            educational_content=educational_content,
            timeline=timeline,
        )

    def explain_digest(self, input_str: str) -> TransactionExplanation:
        """Fetch a transaction by digest (or explorer URL) and explain it"""
        digest = self.reader.extract_digest_from_input(input_str)
        logger.info(f"Processing transaction: {digest}")
        return self.explain(self.reader.get_transaction_block(digest))


def format_markdown(explanation: TransactionExplanation) -> str:
    """Render an explanation as markdown"""
    digest = explanation.digest
    status = "Success" if explanation.success else "Failed"
    if explanation.status_error:
        status += f" ({explanation.status_error})"

    markdown = "# Transaction Explained\n\n"
    markdown += f"**Transaction:** [{digest}](https://suiscan.xyz/mainnet/tx/{digest})\n"
    markdown += f"**Sender:** [{format_address(explanation.sender)}](https://suiscan.xyz/mainnet/account/{explanation.sender})\n"
    if explanation.timestamp is not None:
        markdown += f"**Date & Time:** {format_timestamp(explanation.timestamp)}\n"
    markdown += f"**Status:** {status}\n"
    category = explanation.classification
    markdown += f"**Category:** {category.icon} {category.label} ({category.confidence:.0%} confidence)\n\n"

    markdown += f"## Summary\n\n{explanation.summary}\n\n"
    if explanation.narrative:
        markdown += f"{explanation.narrative}\n\n"

    if explanation.move_call:
        markdown += f"**Move Call:** `{explanation.move_call.fully_qualified_name}`\n\n"

    if explanation.timeline:
        markdown += "## Timeline\n\n"
        for step in explanation.timeline:
            markdown += f"{step.ordinal}. {step.icon} **{step.action}:** {step.description}\n"
            for detail in step.details:
                markdown += f"   - {detail}\n"
        markdown += "\n"

    if explanation.actions:
        markdown += "## Actions\n\n"
        for action in explanation.actions:
            markdown += f"- {action.icon} {action.description}\n"
        markdown += "\n"

    if explanation.balance_changes:
        markdown += "## Balance Changes\n\n"
        for change in explanation.balance_changes:
            sign = '+' if change.direction == 'increase' else '-'
            markdown += f"- **{change.coin_display_type}**: {sign}{change.amount_display} (~{change.approx_fiat_value})\n"
        markdown += "\n"

    gas = explanation.gas
    markdown += "## Gas\n\n"
    markdown += f"- **Net cost:** {gas.net_total_display} SUI ({explanation.gas_estimate.comparison})\n"
    markdown += f"- Computation: {gas.computation:,} MIST / Storage: {gas.storage:,} MIST / Rebate: {gas.rebate:,} MIST\n"
    if explanation.gas_estimate.tip:
        markdown += f"- Tip: {explanation.gas_estimate.tip}\n"
    markdown += "\n"

    if explanation.events:
        markdown += f"## Events ({len(explanation.events)})\n\n"
        for event in explanation.events:
            markdown += f"- {event.description}\n"
        markdown += "\n"

    markdown += "## Learn More\n\n"
    for remark in explanation.educational_content:
        markdown += f"- {remark}\n"

    return markdown


def load_response_file(path: str) -> Dict[str, Any]:
    """Read a saved sui_getTransactionBlock response (bare result or full JSON-RPC envelope)"""
    with open(path, 'r') as f:
        data = json.load(f)
    if isinstance(data, dict) and 'result' in data and 'jsonrpc' in data:
        return data['result']
    return data


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Explain a Sui transaction in human-readable terms')
    parser.add_argument('input', nargs='?', help='Transaction digest or explorer URL')
    parser.add_argument('-f', '--from-file', help='Explain a saved sui_getTransactionBlock JSON response')
    parser.add_argument('--json', action='store_true', help='Output JSON instead of markdown')
    parser.add_argument('--rpc-url', help='Sui fullnode JSON-RPC URL (defaults to config or mainnet)')
    parser.add_argument('-o', '--output', help='Output file (optional)')
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    args = parser.parse_args(argv)
    if not args.input and not args.from_file:
        parser.error('a transaction digest/URL or --from-file is required')

    explainer = SuiTransactionExplainer(rpc_url=args.rpc_url)

    try:
        if args.from_file:
            explanation = explainer.explain(load_response_file(args.from_file))
        else:
            explanation = explainer.explain_digest(args.input)
    except (SuiToolError, OSError, json.JSONDecodeError) as e:
        logger.error(f"Error processing transaction: {e}")
        print(f"Error processing transaction: {e}", file=sys.stderr)
        return 1

    result = explanation.to_json() if args.json else format_markdown(explanation)

    if args.output:
        with open(args.output, 'w') as f:
            f.write(result)
        print(f"Results written to {args.output}")
    else:
        print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
