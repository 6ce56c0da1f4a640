#!/usr/bin/env python3
"""
Sui Transaction Categorizer

Classifies a transaction into a protocol or category by walking an ordered
rule table. The first rule whose predicate holds wins, so the table order is
the priority order:

    named protocol > generic action keyword > transfer heuristic > fallback
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from sui_models import MoveCallInfo, ObjectChange, ProtocolClassification
from sui_utils import logger


@dataclass(frozen=True)
class ClassificationContext:
    """Lower-cased view of a transaction that rule predicates test against"""
    call_name: str
    has_call: bool
    object_types: str
    change_kinds: Tuple[str, ...]

    @classmethod
    def build(cls, move_call: Optional[MoveCallInfo],
              object_changes: Sequence[ObjectChange]) -> 'ClassificationContext':
        call_name = ''
        if move_call:
            call_name = move_call.fully_qualified_name.lower()
            if move_call.package_id:
                call_name = f"{call_name} {move_call.package_id.lower()}"
        return cls(
            call_name=call_name,
            has_call=move_call is not None,
            object_types=' '.join(c.display_type.lower() for c in object_changes),
            change_kinds=tuple(c.kind for c in object_changes),
        )

    def call_contains(self, *keywords: str) -> bool:
        return any(keyword in self.call_name for keyword in keywords)


@dataclass(frozen=True)
class ClassificationRule:
    label: str
    confidence: float
    description: str
    icon: str
    predicate: Callable[[ClassificationContext], bool]
    generic: bool = False
    gas_key: str = 'default'
    narrative: Optional[str] = None
    tip: Optional[str] = None

    def matches(self, context: ClassificationContext) -> bool:
        return self.predicate(context)

    def to_classification(self) -> ProtocolClassification:
        return ProtocolClassification(
            label=self.label,
            confidence=self.confidence,
            description=self.description,
            icon=self.icon,
            generic=self.generic,
            gas_key=self.gas_key,
            narrative=self.narrative,
            tip=self.tip,
        )


def _calls(*keywords: str) -> Callable[[ClassificationContext], bool]:
    return lambda ctx: ctx.call_contains(*keywords)


def _is_nft(ctx: ClassificationContext) -> bool:
    return 'nft' in ctx.object_types or ctx.call_contains('nft')


def _is_simple_transfer(ctx: ClassificationContext) -> bool:
    return not ctx.has_call and 'transferred' in ctx.change_kinds and len(ctx.change_kinds) <= 3


OTHER_RULE = ClassificationRule(
    label='Other',
    confidence=0.5,
    description='Unknown transaction type',
    icon='📦',
    predicate=lambda ctx: True,
    generic=True,
)

DEFAULT_RULES: Tuple[ClassificationRule, ...] = (
    # Named protocols, matched by name or package address
    ClassificationRule(
        label='Cetus',
        confidence=0.95,
        description='Cetus DEX swap transaction',
        icon='🐋',
        predicate=_calls('cetus', '0x1eabed72c53feb3805120a081dc15963c204dc8d091542592abaf7a35689b2fb'),
        gas_key='swap',
        narrative="You interacted with Cetus, a leading DEX on Sui that provides efficient token swaps "
                  "with low slippage and competitive rates.",
        tip="💡 Cetus is a leading DEX on Sui that uses concentrated liquidity. This means liquidity "
            "providers can focus their capital on specific price ranges, leading to better capital "
            "efficiency and lower slippage for traders.",
    ),
    ClassificationRule(
        label='Turbos',
        confidence=0.9,
        description='Turbos Finance transaction',
        icon='🌀',
        predicate=_calls('turbos', '0x91bfbc386a41afcfd9b2533058d7e915a1d3829089cc268ff4333d54d6339ca1'),
        gas_key='swap',
        narrative="You used Turbos Finance, a concentrated liquidity DEX on Sui that offers "
                  "capital-efficient trading with customizable price ranges.",
        tip="💡 Turbos Finance uses concentrated liquidity similar to Uniswap V3. This allows for more "
            "efficient use of capital and better price discovery compared to traditional constant "
            "product AMMs.",
    ),
    ClassificationRule(
        label='Kriya',
        confidence=0.9,
        description='Kriya DEX transaction',
        icon='🔷',
        predicate=_calls('kriya', '0xa0eba10b173538c8fecca1dff298e4883971085b'),
        gas_key='swap',
        narrative="You traded on Kriya, a decentralized exchange on Sui that focuses on providing the "
                  "best execution for your trades.",
        tip="💡 Kriya is designed for optimal trade execution on Sui. It aggregates liquidity from "
            "multiple sources to provide the best possible prices for your trades.",
    ),
    ClassificationRule(
        label='FlowX',
        confidence=0.9,
        description='FlowX Finance transaction',
        icon='🌊',
        predicate=_calls('flowx'),
        gas_key='swap',
        narrative="You interacted with FlowX Finance, a DeFi protocol on Sui offering various financial "
                  "services and trading opportunities.",
        tip="💡 FlowX Finance offers a comprehensive DeFi suite on Sui, including trading, lending, and "
            "yield farming opportunities.",
    ),
    ClassificationRule(
        label='Aftermath',
        confidence=0.9,
        description='Aftermath Finance transaction',
        icon='🌅',
        predicate=_calls('aftermath'),
        gas_key='swap',
        narrative="You used Aftermath Finance, a comprehensive DeFi platform on Sui that aggregates "
                  "liquidity from multiple sources.",
        tip="💡 Aftermath Finance aggregates liquidity from multiple DEXs on Sui, ensuring you get the "
            "best possible execution for your trades across the entire ecosystem.",
    ),
    # Action keywords
    ClassificationRule(
        label='Swap',
        confidence=0.9,
        description='Token swap or trade',
        icon='🔄',
        predicate=_calls('swap', 'trade'),
        gas_key='swap',
        narrative="You performed a token swap on a decentralized exchange. This allows you to trade one "
                  "token for another without needing a centralized intermediary.",
    ),
    ClassificationRule(
        label='Flashloan',
        confidence=0.95,
        description='Flashloan transaction',
        icon='⚡',
        predicate=_calls('flashloan', 'borrow_flashloan'),
        gas_key='flashloan',
        narrative="You took a flashloan, borrowing assets without collateral and repaying them within "
                  "the same transaction.",
    ),
    ClassificationRule(
        label='Liquidity',
        confidence=0.9,
        description='Liquidity pool operation',
        icon='💧',
        predicate=_calls('liquidity', 'add_liquidity', 'remove_liquidity'),
        gas_key='liquidity',
        narrative="You changed your position in a liquidity pool, which determines your share of the "
                  "trading fees that pool earns.",
    ),
    ClassificationRule(
        label='NFT Mint',
        confidence=0.85,
        description='NFT minting',
        icon='✨',
        predicate=lambda ctx: _is_nft(ctx) and ctx.call_contains('mint', 'create'),
        gas_key='nft_mint',
        narrative="You minted a new NFT, creating a unique on-chain object owned by your address.",
    ),
    ClassificationRule(
        label='NFT Transfer',
        confidence=0.85,
        description='NFT transfer',
        icon='🖼️',
        predicate=_is_nft,
        gas_key='nft_transfer',
        narrative="You moved an NFT. Ownership of the object changed hands on the Sui blockchain.",
    ),
    ClassificationRule(
        label='Staking',
        confidence=0.85,
        description='Staking operation',
        icon='🔒',
        predicate=_calls('stake', 'unstake'),
        narrative="You staked your tokens to earn rewards. Staking helps secure the network while "
                  "providing you with passive income.",
    ),
    ClassificationRule(
        label='Governance',
        confidence=0.85,
        description='Governance action',
        icon='🗳️',
        predicate=_calls('vote', 'proposal'),
        narrative="You took part in on-chain governance by voting or submitting a proposal.",
    ),
    # Heuristics and fallbacks
    ClassificationRule(
        label='Transfer',
        confidence=0.8,
        description='Simple token transfer',
        icon='➡️',
        predicate=_is_simple_transfer,
        generic=True,
        gas_key='transfer',
    ),
    ClassificationRule(
        label='Custom Move Call',
        confidence=0.7,
        description='Custom Move function call',
        icon='⚙️',
        predicate=lambda ctx: ctx.has_call,
        generic=True,
    ),
    OTHER_RULE,
)


def categorize_transaction(move_call: Optional[MoveCallInfo],
                           object_changes: Sequence[ObjectChange],
                           rules: Sequence[ClassificationRule] = DEFAULT_RULES) -> ProtocolClassification:
    """
    Classify a transaction by the first matching rule.

    Args:
        move_call: The transaction's first Move call, if any
        object_changes: Interpreted object changes
        rules: Ordered rule table (defaults to DEFAULT_RULES)

    Returns:
        ProtocolClassification; falls back to "Other" if no rule matches
    """
    context = ClassificationContext.build(move_call, object_changes)
    for rule in rules:
        if rule.matches(context):
            logger.debug(f"Classified as {rule.label} (confidence {rule.confidence})")
            return rule.to_classification()
    return OTHER_RULE.to_classification()
