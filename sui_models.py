#!/usr/bin/env python3
"""
Sui Transaction Explainer - Data Models

Typed views of the raw sui_getTransactionBlock response, validated once at the
pipeline boundary, and the immutable records the pipeline derives from it.
"""

import json
from dataclasses import dataclass, fields, is_dataclass
from decimal import Decimal
from typing import Dict, Optional, Any, Mapping, Tuple

from sui_utils import IncompleteTransactionError, parse_int, format_mist, MIST_PER_SUI, logger


def _owner_address(owner: Any) -> Optional[str]:
    """Pull an address out of an owner record ({"AddressOwner": ...} or {"ObjectOwner": ...})"""
    if isinstance(owner, dict):
        return owner.get('AddressOwner') or owner.get('ObjectOwner')
    return None


def _jsonable(value: Any) -> Any:
    """Convert a value for JSON output; integers become decimal strings"""
    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Mapping):
        return {k: _jsonable(v) for k, v in value.items()}
    if is_dataclass(value):
        return value.to_dict()
    return value


class _Serializable:
    """Mixin giving dataclasses a JSON-ready to_dict()"""
    _hidden_fields: Tuple[str, ...] = ()
    _derived_fields: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        out = {}
        for f in fields(self):
            if f.name in self._hidden_fields:
                continue
            out[f.name] = _jsonable(getattr(self, f.name))
        for name in self._derived_fields:
            out[name] = _jsonable(getattr(self, name))
        return out


# ---------------------------------------------------------------------------
# Raw input schema
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RawGasCost:
    """Gas fields from effects.gasUsed, in MIST"""
    computation: int
    storage: int
    rebate: int


@dataclass(frozen=True)
class RawObjectChange:
    """One entry of the objectChanges list"""
    kind: str
    object_id: Optional[str] = None
    object_type: Optional[str] = None
    owner: Optional[str] = None
    recipient: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawObjectChange':
        object_type = data.get('objectType')
        return cls(
            kind=str(data.get('type') or ''),
            # published packages carry packageId instead of objectId
            object_id=data.get('objectId') or data.get('packageId'),
            object_type=object_type if isinstance(object_type, str) else None,
            owner=_owner_address(data.get('owner')),
            recipient=_owner_address(data.get('recipient')),
        )


@dataclass(frozen=True)
class RawBalanceChange:
    """One entry of the balanceChanges list; amount is signed MIST"""
    coin_type: str
    amount: int
    owner: Optional[str] = None


@dataclass(frozen=True)
class RawEvent:
    type: str


@dataclass(frozen=True)
class RawMoveCall:
    package: str
    module: str
    function: str


@dataclass(frozen=True)
class RawCallPayload:
    """
    The transaction's call payload.

    commands holds one entry per command, in order; entries that are not Move
    calls (TransferObjects, SplitCoins, ...) are None.
    """
    kind: str
    commands: Tuple[Optional[RawMoveCall], ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawCallPayload':
        commands = []
        for cmd in data.get('transactions') or []:
            move_call = cmd.get('MoveCall') if isinstance(cmd, dict) else None
            if isinstance(move_call, dict):
                commands.append(RawMoveCall(
                    package=str(move_call.get('package', '')),
                    module=str(move_call.get('module', '')),
                    function=str(move_call.get('function', '')),
                ))
            else:
                commands.append(None)
        return cls(kind=str(data.get('kind') or ''), commands=tuple(commands))


@dataclass(frozen=True)
class RawTransaction:
    """
    Validated sui_getTransactionBlock response.

    Build with from_response(); it raises IncompleteTransactionError when
    effects or call-context data is missing, so downstream code never
    re-checks the shape.
    """
    digest: str
    sender: str
    success: bool
    gas: RawGasCost
    payload: RawCallPayload
    timestamp_ms: Optional[int] = None
    status_error: Optional[str] = None
    object_changes: Tuple[RawObjectChange, ...] = ()
    balance_changes: Tuple[RawBalanceChange, ...] = ()
    events: Tuple[RawEvent, ...] = ()

    @classmethod
    def from_response(cls, data: Any) -> 'RawTransaction':
        """
        Validate a raw transaction response.

        Args:
            data: The `result` object of sui_getTransactionBlock

        Returns:
            RawTransaction

        Raises:
            IncompleteTransactionError: If mandatory effects or call data is missing or malformed
        """
        if not isinstance(data, dict):
            raise IncompleteTransactionError("Transaction data incomplete: expected a mapping")

        digest = data.get('digest')
        if not isinstance(digest, str) or not digest:
            raise IncompleteTransactionError("Transaction data incomplete: missing digest", field='digest')

        effects = data.get('effects')
        if not isinstance(effects, dict):
            raise IncompleteTransactionError("Transaction data incomplete: missing effects", field='effects')

        status = effects.get('status')
        if not isinstance(status, dict) or not status.get('status'):
            raise IncompleteTransactionError("Transaction data incomplete: missing effects.status",
                                             field='effects.status')

        gas_used = effects.get('gasUsed')
        if not isinstance(gas_used, dict):
            raise IncompleteTransactionError("Transaction data incomplete: missing effects.gasUsed",
                                             field='effects.gasUsed')
        try:
            gas = RawGasCost(
                computation=parse_int(gas_used.get('computationCost')),
                storage=parse_int(gas_used.get('storageCost')),
                rebate=parse_int(gas_used.get('storageRebate')),
            )
        except ValueError as e:
            raise IncompleteTransactionError(f"Transaction data incomplete: malformed gas cost ({e})",
                                             field='effects.gasUsed') from e

        transaction = data.get('transaction')
        tx_data = transaction.get('data') if isinstance(transaction, dict) else None
        if not isinstance(tx_data, dict):
            raise IncompleteTransactionError("Transaction data incomplete: missing transaction data",
                                             field='transaction')

        sender = tx_data.get('sender')
        if not isinstance(sender, str) or not sender:
            raise IncompleteTransactionError("Transaction data incomplete: missing sender",
                                             field='transaction.data.sender')

        payload = tx_data.get('transaction')
        if not isinstance(payload, dict):
            raise IncompleteTransactionError("Transaction data incomplete: missing call payload",
                                             field='transaction.data.transaction')

        timestamp_ms = None
        if data.get('timestampMs') is not None:
            try:
                timestamp_ms = parse_int(data.get('timestampMs'), default=None)
            except ValueError:
                logger.warning(f"Ignoring malformed timestampMs for {digest}: {data.get('timestampMs')!r}")

        object_changes = tuple(
            RawObjectChange.from_dict(change)
            for change in data.get('objectChanges') or []
            if isinstance(change, dict)
        )

        balance_changes = []
        for change in data.get('balanceChanges') or []:
            if not isinstance(change, dict):
                continue
            try:
                amount = parse_int(change.get('amount'))
            except ValueError:
                logger.warning(f"Skipping balance change with malformed amount: {change.get('amount')!r}")
                continue
            balance_changes.append(RawBalanceChange(
                coin_type=str(change.get('coinType') or ''),
                amount=amount,
                owner=_owner_address(change.get('owner')),
            ))

        events = tuple(
            RawEvent(type=str(event.get('type') or ''))
            for event in data.get('events') or []
            if isinstance(event, dict)
        )

        return cls(
            digest=digest,
            sender=sender,
            success=status.get('status') == 'success',
            gas=gas,
            payload=RawCallPayload.from_dict(payload),
            timestamp_ms=timestamp_ms,
            status_error=status.get('error'),
            object_changes=object_changes,
            balance_changes=tuple(balance_changes),
            events=events,
        )


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ObjectChange(_Serializable):
    kind: str
    display_type: str
    description: str
    object_id: Optional[str] = None
    owner: Optional[str] = None


@dataclass(frozen=True)
class Action(_Serializable):
    kind: str
    description: str
    icon: str


@dataclass(frozen=True)
class MoveCallInfo(_Serializable):
    package: str
    module: str
    function: str
    fully_qualified_name: str
    package_id: Optional[str] = None


@dataclass(frozen=True)
class ProtocolClassification(_Serializable):
    """Result of the protocol classifier; confidence is fixed per rule"""
    label: str
    confidence: float
    description: str
    icon: str
    generic: bool = False
    gas_key: str = 'default'
    narrative: Optional[str] = None
    tip: Optional[str] = None

    _hidden_fields = ('generic', 'gas_key', 'narrative', 'tip')


@dataclass(frozen=True)
class GasInfo(_Serializable):
    """Gas cost in MIST. The net total is always derived from the three components."""
    computation: int
    storage: int
    rebate: int

    _derived_fields = ('net_total', 'net_total_display')

    @property
    def net_total(self) -> int:
        return self.computation + self.storage - self.rebate

    @property
    def net_total_display(self) -> str:
        return format_mist(self.net_total)

    @property
    def net_total_sui(self) -> Decimal:
        return Decimal(self.net_total) / Decimal(MIST_PER_SUI)


@dataclass(frozen=True)
class GasEstimate(_Serializable):
    cost: float
    tier: str
    comparison: str
    tip: Optional[str] = None


@dataclass(frozen=True)
class BalanceChange(_Serializable):
    coin_display_type: str
    amount: int
    amount_display: str
    direction: str
    approx_fiat_value: str
    approx_fiat_usd: float
    owner: Optional[str] = None

    @property
    def signed_fiat_usd(self) -> float:
        return self.approx_fiat_usd if self.direction == 'increase' else -self.approx_fiat_usd


@dataclass(frozen=True)
class EventInfo(_Serializable):
    type: str
    description: str


@dataclass(frozen=True)
class TimelineStep(_Serializable):
    ordinal: int
    action: str
    description: str
    icon: str
    details: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TransactionExplanation(_Serializable):
    """The pipeline's sole output"""
    digest: str
    sender: str
    summary: str
    success: bool
    gas: GasInfo
    classification: ProtocolClassification
    gas_estimate: GasEstimate
    timestamp: Optional[int] = None
    narrative: Optional[str] = None
    status_error: Optional[str] = None
    move_call: Optional[MoveCallInfo] = None
    actions: Tuple[Action, ...] = ()
    object_changes: Tuple[ObjectChange, ...] = ()
    events: Tuple[EventInfo, ...] = ()
    balance_changes: Tuple[BalanceChange, ...] = ()
    educational_content: Tuple[str, ...] = ()
    timeline: Tuple[TimelineStep, ...] = ()

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
