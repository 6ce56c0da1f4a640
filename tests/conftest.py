"""
Pytest configuration and shared fixtures for Sui Transaction Explainer tests.
"""
import copy
import pytest

SENDER = '0x' + 'a' * 64
RECIPIENT = '0x' + 'b' * 64
CETUS_PACKAGE = '0x1eabed72c53feb3805120a081dc15963c204dc8d091542592abaf7a35689b2fb'
SUI_COIN_TYPE = '0x2::coin::Coin<0x2::sui::SUI>'
USDC_COIN_TYPE = '0x2::coin::Coin<0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC>'
DIGEST = 'GZbJkKrDpH6vSU2SK5uGBVwrQKXcEnLPQcVXx3bYDnzT'


def make_response(move_calls=None, object_changes=None, balance_changes=None, events=None,
                  computation='0', storage='0', rebate='0', status='success', timestamp_ms='1700000000000'):
    """Build a sui_getTransactionBlock result"""
    commands = []
    for package, module, function in move_calls or []:
        commands.append({'MoveCall': {'package': package, 'module': module, 'function': function,
                                      'arguments': [{'Input': 0}]}})
    if not commands:
        commands.append({'TransferObjects': [[{'Input': 0}], {'Input': 1}]})

    return {
        'digest': DIGEST,
        'timestampMs': timestamp_ms,
        'transaction': {
            'data': {
                'sender': SENDER,
                'transaction': {
                    'kind': 'ProgrammableTransaction',
                    'inputs': [],
                    'transactions': commands,
                },
            },
        },
        'effects': {
            'status': {'status': status},
            'gasUsed': {
                'computationCost': computation,
                'storageCost': storage,
                'storageRebate': rebate,
                'nonRefundableStorageFee': '0',
            },
        },
        'objectChanges': object_changes or [],
        'balanceChanges': balance_changes or [],
        'events': events or [],
    }


@pytest.fixture
def build_response():
    """Factory for raw transaction responses"""
    return make_response


@pytest.fixture
def cetus_swap_response():
    """Cetus swap moving one SUI coin, 0.0006 SUI net gas"""
    return make_response(
        move_calls=[(CETUS_PACKAGE, 'cetus', 'swap')],
        object_changes=[{
            'type': 'transferred',
            'sender': SENDER,
            'recipient': {'AddressOwner': RECIPIENT},
            'objectType': SUI_COIN_TYPE,
            'objectId': '0x' + 'c' * 64,
            'version': '12',
            'digest': 'x',
        }],
        computation='500000',
        storage='200000',
        rebate='100000',
    )


@pytest.fixture
def nft_mint_response():
    """Two NFTs created without a Move call and no gas charged"""
    return make_response(
        object_changes=[
            {
                'type': 'created',
                'sender': SENDER,
                'owner': {'AddressOwner': SENDER},
                'objectType': '0xabc::collection::HeroNFT',
                'objectId': '0x' + 'd' * 64,
            },
            {
                'type': 'created',
                'sender': SENDER,
                'owner': {'AddressOwner': SENDER},
                'objectType': '0xabc::collection::HeroNFT',
                'objectId': '0x' + 'e' * 64,
            },
        ],
    )


@pytest.fixture
def copy_response():
    """Deep copy helper so tests can mutate a fixture safely"""
    return copy.deepcopy
