"""
Tests for sui_transaction_parser module.
"""
import pytest

from sui_models import (
    RawObjectChange, RawBalanceChange, RawEvent, RawCallPayload, RawMoveCall, RawGasCost, ObjectChange
)
from sui_transaction_parser import (
    format_object_type, get_token_display_name, parse_object_changes, generate_actions,
    parse_move_call, parse_events, parse_gas_info, parse_balance_changes, calculate_usd_value,
    format_balance_coin_type
)

RECIPIENT = '0x' + 'b' * 64


class TestFormatObjectType:
    """Tests for format_object_type function"""

    def test_sui_coin(self):
        assert format_object_type('0x2::coin::Coin<0x2::sui::SUI>') == 'SUI Coin'

    def test_known_coin_with_long_address(self):
        coin_type = '0x2::coin::Coin<0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC>'
        assert format_object_type(coin_type) == 'USDC Coin'

    def test_unknown_coin_symbol_kept_as_given(self):
        assert format_object_type('0x2::coin::Coin<0x9::meme::Wagmi>') == 'Wagmi Coin'

    def test_coin_without_inner_type(self):
        assert format_object_type('0x2::coin::Coin') == 'Coin'

    def test_coin_metadata_is_not_a_coin(self):
        assert format_object_type('0x2::coin::CoinMetadata<0xabc::usdc::USDC>') == 'CoinMetadata'
        assert format_object_type('0x2::coin::TreasuryCap<0xabc::usdc::USDC>') == 'TreasuryCap'

    def test_plain_struct(self):
        assert format_object_type('0xabc::nft::Hero') == 'Hero'

    def test_generic_type(self):
        assert format_object_type('0xdee9::pool::Pool<0x2::sui::SUI, 0x5::usdc::USDC>') == 'Pool'

    def test_snake_case_struct(self):
        assert format_object_type('0x3::staking_pool::staked_sui') == 'Staked Sui'

    def test_two_segments_unchanged(self):
        assert format_object_type('0x2::sui') == '0x2::sui'

    def test_plain_string_unchanged(self):
        assert format_object_type('Hero') == 'Hero'

    def test_custom_token_table(self):
        assert format_object_type('0x2::coin::Coin<0x2::sui::SUI>', {'SUI': 'Sui'}) == 'Sui Coin'

    def test_token_display_name_is_case_insensitive(self):
        assert get_token_display_name('usdc') == 'USDC'
        assert get_token_display_name('Wagmi') == 'Wagmi'


class TestParseObjectChanges:
    """Tests for parse_object_changes function"""

    def _describe(self, kind, object_type=None, recipient=None):
        change = RawObjectChange(kind=kind, object_id='0x1', object_type=object_type, recipient=recipient)
        return parse_object_changes([change])[0]

    def test_created_coin(self):
        assert self._describe('created', '0x2::coin::Coin<0x2::sui::SUI>').description == 'Minted new SUI Coin'

    def test_created_nft(self):
        change = self._describe('created', '0xabc::collection::HeroNFT')
        assert change.description == 'Created new NFT: HeroNFT'

    def test_created_other(self):
        assert self._describe('created', '0xabc::nft::Hero').description == 'Created new Hero'

    def test_created_coin_metadata(self):
        change = self._describe('created', '0x2::coin::CoinMetadata<0xabc::usdc::USDC>')
        assert change.description == 'Created new CoinMetadata'

    def test_mutated_coin(self):
        change = self._describe('mutated', '0x2::coin::Coin<0x2::sui::SUI>')
        assert change.description == 'Updated SUI Coin balance'

    def test_mutated_pool(self):
        change = self._describe('mutated', '0xdee9::pool::Pool<0x2::sui::SUI, 0x5::usdc::USDC>')
        assert change.description == 'Updated liquidity pool: Pool'

    def test_mutated_other(self):
        assert self._describe('mutated', '0xabc::game::Player').description == 'Modified Player'

    def test_transferred_coin(self):
        change = self._describe('transferred', '0x2::coin::Coin<0x2::sui::SUI>', recipient=RECIPIENT)
        assert change.description == 'Sent SUI Coin to 0xbbbb...bbbb'

    def test_transferred_object_unknown_recipient(self):
        change = self._describe('transferred', '0xabc::nft::Hero')
        assert change.description == 'Transferred Hero to unknown'

    def test_deleted(self):
        assert self._describe('deleted', '0xabc::nft::Hero').description == 'Burned/destroyed Hero'

    def test_wrapped(self):
        assert self._describe('wrapped', '0xabc::nft::Hero').description == 'Wrapped Hero into NFT'

    def test_published(self):
        change = self._describe('published')
        assert change.display_type == 'Smart Contract'
        assert change.description == 'Deployed new smart contract package'

    def test_missing_type_is_unknown(self):
        change = self._describe('mutated')
        assert change.display_type == 'Unknown'
        assert change.description == 'Modified Unknown'

    def test_unrecognized_kind_gets_fallback_description(self):
        change = self._describe('frozen', '0xabc::nft::Hero')
        assert change.kind == 'frozen'
        assert change.description == 'Changed Hero (frozen)'

    def test_owner_and_order_preserved(self):
        raw = [
            RawObjectChange(kind='mutated', object_id='0x1', object_type='0xabc::game::Player', owner='0xowner'),
            RawObjectChange(kind='created', object_id='0x2', object_type='0xabc::game::Sword'),
        ]

        changes = parse_object_changes(raw)

        assert [c.object_id for c in changes] == ['0x1', '0x2']
        assert changes[0].owner == '0xowner'
        assert changes[1].owner is None

    def test_raw_published_uses_package_id(self):
        raw = RawObjectChange.from_dict({'type': 'published', 'packageId': '0xpkg', 'modules': ['m']})
        assert raw.object_id == '0xpkg'

    def test_raw_owner_resolution(self):
        raw = RawObjectChange.from_dict({'type': 'mutated', 'owner': {'ObjectOwner': '0xparent'}})
        assert raw.owner == '0xparent'
        shared = RawObjectChange.from_dict({'type': 'mutated', 'owner': {'Shared': {'initial_shared_version': 1}}})
        assert shared.owner is None


class TestGenerateActions:
    """Tests for generate_actions function"""

    def test_one_action_per_kind_in_first_seen_order(self):
        changes = [
            ObjectChange(kind='mutated', display_type='A', description='first mutate'),
            ObjectChange(kind='created', display_type='B', description='first create'),
            ObjectChange(kind='mutated', display_type='C', description='second mutate'),
        ]

        actions = generate_actions(changes)

        assert [a.kind for a in actions] == ['mutated', 'created']
        assert actions[0].description == 'first mutate'
        assert actions[0].icon == '🔄'
        assert actions[1].icon == '✨'

    def test_unknown_kind_uses_default_icon(self):
        actions = generate_actions([ObjectChange(kind='frozen', display_type='A', description='x')])
        assert actions[0].icon == '📦'

    def test_empty(self):
        assert generate_actions([]) == ()


class TestParseMoveCall:
    """Tests for parse_move_call function"""

    def test_first_move_call_wins(self):
        payload = RawCallPayload(kind='ProgrammableTransaction', commands=(
            None,
            RawMoveCall(package='0x1eabed72c53feb3805120a081dc15963c204dc8d091542592abaf7a35689b2fb',
                        module='pool_script', function='swap_a2b'),
            RawMoveCall(package='0x2', module='coin', function='join'),
        ))

        move_call = parse_move_call(payload)

        assert move_call.package == '0x1eab...b2fb'
        assert move_call.module == 'pool_script'
        assert move_call.function == 'swap_a2b'
        assert move_call.fully_qualified_name == '0x1eab...b2fb::pool_script::swap_a2b'
        assert move_call.package_id.startswith('0x1eabed72')

    def test_short_package_not_shortened(self):
        payload = RawCallPayload(kind='ProgrammableTransaction',
                                 commands=(RawMoveCall(package='0x2', module='coin', function='split'),))
        assert parse_move_call(payload).fully_qualified_name == '0x2::coin::split'

    def test_no_move_call(self):
        payload = RawCallPayload(kind='ProgrammableTransaction', commands=(None, None))
        assert parse_move_call(payload) is None

    def test_non_programmable_transaction(self):
        payload = RawCallPayload(kind='ConsensusCommitPrologue',
                                 commands=(RawMoveCall(package='0x2', module='m', function='f'),))
        assert parse_move_call(payload) is None

    def test_payload_from_dict(self):
        payload = RawCallPayload.from_dict({
            'kind': 'ProgrammableTransaction',
            'transactions': [
                {'SplitCoins': ['GasCoin', [{'Input': 0}]]},
                {'MoveCall': {'package': '0x3', 'module': 'sui_system', 'function': 'request_add_stake'}},
            ],
        })

        assert payload.commands[0] is None
        assert payload.commands[1].function == 'request_add_stake'


class TestParseEvents:
    """Tests for parse_events function"""

    def test_event_description(self):
        events = parse_events([RawEvent(type='0x1eab::pool::SwapEvent')])
        assert events[0].type == 'SwapEvent'
        assert events[0].description == 'Event: SwapEvent'


class TestParseGasInfo:
    """Tests for parse_gas_info function"""

    def test_net_total(self):
        gas = parse_gas_info(RawGasCost(computation=500000, storage=200000, rebate=100000))

        assert gas.net_total == 600000
        assert gas.net_total_display == '0.000600'

    def test_rebate_exceeding_cost_is_negative(self):
        gas = parse_gas_info(RawGasCost(computation=1000, storage=0, rebate=1001000))

        assert gas.net_total == -1000000
        assert gas.net_total_display == '-0.001000'

    def test_large_values_keep_precision(self):
        big = 2 ** 64
        gas = parse_gas_info(RawGasCost(computation=big, storage=1, rebate=0))
        assert gas.net_total == big + 1


class TestParseBalanceChanges:
    """Tests for parse_balance_changes function"""

    def test_sui_decrease(self):
        """Balance changes carry the bare coin type, which is priced like the Coin object"""
        changes = parse_balance_changes([
            RawBalanceChange(coin_type='0x2::sui::SUI', amount=-5000000000, owner='0xowner'),
        ])

        change = changes[0]
        assert change.coin_display_type == 'SUI Coin'
        assert change.direction == 'decrease'
        assert change.amount == -5000000000
        assert change.amount_display == '5.000000'
        assert change.approx_fiat_value == '$12.50'
        assert change.owner == '0xowner'

    def test_bare_coin_type_uses_token_table(self):
        assert format_balance_coin_type('0xdba3::usdc::usdc') == 'USDC Coin'
        assert format_balance_coin_type('0x9::meme::WAGMI') == 'WAGMI Coin'
        assert format_balance_coin_type('0x2::coin::Coin<0x2::sui::SUI>') == 'SUI Coin'

    def test_sui_coin_fiat_value(self):
        change = parse_balance_changes([
            RawBalanceChange(coin_type='0x2::coin::Coin<0x2::sui::SUI>', amount=-5000000000),
        ])[0]

        assert change.coin_display_type == 'SUI Coin'
        assert change.direction == 'decrease'
        assert change.amount_display == '5.000000'
        assert change.approx_fiat_usd == pytest.approx(12.5)
        assert change.approx_fiat_value == '$12.50'
        assert change.signed_fiat_usd == pytest.approx(-12.5)

    def test_increase(self):
        change = parse_balance_changes([
            RawBalanceChange(coin_type='0x2::coin::Coin<0x2::sui::SUI>', amount=1000000000),
        ])[0]

        assert change.direction == 'increase'
        assert change.signed_fiat_usd == pytest.approx(2.5)

    def test_unknown_coin_has_zero_value(self):
        change = parse_balance_changes([
            RawBalanceChange(coin_type='0x9::meme::WAGMI', amount=10 ** 12),
        ])[0]

        assert change.approx_fiat_usd == 0
        assert change.approx_fiat_value == '< $0.01'

    def test_calculate_usd_value_with_custom_prices(self):
        assert calculate_usd_value('SUI Coin', 2.0, {'SUI Coin': 3.0}) == pytest.approx(6.0)
        assert calculate_usd_value('Nope', 2.0, {'SUI Coin': 3.0}) == 0
