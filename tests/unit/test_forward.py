"""
Тесты forward: перевод баланса forwarder'а в bridge как донат.

Проверяет:
1. Native forward: value прикладывается к donate
2. Token forward: approve MAX_UINT один раз, bridge забирает через transfer_from
3. Нестандартные токены (без boolean результата, WETH)
4. Нулевой баланс: no-op без событий
5. Отказ bridge → ERROR_BRIDGE_CALL и полный откат
6. forward_multiple: всё или ничего
7. Re-entrancy через вредоносный токен
8. Bridge читается живьём из фабрики
9. Токен, отклоняющий approve или перевод значением False
"""

import pytest

from funds_forwarder.assets import (
    FalseReturnToken,
    NoReturnToken,
    ReentrantToken,
    WrappedEther,
    ZeroTransferRevertToken,
)
from funds_forwarder.bridge import DonationBridge
from funds_forwarder.core.domain import (
    MAX_UINT,
    NATIVE_ASSET,
    Approval,
    Donate,
    DonationRecord,
    Forwarded,
)
from funds_forwarder.core.errors import (
    ERROR_BRIDGE_CALL,
    ERROR_ERC20_APPROVE,
    ERROR_NO_CODE,
    ERROR_TOKEN_TRANSFER,
    ERROR_ZERO_BRIDGE,
    ConfigurationError,
    Revert,
    TransferError,
)

GIVER_ID = 43271
RECEIVER_ID = 5683

ETHER = 10**18


class TestNativeForward:
    """Native валюта."""

    def test_forward_native_balance(self, ledger, accounts, bridge, forwarder):
        ledger.send(accounts.donor, forwarder.address, ETHER)

        forwarded = forwarder.forward(NATIVE_ASSET, sender=accounts.outsider)

        assert forwarded == ETHER
        assert forwarder.balance == 0
        assert bridge.balance == ETHER
        assert bridge.donations == [
            DonationRecord(giver_id=GIVER_ID, receiver_id=RECEIVER_ID, token=NATIVE_ASSET, amount=ETHER)
        ]

    def test_forward_emits_donate_and_forwarded(self, ledger, accounts, bridge, forwarder):
        ledger.send(accounts.donor, forwarder.address, 3 * ETHER)
        since = ledger.log_height

        forwarder.forward(NATIVE_ASSET, sender=accounts.outsider)

        assert ledger.events(Donate, emitter=bridge.address, since=since) == [
            Donate(giver_id=GIVER_ID, receiver_id=RECEIVER_ID, token=NATIVE_ASSET, amount=3 * ETHER)
        ]
        assert ledger.events(Forwarded, emitter=forwarder.address, since=since) == [
            Forwarded(to=bridge.address, token=NATIVE_ASSET, balance=3 * ETHER)
        ]

    def test_forward_is_permissionless(self, ledger, accounts, bridge, forwarder):
        ledger.send(accounts.donor, forwarder.address, 100)
        assert forwarder.forward(NATIVE_ASSET, sender=accounts.escape_caller) == 100

    def test_forward_accumulated_deposits(self, ledger, accounts, bridge, forwarder):
        ledger.send(accounts.donor, forwarder.address, 100)
        ledger.send(accounts.outsider, forwarder.address, 50)

        assert forwarder.forward(NATIVE_ASSET, sender=accounts.donor) == 150
        assert len(bridge.donations) == 1


class TestZeroBalance:
    """Нулевой баланс — no-op."""

    def test_zero_native_balance(self, ledger, accounts, bridge, forwarder):
        height = ledger.log_height

        assert forwarder.forward(NATIVE_ASSET, sender=accounts.outsider) == 0

        assert ledger.log_height == height
        assert bridge.donations == []

    def test_zero_token_balance_skips_approve(self, ledger, accounts, bridge, forwarder, token):
        height = ledger.log_height

        assert forwarder.forward(token.address, sender=accounts.outsider) == 0

        assert ledger.log_height == height
        assert token.allowance(forwarder.address, bridge.address) == 0

    def test_second_forward_is_noop(self, ledger, accounts, bridge, forwarder):
        ledger.send(accounts.donor, forwarder.address, 100)
        forwarder.forward(NATIVE_ASSET, sender=accounts.outsider)
        height = ledger.log_height

        assert forwarder.forward(NATIVE_ASSET, sender=accounts.outsider) == 0
        assert ledger.log_height == height
        assert len(bridge.donations) == 1


class TestTokenForward:
    """Fungible токены."""

    def test_forward_token_balance(self, ledger, accounts, bridge, forwarder, token):
        token.transfer(forwarder.address, 1_000, sender=accounts.donor)

        assert forwarder.forward(token.address, sender=accounts.outsider) == 1_000

        assert token.balance_of(forwarder.address) == 0
        assert token.balance_of(bridge.address) == 1_000
        assert token.allowance(forwarder.address, bridge.address) == MAX_UINT
        assert bridge.donations_for(GIVER_ID, RECEIVER_ID) == [
            DonationRecord(giver_id=GIVER_ID, receiver_id=RECEIVER_ID, token=token.address, amount=1_000)
        ]

    def test_three_consecutive_token_donations(self, ledger, accounts, bridge, forwarder, token):
        amounts = [100, 250, 7]
        for amount in amounts:
            token.transfer(forwarder.address, amount, sender=accounts.donor)
            assert forwarder.forward(token.address, sender=accounts.outsider) == amount

        assert [record.amount for record in bridge.donations] == amounts
        assert token.balance_of(bridge.address) == sum(amounts)
        # Approve только при первом forward: allowance MAX_UINT не расходуется
        approvals = ledger.events(Approval, emitter=token.address)
        assert [(a.owner, a.spender) for a in approvals] == [(forwarder.address, bridge.address)]

    def test_no_return_token(self, ledger, accounts, bridge, forwarder, make_token):
        token = make_token(NoReturnToken, "NRT")
        for amount in (10, 20, 30):
            token.transfer(forwarder.address, amount, sender=accounts.donor)
            assert forwarder.forward(token.address, sender=accounts.outsider) == amount

        assert token.balance_of(bridge.address) == 60
        assert len(bridge.donations) == 3

    def test_wrapped_ether(self, ledger, accounts, bridge, forwarder):
        weth = ledger.deploy(WrappedEther, deployer=accounts.operator)
        bridge.whitelist_token(weth.address, True, sender=accounts.operator)
        weth.deposit(sender=accounts.donor, value=ETHER)
        weth.transfer(forwarder.address, ETHER, sender=accounts.donor)

        assert forwarder.forward(weth.address, sender=accounts.outsider) == ETHER
        assert weth.balance_of(bridge.address) == ETHER

    def test_forward_unknown_asset(self, accounts, forwarder):
        with pytest.raises(Revert, match=ERROR_NO_CODE):
            forwarder.forward(accounts.outsider, sender=accounts.outsider)


class TestNonStandardTokens:
    """Токены, сигнализирующие отказ значением False или revert на ноль."""

    def test_false_return_token(self, ledger, accounts, bridge, forwarder, make_token):
        token = make_token(FalseReturnToken, "FRT")
        token.transfer(forwarder.address, 500, sender=accounts.donor)

        assert forwarder.forward(token.address, sender=accounts.outsider) == 500
        assert token.balance_of(bridge.address) == 500

    def test_zero_transfer_revert_token(self, ledger, accounts, bridge, forwarder, make_token):
        token = make_token(ZeroTransferRevertToken, "ZRT")
        assert forwarder.forward(token.address, sender=accounts.outsider) == 0

        token.transfer(forwarder.address, 5, sender=accounts.donor)

        assert forwarder.forward(token.address, sender=accounts.outsider) == 5
        assert forwarder.forward(token.address, sender=accounts.outsider) == 0
        assert [record.amount for record in bridge.donations] == [5]

    def test_forward_multiple_mixed_tokens(self, ledger, accounts, bridge, forwarder, make_token):
        false_token = make_token(FalseReturnToken, "FRT")
        zero_token = make_token(ZeroTransferRevertToken, "ZRT")
        false_token.transfer(forwarder.address, 40, sender=accounts.donor)

        result = forwarder.forward_multiple(
            [false_token.address, zero_token.address, NATIVE_ASSET], sender=accounts.outsider
        )

        assert result == [40, 0, 0]
        assert [record.token for record in bridge.donations] == [false_token.address]

    def test_rejected_approve(self, ledger, accounts, bridge, forwarder, approve_rejecting_token):
        token = approve_rejecting_token
        token.transfer(forwarder.address, 500, sender=accounts.donor)
        height = ledger.log_height

        with pytest.raises(TransferError, match=ERROR_ERC20_APPROVE):
            forwarder.forward(token.address, sender=accounts.outsider)

        assert token.balance_of(forwarder.address) == 500
        assert token.balance_of(bridge.address) == 0
        assert token.allowance(forwarder.address, bridge.address) == 0
        assert bridge.donations == []
        assert ledger.log_height == height

    def test_rejected_pull(self, ledger, accounts, bridge, forwarder, freezable_token):
        token = freezable_token
        token.transfer(forwarder.address, 500, sender=accounts.donor)
        token.freeze(sender=accounts.operator)
        height = ledger.log_height

        with pytest.raises(ConfigurationError, match=ERROR_BRIDGE_CALL) as exc_info:
            forwarder.forward(token.address, sender=accounts.outsider)

        assert exc_info.value.details == ERROR_TOKEN_TRANSFER
        assert token.balance_of(forwarder.address) == 500
        assert token.allowance(forwarder.address, bridge.address) == 0
        assert bridge.donations == []
        assert ledger.events(Donate, since=height) == []
        assert ledger.log_height == height


class TestBridgeFailure:
    """Любой отказ bridge откатывает forward целиком."""

    def test_not_whitelisted_token(self, ledger, accounts, bridge, forwarder, make_token):
        token = make_token(whitelist=False)
        token.transfer(forwarder.address, 500, sender=accounts.donor)
        height = ledger.log_height

        with pytest.raises(ConfigurationError, match=ERROR_BRIDGE_CALL):
            forwarder.forward(token.address, sender=accounts.outsider)

        assert token.balance_of(forwarder.address) == 500
        assert token.allowance(forwarder.address, bridge.address) == 0
        assert ledger.log_height == height

    def test_retry_after_bridge_fixed(self, accounts, bridge, forwarder, make_token):
        token = make_token(whitelist=False)
        token.transfer(forwarder.address, 500, sender=accounts.donor)
        with pytest.raises(ConfigurationError) as exc_info:
            forwarder.forward(token.address, sender=accounts.outsider)
        assert exc_info.value.retryable

        bridge.whitelist_token(token.address, True, sender=accounts.operator)

        assert forwarder.forward(token.address, sender=accounts.outsider) == 500

    def test_zero_bridge(self, ledger, accounts, factory, forwarder):
        ledger.send(accounts.donor, forwarder.address, 100)
        factory.change_bridge(NATIVE_ASSET, sender=accounts.operator)

        with pytest.raises(ConfigurationError, match=ERROR_ZERO_BRIDGE):
            forwarder.forward(NATIVE_ASSET, sender=accounts.outsider)
        assert forwarder.balance == 100

    def test_bridge_without_code(self, ledger, accounts, factory, forwarder):
        ledger.send(accounts.donor, forwarder.address, 100)
        factory.change_bridge(accounts.outsider, sender=accounts.operator)

        with pytest.raises(ConfigurationError, match=ERROR_BRIDGE_CALL):
            forwarder.forward(NATIVE_ASSET, sender=accounts.outsider)
        assert forwarder.balance == 100
        assert ledger.balance_of(accounts.outsider) == 10 * ETHER

    def test_bridge_read_live_from_factory(self, ledger, accounts, bridge, factory, forwarder):
        new_bridge = ledger.deploy(
            DonationBridge,
            accounts.escape_caller,
            accounts.escape_destination,
            deployer=accounts.operator,
        )
        factory.change_bridge(new_bridge.address, sender=accounts.operator)
        ledger.send(accounts.donor, forwarder.address, 100)

        forwarder.forward(NATIVE_ASSET, sender=accounts.outsider)

        assert new_bridge.balance == 100
        assert bridge.balance == 0


class TestForwardMultiple:
    """Batch forward: всё или ничего."""

    def test_forward_multiple(self, ledger, accounts, bridge, forwarder, token):
        ledger.send(accounts.donor, forwarder.address, 100)
        token.transfer(forwarder.address, 200, sender=accounts.donor)

        result = forwarder.forward_multiple([NATIVE_ASSET, token.address], sender=accounts.outsider)

        assert result == [100, 200]
        assert [record.token for record in bridge.donations] == [NATIVE_ASSET, token.address]

    def test_zero_balances_in_batch(self, accounts, forwarder, token):
        assert forwarder.forward_multiple([NATIVE_ASSET, token.address], sender=accounts.outsider) == [0, 0]

    def test_failure_rolls_back_whole_batch(self, ledger, accounts, bridge, forwarder, make_token):
        rejected = make_token(whitelist=False)
        ledger.send(accounts.donor, forwarder.address, 100)
        rejected.transfer(forwarder.address, 200, sender=accounts.donor)
        height = ledger.log_height

        with pytest.raises(ConfigurationError, match=ERROR_BRIDGE_CALL):
            forwarder.forward_multiple([NATIVE_ASSET, rejected.address], sender=accounts.outsider)

        assert forwarder.balance == 100
        assert bridge.balance == 0
        assert bridge.donations == []
        assert ledger.log_height == height


class TestReentrancy:
    """Вредоносный токен повторно вызывает forward посреди transfer_from."""

    @pytest.fixture
    def evil(self, make_token) -> ReentrantToken:
        return make_token(ReentrantToken, "EVIL")

    def test_reentry_after_move_is_noop(self, ledger, accounts, bridge, forwarder, evil):
        evil.transfer(forwarder.address, 300, sender=accounts.donor)
        inner = []
        evil.arm_reentry(lambda: inner.append(forwarder.forward(evil.address, sender=accounts.outsider)))

        assert forwarder.forward(evil.address, sender=accounts.outsider) == 300

        assert inner == [0]
        assert [record.amount for record in bridge.donations] == [300]
        assert evil.balance_of(bridge.address) == 300

    def test_reentry_before_move_reverts_everything(self, ledger, accounts, bridge, forwarder, evil):
        evil.transfer(forwarder.address, 300, sender=accounts.donor)
        evil.arm_reentry(
            lambda: forwarder.forward(evil.address, sender=accounts.outsider), before_move=True
        )
        height = ledger.log_height

        with pytest.raises(ConfigurationError, match=ERROR_BRIDGE_CALL):
            forwarder.forward(evil.address, sender=accounts.outsider)

        assert evil.balance_of(forwarder.address) == 300
        assert evil.balance_of(bridge.address) == 0
        assert bridge.donations == []
        assert ledger.log_height == height

        # Hook израсходован: обычный forward проходит
        assert forwarder.forward(evil.address, sender=accounts.outsider) == 300
        assert len(bridge.donations) == 1
