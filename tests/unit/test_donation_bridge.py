"""
Тесты эталонного DonationBridge.
"""

import pytest

from funds_forwarder.bridge import DonationBridgeInterface
from funds_forwarder.core.domain import NATIVE_ASSET, DonationRecord, TokenWhitelisted
from funds_forwarder.core.errors import (
    ERR_OWNED_INVALID_CALLER,
    ERROR_TOKEN_NOT_WHITELISTED,
    ERROR_TOKEN_TRANSFER,
    ERROR_VALUE_MISMATCH,
    ERROR_ZERO_AMOUNT,
    AuthorizationError,
    Revert,
)


class TestDonationBridge:
    """Регистрация донатов напрямую в bridge."""

    def test_satisfies_interface(self, bridge):
        assert isinstance(bridge, DonationBridgeInterface)

    def test_native_whitelisted_by_default(self, bridge):
        assert bridge.is_whitelisted(NATIVE_ASSET)

    def test_donate_native(self, ledger, accounts, bridge):
        record = bridge.donate(1, 2, NATIVE_ASSET, 500, sender=accounts.donor, value=500)

        assert record == DonationRecord(giver_id=1, receiver_id=2, token=NATIVE_ASSET, amount=500)
        assert bridge.balance == 500
        assert bridge.donations_for(1, 2) == [record]
        assert bridge.donations_for(2, 1) == []

    def test_value_must_match_amount(self, accounts, bridge):
        with pytest.raises(Revert, match=ERROR_VALUE_MISMATCH):
            bridge.donate(1, 2, NATIVE_ASSET, 500, sender=accounts.donor, value=499)

    def test_zero_amount(self, accounts, bridge):
        with pytest.raises(Revert, match=ERROR_ZERO_AMOUNT):
            bridge.donate(1, 2, NATIVE_ASSET, 0, sender=accounts.donor)

    def test_donate_token_pulls_with_allowance(self, accounts, bridge, token):
        token.approve(bridge.address, 300, sender=accounts.donor)

        bridge.donate(1, 2, token.address, 300, sender=accounts.donor)

        assert token.balance_of(bridge.address) == 300
        assert token.allowance(accounts.donor, bridge.address) == 0

    def test_donate_token_without_allowance(self, accounts, bridge, token):
        with pytest.raises(Revert, match=ERROR_TOKEN_TRANSFER):
            bridge.donate(1, 2, token.address, 300, sender=accounts.donor)
        assert bridge.donations == []

    def test_token_with_value_rejected(self, accounts, bridge, token):
        token.approve(bridge.address, 300, sender=accounts.donor)
        with pytest.raises(Revert, match=ERROR_VALUE_MISMATCH):
            bridge.donate(1, 2, token.address, 300, sender=accounts.donor, value=1)

    def test_not_whitelisted(self, accounts, bridge, make_token):
        token = make_token(whitelist=False)
        with pytest.raises(Revert, match=ERROR_TOKEN_NOT_WHITELISTED):
            bridge.donate(1, 2, token.address, 1, sender=accounts.donor)

    def test_whitelist_by_owner(self, ledger, accounts, bridge, make_token):
        token = make_token(whitelist=False)
        since = ledger.log_height

        bridge.whitelist_token(token.address, True, sender=accounts.operator)

        assert bridge.is_whitelisted(token.address)
        assert ledger.events(TokenWhitelisted, since=since) == [
            TokenWhitelisted(token=token.address, accepted=True)
        ]

    def test_whitelist_only_owner(self, accounts, bridge, make_token):
        token = make_token(whitelist=False)
        with pytest.raises(AuthorizationError, match=ERR_OWNED_INVALID_CALLER):
            bridge.whitelist_token(token.address, True, sender=accounts.escape_caller)
