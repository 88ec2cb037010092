"""
Общие фикстуры: ledger, аккаунты, bridge, фабрика, forwarder кампании, токены.
"""

from types import SimpleNamespace

import pytest

from funds_forwarder.assets import FalseReturnToken, StandardToken
from funds_forwarder.bridge import DonationBridge
from funds_forwarder.forwarder import ForwarderInstance, FundsForwarderFactory
from funds_forwarder.ledger import Ledger, transactional

GIVER_ID = 43271
RECEIVER_ID = 5683

ETHER = 10**18


class FreezableToken(FalseReturnToken):
    """FalseReturnToken, который после freeze() отклоняет все переводы."""

    @transactional
    def freeze(self, *, sender: str) -> None:
        self.storage["frozen"] = True

    def _check_move(self, source: str, amount: int) -> str:
        if self.storage.get("frozen", False):
            return "ERROR_TOKEN_FROZEN"
        return super()._check_move(source, amount)


class ApproveRejectingToken(FalseReturnToken):
    """Токен, у которого approve всегда возвращает False."""

    @transactional
    def approve(self, spender: str, amount: int, *, sender: str) -> bool:
        return self._reject("ERROR_TOKEN_APPROVE")


@pytest.fixture
def ledger() -> Ledger:
    return Ledger()


@pytest.fixture
def accounts(ledger):
    """Внешние аккаунты с native балансом."""
    return SimpleNamespace(
        operator=ledger.create_account("operator", balance=100 * ETHER),
        escape_caller=ledger.create_account("escape_caller", balance=10 * ETHER),
        escape_destination=ledger.create_account("escape_destination"),
        donor=ledger.create_account("donor", balance=100 * ETHER),
        outsider=ledger.create_account("outsider", balance=10 * ETHER),
    )


@pytest.fixture
def bridge(ledger, accounts) -> DonationBridge:
    return ledger.deploy(
        DonationBridge,
        accounts.escape_caller,
        accounts.escape_destination,
        deployer=accounts.operator,
    )


@pytest.fixture
def factory(ledger, accounts, bridge) -> FundsForwarderFactory:
    return ledger.deploy(
        FundsForwarderFactory,
        bridge.address,
        accounts.escape_caller,
        accounts.escape_destination,
        deployer=accounts.operator,
    )


@pytest.fixture
def forwarder(factory, accounts) -> ForwarderInstance:
    return factory.new_funds_forwarder(GIVER_ID, RECEIVER_ID, sender=accounts.donor)


@pytest.fixture
def make_token(ledger, accounts, bridge):
    """
    Деплой токена: donor получает supply, bridge принимает токен.

    Usage:
        token = make_token(NoReturnToken, "NRT", supply=1000)
    """

    def _make(token_cls=StandardToken, symbol="TKN", supply=1_000_000 * ETHER, whitelist=True):
        token = ledger.deploy(token_cls, symbol, deployer=accounts.operator)
        token.mint(accounts.donor, supply, sender=accounts.operator)
        if whitelist:
            bridge.whitelist_token(token.address, True, sender=accounts.operator)
        return token

    return _make


@pytest.fixture
def token(make_token) -> StandardToken:
    return make_token(StandardToken, "DAI")


@pytest.fixture
def freezable_token(make_token) -> FreezableToken:
    return make_token(FreezableToken, "FRZ")


@pytest.fixture
def approve_rejecting_token(make_token) -> ApproveRejectingToken:
    return make_token(ApproveRejectingToken, "NAP")
