"""
Asset Transfer — перевод актива как capability с явным результатом

Два варианта одного интерфейса:
- NativeTransfer: native валюта (asset = 0x0)
- TokenTransfer:  fungible token по адресу контракта

Каждое перемещение возвращает TransferResult; вызывающий обязан проверить
result.ok, а не полагаться на revert. Толерантность к токенам:
- None вместо boolean    → успех
- False                  → неуспех
- Revert                 → неуспех (frame токена откатан ledger'ом)
- amount == 0            → успех без вызова токена
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from funds_forwarder.core.domain.address import MAX_UINT, NATIVE_ASSET, normalize_address
from funds_forwarder.core.errors import (
    ERROR_NO_CODE,
    ERROR_NOT_A_TOKEN,
    ERROR_TOKEN_RETURNED_FALSE,
    Revert,
)
from funds_forwarder.ledger.ledger import Ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferResult:
    """Результат перемещения актива."""

    ok: bool
    amount: int
    reason: str = ""

    @classmethod
    def success(cls, amount: int) -> "TransferResult":
        return cls(ok=True, amount=amount)

    @classmethod
    def failure(cls, reason: str) -> "TransferResult":
        return cls(ok=False, amount=0, reason=reason)


@runtime_checkable
class TokenInterface(Protocol):
    """Минимальная поверхность ERC20-подобного токена."""

    def balance_of(self, holder: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def transfer(self, to: str, amount: int, *, sender: str) -> Optional[bool]: ...

    def approve(self, spender: str, amount: int, *, sender: str) -> Optional[bool]: ...

    def transfer_from(
        self, source: str, to: str, amount: int, *, sender: str
    ) -> Optional[bool]: ...


class AssetTransfer(Protocol):
    """Capability перевода одного актива."""

    asset: str

    def balance_of(self, holder: str) -> int: ...

    def send(self, holder: str, to: str, amount: int) -> TransferResult: ...

    def allowance(self, holder: str, spender: str) -> int: ...

    def approve(self, holder: str, spender: str, amount: int) -> TransferResult: ...


# =============================================================================
# NATIVE
# =============================================================================


class NativeTransfer:
    """Native валюта. Approve не требуется: value прикладывается к вызову."""

    asset = NATIVE_ASSET

    def __init__(self, ledger: Ledger):
        self.ledger = ledger

    def balance_of(self, holder: str) -> int:
        return self.ledger.balance_of(holder)

    def send(self, holder: str, to: str, amount: int) -> TransferResult:
        if amount == 0:
            return TransferResult.success(0)
        try:
            self.ledger.send(holder, to, amount)
        except Revert as e:
            logger.debug("Native transfer %s -> %s rejected: %s", holder, to, e.reason)
            return TransferResult.failure(e.reason)
        return TransferResult.success(amount)

    def allowance(self, holder: str, spender: str) -> int:
        return MAX_UINT

    def approve(self, holder: str, spender: str, amount: int) -> TransferResult:
        return TransferResult.success(amount)


# =============================================================================
# TOKEN
# =============================================================================


class TokenTransfer:
    """Fungible token с безопасной интерпретацией результата вызова."""

    def __init__(self, ledger: Ledger, token: TokenInterface, asset: str):
        self.ledger = ledger
        self.token = token
        self.asset = asset

    def balance_of(self, holder: str) -> int:
        return self.token.balance_of(holder)

    def allowance(self, holder: str, spender: str) -> int:
        return self.token.allowance(holder, spender)

    def send(self, holder: str, to: str, amount: int) -> TransferResult:
        if amount == 0:
            return TransferResult.success(0)
        return self._checked(
            lambda: self.token.transfer(to, amount, sender=holder), amount, "transfer"
        )

    def send_from(self, spender: str, source: str, to: str, amount: int) -> TransferResult:
        """transfer_from от имени spender'а (pull по allowance)."""
        if amount == 0:
            return TransferResult.success(0)
        return self._checked(
            lambda: self.token.transfer_from(source, to, amount, sender=spender),
            amount,
            "transfer_from",
        )

    def approve(self, holder: str, spender: str, amount: int) -> TransferResult:
        return self._checked(
            lambda: self.token.approve(spender, amount, sender=holder), amount, "approve"
        )

    def _checked(self, call, amount: int, operation: str) -> TransferResult:
        try:
            returned = call()
        except Revert as e:
            logger.debug("Token %s %s reverted: %s", self.asset, operation, e.reason)
            return TransferResult.failure(e.reason)
        if returned is False:
            logger.debug("Token %s %s returned False", self.asset, operation)
            return TransferResult.failure(ERROR_TOKEN_RETURNED_FALSE)
        return TransferResult.success(amount)


def asset_transfer_for(ledger: Ledger, asset: str) -> AssetTransfer:
    """
    Capability для актива.

    Args:
        ledger: Ledger, на котором живёт актив
        asset: 0x0 для native или адрес token контракта

    Raises:
        Revert(ERROR_NO_CODE): По адресу нет контракта
        Revert(ERROR_NOT_A_TOKEN): Контракт не реализует token интерфейс
    """
    asset = normalize_address(asset)
    if asset == NATIVE_ASSET:
        return NativeTransfer(ledger)
    return token_transfer_for(ledger, asset)


def token_transfer_for(ledger: Ledger, asset: str) -> TokenTransfer:
    """Capability для token контракта (native sentinel не допускается)."""
    asset = normalize_address(asset)
    if not ledger.is_contract(asset):
        raise Revert(ERROR_NO_CODE, f"token {asset}")
    token = ledger.contract_at(asset)
    if not isinstance(token, TokenInterface):
        raise Revert(ERROR_NOT_A_TOKEN, f"{token!r}")
    return TokenTransfer(ledger, token, asset)
