"""
Tokens — fungible token контракты

StandardToken — эталонная реализация (transfer/approve/transfer_from,
возвращает True, revert при ошибке). Остальные классы воспроизводят
нестандартное поведение, с которым forwarder обязан справляться:

- NoReturnToken:            не возвращает boolean (None)
- FalseReturnToken:         возвращает False вместо revert
- ZeroTransferRevertToken:  revert на перевод 0
- ReentrantToken:           вызывает внешний hook посреди transfer_from
- WrappedEther:             1:1 обёртка native валюты (deposit/withdraw)
"""

import logging
from typing import Callable, Optional

from funds_forwarder.core.domain.address import MAX_UINT, ZERO_ADDRESS, normalize_address
from funds_forwarder.core.domain.events import Approval, Transfer
from funds_forwarder.core.errors import (
    ERROR_TOKEN_ALLOWANCE,
    ERROR_TOKEN_BALANCE,
    ERROR_TOKEN_NOT_OWNER,
    ERROR_TOKEN_ZERO_TRANSFER,
    Revert,
)
from funds_forwarder.ledger.contract import Contract, transactional

logger = logging.getLogger(__name__)

TokenResult = Optional[bool]


class StandardToken(Contract):
    """
    Fungible token с owner-only mint.

    Storage:
        symbol, owner, total_supply,
        ("balance", holder) → int,
        ("allowance", owner, spender) → int
    """

    def constructor(self, symbol: str = "TKN", *, sender: str) -> None:
        self.storage.update(
            symbol=symbol,
            owner=sender,
            total_supply=0,
        )

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def symbol(self) -> str:
        return self.storage["symbol"]

    @property
    def total_supply(self) -> int:
        return self.storage["total_supply"]

    def balance_of(self, holder: str) -> int:
        return self.storage.get(("balance", normalize_address(holder)), 0)

    def allowance(self, owner: str, spender: str) -> int:
        key = ("allowance", normalize_address(owner), normalize_address(spender))
        return self.storage.get(key, 0)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    @transactional
    def mint(self, to: str, amount: int, *, sender: str) -> None:
        if normalize_address(sender) != self.storage["owner"]:
            raise Revert(ERROR_TOKEN_NOT_OWNER)
        self._mint(normalize_address(to), amount)

    @transactional
    def transfer(self, to: str, amount: int, *, sender: str) -> TokenResult:
        sender = normalize_address(sender)
        failure = self._check_move(sender, amount)
        if failure:
            return self._reject(failure)
        self._move(sender, normalize_address(to), amount)
        return self._accept()

    @transactional
    def approve(self, spender: str, amount: int, *, sender: str) -> TokenResult:
        owner = normalize_address(sender)
        spender = normalize_address(spender)
        self.storage["allowance", owner, spender] = amount
        self.emit(Approval(owner=owner, spender=spender, amount=amount))
        return self._accept()

    @transactional
    def transfer_from(self, source: str, to: str, amount: int, *, sender: str) -> TokenResult:
        source = normalize_address(source)
        spender = normalize_address(sender)
        allowed = self.allowance(source, spender)
        if allowed < amount:
            return self._reject(ERROR_TOKEN_ALLOWANCE)
        failure = self._check_move(source, amount)
        if failure:
            return self._reject(failure)
        if allowed != MAX_UINT:
            self.storage["allowance", source, spender] = allowed - amount
        self._move(source, normalize_address(to), amount)
        return self._accept()

    # -------------------------------------------------------------------------
    # Hooks for non-standard variants
    # -------------------------------------------------------------------------

    def _check_move(self, source: str, amount: int) -> str:
        if amount < 0 or self.balance_of(source) < amount:
            return ERROR_TOKEN_BALANCE
        return ""

    def _accept(self) -> TokenResult:
        return True

    def _reject(self, reason: str) -> TokenResult:
        raise Revert(reason, f"{self.symbol} at {self.address}")

    def _move(self, source: str, to: str, amount: int) -> None:
        self.storage["balance", source] = self.balance_of(source) - amount
        self.storage["balance", to] = self.balance_of(to) + amount
        self.emit(Transfer(source=source, destination=to, amount=amount))

    def _mint(self, to: str, amount: int) -> None:
        self.storage["balance", to] = self.balance_of(to) + amount
        self.storage["total_supply"] += amount
        self.emit(Transfer(source=ZERO_ADDRESS, destination=to, amount=amount))

    def _burn(self, source: str, amount: int) -> None:
        if self.balance_of(source) < amount:
            raise Revert(ERROR_TOKEN_BALANCE)
        self.storage["balance", source] = self.balance_of(source) - amount
        self.storage["total_supply"] -= amount
        self.emit(Transfer(source=source, destination=ZERO_ADDRESS, amount=amount))


class NoReturnToken(StandardToken):
    """Токен без boolean результата (ранние ERC20, DS-token стиль)."""

    def _accept(self) -> TokenResult:
        return None


class FalseReturnToken(StandardToken):
    """Токен, сигнализирующий ошибку значением False вместо revert."""

    def _reject(self, reason: str) -> TokenResult:
        logger.debug("%s rejected operation: %s", self.symbol, reason)
        return False


class ZeroTransferRevertToken(StandardToken):
    """Токен, отклоняющий переводы нулевой суммы."""

    def _check_move(self, source: str, amount: int) -> str:
        if amount == 0:
            return ERROR_TOKEN_ZERO_TRANSFER
        return super()._check_move(source, amount)


class ReentrantToken(StandardToken):
    """
    Вредоносный токен: посреди transfer_from вызывает внешний hook.

    Hook срабатывает один раз (arm_reentry) либо до перемещения балансов
    (before_move=True), либо после. Hook — атрибут объекта, а не storage.
    """

    def __init__(self, ledger, address: str):
        super().__init__(ledger, address)
        self._hook: Optional[Callable[[], None]] = None
        self._before_move = False

    def arm_reentry(self, hook: Callable[[], None], before_move: bool = False) -> None:
        self._hook = hook
        self._before_move = before_move

    def _fire(self) -> None:
        hook, self._hook = self._hook, None
        if hook is not None:
            hook()

    @transactional
    def transfer_from(self, source: str, to: str, amount: int, *, sender: str) -> TokenResult:
        if self._before_move:
            self._fire()
        result = super().transfer_from(source, to, amount, sender=sender)
        if not self._before_move:
            self._fire()
        return result


class WrappedEther(StandardToken):
    """Wrapped native валюта: deposit чеканит 1:1, withdraw сжигает и отправляет."""

    def constructor(self, symbol: str = "WETH", *, sender: str) -> None:
        super().constructor(symbol, sender=sender)

    def receive(self, value: int, *, sender: str) -> None:
        self._mint(sender, value)

    @transactional
    def deposit(self, *, sender: str, value: int) -> None:
        self.ledger.attach_value(sender, self.address, value)
        self._mint(normalize_address(sender), value)

    @transactional
    def withdraw(self, amount: int, *, sender: str) -> None:
        sender = normalize_address(sender)
        self._burn(sender, amount)
        self.ledger.send(self.address, sender, amount)

