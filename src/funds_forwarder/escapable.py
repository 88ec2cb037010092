"""
Owned / Escapable — роли владельца и восстановления средств

Owned:
- owner; передача владения в два шага (propose → accept)

Escapable (поверх Owned):
- escape_hatch_caller: роль, которая вместе с owner может вызвать escape hatch
  контракта и менять его конфигурацию
- escape_hatch_destination: фиксированный адрес, куда уходят выведенные средства
- blacklist токенов, которые escape hatch вывести не может

Роли читаются через _read_role/_write_role: по умолчанию из storage,
подкласс может хранить их в собственной модели конфигурации.
"""

import logging

from funds_forwarder.assets.transfer import asset_transfer_for
from funds_forwarder.core.domain.address import ZERO_ADDRESS, normalize_address
from funds_forwarder.core.domain.events import (
    EscapeHatchCalled,
    OwnershipRequested,
    OwnershipTransferred,
)
from funds_forwarder.core.errors import (
    ERR_ESCAPABLE_BLACKLISTED_TOKEN,
    ERR_ESCAPABLE_INVALID_CALLER,
    ERR_OWNED_INVALID_CALLER,
    RECOVER_NATIVE_TRANSFER,
    RECOVER_TOKEN_TRANSFER,
    AuthorizationError,
    TransferError,
)
from funds_forwarder.ledger.contract import Contract, transactional

logger = logging.getLogger(__name__)


class Owned(Contract):
    """Контракт с владельцем."""

    def _read_role(self, role: str) -> str:
        return self.storage.get(role, ZERO_ADDRESS)

    def _write_role(self, role: str, address: str) -> None:
        self.storage[role] = normalize_address(address)

    @property
    def owner(self) -> str:
        return self._read_role("owner")

    @property
    def new_owner_candidate(self) -> str:
        return self.storage.get("new_owner_candidate", ZERO_ADDRESS)

    def _only_owner(self, sender: str) -> None:
        if normalize_address(sender) != self.owner:
            raise AuthorizationError(ERR_OWNED_INVALID_CALLER)

    @transactional
    def propose_ownership(self, new_owner: str, *, sender: str) -> None:
        self._only_owner(sender)
        self.storage["new_owner_candidate"] = normalize_address(new_owner)
        self.emit(OwnershipRequested(by=self.owner, to=new_owner))

    @transactional
    def accept_ownership(self, *, sender: str) -> None:
        """Только предложенный кандидат принимает владение."""
        sender = normalize_address(sender)
        if sender != self.new_owner_candidate or sender == ZERO_ADDRESS:
            raise AuthorizationError(ERR_OWNED_INVALID_CALLER)
        previous = self.owner
        self._write_role("owner", sender)
        self.storage["new_owner_candidate"] = ZERO_ADDRESS
        self.emit(OwnershipTransferred(previous_owner=previous, new_owner=sender))
        logger.info("%r ownership transferred %s -> %s", self, previous, sender)


class Escapable(Owned):
    """
    Контракт с escape hatch для собственного баланса.

    Не путать с escape hatch forwarder'а: тот выводит средства forwarder'а
    и разрешён только escape_hatch_caller фабрики.
    """

    def _init_escapable(self, owner: str, escape_hatch_caller: str, escape_hatch_destination: str) -> None:
        self._write_role("owner", owner)
        self._write_role("escape_hatch_caller", escape_hatch_caller)
        self._write_role("escape_hatch_destination", escape_hatch_destination)

    @property
    def escape_hatch_caller(self) -> str:
        return self._read_role("escape_hatch_caller")

    @property
    def escape_hatch_destination(self) -> str:
        return self._read_role("escape_hatch_destination")

    def _only_escape_hatch_caller_or_owner(self, sender: str) -> None:
        sender = normalize_address(sender)
        if sender != self.escape_hatch_caller and sender != self.owner:
            raise AuthorizationError(ERR_ESCAPABLE_INVALID_CALLER)

    def is_token_escapable(self, token: str) -> bool:
        return not self.storage.get(("escape_blacklisted", normalize_address(token)), False)

    @transactional
    def block_escape_hatch(self, token: str, *, sender: str) -> None:
        """Запрет вывода токена через escape hatch (owner only, необратимо)."""
        self._only_owner(sender)
        self.storage["escape_blacklisted", normalize_address(token)] = True

    @transactional
    def change_hatch_escape_caller(self, new_escape_hatch_caller: str, *, sender: str) -> None:
        self._only_escape_hatch_caller_or_owner(sender)
        self._write_role("escape_hatch_caller", new_escape_hatch_caller)

    @transactional
    def escape_hatch(self, token: str, *, sender: str) -> int:
        """
        Вывод всего баланса актива контракта на escape_hatch_destination.

        Returns:
            Выведенная сумма
        """
        self._only_escape_hatch_caller_or_owner(sender)
        token = normalize_address(token)
        if not self.is_token_escapable(token):
            raise AuthorizationError(ERR_ESCAPABLE_BLACKLISTED_TOKEN)

        transfer = asset_transfer_for(self.ledger, token)
        balance = transfer.balance_of(self.address)
        result = transfer.send(self.address, self.escape_hatch_destination, balance)
        if not result.ok:
            reason = RECOVER_NATIVE_TRANSFER if token == ZERO_ADDRESS else RECOVER_TOKEN_TRANSFER
            raise TransferError(reason, result.reason)

        self.emit(EscapeHatchCalled(token=token, amount=balance))
        logger.warning("%r escape hatch: %d of %s -> %s", self, balance, token, self.escape_hatch_destination)
        return balance
