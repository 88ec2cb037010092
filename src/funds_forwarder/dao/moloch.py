"""
MolochDao — DAO-казна с share-based выплатой

Упрощённая модель Moloch DAO, достаточная для forward_moloch:
- summoner принимает участников (submit_member): tribute в approved_token
  забирается у заявителя в GuildBank, участнику начисляются shares
- ragequit(shares): shares сжигаются, участник получает
  guild_balance * shares // total_shares approved_token'а из GuildBank

Голосование, периоды и processing reward не моделируются.
"""

import logging

from funds_forwarder.assets.transfer import token_transfer_for
from funds_forwarder.bridge.interface import Member
from funds_forwarder.core.domain.address import normalize_address
from funds_forwarder.core.domain.events import Ragequit
from funds_forwarder.core.errors import (
    ERROR_GUILD_WITHDRAW,
    ERROR_INSUFFICIENT_SHARES,
    ERROR_NOT_SUMMONER,
    ERROR_TRIBUTE_TRANSFER,
    Revert,
)
from funds_forwarder.escapable import Owned
from funds_forwarder.ledger.contract import Contract, transactional

logger = logging.getLogger(__name__)


class GuildBank(Owned):
    """Хранилище approved_token'а DAO; выводить может только DAO (owner)."""

    def constructor(self, approved_token: str, *, sender: str) -> None:
        self._write_role("owner", sender)
        self.storage["approved_token"] = normalize_address(approved_token)

    @property
    def approved_token(self) -> str:
        return self.storage["approved_token"]

    @property
    def token_balance(self) -> int:
        return token_transfer_for(self.ledger, self.approved_token).balance_of(self.address)

    @transactional
    def withdraw(self, receiver: str, shares: int, total_shares: int, *, sender: str) -> int:
        self._only_owner(sender)
        transfer = token_transfer_for(self.ledger, self.approved_token)
        amount = transfer.balance_of(self.address) * shares // total_shares
        result = transfer.send(self.address, receiver, amount)
        if not result.ok:
            raise Revert(ERROR_GUILD_WITHDRAW, result.reason)
        return amount


class MolochDao(Contract):
    """
    DAO.

    Storage:
        summoner, approved_token, guild_bank, ("member", address) → shares,
        total_shares
    """

    def constructor(self, approved_token: str, *, sender: str) -> None:
        approved_token = normalize_address(approved_token)
        guild_bank = self.ledger.deploy(GuildBank, approved_token, deployer=self.address)
        self.storage.update(
            summoner=sender,
            approved_token=approved_token,
            guild_bank=guild_bank.address,
            total_shares=1,
        )
        self.storage["member", sender] = 1

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def approved_token(self) -> str:
        return self.storage["approved_token"]

    @property
    def guild_bank(self) -> str:
        return self.storage["guild_bank"]

    @property
    def total_shares(self) -> int:
        return self.storage["total_shares"]

    def members(self, member: str) -> Member:
        key = ("member", normalize_address(member))
        if key not in self.storage:
            return Member()
        return Member(shares=self.storage[key], exists=True)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    @transactional
    def submit_member(
        self, applicant: str, token_tribute: int, shares_requested: int, *, sender: str
    ) -> None:
        """
        Принятие участника (proposal + vote + process в одном шаге).

        Tribute забирается у applicant'а (нужен approve на DAO).
        """
        if normalize_address(sender) != self.storage["summoner"]:
            raise Revert(ERROR_NOT_SUMMONER)
        applicant = normalize_address(applicant)

        transfer = token_transfer_for(self.ledger, self.approved_token)
        result = transfer.send_from(self.address, applicant, self.guild_bank, token_tribute)
        if not result.ok:
            raise Revert(ERROR_TRIBUTE_TRANSFER, result.reason)

        self.storage["member", applicant] = self.members(applicant).shares + shares_requested
        self.storage["total_shares"] += shares_requested
        logger.info("DAO %s admitted %s with %d shares", self.address, applicant, shares_requested)

    @transactional
    def ragequit(self, shares_to_burn: int, *, sender: str) -> int:
        """
        Выход с долей казны.

        Returns:
            Сумма approved_token'а, переведённая участнику
        """
        sender = normalize_address(sender)
        shares = self.members(sender).shares
        if shares_to_burn <= 0 or shares < shares_to_burn:
            raise Revert(ERROR_INSUFFICIENT_SHARES, f"{sender} has {shares}")

        initial_total_shares = self.storage["total_shares"]
        self.storage["member", sender] = shares - shares_to_burn
        self.storage["total_shares"] = initial_total_shares - shares_to_burn

        guild_bank = self.ledger.contract_at(self.guild_bank, GuildBank)
        amount = guild_bank.withdraw(
            sender, shares_to_burn, initial_total_shares, sender=self.address
        )
        self.emit(Ragequit(member=sender, shares_to_burn=shares_to_burn))
        return amount
