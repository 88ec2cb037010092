"""
DonationBridge — эталонный donation bridge

Принимает средства вместе с парой (giverId, receiverId), ведёт собственный
whitelist токенов и эмитит авторитетное событие Donate. Forwarder не хранит
записи о донатах: источник истины — bridge.
"""

import logging
from typing import List

from funds_forwarder.assets.transfer import token_transfer_for
from funds_forwarder.core.domain.address import NATIVE_ASSET, normalize_address
from funds_forwarder.core.domain.donation import DonationRecord
from funds_forwarder.core.domain.events import Donate, TokenWhitelisted
from funds_forwarder.core.errors import (
    ERROR_TOKEN_NOT_WHITELISTED,
    ERROR_TOKEN_TRANSFER,
    ERROR_VALUE_MISMATCH,
    ERROR_ZERO_AMOUNT,
    Revert,
)
from funds_forwarder.escapable import Escapable
from funds_forwarder.ledger.contract import transactional

logger = logging.getLogger(__name__)


class DonationBridge(Escapable):
    """
    Donation bridge.

    Storage:
        owner, escape_hatch_caller, escape_hatch_destination,
        ("escape_blacklisted", token) → bool,
        ("whitelist", token) → bool, donation_count,
        ("donation", index) → DonationRecord
    """

    def constructor(
        self, escape_hatch_caller: str, escape_hatch_destination: str, *, sender: str
    ) -> None:
        self._init_escapable(sender, escape_hatch_caller, escape_hatch_destination)
        self.storage["whitelist", NATIVE_ASSET] = True
        self.storage["donation_count"] = 0

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def is_whitelisted(self, token: str) -> bool:
        return self.storage.get(("whitelist", normalize_address(token)), False)

    @property
    def donations(self) -> List[DonationRecord]:
        return [self.storage["donation", index] for index in range(self.storage["donation_count"])]

    def donations_for(self, giver_id: int, receiver_id: int) -> List[DonationRecord]:
        return [
            record
            for record in self.donations
            if record.giver_id == giver_id and record.receiver_id == receiver_id
        ]

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    @transactional
    def whitelist_token(self, token: str, accepted: bool, *, sender: str) -> None:
        self._only_owner(sender)
        token = normalize_address(token)
        self.storage["whitelist", token] = accepted
        self.emit(TokenWhitelisted(token=token, accepted=accepted))

    @transactional
    def donate(
        self,
        giver_id: int,
        receiver_id: int,
        token: str,
        amount: int,
        *,
        sender: str,
        value: int = 0,
    ) -> DonationRecord:
        """
        Регистрация доната.

        Native: value должен совпадать с amount.
        Token: сумма забирается у sender через transfer_from (нужен approve).

        Raises:
            Revert: ERROR_ZERO_AMOUNT, ERROR_VALUE_MISMATCH,
                ERROR_TOKEN_NOT_WHITELISTED, ERROR_TOKEN_TRANSFER
        """
        token = normalize_address(token)
        sender = normalize_address(sender)
        if amount <= 0:
            raise Revert(ERROR_ZERO_AMOUNT)
        if not self.is_whitelisted(token):
            raise Revert(ERROR_TOKEN_NOT_WHITELISTED, token)

        if token == NATIVE_ASSET:
            if value != amount:
                raise Revert(ERROR_VALUE_MISMATCH, f"value={value}, amount={amount}")
            self.ledger.attach_value(sender, self.address, value)
        else:
            if value:
                raise Revert(ERROR_VALUE_MISMATCH, "native value sent with token donation")
            transfer = token_transfer_for(self.ledger, token)
            result = transfer.send_from(self.address, sender, self.address, amount)
            if not result.ok:
                raise Revert(ERROR_TOKEN_TRANSFER, result.reason)

        record = DonationRecord(
            giver_id=giver_id, receiver_id=receiver_id, token=token, amount=amount
        )
        count = self.storage["donation_count"]
        self.storage["donation", count] = record
        self.storage["donation_count"] = count + 1
        self.emit(Donate(giver_id=giver_id, receiver_id=receiver_id, token=token, amount=amount))
        logger.info(
            "Donation giver=%d receiver=%d token=%s amount=%d", giver_id, receiver_id, token, amount
        )
        return record
