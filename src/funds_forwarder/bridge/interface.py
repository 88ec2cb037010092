"""
Interfaces — внешние коллабораторы forwarder'а на уровне границы

- DonationBridgeInterface: превращает форварднутый баланс в запись о донате
- MolochInterface: DAO-казна, где forwarder держит погашаемую долю
"""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DonationBridgeInterface(Protocol):
    """
    Donation bridge.

    donate() вызывается с уже приложенным value (native) либо после approve
    (token: bridge сам забирает сумму через transfer_from). Любой revert
    donate() — жёсткий отказ всего forward.
    """

    @property
    def owner(self) -> str: ...

    @property
    def escape_hatch_caller(self) -> str: ...

    @property
    def escape_hatch_destination(self) -> str: ...

    def donate(
        self,
        giver_id: int,
        receiver_id: int,
        token: str,
        amount: int,
        *,
        sender: str,
        value: int = 0,
    ) -> Any: ...


@dataclass(frozen=True)
class Member:
    """Участник DAO."""

    shares: int = 0
    exists: bool = False


@runtime_checkable
class MolochInterface(Protocol):
    """DAO-казна с share-based выплатой (ragequit)."""

    @property
    def approved_token(self) -> str: ...

    def members(self, member: str) -> Member: ...

    def ragequit(self, shares_to_burn: int, *, sender: str) -> int: ...
