"""
ForwarderInstance — клон forwarder'а для одной кампании

Instance хранит только собственный ForwarderState и адрес логики,
закреплённый при клонировании. Все операции делегируются ForwarderLogic по
этому адресу: код общий, состояние изолированное. Смена child_implementation
на фабрике уже созданные instance'ы не затрагивает.
"""

from funds_forwarder.core.domain.address import normalize_address
from funds_forwarder.core.domain.forwarder_state import ForwarderState

from .logic import ForwarderLogic, ForwarderSurface


class ForwarderInstance(ForwarderSurface):
    """
    Forwarder кампании (giverId, receiverId).

    Storage:
        state: ForwarderState
        implementation: адрес ForwarderLogic
    """

    def constructor(self, implementation: str, *, sender: str) -> None:
        self.storage["implementation"] = normalize_address(implementation)
        self._set_state(ForwarderState.uninitialized())

    @property
    def implementation(self) -> str:
        return self.storage["implementation"]

    def _logic(self) -> ForwarderLogic:
        return self.ledger.contract_at(self.implementation, ForwarderLogic)
