"""
ForwarderState — изолированное состояние одного forwarder'а

Immutable Pydantic модель. Каждый ForwarderInstance хранит ровно одну такую
запись; вся логика живёт в общем ForwarderLogic и получает состояние извне.

Жизненный цикл:
    uninitialized  --initialize-->  initialized   (один раз, необратимо)
    petrified                                      (шаблон логики, навсегда)
"""

from pydantic import BaseModel, Field

from .address import PETRIFIED_ADDRESS, ZERO_ADDRESS, Address, CampaignId


class ForwarderState(BaseModel):
    """
    Состояние forwarder'а (giverId, receiverId, initialized, factory).

    Immutable модель (frozen=True): переход uninitialized → initialized
    создаёт новый экземпляр.
    """

    giver_id: CampaignId = Field(0, description="Идентификатор дарителя кампании")
    receiver_id: CampaignId = Field(0, description="Идентификатор получателя кампании")
    initialized: bool = Field(False, description="One-way флаг инициализации")
    factory_address: Address = Field(
        ZERO_ADDRESS, description="Фабрика, создавшая forwarder (back-reference)"
    )

    model_config = {"frozen": True}

    @classmethod
    def uninitialized(cls) -> "ForwarderState":
        return cls()

    @classmethod
    def petrified(cls) -> "ForwarderState":
        """Состояние шаблона логики: инициализирован навсегда, фабрика — sentinel."""
        return cls(initialized=True, factory_address=PETRIFIED_ADDRESS)

    @property
    def is_petrified(self) -> bool:
        return self.factory_address == PETRIFIED_ADDRESS

    def initialized_with(
        self, giver_id: int, receiver_id: int, factory_address: str
    ) -> "ForwarderState":
        """
        Переход в initialized.

        Args:
            giver_id: Идентификатор дарителя
            receiver_id: Идентификатор получателя
            factory_address: Адрес фабрики, вызвавшей initialize

        Returns:
            Новое состояние (исходное не меняется)

        Raises:
            ValueError: Если состояние уже инициализировано
        """
        if self.initialized:
            raise ValueError("state is already initialized")
        return ForwarderState(
            giver_id=giver_id,
            receiver_id=receiver_id,
            initialized=True,
            factory_address=factory_address,
        )
