"""
FactoryConfig — разделяемая конфигурация фабрики

Immutable Pydantic модель. Фабрика хранит текущую конфигурацию и заменяет её
целиком в operator-gated операциях (change_bridge, change_child_implementation,
...). Forwarder'ы читают конфигурацию заново при каждом вызове, снапшотов нет.
"""

from pydantic import BaseModel, Field

from .address import ZERO_ADDRESS, Address


class FactoryConfig(BaseModel):
    """Конфигурация FundsForwarderFactory."""

    bridge: Address = Field(..., description="Donation bridge, куда уходят средства")
    child_implementation: Address = Field(
        ZERO_ADDRESS, description="ForwarderLogic, которую клонируют новые forwarder'ы"
    )
    escape_hatch_caller: Address = Field(..., description="Роль восстановления средств")
    escape_hatch_destination: Address = Field(
        ..., description="Фиксированный адрес, куда escape hatch выводит средства"
    )
    owner: Address = Field(..., description="Оператор фабрики (владелец bridge)")

    model_config = {"frozen": True}

    @property
    def has_bridge(self) -> bool:
        return self.bridge != ZERO_ADDRESS
