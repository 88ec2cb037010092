"""
FundsForwarderFactory — фабрика forwarder'ов

Отвечает за:
1. Валидацию конфигурации при деплое (bridge, escape hatch роли)
2. Деплой и petrification ForwarderLogic, если логика не передана
3. Атомарное создание forwarder'а: clone + initialize + NewFundForwarder
4. Operator-gated изменение bridge и child_implementation

Роли Escapable (owner, escape_hatch_caller, escape_hatch_destination)
хранятся не отдельными ключами storage, а внутри FactoryConfig: конфигурация
фабрики всегда одна модель, заменяемая целиком.
"""

import logging

from funds_forwarder.bridge.interface import DonationBridgeInterface
from funds_forwarder.core.domain.address import ZERO_ADDRESS, normalize_address
from funds_forwarder.core.domain.events import (
    BridgeChanged,
    ChildImplementationChanged,
    NewFundForwarder,
)
from funds_forwarder.core.domain.factory_config import FactoryConfig
from funds_forwarder.core.errors import (
    ERROR_BRIDGE_CALL,
    ERROR_HATCH_CALLER,
    ERROR_HATCH_DESTINATION,
    ERROR_NOT_A_CONTRACT,
    ERROR_ZERO_BRIDGE,
    ConfigurationError,
    ConstructionError,
)
from funds_forwarder.escapable import Escapable
from funds_forwarder.ledger.contract import transactional

from .instance import ForwarderInstance
from .logic import ForwarderLogic

logger = logging.getLogger(__name__)


class FundsForwarderFactory(Escapable):
    """
    Фабрика forwarder'ов.

    Storage:
        config: FactoryConfig
        ("escape_blacklisted", token), new_owner_candidate (Escapable / Owned)
    """

    def constructor(
        self,
        bridge: str,
        escape_hatch_caller: str,
        escape_hatch_destination: str,
        child_implementation: str = ZERO_ADDRESS,
        *,
        sender: str,
    ) -> None:
        """
        Деплой фабрики.

        Порядок проверок:
        1. bridge — контракт donation bridge
        2. escape_hatch_caller — не контракт и совпадает с ролью bridge'а
        3. escape_hatch_destination — то же

        Raises:
            ConstructionError: ERROR_NOT_A_CONTRACT, ERROR_HATCH_CALLER,
                ERROR_HATCH_DESTINATION
        """
        bridge = normalize_address(bridge)
        escape_hatch_caller = normalize_address(escape_hatch_caller)
        escape_hatch_destination = normalize_address(escape_hatch_destination)
        child_implementation = normalize_address(child_implementation)

        if not self.ledger.is_contract(bridge):
            raise ConstructionError(ERROR_NOT_A_CONTRACT, f"bridge {bridge}")
        bridge_contract = self.ledger.contract_at(bridge)
        if not isinstance(bridge_contract, DonationBridgeInterface):
            raise ConstructionError(ERROR_NOT_A_CONTRACT, f"{bridge_contract!r} is not a bridge")

        if (
            self.ledger.is_contract(escape_hatch_caller)
            or escape_hatch_caller != bridge_contract.escape_hatch_caller
        ):
            raise ConstructionError(ERROR_HATCH_CALLER, escape_hatch_caller)
        if (
            self.ledger.is_contract(escape_hatch_destination)
            or escape_hatch_destination != bridge_contract.escape_hatch_destination
        ):
            raise ConstructionError(ERROR_HATCH_DESTINATION, escape_hatch_destination)

        if child_implementation == ZERO_ADDRESS:
            child_implementation = self.ledger.deploy(ForwarderLogic, deployer=self.address).address

        self.storage["config"] = FactoryConfig(
            bridge=bridge,
            child_implementation=child_implementation,
            escape_hatch_caller=escape_hatch_caller,
            escape_hatch_destination=escape_hatch_destination,
            owner=bridge_contract.owner,
        )
        logger.info(
            "Factory %s deployed: bridge=%s implementation=%s",
            self.address,
            bridge,
            child_implementation,
        )

    # -------------------------------------------------------------------------
    # Config
    # -------------------------------------------------------------------------

    def _read_role(self, role: str) -> str:
        return getattr(self.config, role)

    def _write_role(self, role: str, address: str) -> None:
        self.storage["config"] = self.config.model_copy(
            update={role: normalize_address(address)}
        )

    @property
    def config(self) -> FactoryConfig:
        return self.storage["config"]

    @property
    def bridge(self) -> str:
        return self.config.bridge

    @property
    def child_implementation(self) -> str:
        return self.config.child_implementation

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    @transactional
    def new_funds_forwarder(
        self, giver_id: int, receiver_id: int, *, sender: str
    ) -> ForwarderInstance:
        """
        Создание forwarder'а кампании (permissionless).

        Clone, initialize и NewFundForwarder выполняются в одном frame:
        неудача любого шага откатывает создание целиком.

        Raises:
            ConfigurationError: ERROR_ZERO_BRIDGE, ERROR_BRIDGE_CALL,
                ERROR_NOT_A_CONTRACT (child implementation)
        """
        config = self.config
        if not config.has_bridge:
            raise ConfigurationError(ERROR_ZERO_BRIDGE)
        if not self.ledger.is_contract(config.bridge):
            raise ConfigurationError(ERROR_BRIDGE_CALL, f"no code at {config.bridge}")
        implementation = config.child_implementation
        if not self.ledger.is_contract(implementation) or not isinstance(
            self.ledger.contract_at(implementation), ForwarderLogic
        ):
            raise ConfigurationError(
                ERROR_NOT_A_CONTRACT, f"implementation {config.child_implementation}"
            )

        instance = self.ledger.deploy(
            ForwarderInstance, config.child_implementation, deployer=self.address
        )
        instance.initialize(giver_id, receiver_id, sender=self.address)
        self.emit(
            NewFundForwarder(
                giver_id=giver_id, receiver_id=receiver_id, funds_forwarder=instance.address
            )
        )
        logger.info(
            "New forwarder %s for giver=%d receiver=%d (requested by %s)",
            instance.address,
            giver_id,
            receiver_id,
            sender,
        )
        return instance

    @transactional
    def change_bridge(self, new_bridge: str, *, sender: str) -> None:
        """Смена bridge; существующие forwarder'ы видят новый bridge сразу."""
        self._only_escape_hatch_caller_or_owner(sender)
        new_bridge = normalize_address(new_bridge)
        self.storage["config"] = self.config.model_copy(update={"bridge": new_bridge})
        self.emit(BridgeChanged(new_bridge=new_bridge))
        logger.info("Factory %s bridge changed to %s by %s", self.address, new_bridge, sender)

    @transactional
    def change_child_implementation(self, new_child_implementation: str, *, sender: str) -> None:
        """Смена логики для будущих клонов; существующие не затрагиваются."""
        self._only_escape_hatch_caller_or_owner(sender)
        new_child_implementation = normalize_address(new_child_implementation)
        self.storage["config"] = self.config.model_copy(
            update={"child_implementation": new_child_implementation}
        )
        self.emit(ChildImplementationChanged(new_child_implementation=new_child_implementation))
        logger.info(
            "Factory %s child implementation changed to %s by %s",
            self.address,
            new_child_implementation,
            sender,
        )
