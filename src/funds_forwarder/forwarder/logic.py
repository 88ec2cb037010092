"""
ForwarderLogic — общая логика forwarding / escape hatch

Один экземпляр логики обслуживает тысячи forwarder'ов. Логика не хранит
состояния кампаний: каждая операция получает контекст (forwarder) явно и
читает/пишет только его ForwarderState. Конфигурацию (bridge, escape hatch)
логика каждый раз заново читает из фабрики контекста.

Сам контракт логики — "petrified" шаблон:
- state = ForwarderState.petrified(): initialized=True, factory = 0xff..ff
- initialize() всегда падает с INIT_ALREADY_INITIALIZED
- forward/escape_hatch падают с INIT_PETRIFIED: sentinel никогда не
  разрешается в реальную фабрику

Алгоритм forward(asset):
1. Контекст инициализирован, bridge фабрики ненулевой и code-bearing
2. balance = текущий баланс актива у контекста (живое чтение)
3. balance == 0 → no-op, 0 (безопасно вызывать спекулятивно и конкурентно)
4. native: bridge.donate(..., value=balance)
   token:  approve(bridge, MAX_UINT) если allowance < balance,
           затем bridge.donate(...) забирает balance через transfer_from
5. Любой отказ bridge → ERROR_BRIDGE_CALL, откат всего вызова
6. Forwarded(bridge, asset, balance)

Re-entrancy: баланс читается в момент вызова, переводится целиком и
только потом регистрируется; повторный вход либо видит 0 (no-op), либо
исчерпывает баланс раньше внешнего вызова, и тогда внешний откатывается
целиком вместе с вложенным.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Protocol, Sequence, runtime_checkable

from funds_forwarder.assets.transfer import asset_transfer_for
from funds_forwarder.bridge.interface import DonationBridgeInterface, MolochInterface
from funds_forwarder.core.domain.address import (
    MAX_UINT,
    NATIVE_ASSET,
    ZERO_ADDRESS,
    normalize_address,
)
from funds_forwarder.core.domain.events import EscapeHatchCalled, Forwarded
from funds_forwarder.core.domain.forwarder_state import ForwarderState
from funds_forwarder.core.errors import (
    ERROR_BRIDGE_CALL,
    ERROR_ERC20_APPROVE,
    ERROR_NOT_A_DAO,
    ERROR_ZERO_BRIDGE,
    INIT_ALREADY_INITIALIZED,
    INIT_INVALID_FACTORY,
    INIT_NOT_INITIALIZED,
    INIT_PETRIFIED,
    RECOVER_DISALLOWED,
    RECOVER_NATIVE_TRANSFER,
    RECOVER_TOKEN_TRANSFER,
    AuthorizationError,
    ConfigurationError,
    LifecycleError,
    Revert,
    TransferError,
)
from funds_forwarder.ledger.contract import Contract, transactional

logger = logging.getLogger(__name__)


@runtime_checkable
class ForwarderFactoryInterface(Protocol):
    """То, что forwarder читает у своей фабрики (живьём, на каждый вызов)."""

    @property
    def bridge(self) -> str: ...

    @property
    def escape_hatch_caller(self) -> str: ...

    @property
    def escape_hatch_destination(self) -> str: ...


# =============================================================================
# SURFACE
# =============================================================================


class ForwarderSurface(Contract, ABC):
    """
    Публичная поверхность forwarder'а, общая для шаблона и клонов.

    Каждая операция — отдельный атомарный frame, исполняемый логикой,
    которую возвращает _logic(), над состоянием self.
    """

    @abstractmethod
    def _logic(self) -> "ForwarderLogic":
        """Логика, исполняющая операции над состоянием self."""

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ForwarderState:
        return self.storage["state"]

    def _set_state(self, state: ForwarderState) -> None:
        self.storage["state"] = state

    @property
    def giver_id(self) -> int:
        return self.state.giver_id

    @property
    def receiver_id(self) -> int:
        return self.state.receiver_id

    @property
    def initialized(self) -> bool:
        return self.state.initialized

    @property
    def factory_address(self) -> str:
        return self.state.factory_address

    def receive(self, value: int, *, sender: str) -> None:
        logger.debug("%r received %d native from %s", self, value, sender)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    @transactional
    def initialize(self, giver_id: int, receiver_id: int, *, sender: str) -> None:
        self._logic().do_initialize(self, giver_id, receiver_id, sender=sender)

    @transactional
    def forward(self, asset: str, *, sender: str) -> int:
        return self._logic().do_forward(self, asset, sender=sender)

    @transactional
    def forward_multiple(self, assets: Sequence[str], *, sender: str) -> List[int]:
        return self._logic().do_forward_multiple(self, assets, sender=sender)

    @transactional
    def forward_moloch(self, dao: str, *, sender: str) -> int:
        return self._logic().do_forward_moloch(self, dao, sender=sender)

    @transactional
    def escape_hatch(self, asset: str, *, sender: str) -> int:
        return self._logic().do_escape_hatch(self, asset, sender=sender)


# =============================================================================
# LOGIC IMPLEMENTATION
# =============================================================================


class ForwarderLogic(ForwarderSurface):
    """Логика forwarder'а и одновременно petrified шаблон."""

    def constructor(self, *, sender: str) -> None:
        self._set_state(ForwarderState.petrified())
        logger.info("Forwarder logic deployed and petrified at %s", self.address)

    def _logic(self) -> "ForwarderLogic":
        return self

    # -------------------------------------------------------------------------
    # Resolution helpers
    # -------------------------------------------------------------------------

    def _factory_of(self, ctx: ForwarderSurface) -> ForwarderFactoryInterface:
        state = ctx.state
        if not state.initialized:
            raise LifecycleError(INIT_NOT_INITIALIZED, repr(ctx))
        if state.is_petrified:
            raise LifecycleError(INIT_PETRIFIED, repr(ctx))
        factory = self.ledger.contract_at(state.factory_address)
        if not isinstance(factory, ForwarderFactoryInterface):
            raise LifecycleError(INIT_INVALID_FACTORY, state.factory_address)
        return factory

    def _bridge_of(self, factory: ForwarderFactoryInterface) -> DonationBridgeInterface:
        bridge_address = factory.bridge
        if bridge_address == ZERO_ADDRESS:
            raise ConfigurationError(ERROR_ZERO_BRIDGE)
        if not self.ledger.is_contract(bridge_address):
            raise ConfigurationError(ERROR_BRIDGE_CALL, f"no code at {bridge_address}")
        bridge = self.ledger.contract_at(bridge_address)
        if not isinstance(bridge, DonationBridgeInterface):
            raise ConfigurationError(ERROR_BRIDGE_CALL, f"{bridge!r} is not a bridge")
        return bridge

    # -------------------------------------------------------------------------
    # Delegated operations
    # -------------------------------------------------------------------------

    def do_initialize(
        self, ctx: ForwarderSurface, giver_id: int, receiver_id: int, *, sender: str
    ) -> None:
        """
        Exactly-once инициализация контекста.

        Вызывающий записывается как фабрика; его bridge должен быть ненулевым.

        Raises:
            LifecycleError(INIT_ALREADY_INITIALIZED): Повторный вызов (в т.ч. на шаблоне)
            AuthorizationError(INIT_INVALID_FACTORY): Вызывающий — не фабрика
            ConfigurationError(ERROR_ZERO_BRIDGE): У фабрики нулевой bridge
        """
        if ctx.state.initialized:
            raise LifecycleError(INIT_ALREADY_INITIALIZED, repr(ctx))

        sender = normalize_address(sender)
        if not self.ledger.is_contract(sender) or not isinstance(
            self.ledger.contract_at(sender), ForwarderFactoryInterface
        ):
            raise AuthorizationError(INIT_INVALID_FACTORY, sender)
        factory = self.ledger.contract_at(sender)
        if factory.bridge == ZERO_ADDRESS:
            raise ConfigurationError(ERROR_ZERO_BRIDGE)

        ctx._set_state(ctx.state.initialized_with(giver_id, receiver_id, sender))
        logger.info(
            "Forwarder %s initialized: giver=%d receiver=%d factory=%s",
            ctx.address,
            giver_id,
            receiver_id,
            sender,
        )

    def do_forward(self, ctx: ForwarderSurface, asset: str, *, sender: str) -> int:
        """
        Перевод всего баланса актива в bridge с регистрацией доната.

        Returns:
            Переведённая сумма (0 — no-op)
        """
        factory = self._factory_of(ctx)
        bridge = self._bridge_of(factory)
        asset = normalize_address(asset)

        transfer = asset_transfer_for(self.ledger, asset)
        balance = transfer.balance_of(ctx.address)
        if balance == 0:
            logger.debug("Forwarder %s: nothing to forward for %s", ctx.address, asset)
            return 0

        value = 0
        if asset == NATIVE_ASSET:
            value = balance
        elif transfer.allowance(ctx.address, bridge.address) < balance:
            approved = transfer.approve(ctx.address, bridge.address, MAX_UINT)
            if not approved.ok:
                raise TransferError(ERROR_ERC20_APPROVE, approved.reason)

        state = ctx.state
        try:
            bridge.donate(
                state.giver_id,
                state.receiver_id,
                asset,
                balance,
                sender=ctx.address,
                value=value,
            )
        except Revert as e:
            raise ConfigurationError(ERROR_BRIDGE_CALL, e.reason) from e

        ctx.emit(Forwarded(to=bridge.address, token=asset, balance=balance))
        logger.info(
            "Forwarder %s forwarded %d of %s to bridge %s (caller=%s)",
            ctx.address,
            balance,
            asset,
            bridge.address,
            sender,
        )
        return balance

    def do_forward_multiple(
        self, ctx: ForwarderSurface, assets: Sequence[str], *, sender: str
    ) -> List[int]:
        """All-or-nothing: отказ по одному активу откатывает весь batch."""
        return [self.do_forward(ctx, asset, sender=sender) for asset in assets]

    def do_forward_moloch(self, ctx: ForwarderSurface, dao_address: str, *, sender: str) -> int:
        """
        Погашение shares контекста в DAO (ragequit) и forward полученного токена.
        """
        self._factory_of(ctx)
        dao_address = normalize_address(dao_address)
        if not self.ledger.is_contract(dao_address):
            raise ConfigurationError(ERROR_NOT_A_DAO, dao_address)
        dao = self.ledger.contract_at(dao_address)
        if not isinstance(dao, MolochInterface):
            raise ConfigurationError(ERROR_NOT_A_DAO, repr(dao))

        shares = dao.members(ctx.address).shares
        if shares > 0:
            redeemed = dao.ragequit(shares, sender=ctx.address)
            logger.info(
                "Forwarder %s ragequit %d shares from %s, redeemed %d",
                ctx.address,
                shares,
                dao_address,
                redeemed,
            )
        return self.do_forward(ctx, dao.approved_token, sender=sender)

    def do_escape_hatch(self, ctx: ForwarderSurface, asset: str, *, sender: str) -> int:
        """
        Recovery: весь баланс актива → escape_hatch_destination фабрики.

        Bridge и запись о донате не участвуют.

        Raises:
            AuthorizationError(RECOVER_DISALLOWED): sender != escape_hatch_caller
            TransferError(RECOVER_TOKEN_TRANSFER | RECOVER_NATIVE_TRANSFER)
        """
        factory = self._factory_of(ctx)
        if normalize_address(sender) != factory.escape_hatch_caller:
            logger.warning("Forwarder %s: escape hatch rejected for %s", ctx.address, sender)
            raise AuthorizationError(RECOVER_DISALLOWED, sender)

        asset = normalize_address(asset)
        destination = factory.escape_hatch_destination
        transfer = asset_transfer_for(self.ledger, asset)
        balance = transfer.balance_of(ctx.address)
        result = transfer.send(ctx.address, destination, balance)
        if not result.ok:
            reason = RECOVER_NATIVE_TRANSFER if asset == NATIVE_ASSET else RECOVER_TOKEN_TRANSFER
            raise TransferError(reason, result.reason)

        ctx.emit(EscapeHatchCalled(token=asset, amount=balance))
        logger.warning(
            "Forwarder %s escape hatch: %d of %s -> %s", ctx.address, balance, asset, destination
        )
        return balance
