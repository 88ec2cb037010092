"""
Ledger — атомарный исполнитель операций

In-process модель внешнего ledger'а, на который опирается forwarder-система:
- Единый последовательный порядок операций (нет потоков, нет async)
- Каждая state-changing операция — call frame: либо выполняется целиком,
  либо откатывается целиком (storage, native балансы, nonce, реестр
  контрактов, лог событий)
- Каждый frame ведёт undo-журнал: при первой записи ключа (storage
  контракта, баланс, nonce, реестр) запоминается его прежнее значение.
  Откат внутреннего frame'а восстанавливает только его журнал; успешный
  frame сливает журнал в родительский. Стоимость frame'а пропорциональна
  числу записей в нём и не зависит от числа контрактов на ledger'е

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Ни одна неудачная операция не оставляет частичных изменений
2. Native валюта не создаётся и не уничтожается, кроме mint_native (genesis)
3. Лог событий append-only; откат только усекает хвост текущего frame'а
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterator, List, MutableMapping, Optional, Tuple, Type, TypeVar

from funds_forwarder.core.contracts import validate_event
from funds_forwarder.core.domain.address import derive_address, normalize_address
from funds_forwarder.core.domain.events import Event
from funds_forwarder.core.errors import ERROR_INSUFFICIENT_BALANCE, ERROR_NO_CODE, Revert
from funds_forwarder.ledger.contract import Contract

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=Contract)


# =============================================================================
# CONFIG / RECORDS
# =============================================================================


@dataclass(frozen=True)
class LedgerConfig:
    """
    Конфигурация ledger'а.

    - validate_events: проверять каждое событие против JSON Schema при emit
    - address_salt: соль деривации адресов (разные ledger'ы → разные адреса)
    """

    validate_events: bool = True
    address_salt: str = "funds-forwarder"


@dataclass(frozen=True)
class LogEntry:
    """Запись лога событий."""

    index: int
    emitter: str
    event: Event

    @property
    def name(self) -> str:
        return type(self.event).__name__


_MISSING = object()


@dataclass
class _Frame:
    """Undo-журнал call frame'а: (id таблицы, ключ) → (таблица, ключ, прежнее значение)."""

    log_length: int
    entries: Dict[Tuple[int, Hashable], Tuple[MutableMapping, Hashable, Any]] = field(
        default_factory=dict
    )


# =============================================================================
# LEDGER
# =============================================================================


class Ledger:
    """
    Ledger с атомарными call frame'ами.

    Usage:
        ledger = Ledger()
        donor = ledger.create_account("donor", balance=10**18)
        token = ledger.deploy(StandardToken, "DAI", deployer=donor)
        with ledger.atomic():
            ...  # всё или ничего
    """

    def __init__(self, config: Optional[LedgerConfig] = None):
        self.config = config or LedgerConfig()

        self._contracts: Dict[str, Contract] = {}
        self._balances: Dict[str, int] = {}
        self._nonces: Dict[str, int] = {}
        self._accounts: Dict[str, str] = {}
        self._log: List[LogEntry] = []
        self._frames: List[_Frame] = []
        self._journal_writes = 0

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def create_account(self, label: str, balance: int = 0) -> str:
        """
        Внешний (не-контрактный) аккаунт с детерминированным адресом.

        Args:
            label: Человекочитаемая метка (уникальна в пределах ledger'а)
            balance: Начальный native баланс (genesis)

        Returns:
            Адрес аккаунта
        """
        address = derive_address(self.config.address_salt, "account", label)
        self.journal(self._accounts, address)
        self._accounts[address] = label
        if balance:
            self.mint_native(address, balance)
        return address

    def label_of(self, address: str) -> str:
        address = normalize_address(address)
        if address in self._accounts:
            return self._accounts[address]
        if address in self._contracts:
            return repr(self._contracts[address])
        return address

    def mint_native(self, address: str, amount: int) -> None:
        """Genesis-аллокация native валюты (только для bootstrap'а окружения)."""
        if amount < 0:
            raise ValueError(f"amount must be non-negative, got {amount}")
        address = normalize_address(address)
        self.journal(self._balances, address)
        self._balances[address] = self._balances.get(address, 0) + amount

    def balance_of(self, address: str) -> int:
        return self._balances.get(normalize_address(address), 0)

    # -------------------------------------------------------------------------
    # Contracts
    # -------------------------------------------------------------------------

    def is_contract(self, address: str) -> bool:
        """Code-bearing проверка: по адресу задеплоен контракт."""
        return normalize_address(address) in self._contracts

    def contract_at(self, address: str, expected: Type[C] = Contract) -> C:  # type: ignore[assignment]
        """
        Разрешение адреса в контракт.

        Raises:
            Revert(ERROR_NO_CODE): Если по адресу нет контракта ожидаемого типа
        """
        contract = self._contracts.get(normalize_address(address))
        if contract is None or not isinstance(contract, expected):
            raise Revert(ERROR_NO_CODE, f"no {expected.__name__} at {address}")
        return contract

    def deploy(self, contract_cls: Type[C], *args: Any, deployer: str, **kwargs: Any) -> C:
        """
        Деплой контракта: адрес из (deployer, nonce), затем constructor().

        Деплой атомарен: если constructor() падает, контракта не существует
        и nonce деплоера не увеличен.
        """
        deployer = normalize_address(deployer)
        with self.atomic():
            nonce = self._nonces.get(deployer, 0)
            self.journal(self._nonces, deployer)
            self._nonces[deployer] = nonce + 1
            address = derive_address(self.config.address_salt, deployer, nonce)

            contract = contract_cls(self, address)
            self.journal(self._contracts, address)
            self._contracts[address] = contract
            contract.constructor(*args, sender=deployer, **kwargs)

        logger.debug("Deployed %s at %s (deployer=%s)", contract_cls.__name__, address, deployer)
        return contract

    # -------------------------------------------------------------------------
    # Native currency
    # -------------------------------------------------------------------------

    def send(self, sender: str, to: str, value: int) -> None:
        """
        Native перевод. Если получатель — контракт, вызывается его receive().

        Raises:
            Revert: Недостаточный баланс или получатель отклонил перевод
        """
        to = normalize_address(to)
        with self.atomic():
            self.attach_value(sender, to, value)
            contract = self._contracts.get(to)
            if contract is not None:
                contract.receive(value, sender=normalize_address(sender))

    def attach_value(self, sender: str, to: str, value: int) -> None:
        """
        Перемещение native value без вызова receive() получателя.

        Используется payable-методами, которые принимают value как часть вызова.
        """
        if value < 0:
            raise ValueError(f"value must be non-negative, got {value}")
        if value == 0:
            return
        sender = normalize_address(sender)
        to = normalize_address(to)
        available = self._balances.get(sender, 0)
        if available < value:
            raise Revert(
                ERROR_INSUFFICIENT_BALANCE,
                f"{self.label_of(sender)} has {available}, needs {value}",
            )
        self.journal(self._balances, sender)
        self.journal(self._balances, to)
        self._balances[sender] = available - value
        self._balances[to] = self._balances.get(to, 0) + value

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def emit(self, emitter: str, event: Event) -> LogEntry:
        if self.config.validate_events:
            validate_event(event)
        entry = LogEntry(index=len(self._log), emitter=normalize_address(emitter), event=event)
        self._log.append(entry)
        return entry

    def events(
        self,
        event_type: Optional[Type[Event]] = None,
        emitter: Optional[str] = None,
        since: int = 0,
    ) -> List[Event]:
        """
        Выборка событий из лога.

        Args:
            event_type: Фильтр по классу события
            emitter: Фильтр по адресу эмиттера
            since: Индекс первой записи (см. log_height)
        """
        emitter = normalize_address(emitter) if emitter is not None else None
        result = []
        for entry in self._log[since:]:
            if event_type is not None and not isinstance(entry.event, event_type):
                continue
            if emitter is not None and entry.emitter != emitter:
                continue
            result.append(entry.event)
        return result

    @property
    def log(self) -> List[LogEntry]:
        return list(self._log)

    @property
    def log_height(self) -> int:
        return len(self._log)

    # -------------------------------------------------------------------------
    # Atomicity
    # -------------------------------------------------------------------------

    @property
    def depth(self) -> int:
        """Глубина текущего call frame (0 = вне операции)."""
        return len(self._frames)

    @property
    def journal_writes(self) -> int:
        """Сколько прежних значений записано в журналы frame'ов за всё время."""
        return self._journal_writes

    def journal(self, table: MutableMapping, key: Hashable) -> None:
        """
        Запомнить прежнее значение table[key] перед записью.

        Вне frame'а запись не журналируется. Внутри frame'а запоминается
        только первая запись ключа: именно она нужна для отката.
        """
        if not self._frames:
            return
        entries = self._frames[-1].entries
        slot = (id(table), key)
        if slot not in entries:
            entries[slot] = (table, key, table.get(key, _MISSING))
            self._journal_writes += 1

    @contextmanager
    def atomic(self) -> Iterator["Ledger"]:
        """
        Call frame: все изменения внутри блока откатываются при исключении.
        """
        frame = _Frame(log_length=len(self._log))
        self._frames.append(frame)
        try:
            yield self
        except Exception as e:
            self._rollback(frame)
            logger.debug("Frame at depth %d reverted: %s", len(self._frames), e)
            raise
        else:
            if len(self._frames) > 1:
                parent = self._frames[-2].entries
                for slot, entry in frame.entries.items():
                    parent.setdefault(slot, entry)
        finally:
            self._frames.pop()

    def _rollback(self, frame: _Frame) -> None:
        for table, key, previous in frame.entries.values():
            if previous is _MISSING:
                table.pop(key, None)
            else:
                table[key] = previous
        del self._log[frame.log_length:]


__all__ = ["Ledger", "LedgerConfig", "LogEntry"]
