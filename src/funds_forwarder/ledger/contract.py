"""
Contract — базовый класс контрактов на ledger

Контракт = адрес + storage. Storage — единственное изменяемое состояние
контракта: плоское отображение ключ → неизменяемое значение. Каждая запись
журналируется в текущем call frame ledger'а (старое значение ключа), поэтому
откат стоит O(записей во frame'е), а не O(всех контрактов). Вложенные
коллекции (балансы держателей, whitelist) хранятся составными ключами,
например ("balance", holder). Ссылки на другие контракты хранятся только
адресами и разрешаются через ledger при каждом вызове.
"""

import functools
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Callable, Dict, Hashable, Iterator, TypeVar

from funds_forwarder.core.domain.events import Event
from funds_forwarder.core.errors import ERROR_NOT_PAYABLE, Revert

if TYPE_CHECKING:
    from funds_forwarder.ledger.ledger import Ledger


F = TypeVar("F", bound=Callable[..., Any])

# Изменяемые контейнеры нельзя класть в storage: их мутация мимо журнала
# не откатывается.
_MUTABLE_TYPES = (list, dict, set, bytearray)


def transactional(method: F) -> F:
    """
    Декоратор state-changing метода: метод выполняется в отдельном call frame.

    Любое исключение откатывает все изменения, сделанные внутри вызова
    (включая вложенные вызовы других контрактов), и пробрасывается дальше.
    """

    @functools.wraps(method)
    def wrapper(self: "Contract", *args: Any, **kwargs: Any) -> Any:
        with self.ledger.atomic():
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class Storage(MutableMapping):
    """
    Журналируемое storage контракта.

    Объект storage живёт столько же, сколько контракт: откат восстанавливает
    значения ключей на месте, поэтому ссылка на storage остаётся валидной.
    """

    def __init__(self, ledger: "Ledger"):
        self._ledger = ledger
        self._data: Dict[Hashable, Any] = {}

    def __getitem__(self, key: Hashable) -> Any:
        return self._data[key]

    def __setitem__(self, key: Hashable, value: Any) -> None:
        if isinstance(value, _MUTABLE_TYPES):
            raise TypeError(
                f"storage values must be immutable, got {type(value).__name__} for {key!r}"
            )
        self._ledger.journal(self._data, key)
        self._data[key] = value

    def __delitem__(self, key: Hashable) -> None:
        if key not in self._data:
            raise KeyError(key)
        self._ledger.journal(self._data, key)
        del self._data[key]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Storage({self._data!r})"


class Contract:
    """
    Базовый контракт.

    Подклассы реализуют constructor() (вызывается ledger.deploy внутри
    атомарного frame'а) и, если принимают native-валюту, receive().
    """

    def __init__(self, ledger: "Ledger", address: str):
        self.ledger = ledger
        self.address = address
        self.storage = Storage(ledger)

    def constructor(self, *, sender: str) -> None:
        """Инициализация storage при деплое."""

    def receive(self, value: int, *, sender: str) -> None:
        """Payable fallback. По умолчанию контракт native-валюту не принимает."""
        raise Revert(ERROR_NOT_PAYABLE, f"{type(self).__name__} at {self.address}")

    @property
    def balance(self) -> int:
        """Native баланс контракта."""
        return self.ledger.balance_of(self.address)

    def emit(self, event: Event) -> None:
        self.ledger.emit(self.address, event)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"
