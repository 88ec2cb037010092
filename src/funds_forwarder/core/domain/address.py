"""
Address — адреса аккаунтов и контрактов

Все адреса хранятся в нормализованном виде: lowercase, '0x' + 40 hex.
Два зарезервированных значения:
- ZERO_ADDRESS: "пустой" адрес и одновременно sentinel native-валюты
- PETRIFIED_ADDRESS: poison-значение factory back-reference у шаблона логики,
  никогда не совпадает с адресом реальной фабрики
"""

import hashlib
import re
from typing import Annotated, Final

from pydantic import AfterValidator, Field, StrictInt


_ADDRESS_RE: Final[re.Pattern[str]] = re.compile(r"^0x[0-9a-f]{40}$")

ZERO_ADDRESS: Final[str] = "0x" + "0" * 40
PETRIFIED_ADDRESS: Final[str] = "0x" + "f" * 40

# Native currency не имеет контракта; используется нулевой адрес
NATIVE_ASSET: Final[str] = ZERO_ADDRESS

# uint256 max (бесконечный allowance)
MAX_UINT: Final[int] = 2**256 - 1

# Диапазон giverId / receiverId (uint64)
MAX_UINT64: Final[int] = 2**64 - 1


def normalize_address(value: str) -> str:
    """
    Нормализация адреса.

    Args:
        value: Адрес в любом регистре (checksum или lowercase)

    Returns:
        Адрес в lowercase

    Raises:
        ValueError: Если строка не является адресом
    """
    if not isinstance(value, str):
        raise ValueError(f"address must be a string, got {type(value).__name__}")
    lowered = value.lower()
    if not _ADDRESS_RE.match(lowered):
        raise ValueError(f"invalid address: {value!r}")
    return lowered


Address = Annotated[str, AfterValidator(normalize_address)]

# Непрозрачный uint64 идентификатор кампании (giverId / receiverId); bool и
# строки не приводятся.
CampaignId = Annotated[StrictInt, Field(ge=0, le=MAX_UINT64)]


def is_zero(address: str) -> bool:
    return normalize_address(address) == ZERO_ADDRESS


def derive_address(*parts: object) -> str:
    """
    Детерминированный адрес из произвольных частей (deployer, nonce, label).

    Последние 20 байт sha3-256 от склеенных частей, по аналогии с CREATE.
    """
    payload = ":".join(str(part) for part in parts).encode("utf-8")
    return "0x" + hashlib.sha3_256(payload).hexdigest()[-40:]
