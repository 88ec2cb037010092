"""
Errors — таксономия отказов forwarder-системы

Каждый отказ — это revert: исключение с точной reason-строкой.
Ledger откатывает все изменения call frame'а, в котором исключение возникло,
поэтому ни один отказ не оставляет частичного состояния.

Категории:
1. ConstructionError   — валидация при деплое фабрики
2. LifecycleError      — нарушение exactly-once инициализации
3. AuthorizationError  — вызывающий не имеет права на операцию
4. ConfigurationError  — система ещё не готова к forwarding (retryable)
5. TransferError       — токен/native перевод не прошёл
"""

from typing import Final


# =============================================================================
# REASON STRINGS
# =============================================================================

# Construction
ERROR_NOT_A_CONTRACT: Final[str] = "ERROR_NOT_A_CONTRACT"
ERROR_HATCH_CALLER: Final[str] = "ERROR_HATCH_CALLER"
ERROR_HATCH_DESTINATION: Final[str] = "ERROR_HATCH_DESTINATION"

# Lifecycle
INIT_ALREADY_INITIALIZED: Final[str] = "INIT_ALREADY_INITIALIZED"
INIT_NOT_INITIALIZED: Final[str] = "INIT_NOT_INITIALIZED"
INIT_PETRIFIED: Final[str] = "INIT_PETRIFIED"

# Authorization
RECOVER_DISALLOWED: Final[str] = "RECOVER_DISALLOWED"
ERR_ESCAPABLE_INVALID_CALLER: Final[str] = "err_escapableInvalidCaller"
ERR_ESCAPABLE_BLACKLISTED_TOKEN: Final[str] = "err_escapableBlacklistedToken"
ERR_OWNED_INVALID_CALLER: Final[str] = "err_ownedInvalidCaller"
INIT_INVALID_FACTORY: Final[str] = "INIT_INVALID_FACTORY"

# Configuration preconditions
ERROR_ZERO_BRIDGE: Final[str] = "ERROR_ZERO_BRIDGE"
ERROR_BRIDGE_CALL: Final[str] = "ERROR_BRIDGE_CALL"
ERROR_NOT_A_DAO: Final[str] = "ERROR_NOT_A_DAO"

# Transfers
ERROR_ERC20_APPROVE: Final[str] = "ERROR_ERC20_APPROVE"
RECOVER_TOKEN_TRANSFER: Final[str] = "RECOVER_TOKEN_TRANSFER"
RECOVER_NATIVE_TRANSFER: Final[str] = "RECOVER_NATIVE_TRANSFER"

# Ledger
ERROR_INSUFFICIENT_BALANCE: Final[str] = "ERROR_INSUFFICIENT_BALANCE"
ERROR_NOT_PAYABLE: Final[str] = "ERROR_NOT_PAYABLE"
ERROR_NO_CODE: Final[str] = "ERROR_NO_CODE"

# Asset capability
ERROR_TOKEN_RETURNED_FALSE: Final[str] = "ERROR_TOKEN_RETURNED_FALSE"
ERROR_NOT_A_TOKEN: Final[str] = "ERROR_NOT_A_TOKEN"

# Reference tokens
ERROR_TOKEN_BALANCE: Final[str] = "ERROR_TOKEN_BALANCE"
ERROR_TOKEN_ALLOWANCE: Final[str] = "ERROR_TOKEN_ALLOWANCE"
ERROR_TOKEN_NOT_OWNER: Final[str] = "ERROR_TOKEN_NOT_OWNER"
ERROR_TOKEN_ZERO_TRANSFER: Final[str] = "ERROR_TOKEN_ZERO_TRANSFER"

# Donation bridge
ERROR_ZERO_AMOUNT: Final[str] = "ERROR_ZERO_AMOUNT"
ERROR_VALUE_MISMATCH: Final[str] = "ERROR_VALUE_MISMATCH"
ERROR_TOKEN_NOT_WHITELISTED: Final[str] = "ERROR_TOKEN_NOT_WHITELISTED"
ERROR_TOKEN_TRANSFER: Final[str] = "ERROR_TOKEN_TRANSFER"

# DAO
ERROR_NOT_SUMMONER: Final[str] = "ERROR_NOT_SUMMONER"
ERROR_INSUFFICIENT_SHARES: Final[str] = "ERROR_INSUFFICIENT_SHARES"
ERROR_TRIBUTE_TRANSFER: Final[str] = "ERROR_TRIBUTE_TRANSFER"
ERROR_GUILD_WITHDRAW: Final[str] = "ERROR_GUILD_WITHDRAW"


# =============================================================================
# EXCEPTIONS
# =============================================================================


class Revert(Exception):
    """
    Базовый отказ операции на ledger.

    Attributes:
        reason: Точная reason-строка (то, что видит вызывающий)
    """

    def __init__(self, reason: str, details: str = ""):
        self.reason = reason
        self.details = details
        message = reason if not details else f"{reason}: {details}"
        super().__init__(message)


class ForwarderError(Revert):
    """Отказ, сгенерированный forwarder/factory логикой."""

    retryable: bool = False


class ConstructionError(ForwarderError):
    """Фабрика не прошла валидацию при деплое."""


class LifecycleError(ForwarderError):
    """Нарушение протокола инициализации (никогда не ретраится)."""


class AuthorizationError(ForwarderError):
    """Вызывающий не имеет нужной роли."""


class ConfigurationError(ForwarderError):
    """
    Конфигурация ещё не готова (например, bridge = 0x0).

    Вызывающий может повторить операцию после того, как оператор
    исправит конфигурацию фабрики.
    """

    retryable = True


class TransferError(ForwarderError):
    """Перевод актива отклонён токеном или получателем."""
