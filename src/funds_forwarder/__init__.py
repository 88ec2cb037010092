"""
Funds Forwarder — per-campaign forwarding в donation bridge.

Фабрика создаёт для каждой пары (giverId, receiverId) дешёвый forwarder,
делегирующий общей логике. Любой может форварднуть баланс forwarder'а в
bridge, где он регистрируется как донат. Escape hatch возвращает застрявшие
средства оператору.
"""

from funds_forwarder.forwarder import (
    ForwarderInstance,
    ForwarderLogic,
    FundsForwarderFactory,
)
from funds_forwarder.ledger import Ledger, LedgerConfig

__version__ = "0.3.0"

__all__ = [
    "FundsForwarderFactory",
    "ForwarderInstance",
    "ForwarderLogic",
    "Ledger",
    "LedgerConfig",
]
