"""Ledger — атомарный исполнитель: контракты, native балансы, лог событий."""

from .contract import Contract, Storage, transactional
from .ledger import Ledger, LedgerConfig, LogEntry

__all__ = [
    "Contract",
    "Storage",
    "transactional",
    "Ledger",
    "LedgerConfig",
    "LogEntry",
]
