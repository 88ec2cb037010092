"""
Event Contract Validation Module

Модуль для валидации событий forwarder-системы против JSON Schema.
"""

from .validators import (
    ContractValidator,
    SchemaLoader,
    default_loader,
    validate_event,
    validate_event_payload,
    validator_for,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    # Functions
    "default_loader",
    "validator_for",
    "validate_event",
    "validate_event_payload",
]
