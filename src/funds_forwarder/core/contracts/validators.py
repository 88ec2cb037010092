"""
JSON Schema Event Contract Validators

Модуль для валидации событий согласно формальным JSON Schema контрактам.
Индексеры полагаются на точные значения полей событий, поэтому каждое
событие, попадающее в лог ledger'а, можно проверить против схемы.
Использует библиотеку jsonschema (Draft 2020-12).

Схемы поставляются как package data (funds_forwarder/core/contracts/schema/):
- new_fund_forwarder.json, forwarded.json, escape_hatch_called.json
- bridge_changed.json, child_implementation_changed.json
- ownership_requested.json, ownership_transferred.json
- donate.json, token_whitelisted.json, transfer.json, approval.json, ragequit.json
"""

import json
from functools import lru_cache
from importlib.resources import files
from importlib.resources.abc import Traversable
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator

from funds_forwarder.core.domain.events import Event


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Читает схемы из ресурсов пакета (funds_forwarder.core.contracts/schema).
    """

    def __init__(self):
        self._schema_dir = files(__package__) / "schema"
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Traversable:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'forwarded')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.is_file():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        schema = json.loads(schema_path.read_text(encoding="utf-8"))

        # Валидируем саму схему (meta-validation)
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


@lru_cache(maxsize=None)
def default_loader() -> SchemaLoader:
    """Общий загрузчик (создаётся при первом обращении)."""
    return SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Валидатор одного событийного контракта.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = default_loader().load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            jsonschema.ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        return self.validator.iter_errors(data)


_VALIDATORS: Dict[str, ContractValidator] = {}


def validator_for(schema_name: str) -> ContractValidator:
    """Кэшированный валидатор по имени схемы."""
    if schema_name not in _VALIDATORS:
        _VALIDATORS[schema_name] = ContractValidator(schema_name)
    return _VALIDATORS[schema_name]


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_event(event: Event) -> None:
    """
    Валидация события против его схемы.

    Args:
        event: Pydantic событие (schema_name задан на классе)

    Raises:
        ValueError: Если у события нет схемы
        jsonschema.ValidationError: Если сериализованное событие не
            соответствует схеме
    """
    if not event.schema_name:
        raise ValueError(f"{type(event).__name__} has no schema")
    validator_for(event.schema_name).validate(event.model_dump(mode="json"))


def validate_event_payload(schema_name: str, data: Dict[str, Any]) -> None:
    """Валидация сырого payload (например, полученного индексером)."""
    validator_for(schema_name).validate(data)
