"""
Events — наблюдаемые события для downstream индексеров

Immutable Pydantic модели. Каждое событие несёт точные значения полей;
сериализованная форма (model_dump(mode="json")) соответствует JSON Schema
из funds_forwarder/core/contracts/schema/<schema_name>.json.
"""

from typing import ClassVar, Literal

from pydantic import BaseModel, Field

from .address import Address, CampaignId


class Event(BaseModel):
    """Базовый класс событий."""

    schema_name: ClassVar[str] = ""

    model_config = {"frozen": True}


# =============================================================================
# FACTORY / FORWARDER EVENTS
# =============================================================================


class NewFundForwarder(Event):
    """Фабрика создала и инициализировала новый forwarder."""

    schema_name: ClassVar[str] = "new_fund_forwarder"

    name: Literal["NewFundForwarder"] = "NewFundForwarder"
    giver_id: CampaignId
    receiver_id: CampaignId
    funds_forwarder: Address


class Forwarded(Event):
    """Баланс актива ушёл в bridge."""

    schema_name: ClassVar[str] = "forwarded"

    name: Literal["Forwarded"] = "Forwarded"
    to: Address = Field(..., description="Bridge, получивший средства")
    token: Address = Field(..., description="Актив (0x0 = native)")
    balance: int = Field(..., ge=0)


class BridgeChanged(Event):
    schema_name: ClassVar[str] = "bridge_changed"

    name: Literal["BridgeChanged"] = "BridgeChanged"
    new_bridge: Address


class ChildImplementationChanged(Event):
    schema_name: ClassVar[str] = "child_implementation_changed"

    name: Literal["ChildImplementationChanged"] = "ChildImplementationChanged"
    new_child_implementation: Address


class EscapeHatchCalled(Event):
    """Средства выведены через escape hatch (recovery, не donation)."""

    schema_name: ClassVar[str] = "escape_hatch_called"

    name: Literal["EscapeHatchCalled"] = "EscapeHatchCalled"
    token: Address
    amount: int = Field(..., ge=0)


# =============================================================================
# OWNERSHIP EVENTS
# =============================================================================


class OwnershipRequested(Event):
    schema_name: ClassVar[str] = "ownership_requested"

    name: Literal["OwnershipRequested"] = "OwnershipRequested"
    by: Address
    to: Address


class OwnershipTransferred(Event):
    schema_name: ClassVar[str] = "ownership_transferred"

    name: Literal["OwnershipTransferred"] = "OwnershipTransferred"
    previous_owner: Address
    new_owner: Address


# =============================================================================
# BRIDGE / TOKEN / DAO EVENTS
# =============================================================================


class Donate(Event):
    """Авторитетная запись о пожертвовании (эмитит bridge)."""

    schema_name: ClassVar[str] = "donate"

    name: Literal["Donate"] = "Donate"
    giver_id: CampaignId
    receiver_id: CampaignId
    token: Address
    amount: int = Field(..., gt=0)


class TokenWhitelisted(Event):
    schema_name: ClassVar[str] = "token_whitelisted"

    name: Literal["TokenWhitelisted"] = "TokenWhitelisted"
    token: Address
    accepted: bool


class Transfer(Event):
    schema_name: ClassVar[str] = "transfer"

    name: Literal["Transfer"] = "Transfer"
    source: Address
    destination: Address
    amount: int = Field(..., ge=0)


class Approval(Event):
    schema_name: ClassVar[str] = "approval"

    name: Literal["Approval"] = "Approval"
    owner: Address
    spender: Address
    amount: int = Field(..., ge=0)


class Ragequit(Event):
    schema_name: ClassVar[str] = "ragequit"

    name: Literal["Ragequit"] = "Ragequit"
    member: Address
    shares_to_burn: int = Field(..., gt=0)
