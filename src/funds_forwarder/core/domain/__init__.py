"""
Domain models and value objects.

Contains addresses and sentinels, forwarder/factory state, donation records
and the events emitted for downstream indexers.
"""

from funds_forwarder.core.domain.address import (
    MAX_UINT,
    MAX_UINT64,
    NATIVE_ASSET,
    PETRIFIED_ADDRESS,
    ZERO_ADDRESS,
    Address,
    CampaignId,
    derive_address,
    is_zero,
    normalize_address,
)
from funds_forwarder.core.domain.donation import DonationRecord
from funds_forwarder.core.domain.events import (
    Approval,
    BridgeChanged,
    ChildImplementationChanged,
    Donate,
    EscapeHatchCalled,
    Event,
    Forwarded,
    NewFundForwarder,
    OwnershipRequested,
    OwnershipTransferred,
    Ragequit,
    TokenWhitelisted,
    Transfer,
)
from funds_forwarder.core.domain.factory_config import FactoryConfig
from funds_forwarder.core.domain.forwarder_state import ForwarderState

__all__ = [
    # Address module
    "Address",
    "CampaignId",
    "ZERO_ADDRESS",
    "PETRIFIED_ADDRESS",
    "NATIVE_ASSET",
    "MAX_UINT",
    "MAX_UINT64",
    "normalize_address",
    "is_zero",
    "derive_address",
    # State models
    "ForwarderState",
    "FactoryConfig",
    "DonationRecord",
    # Events
    "Event",
    "NewFundForwarder",
    "Forwarded",
    "BridgeChanged",
    "ChildImplementationChanged",
    "EscapeHatchCalled",
    "OwnershipRequested",
    "OwnershipTransferred",
    "Donate",
    "TokenWhitelisted",
    "Transfer",
    "Approval",
    "Ragequit",
]
