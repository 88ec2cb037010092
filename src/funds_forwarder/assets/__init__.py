"""Assets — token контракты и capability перевода актива."""

from .tokens import (
    FalseReturnToken,
    NoReturnToken,
    ReentrantToken,
    StandardToken,
    WrappedEther,
    ZeroTransferRevertToken,
)
from .transfer import (
    AssetTransfer,
    NativeTransfer,
    TokenInterface,
    TokenTransfer,
    TransferResult,
    asset_transfer_for,
    token_transfer_for,
)

__all__ = [
    # Tokens
    "StandardToken",
    "NoReturnToken",
    "FalseReturnToken",
    "ZeroTransferRevertToken",
    "ReentrantToken",
    "WrappedEther",
    # Transfer capability
    "AssetTransfer",
    "NativeTransfer",
    "TokenTransfer",
    "TokenInterface",
    "TransferResult",
    "asset_transfer_for",
    "token_transfer_for",
]
