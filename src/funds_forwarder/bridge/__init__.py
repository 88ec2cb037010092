"""Bridge — donation bridge и интерфейсы внешних коллабораторов."""

from .donation_bridge import DonationBridge
from .interface import DonationBridgeInterface, Member, MolochInterface

__all__ = [
    "DonationBridge",
    "DonationBridgeInterface",
    "MolochInterface",
    "Member",
]
