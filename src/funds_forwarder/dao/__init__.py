"""DAO — эталонная DAO-казна для forward_moloch."""

from .moloch import GuildBank, MolochDao

__all__ = [
    "MolochDao",
    "GuildBank",
]
