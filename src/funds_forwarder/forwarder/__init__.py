"""Forwarder — логика, клоны кампаний и фабрика."""

from .factory import FundsForwarderFactory
from .instance import ForwarderInstance
from .logic import ForwarderFactoryInterface, ForwarderLogic, ForwarderSurface

__all__ = [
    "FundsForwarderFactory",
    "ForwarderInstance",
    "ForwarderLogic",
    "ForwarderSurface",
    "ForwarderFactoryInterface",
]
