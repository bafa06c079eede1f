"""
Process-wide holder for the PricingSystem used by the API routes.
"""
from typing import Optional

from ..services.system import PricingSystem

_system: Optional[PricingSystem] = None


def get_system() -> PricingSystem:
    if _system is None:
        raise RuntimeError("Pricing system has not been loaded")
    return _system


def set_system(system: Optional[PricingSystem]) -> None:
    global _system
    _system = system
