"""
Calculators Package

Provides the pricing and ticket inventory components.
"""

from .availability import TicketAvailabilityEngine
from .installments import InstallmentCalculator
from .orders import OrderQuoter
from .resolver import TierResolver

__all__ = [
    "TierResolver",
    "InstallmentCalculator",
    "TicketAvailabilityEngine",
    "OrderQuoter",
]
