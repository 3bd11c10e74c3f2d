"""
REGISTRATION PRICING & TICKET INVENTORY ENGINE
Tier resolution, installment plans and ticket availability
"""

from .catalog import TicketCatalog
from .models import PricingTier, SaleRecord, TicketDiscount, TicketType, TierTable
from .processor import RegistrationProcessor

__all__ = ['RegistrationProcessor', 'TicketCatalog', 'TierTable', 'PricingTier', 'TicketType', 'SaleRecord', 'TicketDiscount']
