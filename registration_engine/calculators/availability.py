"""
Ticket Availability Engine

Decides whether a ticket type can be bought on a given date and how many
remain, from a snapshot of sales supplied by the order system.
"""

import logging
from datetime import date

from ..models import Availability, DenialReason, SaleRecord, TicketType, parse_date

logger = logging.getLogger(__name__)


class TicketAvailabilityEngine:
    """Computes availability; never mutates sales counters."""

    def is_purchasable(
        self,
        ticket: TicketType,
        on_date,
        sales: list[SaleRecord],
        dependency_satisfied: bool,
    ) -> Availability:
        """
        Evaluate purchase rules in priority order. The first failing rule
        decides the reason:

        1. Inactive ticket type
        2. Date outside the sale window
        3. Date not among the ticket's applicable days
        4. Required ticket not purchased (or no longer exists)
        5. Capacity reached
        """
        day = parse_date(on_date)

        if not ticket.is_active:
            return self._deny(ticket, DenialReason.INACTIVE)

        if not (ticket.start_date <= day <= ticket.end_date):
            return self._deny(ticket, DenialReason.OUTSIDE_SALE_WINDOW)

        if ticket.applicable_days and day not in ticket.applicable_days:
            return self._deny(ticket, DenialReason.DAY_NOT_APPLICABLE)

        if ticket.dependency_ticket_id is not None and not dependency_satisfied:
            return self._deny(ticket, DenialReason.DEPENDENCY_UNMET)

        if ticket.capacity is None:
            return Availability(ticket_type_id=ticket.id, purchasable=True, remaining=None)

        sold = self.quantity_sold(ticket, day, sales)
        if sold >= ticket.capacity:
            return self._deny(ticket, DenialReason.SOLD_OUT)

        return Availability(ticket_type_id=ticket.id, purchasable=True, remaining=ticket.capacity - sold)

    def catalog_availability(self, catalog, on_date, sales: list[SaleRecord], purchased_ids=()) -> dict:
        """Availability of every ticket type in a catalog, keyed by ticket id."""
        return {
            ticket.id: self.is_purchasable(
                ticket,
                on_date,
                sales,
                dependency_satisfied=catalog.dependency_satisfied(ticket, purchased_ids),
            )
            for ticket in catalog
        }

    @staticmethod
    def quantity_sold(ticket: TicketType, day: date, sales: list[SaleRecord]) -> int:
        """
        Sold quantity for this ticket type. Day-restricted tickets have
        per-day capacity, so only that day's sales count.
        """
        records = (s for s in sales if s.ticket_type_id == ticket.id)
        if ticket.applicable_days:
            records = (s for s in records if s.date == day)
        return sum(s.quantity_sold for s in records)

    @staticmethod
    def _deny(ticket: TicketType, reason: DenialReason) -> Availability:
        logger.debug(f"Ticket type '{ticket.name}' not purchasable: {reason.value}")
        return Availability(ticket_type_id=ticket.id, purchasable=False, remaining=0, reason=reason)
