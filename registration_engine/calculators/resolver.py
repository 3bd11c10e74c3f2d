"""
Tier Resolver

Selects the pricing tier that applies to a registration from how far in
advance of the event it is made.
"""

import logging
from datetime import date

from ..errors import NoApplicableTierError, TierDisabledError
from ..models import PricingTier, TierTable, parse_date

logger = logging.getLogger(__name__)


def whole_months_between(start: date, end: date) -> int:
    """
    Count whole calendar months from start to end, floored.

    Exactly N calendar months apart counts as N (2025-03-15 -> 2025-06-15 is 3).
    Negative when end is before start.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months > 0 and end.day < start.day:
        months -= 1
    elif months < 0 and end.day > start.day:
        months += 1
    return months


class TierResolver:
    """Resolves the applicable tier of a tier table."""

    def resolve(self, table: TierTable, event_start_date, as_of=None) -> PricingTier:
        """
        Return the tier with the largest threshold the lead time still meets.

        Raises:
            TierDisabledError: fees are switched off for this application type
            NoApplicableTierError: no threshold is met (or the event has started)
        """
        if not table.enabled:
            raise TierDisabledError(table.application_type)

        event_start = parse_date(event_start_date)
        registered_on = parse_date(as_of) if as_of is not None else date.today()
        lead_months = self.lead_months(registered_on, event_start)

        if registered_on > event_start:
            # Even the zero-month tier only covers registrations up to the start
            raise NoApplicableTierError(table.application_type, lead_months)

        for tier in table.sorted_descending_by_lead_time():
            if tier.months_before_event <= lead_months:
                logger.debug(
                    f"Resolved tier '{tier.name}' for {table.application_type} "
                    f"({lead_months} months before {event_start.isoformat()})"
                )
                return tier

        raise NoApplicableTierError(table.application_type, lead_months)

    @staticmethod
    def lead_months(as_of: date, event_start_date: date) -> int:
        return whole_months_between(as_of, event_start_date)
