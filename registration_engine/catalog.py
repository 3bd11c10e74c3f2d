"""
Ticket Catalog

Holds the ticket types of one event and guards the dependency graph.
Every change is validated against the whole catalog before it is accepted.
"""

import logging
import uuid
from uuid import UUID

from .errors import ErrorCode
from .models import TicketType, ValidationIssue, ValidationResult
from .validators import TicketValidator

logger = logging.getLogger(__name__)


class TicketCatalog:
    """The set of ticket types for an event."""

    COPY_SUFFIX = " (Copy)"

    def __init__(self, event_id, ticket_types=()):
        self.event_id = event_id
        self._tickets: dict[UUID, TicketType] = {}
        self._validator = TicketValidator()
        self._duplicate_ids: list[UUID] = []
        for ticket in ticket_types:
            if ticket.id in self._tickets:
                self._duplicate_ids.append(ticket.id)
            self._tickets[ticket.id] = ticket

    def __len__(self) -> int:
        return len(self._tickets)

    def __iter__(self):
        return iter(self._tickets.values())

    def __contains__(self, ticket_id) -> bool:
        return ticket_id in self._tickets

    def get(self, ticket_id: UUID) -> TicketType | None:
        return self._tickets.get(ticket_id)

    @property
    def ticket_types(self) -> tuple[TicketType, ...]:
        return tuple(self._tickets.values())

    def new_id(self) -> UUID:
        """Generate an id that is not yet used in this catalog."""
        while True:
            candidate = uuid.uuid4()
            if candidate not in self._tickets:
                return candidate

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_or_update(self, ticket: TicketType) -> ValidationResult:
        """
        Validate and store a ticket type, replacing any ticket with the same id.

        The catalog is left untouched when the result is not ok.
        """
        result = self._validator.validate(ticket)
        if result.ok:
            result = self._check_dependency(ticket)

        if not result.ok:
            logger.info(f"Rejected ticket type {ticket.id} for event {self.event_id}: {result.first_error.message}")
            return result

        self._tickets[ticket.id] = ticket
        return result

    def create(self, **fields) -> tuple[TicketType, ValidationResult]:
        """Build a ticket type with a catalog-issued id and try to add it."""
        ticket = TicketType(id=self.new_id(), **fields)
        return ticket, self.add_or_update(ticket)

    def remove(self, ticket_id: UUID) -> None:
        """
        Remove a ticket type. Dependents keep their (now dangling) reference
        and are reported as having an unmet dependency.
        """
        removed = self._tickets.pop(ticket_id, None)
        if removed is None:
            return
        dependents = [t.name for t in self._tickets.values() if t.dependency_ticket_id == ticket_id]
        if dependents:
            logger.warning(f"Removed ticket type '{removed.name}' still required by: {', '.join(dependents)}")

    def duplicate(self, ticket_id: UUID) -> TicketType:
        """
        Copy a ticket type under a new id. The copy never keeps a dependency,
        so it cannot close a cycle with the original.
        """
        original = self._tickets.get(ticket_id)
        if original is None:
            raise KeyError(f"Unknown ticket type: {ticket_id}")

        copy = original.with_changes(
            id=self.new_id(),
            name=f"{original.name}{self.COPY_SUFFIX}",
            dependency_ticket_id=None,
        )
        self._tickets[copy.id] = copy
        return copy

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> ValidationResult:
        """Check every ticket, repeated ids and the dependency graph before a save."""
        # Later rows with a repeated id replaced earlier ones at load time
        result = ValidationResult(
            issues=tuple(
                ValidationIssue(ErrorCode.INVALID_TICKET, "id", f"Ticket type id {ticket_id} is used more than once")
                for ticket_id in self._duplicate_ids
            )
        )
        for ticket in self._tickets.values():
            result = result.merge(self._validator.validate(ticket))
            result = result.merge(self._check_dependency(ticket))
        return result

    def validate_venue_capacity(self, max_attendees: int | None) -> ValidationResult:
        """
        Capacity of tickets that count toward the venue limit must fit
        within the venue's daily maximum.
        """
        if not max_attendees:
            return ValidationResult()

        total = sum(t.capacity or 0 for t in self._tickets.values() if t.affects_venue_capacity)
        if total <= max_attendees:
            return ValidationResult()

        return ValidationResult(
            issues=(
                ValidationIssue(
                    code=ErrorCode.VENUE_CAPACITY_EXCEEDED,
                    field="capacity",
                    message=f"Total ticket capacity ({total}) exceeds the maximum daily capacity ({max_attendees})",
                ),
            )
        )

    def dependency_satisfied(self, ticket: TicketType, purchased_ids=()) -> bool:
        """A dependency is met only if it still exists and has been purchased."""
        dependency = ticket.dependency_ticket_id
        if dependency is None:
            return True
        if dependency not in self._tickets:
            return False
        return dependency in set(purchased_ids)

    def _check_dependency(self, ticket: TicketType) -> ValidationResult:
        dependency = ticket.dependency_ticket_id
        if dependency is None:
            return ValidationResult()

        if dependency == ticket.id:
            return self._issue(ErrorCode.CYCLIC_DEPENDENCY, f"Ticket type '{ticket.name}' cannot depend on itself")

        if dependency not in self._tickets:
            return self._issue(
                ErrorCode.UNKNOWN_DEPENDENCY,
                f"Ticket type '{ticket.name}' depends on unknown ticket type {dependency}",
            )

        # Walk the chain as it would look with this ticket in place
        seen = {ticket.id}
        current = dependency
        while current is not None:
            if current in seen:
                return self._issue(
                    ErrorCode.CYCLIC_DEPENDENCY,
                    f"Ticket type '{ticket.name}' has a circular dependency",
                )
            seen.add(current)
            node = self._tickets.get(current)
            current = node.dependency_ticket_id if node is not None else None

        return ValidationResult()

    @staticmethod
    def _issue(code: ErrorCode, message: str) -> ValidationResult:
        return ValidationResult(issues=(ValidationIssue(code, "dependency_ticket_id", message),))

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, event_id, ticket_types: list[dict]) -> "TicketCatalog":
        """Load a catalog as persisted; call validate() before trusting it."""
        return cls(event_id, [TicketType.from_dict(t) for t in ticket_types])

    def to_dict(self) -> list[dict]:
        return [t.to_dict() for t in self._tickets.values()]
