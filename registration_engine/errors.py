"""Domain error codes for the registration engine."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    # Validation
    INVALID_TIER = "INVALID_TIER"
    EMPTY_TABLE = "EMPTY_TABLE"
    INVALID_TICKET = "INVALID_TICKET"
    VENUE_CAPACITY_EXCEEDED = "VENUE_CAPACITY_EXCEEDED"
    # Resolution
    NO_APPLICABLE_TIER = "NO_APPLICABLE_TIER"
    TIER_DISABLED = "TIER_DISABLED"
    PLAN_UNAVAILABLE = "PLAN_UNAVAILABLE"
    # Integrity
    UNKNOWN_DEPENDENCY = "UNKNOWN_DEPENDENCY"
    CYCLIC_DEPENDENCY = "CYCLIC_DEPENDENCY"
    UNKNOWN_TICKET = "UNKNOWN_TICKET"
    # Discounts
    INVALID_DISCOUNT = "INVALID_DISCOUNT"
    UNKNOWN_DISCOUNT = "UNKNOWN_DISCOUNT"


INTEGRITY_CODES = frozenset({ErrorCode.UNKNOWN_DEPENDENCY, ErrorCode.CYCLIC_DEPENDENCY})


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised at the service boundary when tier or ticket input is malformed."""

    def __init__(self, issues) -> None:
        first = issues[0]
        super().__init__(code=first.code, message=first.message)
        self.issues = tuple(issues)


class ResolutionError(DomainError):
    """No price can be charged; checkout must be blocked."""


class NoApplicableTierError(ResolutionError):
    """Raised when no tier threshold is met by the registration lead time."""

    def __init__(self, application_type: str, lead_months: int) -> None:
        super().__init__(
            code=ErrorCode.NO_APPLICABLE_TIER,
            message=f"No pricing tier applies to {application_type} with {lead_months} months lead time",
        )
        self.lead_months = lead_months


class TierDisabledError(ResolutionError):
    """Raised when registration fees are disabled for the application type."""

    def __init__(self, application_type: str) -> None:
        super().__init__(
            code=ErrorCode.TIER_DISABLED,
            message=f"Registration fees are disabled for {application_type}",
        )


class PlanUnavailableError(DomainError):
    """Raised when an installment plan is not offered on a tier."""

    def __init__(self, tier_name: str, plan: int) -> None:
        super().__init__(
            code=ErrorCode.PLAN_UNAVAILABLE,
            message=f"{plan}-payment plan is not available for tier '{tier_name}'",
        )
