"""
Domain Models for the Registration Pricing Engine

These dataclasses provide type-safe representations of pricing tiers,
ticket types and the results computed from them.
All monetary values use Decimal for precision.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from uuid import UUID

from .errors import ErrorCode


def parse_date(value) -> date:
    """Accept a date, datetime or YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()


def _decimal(value, name: str) -> Decimal:
    """Parse an amount from a payload value. Raises ValueError when it is not a finite number."""
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{name} must be a number, got: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"{name} must be a finite number, got: {value!r}")
    return amount


def _optional_decimal(value, name: str) -> Decimal | None:
    return _decimal(value, name) if value is not None else None


def _optional_int(value) -> int | None:
    return int(value) if value is not None else None


# =============================================================================
# PRICING MODELS
# =============================================================================


@dataclass(frozen=True)
class PricingTier:
    """A price applicable to registrations made at least N months before the event."""

    name: str
    months_before_event: int
    full_price: Decimal
    installment_3_total: Decimal | None = None
    installment_3_enabled: bool = False
    installment_6_total: Decimal | None = None
    installment_6_enabled: bool = False

    def installment_total(self, plan: int) -> Decimal | None:
        return self.installment_3_total if plan == 3 else self.installment_6_total

    def installment_enabled(self, plan: int) -> bool:
        return self.installment_3_enabled if plan == 3 else self.installment_6_enabled

    @classmethod
    def from_dict(cls, data: dict) -> "PricingTier":
        return cls(
            name=data.get("tier_name", data.get("name", "")),
            months_before_event=int(data["months_before_event"]),
            full_price=_decimal(data["full_price"], "full_price"),
            installment_3_total=_optional_decimal(data.get("installment_3_total"), "installment_3_total"),
            installment_3_enabled=data.get("installment_3_enabled", False),
            installment_6_total=_optional_decimal(data.get("installment_6_total"), "installment_6_total"),
            installment_6_enabled=data.get("installment_6_enabled", False),
        )

    def to_dict(self) -> dict:
        return {
            "tier_name": self.name,
            "months_before_event": self.months_before_event,
            "full_price": str(self.full_price),
            "installment_3_total": str(self.installment_3_total) if self.installment_3_total is not None else None,
            "installment_3_enabled": self.installment_3_enabled,
            "installment_6_total": str(self.installment_6_total) if self.installment_6_total is not None else None,
            "installment_6_enabled": self.installment_6_enabled,
        }


@dataclass(frozen=True)
class TierTable:
    """All pricing tiers for one application type of one event."""

    application_type: str
    enabled: bool
    tiers: tuple[PricingTier, ...] = ()

    def validate(self) -> "ValidationResult":
        from .validators import TierTableValidator

        return TierTableValidator().validate(self)

    def sorted_descending_by_lead_time(self) -> tuple[PricingTier, ...]:
        """Tiers with the longest lead time first; ties keep declaration order."""
        # sorted() is stable, so equal thresholds stay in table order
        return tuple(sorted(self.tiers, key=lambda t: t.months_before_event, reverse=True))

    @classmethod
    def from_dict(cls, data: dict) -> "TierTable":
        return cls(
            application_type=data["application_type"],
            enabled=data.get("enabled", False),
            tiers=tuple(PricingTier.from_dict(t) for t in data.get("pricing_tiers", [])),
        )

    def to_dict(self) -> dict:
        return {
            "application_type": self.application_type,
            "enabled": self.enabled,
            "pricing_tiers": [t.to_dict() for t in self.tiers],
        }


# =============================================================================
# TICKET MODELS
# =============================================================================


@dataclass(frozen=True)
class TicketType:
    """A purchasable inventory unit for an event."""

    id: UUID
    name: str
    price_gbp: Decimal
    start_date: date
    end_date: date
    capacity: int | None = None  # None = unlimited
    affects_venue_capacity: bool = True
    is_active: bool = True
    applicable_days: frozenset[date] = frozenset()  # empty = every event day
    dependency_ticket_id: UUID | None = None
    max_per_order: int | None = None
    min_age: int | None = None
    description: str = ""

    def with_changes(self, **changes) -> "TicketType":
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict) -> "TicketType":
        dependency = data.get("dependency_ticket_id")
        return cls(
            id=UUID(str(data["id"])),
            name=data.get("name", ""),
            price_gbp=_decimal(data["price_gbp"], "price_gbp"),
            start_date=parse_date(data["start_date"]),
            end_date=parse_date(data["end_date"]),
            capacity=_optional_int(data.get("capacity")),
            affects_venue_capacity=data.get("affects_capacity", data.get("affects_venue_capacity", True)),
            is_active=data["is_active"],
            applicable_days=frozenset(parse_date(d) for d in data.get("applicable_days") or []),
            dependency_ticket_id=UUID(str(dependency)) if dependency else None,
            max_per_order=_optional_int(data.get("max_per_order")),
            min_age=_optional_int(data.get("min_age")),
            description=data.get("description", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "price_gbp": str(self.price_gbp),
            "capacity": self.capacity,
            "affects_capacity": self.affects_venue_capacity,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "is_active": self.is_active,
            "applicable_days": sorted(d.isoformat() for d in self.applicable_days),
            "dependency_ticket_id": str(self.dependency_ticket_id) if self.dependency_ticket_id else None,
            "max_per_order": self.max_per_order,
            "min_age": self.min_age,
        }


@dataclass(frozen=True)
class SaleRecord:
    """Sold quantity for a ticket type on a given day, as reported by the order system."""

    ticket_type_id: UUID
    quantity_sold: int
    date: date

    @classmethod
    def from_dict(cls, data: dict) -> "SaleRecord":
        return cls(
            ticket_type_id=UUID(str(data["ticket_type_id"])),
            quantity_sold=int(data["quantity_sold"]),
            date=parse_date(data["date"]),
        )


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class TicketDiscount:
    """A discount code redeemable against ticket orders for an event."""

    code: str
    discount_type: DiscountType
    discount_value: Decimal  # percent for PERCENTAGE, GBP for FIXED
    start_date: date
    end_date: date | None = None  # None = no expiry
    max_uses: int | None = None  # None = unlimited
    current_uses: int = 0
    is_active: bool = True
    description: str = ""
    id: str | None = None

    def matches(self, code: str) -> bool:
        return self.code.strip().upper() == code.strip().upper()

    def valid_on(self, day: date) -> bool:
        if day < self.start_date:
            return False
        return self.end_date is None or day <= self.end_date

    @property
    def exhausted(self) -> bool:
        return self.max_uses is not None and self.current_uses >= self.max_uses

    @classmethod
    def from_dict(cls, data: dict) -> "TicketDiscount":
        end_date = data.get("end_date")
        return cls(
            code=data["code"],
            discount_type=DiscountType(data["discount_type"]),
            discount_value=_decimal(data["discount_value"], "discount_value"),
            start_date=parse_date(data["start_date"]),
            end_date=parse_date(end_date) if end_date else None,
            max_uses=_optional_int(data.get("max_uses")),
            current_uses=int(data.get("current_uses", 0)),
            is_active=data["is_active"],
            description=data.get("description", ""),
            id=str(data["id"]) if data.get("id") is not None else None,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "description": self.description,
            "discount_type": self.discount_type.value,
            "discount_value": str(self.discount_value),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "max_uses": self.max_uses,
            "current_uses": self.current_uses,
            "is_active": self.is_active,
        }


# =============================================================================
# RESULT MODELS
# =============================================================================


@dataclass(frozen=True)
class ValidationIssue:
    """A single field-level validation failure."""

    code: ErrorCode
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"code": self.code.value, "field": self.field, "message": self.message}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a tier table, ticket or catalog."""

    issues: tuple[ValidationIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues

    @property
    def first_error(self) -> ValidationIssue | None:
        return self.issues[0] if self.issues else None

    def has_code(self, code: ErrorCode) -> bool:
        return any(issue.code == code for issue in self.issues)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(issues=self.issues + other.issues)


@dataclass(frozen=True)
class PaymentInstallment:
    """One payment of a plan."""

    number: int
    amount: Decimal
    due_date: date | None = None


@dataclass(frozen=True)
class PaymentOption:
    """A way of paying for a tier: in full or over 3 or 6 installments."""

    plan: str  # 'full', '3' or '6'
    total: Decimal
    installments: tuple[PaymentInstallment, ...] = ()
    warning: str | None = None


class DenialReason(Enum):
    """Why a ticket cannot be purchased or an order cannot be accepted."""

    INACTIVE = "INACTIVE"
    OUTSIDE_SALE_WINDOW = "OUTSIDE_SALE_WINDOW"
    DAY_NOT_APPLICABLE = "DAY_NOT_APPLICABLE"
    DEPENDENCY_UNMET = "DEPENDENCY_UNMET"
    SOLD_OUT = "SOLD_OUT"
    # Order-level reasons
    INVALID_QUANTITY = "INVALID_QUANTITY"
    EXCEEDS_MAX_PER_ORDER = "EXCEEDS_MAX_PER_ORDER"
    INSUFFICIENT_REMAINING = "INSUFFICIENT_REMAINING"
    AGE_RESTRICTED = "AGE_RESTRICTED"
    # Discount reasons
    DISCOUNT_INACTIVE = "DISCOUNT_INACTIVE"
    DISCOUNT_OUTSIDE_WINDOW = "DISCOUNT_OUTSIDE_WINDOW"
    DISCOUNT_EXHAUSTED = "DISCOUNT_EXHAUSTED"


@dataclass(frozen=True)
class Availability:
    """Whether a ticket type can be bought on a date, and how many remain."""

    ticket_type_id: UUID
    purchasable: bool
    remaining: int | None  # None = unlimited, only when purchasable
    reason: DenialReason | None = None

    @property
    def is_unlimited(self) -> bool:
        return self.purchasable and self.remaining is None


@dataclass(frozen=True)
class OrderQuote:
    """Price and acceptance of a requested quantity of one ticket type."""

    ticket_type_id: UUID
    quantity: int
    unit_price: Decimal
    total: Decimal | None  # None when rejected
    accepted: bool
    reason: DenialReason | None = None
    subtotal: Decimal | None = None  # before discount
    discount_code: str | None = None
    discount_amount: Decimal | None = None
    availability: Availability | None = field(default=None, compare=False)


@dataclass(frozen=True)
class RegistrationQuote:
    """Resolved price and payment options for one registration."""

    application_type: str
    event_start_date: date
    as_of: date
    lead_months: int
    tier: PricingTier
    payment_options: tuple[PaymentOption, ...]

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(o.warning for o in self.payment_options if o.warning)
