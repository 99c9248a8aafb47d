"""
Domain Value Objects

Immutable value objects that encapsulate business rules and validation.
Value objects are compared by their value, not identity.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Set, Union
from uuid import UUID, uuid4

from .exceptions import CurrencyMismatchError, ValidationError

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")
_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class EntityId:
    """UUID-backed identifier; two ids are equal only if kind and value match."""

    value: UUID

    field_name = "id"

    @classmethod
    def generate(cls):
        return cls(uuid4())

    @classmethod
    def from_string(cls, value: Union[str, UUID]):
        """Parse an identifier, raising ValidationError on malformed input."""
        if isinstance(value, UUID):
            return cls(value)
        try:
            return cls(UUID(str(value)))
        except (ValueError, AttributeError, TypeError):
            raise ValidationError.for_field(
                cls.field_name, f"invalid {cls.__name__} format: {value!r}"
            )

    def __str__(self) -> str:
        return str(self.value)


class CampaignID(EntityId):
    """Identifier of a campaign aggregate."""

    field_name = "campaign_id"


class RuleID(EntityId):
    """Identifier of a targeting rule owned by the rules engine."""

    field_name = "rule_id"


class UserID(EntityId):
    """Identifier of the user performing an operation."""

    field_name = "user_id"


class CustomerID(EntityId):
    """Identifier of the customer an event was tracked for."""

    field_name = "customer_id"


class Currency(str, Enum):
    """Commonly used currencies; Money accepts any ISO-4217 style code."""

    EUR = "EUR"
    USD = "USD"
    GBP = "GBP"
    CAD = "CAD"
    AUD = "AUD"
    JPY = "JPY"


class Money:
    """
    Immutable Money value object with currency validation and arithmetic operations.

    Prevents negative amounts and ensures currency consistency in operations.
    Uses Decimal for precise financial calculations.
    """

    def __init__(self, amount: Union[int, float, Decimal, str], currency: Union[str, Currency]):
        if isinstance(currency, Currency):
            currency = currency.value
        if not isinstance(currency, str) or not _CURRENCY_CODE.match(currency.upper()):
            raise ValidationError.for_field(
                "currency", f"currency must be a 3-letter code, got {currency!r}"
            )

        try:
            if isinstance(amount, (int, float, str)):
                amount = Decimal(str(amount))
            amount = amount.quantize(_CENTS, rounding=ROUND_HALF_UP)
        except (InvalidOperation, AttributeError):
            raise ValidationError.for_field("amount", f"invalid money amount: {amount!r}")

        if not amount.is_finite():
            raise ValidationError.for_field("amount", "money amount must be finite")
        if amount < 0:
            raise ValidationError.for_field("amount", "money amount cannot be negative")

        self._amount = amount
        self._currency = currency.upper()

    @classmethod
    def zero(cls, currency: Union[str, Currency]) -> "Money":
        """Zero amount in the given currency."""
        return cls(0, currency)

    @property
    def amount(self) -> Decimal:
        """Get the amount as a Decimal."""
        return self._amount

    @property
    def currency(self) -> str:
        """Get the currency code."""
        return self._currency

    def _ensure_same_currency(self, other: "Money", operation: str) -> None:
        if self._currency != other._currency:
            raise CurrencyMismatchError(
                f"Cannot perform {operation} on money with different currencies",
                currency_a=self._currency,
                currency_b=other._currency,
                operation=operation,
            )

    def add(self, other: "Money") -> "Money":
        """Add two Money objects with the same currency."""
        self._ensure_same_currency(other, "addition")
        return Money(self._amount + other._amount, self._currency)

    def subtract(self, other: "Money") -> "Money":
        """Subtract two Money objects with the same currency."""
        self._ensure_same_currency(other, "subtraction")

        result_amount = self._amount - other._amount
        if result_amount < 0:
            raise ValidationError.for_field(
                "amount", "subtraction would result in negative amount"
            )

        return Money(result_amount, self._currency)

    def multiply(self, factor: Union[int, float, Decimal]) -> "Money":
        """Multiply money by a scalar factor."""
        if isinstance(factor, (int, float)):
            factor = Decimal(str(factor))

        if factor < 0:
            raise ValidationError.for_field("factor", "cannot multiply money by negative factor")

        return Money(self._amount * factor, self._currency)

    def divide(self, divisor: Union[int, float, Decimal]) -> "Money":
        """Divide money by a scalar divisor."""
        if isinstance(divisor, (int, float)):
            divisor = Decimal(str(divisor))

        if divisor <= 0:
            raise ValidationError.for_field(
                "divisor", "cannot divide money by zero or negative number"
            )

        return Money(self._amount / divisor, self._currency)

    def is_greater_than(self, other: "Money") -> bool:
        """Check if this money is greater than another."""
        self._ensure_same_currency(other, "comparison")
        return self._amount > other._amount

    def is_less_than(self, other: "Money") -> bool:
        """Check if this money is less than another."""
        self._ensure_same_currency(other, "comparison")
        return self._amount < other._amount

    def is_at_least(self, other: "Money") -> bool:
        """Check if this money is greater than or equal to another."""
        self._ensure_same_currency(other, "comparison")
        return self._amount >= other._amount

    def is_zero(self) -> bool:
        """Check if the amount is zero."""
        return self._amount == 0

    def is_positive(self) -> bool:
        """Check if the amount is strictly positive."""
        return self._amount > 0

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": str(self._amount), "currency": self._currency}

    def __eq__(self, other) -> bool:
        if not isinstance(other, Money):
            return False
        return self._amount == other._amount and self._currency == other._currency

    def __hash__(self) -> int:
        return hash((self._amount, self._currency))

    def __str__(self) -> str:
        return f"{self._amount} {self._currency}"

    def __repr__(self) -> str:
        return f"Money(amount={self._amount}, currency='{self._currency}')"


class CampaignType(str, Enum):
    """Kinds of marketing campaigns."""

    PROMOTION = "PROMOTION"
    LOYALTY = "LOYALTY"
    COUPON = "COUPON"
    SEGMENTATION = "SEGMENTATION"
    RETARGETING = "RETARGETING"


class CampaignStatus(str, Enum):
    """
    Campaign lifecycle status with state transition validation.

    DRAFT is initial; COMPLETED and CANCELLED are terminal.
    """

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    def can_transition_to(self, new_status: "CampaignStatus") -> bool:
        """Check if transition to new status is valid."""
        return new_status in _VALID_TRANSITIONS[self]

    def is_terminal(self) -> bool:
        """Completed and cancelled campaigns never change again."""
        return not _VALID_TRANSITIONS[self]

    def can_be_modified(self) -> bool:
        """Check if campaign fields can be modified in current status."""
        return not self.is_terminal()


_VALID_TRANSITIONS: Dict[CampaignStatus, Set[CampaignStatus]] = {
    CampaignStatus.DRAFT: {
        CampaignStatus.ACTIVE,
        CampaignStatus.COMPLETED,
        CampaignStatus.CANCELLED,
    },
    CampaignStatus.ACTIVE: {
        CampaignStatus.PAUSED,
        CampaignStatus.COMPLETED,
        CampaignStatus.CANCELLED,
    },
    CampaignStatus.PAUSED: {
        CampaignStatus.ACTIVE,
        CampaignStatus.COMPLETED,
        CampaignStatus.CANCELLED,
    },
    CampaignStatus.COMPLETED: set(),
    CampaignStatus.CANCELLED: set(),
}
