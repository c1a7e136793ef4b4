"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

import random
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Self
from uuid import UUID, uuid4

from app.domain.base import ValueObject, utcnow
from app.domain.exceptions import CurrencyMismatchError, NegativeMoneyError


# ============================================================================
# Typed Identifiers
# ============================================================================


@dataclass(frozen=True)
class OrderId(ValueObject):
    """Strongly-typed order identifier.

    Typed IDs keep order, order line and cart line identifiers from being
    mixed up when they travel through the services.
    """

    value: UUID

    @classmethod
    def generate(cls) -> Self:
        """Generate a new order ID.

        Returns:
            New OrderId with random UUID.
        """
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Create OrderId from string representation.

        Args:
            value: String UUID representation.

        Returns:
            OrderId instance.

        Raises:
            ValueError: If value is not a UUID.
        """
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OrderItemId(ValueObject):
    """Strongly-typed order line identifier."""

    value: UUID

    @classmethod
    def generate(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class CartItemId(ValueObject):
    """Strongly-typed cart line identifier."""

    value: UUID

    @classmethod
    def generate(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


# ============================================================================
# Order Number
# ============================================================================


ORDER_NUMBER_PATTERN = re.compile(r"^ORD-\d{14}-\d{3}$")


@dataclass(frozen=True)
class OrderNumber(ValueObject):
    """Human-readable order number, e.g. ``ORD-20240131120000-042``.

    The number is the creation second plus a random three digit suffix,
    so two orders placed in the same second may draw the same number.
    Uniqueness is enforced when the number is claimed in the order
    repository, not here.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate order number format."""
        if not ORDER_NUMBER_PATTERN.match(self.value):
            raise ValueError(f"Invalid order number: {self.value!r}")

    @classmethod
    def generate(
        cls,
        now: datetime | None = None,
        rng: random.Random | None = None,
    ) -> Self:
        """Draw a candidate order number.

        Args:
            now: Timestamp to embed (defaults to current UTC time).
            rng: Random source for the suffix (defaults to module random).

        Returns:
            New OrderNumber candidate.
        """
        now = now or utcnow()
        suffix = (rng or random).randint(0, 999)
        return cls(value=f"ORD-{now.strftime('%Y%m%d%H%M%S')}-{suffix:03d}")

    def __str__(self) -> str:
        return self.value


# ============================================================================
# Money Value Object
# ============================================================================


@dataclass(frozen=True)
class Money(ValueObject):
    """Represents monetary value with currency.

    Money is stored in the smallest currency unit (cents for USD/EUR)
    so that line totals and cart/order totals are exact sums.

    Attributes:
        amount_cents: Amount in smallest currency unit (e.g., cents).
        currency: ISO 4217 currency code (e.g., 'USD', 'EUR').
    """

    amount_cents: int
    currency: str = "USD"

    def __post_init__(self) -> None:
        """Validate money constraints."""
        if self.amount_cents < 0:
            raise NegativeMoneyError(self.amount_cents)
        object.__setattr__(self, "currency", self.currency.upper())

    @classmethod
    def zero(cls, currency: str = "USD") -> Self:
        """Create zero amount money."""
        return cls(amount_cents=0, currency=currency)

    @classmethod
    def from_decimal(cls, amount: Decimal, currency: str = "USD") -> Self:
        """Create money from decimal amount.

        Args:
            amount: Decimal amount in major units (e.g., dollars).
            currency: Currency code.

        Returns:
            Money instance, rounded half-up to whole cents.
        """
        cents = int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return cls(amount_cents=cents, currency=currency)

    @classmethod
    def sum(cls, amounts: Iterable["Money"], currency: str = "USD") -> "Money":
        """Add up a sequence of amounts, starting from zero.

        Args:
            amounts: Amounts to add; all must share ``currency``.
            currency: Currency of the result (used when amounts is empty).

        Returns:
            Exact sum of all amounts.

        Raises:
            CurrencyMismatchError: If an amount has another currency.
        """
        total = Money.zero(currency)
        for amount in amounts:
            total = total + amount
        return total

    def to_decimal(self) -> Decimal:
        """Convert to decimal amount in major units.

        Returns:
            Decimal amount with two places (e.g., dollars from cents).
        """
        return (Decimal(self.amount_cents) / 100).quantize(Decimal("0.01"))

    def __add__(self, other: "Money") -> "Money":
        """Add two money amounts.

        Raises:
            CurrencyMismatchError: If currencies don't match.
        """
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)
        return Money(
            amount_cents=self.amount_cents + other.amount_cents,
            currency=self.currency,
        )

    def __mul__(self, quantity: int) -> "Money":
        """Multiply money by a line quantity."""
        return Money(
            amount_cents=self.amount_cents * quantity,
            currency=self.currency,
        )

    def __rmul__(self, quantity: int) -> "Money":
        return self.__mul__(quantity)

    def __str__(self) -> str:
        symbol = {"USD": "$", "EUR": "€", "GBP": "£"}.get(self.currency, "")
        return f"{symbol}{self.to_decimal():.2f} {self.currency}"


# ============================================================================
# Product Snapshot
# ============================================================================


@dataclass(frozen=True)
class ProductSnapshot(ValueObject):
    """Point-in-time view of a product as the catalog reports it.

    Stock and the active flag come from the inventory ledger and may be
    stale the moment they are read. Cart checks built on a snapshot are
    advisory; only a reservation is authoritative.

    Attributes:
        product_id: Product identifier.
        name: Display name.
        price: Current unit price.
        is_active: Whether the product can be sold.
        stock_quantity: Observed stock.
        sku: Stock Keeping Unit (optional).
    """

    product_id: UUID
    name: str
    price: Money
    is_active: bool
    stock_quantity: int
    sku: str | None = None

    @property
    def is_available(self) -> bool:
        """Active and with at least one unit in stock."""
        return self.is_active and self.stock_quantity > 0
