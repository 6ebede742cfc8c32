"""Immutable value objects shared by the domain aggregates."""

import calendar
import re
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal
from enum import StrEnum

from saastral_api.exceptions import (
    CurrencyMismatchError,
    InvalidEmailError,
    InvalidMoneyAmountError,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DEFAULT_CURRENCY = "BRL"


@dataclass(frozen=True, slots=True)
class Email:
    """A normalized (trimmed, lower-cased) email address."""

    value: str

    @classmethod
    def create(cls, value: str) -> "Email":
        """Normalize and validate an email address.

        Raises:
            InvalidEmailError: If the value does not look like an address
        """
        normalized = (value or "").strip().lower()
        if not EMAIL_PATTERN.match(normalized):
            raise InvalidEmailError(value)
        return cls(normalized)

    @classmethod
    def reconstitute(cls, value: str) -> "Email":
        """Rebuild from a stored value without validation."""
        return cls(value)

    @property
    def domain(self) -> str:
        return self.value.split("@", 1)[1]

    @property
    def local_part(self) -> str:
        return self.value.split("@", 1)[0]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Money:
    """An amount in integer minor units (cents) of a single currency."""

    cents: int
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if self.cents < 0:
            raise InvalidMoneyAmountError(
                "Money amount cannot be negative", {"cents": self.cents}
            )

    @classmethod
    def from_cents(cls, cents: int, currency: str = DEFAULT_CURRENCY) -> "Money":
        return cls(int(cents), currency.upper())

    @classmethod
    def from_decimal(cls, amount: Decimal | float | str, currency: str = DEFAULT_CURRENCY) -> "Money":
        """Build from a major-unit amount, rounding half-even to the cent."""
        cents = (Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_EVEN)
        return cls(int(cents), currency.upper())

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> "Money":
        return cls(0, currency.upper())

    @property
    def amount(self) -> Decimal:
        """Amount in major units."""
        return Decimal(self.cents) / 100

    def is_zero(self) -> bool:
        return self.cents == 0

    def _check_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def add(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.cents + other.cents, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.cents - other.cents, self.currency)

    def multiply(self, factor: int | float | Decimal) -> "Money":
        cents = (Decimal(self.cents) * Decimal(str(factor))).quantize(
            Decimal("1"), rounding=ROUND_HALF_EVEN
        )
        return Money(int(cents), self.currency)

    def divide(self, divisor: int | float | Decimal) -> "Money":
        if Decimal(str(divisor)) == 0:
            raise InvalidMoneyAmountError("Cannot divide money by zero")
        cents = (Decimal(self.cents) / Decimal(str(divisor))).quantize(
            Decimal("1"), rounding=ROUND_HALF_EVEN
        )
        return Money(int(cents), self.currency)

    def __lt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.cents < other.cents

    def __le__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.cents <= other.cents

    def __gt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.cents > other.cents

    def __ge__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.cents >= other.cents

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:.2f}"


class BillingCycle(StrEnum):
    """Billing cycle of a subscription."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    ONE_TIME = "one_time"

    @property
    def months(self) -> int:
        return _CYCLE_MONTHS[self]

    @property
    def is_recurring(self) -> bool:
        return self.months > 0

    def next_billing_date(self, from_date: date) -> date | None:
        """Get the next billing date, or None for one-time purchases.

        The day of month is clamped to the length of the target month, so
        Jan 31 + monthly gives Feb 28 (or 29).
        """
        if not self.is_recurring:
            return None
        month_index = from_date.month - 1 + self.months
        year = from_date.year + month_index // 12
        month = month_index % 12 + 1
        day = min(from_date.day, calendar.monthrange(year, month)[1])
        return date(year, month, day)

    def monthly_equivalent(self, price: Money) -> Money:
        """Spread a per-cycle price over its months (one-time returns the price)."""
        if not self.is_recurring:
            return price
        return price.divide(self.months)


_CYCLE_MONTHS = {
    BillingCycle.MONTHLY: 1,
    BillingCycle.QUARTERLY: 3,
    BillingCycle.YEARLY: 12,
    BillingCycle.ONE_TIME: 0,
}
