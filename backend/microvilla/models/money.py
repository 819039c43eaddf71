"""
Monetary values with DOP/USD currency support.

Amounts are stored at full precision; rounding to cents happens where the
engine derives a figure, never inside these helpers (except conversion).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from microvilla.config import MONEY_TOLERANCE
from microvilla.errors import (
    CurrencyMismatchError, DivisionByZeroError, InputValidationError,
)

DEFAULT_EXCHANGE_RATE = 58.5  # DOP per USD
CURRENCY_PRECISION = 2


class Currency(str, Enum):
    DOP = "DOP"
    USD = "USD"


CURRENCY_SYMBOLS = {
    Currency.USD: "$",
    Currency.DOP: "RD$",
}


@dataclass(frozen=True)
class Money:
    amount: float
    currency: Currency = Currency.USD

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, (int, float)):
            raise InputValidationError(f"Amount must be a number, got {self.amount!r}")
        if not math.isfinite(self.amount):
            raise InputValidationError(f"Amount must be finite, got {self.amount}")
        try:
            currency = Currency(self.currency)
        except ValueError:
            raise InputValidationError(
                f"Currency must be DOP or USD, got {self.currency!r}"
            ) from None
        object.__setattr__(self, "currency", currency)

    def _check_currency(self, other: "Money") -> None:
        if other.currency != self.currency:
            raise CurrencyMismatchError(
                f"Cannot combine {self.currency.value} with {other.currency.value}"
            )

    def add(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def multiply(self, factor: float) -> "Money":
        return Money(self.amount * factor, self.currency)

    def divide(self, divisor: float) -> "Money":
        if divisor == 0:
            raise DivisionByZeroError("Cannot divide money by zero")
        return Money(self.amount / divisor, self.currency)

    def is_close(self, other: "Money", tolerance: float = MONEY_TOLERANCE) -> bool:
        return (
            self.currency == other.currency
            and abs(self.amount - other.amount) <= tolerance
        )

    def require_non_negative(self, label: str) -> "Money":
        if self.amount < 0:
            raise InputValidationError(f"{label} must be non-negative, got {self.amount}")
        return self

    def to_dict(self) -> dict:
        return {"amount": self.amount, "currency": self.currency.value}


@dataclass(frozen=True)
class ExchangeRate:
    """Rate expressed as DOP per USD regardless of direction."""
    from_currency: Currency
    to_currency: Currency
    rate: float
    effective_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if self.rate <= 0:
            raise InputValidationError(f"Exchange rate must be positive, got {self.rate}")
        object.__setattr__(self, "from_currency", Currency(self.from_currency))
        object.__setattr__(self, "to_currency", Currency(self.to_currency))

    def inverse(self) -> "ExchangeRate":
        return ExchangeRate(
            from_currency=self.to_currency,
            to_currency=self.from_currency,
            rate=self.rate,
            effective_date=self.effective_date,
        )

    def to_dict(self) -> dict:
        return {
            "from": self.from_currency.value,
            "to": self.to_currency.value,
            "rate": self.rate,
            "effective_date": self.effective_date.isoformat(),
        }


def convert_money(
    money: Money,
    target: Currency,
    rate: float = DEFAULT_EXCHANGE_RATE,
) -> Money:
    """Convert between USD and DOP using a DOP-per-USD rate."""
    target = Currency(target)
    if money.currency == target:
        return money
    if rate <= 0:
        raise InputValidationError(f"Exchange rate must be positive, got {rate}")

    if money.currency == Currency.USD:
        converted = money.amount * rate
    else:
        converted = money.amount / rate
    return Money(round(converted, CURRENCY_PRECISION), target)


def format_money(money: Money, precision: int = 2) -> str:
    """Format for display, e.g. ``$1,250.00`` or ``RD$73,125.00``."""
    symbol = CURRENCY_SYMBOLS[money.currency]
    return f"{symbol}{money.amount:,.{precision}f}"


def ensure_same_currency(values: list[Money]) -> Currency:
    """Return the shared currency of ``values`` or raise CurrencyMismatchError."""
    if not values:
        raise InputValidationError("No monetary values supplied")
    currency = values[0].currency
    mismatched = sorted({v.currency.value for v in values if v.currency != currency})
    if mismatched:
        raise CurrencyMismatchError(
            f"All costs must use the same currency: expected {currency.value}, "
            f"found {', '.join(mismatched)}"
        )
    return currency
