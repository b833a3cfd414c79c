"""
Pure domain entities (POPOs).
No dependency on Django or the ORM.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Tuple, Union

from apps.finance.domain.exceptions import InvalidAmount, UnsupportedCurrency

Number = Union[int, float, Decimal]
OptionalDate = Optional[date]

RATE_PRECISION = Decimal("0.000001")


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Floats go through ``str`` so ``1234.56`` stays ``Decimal("1234.56")``
    instead of picking up binary noise. NaN and infinities are preserved.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f"Not a number: {value!r}")
    return Decimal(str(value))


class CurrencyCode(str, Enum):
    """Currencies supported by the dealership. AED is the reporting currency."""

    AED = "AED"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, code) -> "CurrencyCode":
        if isinstance(code, cls):
            return code
        if isinstance(code, str):
            try:
                return cls(code.strip().upper())
            except ValueError:
                pass
        raise UnsupportedCurrency(code)

    @classmethod
    def is_supported(cls, code) -> bool:
        try:
            cls.parse(code)
        except UnsupportedCurrency:
            return False
        return True


BASE_CURRENCY = CurrencyCode.AED


def same_currency(first, second) -> bool:
    """Compare two currency codes, ignoring case and padding when both parse."""
    try:
        return CurrencyCode.parse(first) is CurrencyCode.parse(second)
    except UnsupportedCurrency:
        return first == second


class ExpenseCategory(str, Enum):
    PURCHASE = "purchase"
    TRANSPORT = "transport"
    CUSTOMS = "customs"
    REPAIR = "repair"
    MAINTENANCE = "maintenance"
    MARKETING = "marketing"
    OFFICE = "office"
    OTHER = "other"


@dataclass(frozen=True)
class ValidationResult:

    is_valid: bool
    errors: Tuple[str, ...] = ()

    def as_dict(self) -> dict:
        return {"is_valid": self.is_valid, "errors": list(self.errors)}


@dataclass(frozen=True)
class Money:
    """An amount in one of the supported currencies.

    Construction is the validation boundary. An unknown currency raises
    ``UnsupportedCurrency``; an amount failing validation raises
    ``InvalidAmount`` with every violation listed.
    """

    amount: Decimal
    currency: CurrencyCode

    def __post_init__(self):
        from apps.finance.domain.validation import validate_currency_amount

        currency = CurrencyCode.parse(self.currency)
        result = validate_currency_amount(self.amount, currency)
        if not result.is_valid:
            raise InvalidAmount(list(result.errors))
        object.__setattr__(self, "amount", coerce_decimal(self.amount))
        object.__setattr__(self, "currency", currency)

    @classmethod
    def of(cls, amount: Number, currency) -> "Money":
        return cls(amount=amount, currency=currency)


@dataclass(frozen=True)
class Expense:

    amount: Money
    category: ExpenseCategory = ExpenseCategory.OTHER
    date: OptionalDate = None


@dataclass(frozen=True)
class DatedMoney:
    """A sale amount with the date it happened on."""

    money: Money
    date: Union[date, datetime, str]


@dataclass(frozen=True)
class CarTransaction:
    """Purchase/sale pair of one car, with the expenses booked against it."""

    purchase_price: Money
    sale_price: Optional[Money] = None
    expenses: Tuple[Expense, ...] = field(default_factory=tuple)
    sale_date: Optional[date] = None

    @property
    def is_sold(self) -> bool:
        return self.sale_price is not None


@dataclass(frozen=True)
class InventoryItem:
    """A car in stock: its purchase price and expenses already summed in the report currency."""

    purchase_price: Money
    total_expenses: Decimal = Decimal("0")


@dataclass(frozen=True)
class DistributionEntry:

    count: int
    total: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class ExchangeRate:

    source_currency: str
    exchanged_currency: str
    valuation_date: date
    rate_value: Decimal

    def __post_init__(self):
        if self.rate_value <= 0:
            raise ValueError(f"rate_value must be positive, got {self.rate_value}")
        if self.source_currency == self.exchanged_currency:
            raise ValueError("source_currency and exchanged_currency must be different")

    def convert(self, amount: Decimal) -> Decimal:
        return (coerce_decimal(amount) * self.rate_value).quantize(RATE_PRECISION)

    def inverse(self) -> "ExchangeRate":
        return ExchangeRate(
            source_currency=self.exchanged_currency,
            exchanged_currency=self.source_currency,
            valuation_date=self.valuation_date,
            rate_value=(Decimal("1") / self.rate_value).quantize(RATE_PRECISION),
        )
