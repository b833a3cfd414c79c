"""
Financial derivations over car transactions.

Every conversion goes through the injected converter; amounts keep full
Decimal precision here and are only rounded when formatted for display.
Functions that divide return 0 for a zero base so reports never show
NaN or infinity.
"""

from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Union

from apps.finance.domain.conversion import convert
from apps.finance.domain.interfaces import BaseCurrencyConverter
from apps.finance.domain.models import (
    BASE_CURRENCY,
    CurrencyCode,
    DatedMoney,
    DistributionEntry,
    Expense,
    InventoryItem,
    Money,
    coerce_decimal,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _money_of(item: Union[Money, Expense]) -> Money:
    if isinstance(item, Expense):
        return item.amount
    return item


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    # zero base reads as 0% in every report
    if whole == 0:
        return ZERO
    return (part / whole) * HUNDRED


async def calculate_profit_in_target(
    sale_price,
    sale_currency,
    purchase_price,
    purchase_currency,
    total_expenses=0,
    *,
    converter: BaseCurrencyConverter,
    target=BASE_CURRENCY,
) -> Decimal:
    """
    Profit of a sale in the target currency.

    ``total_expenses`` must already be summed in the target currency. Prices
    are validated as Money first, so bad input raises InvalidAmount or
    UnsupportedCurrency before any conversion.
    """
    sale = Money(sale_price, sale_currency)
    purchase = Money(purchase_price, purchase_currency)
    sale_target = await convert(sale.amount, sale.currency, target, converter)
    purchase_target = await convert(purchase.amount, purchase.currency, target, converter)
    return sale_target - purchase_target - coerce_decimal(total_expenses)


async def calculate_profit_in_aed_async(
    sale_price,
    sale_currency,
    purchase_price,
    purchase_currency,
    total_expenses=0,
    *,
    converter: BaseCurrencyConverter,
) -> Decimal:
    return await calculate_profit_in_target(
        sale_price,
        sale_currency,
        purchase_price,
        purchase_currency,
        total_expenses,
        converter=converter,
        target=CurrencyCode.AED,
    )


def calculate_roi(profit, total_investment) -> Decimal:
    """Return on investment as a percentage; 0 when nothing was invested."""
    return _percentage(coerce_decimal(profit), coerce_decimal(total_investment))


def calculate_profit_margin(profit, total_cost) -> Decimal:
    """
    Profit over total cost, as a percentage; 0 when the cost is 0.

    This is a cost-based margin. Revenue-based margin is
    calculate_sale_margin; the two are reported separately.
    """
    return _percentage(coerce_decimal(profit), coerce_decimal(total_cost))


def calculate_sale_margin(profit, sale_price) -> Decimal:
    """Profit over sale price, as a percentage; 0 when the sale price is 0."""
    return _percentage(coerce_decimal(profit), coerce_decimal(sale_price))


async def calculate_total_cost_async(
    purchase_price,
    purchase_currency,
    expenses: Iterable[Union[Money, Expense]],
    *,
    converter: BaseCurrencyConverter,
    target=BASE_CURRENCY,
) -> Decimal:
    """Purchase price plus every expense, all in the target currency."""
    purchase = Money(purchase_price, purchase_currency)
    total = await convert(purchase.amount, purchase.currency, target, converter)

    for expense in expenses:
        money = _money_of(expense)
        total += await convert(money.amount, money.currency, target, converter)

    return total


async def calculate_inventory_value_async(
    cars: Iterable[InventoryItem],
    *,
    converter: BaseCurrencyConverter,
    target=BASE_CURRENCY,
) -> Decimal:
    total = ZERO

    for car in cars:
        purchase = await convert(
            car.purchase_price.amount,
            car.purchase_price.currency,
            target,
            converter,
        )
        total += purchase + coerce_decimal(car.total_expenses)

    return total


async def calculate_average_selling_price_async(
    sales: Iterable[Money],
    *,
    converter: BaseCurrencyConverter,
    target=BASE_CURRENCY,
) -> Decimal:
    sales = list(sales)
    if not sales:
        return ZERO

    total = ZERO
    for sale in sales:
        total += await convert(sale.amount, sale.currency, target, converter)

    return total / len(sales)


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value)).date()


async def calculate_monthly_revenue_async(
    sales: Iterable[DatedMoney],
    year: int,
    month: int,
    *,
    converter: BaseCurrencyConverter,
    target=BASE_CURRENCY,
) -> Decimal:
    """Revenue of one calendar month (``month`` is 1-12)."""
    if month not in range(1, 13):
        raise ValueError(f"month must be between 1 and 12, got {month}")

    total = ZERO
    for sale in sales:
        sold_on = _as_date(sale.date)
        if sold_on.year != year or sold_on.month != month:
            continue
        total += await convert(sale.money.amount, sale.money.currency, target, converter)

    return total


async def calculate_currency_distribution_async(
    transactions: Iterable[Money],
    *,
    converter: BaseCurrencyConverter,
    target=BASE_CURRENCY,
) -> dict[CurrencyCode, DistributionEntry]:
    """
    Share of each currency in a list of transactions.

    Groups keep the order in which currencies first appear. Percentages are
    of the grand total in the target currency, 0 for all groups when that
    total is 0.
    """
    counts: dict[CurrencyCode, int] = OrderedDict()
    totals: dict[CurrencyCode, Decimal] = OrderedDict()
    grand_total = ZERO

    for money in transactions:
        converted = await convert(money.amount, money.currency, target, converter)
        counts[money.currency] = counts.get(money.currency, 0) + 1
        totals[money.currency] = totals.get(money.currency, ZERO) + converted
        grand_total += converted

    return {
        currency: DistributionEntry(
            count=counts[currency],
            total=totals[currency],
            percentage=_percentage(totals[currency], grand_total),
        )
        for currency in counts
    }
