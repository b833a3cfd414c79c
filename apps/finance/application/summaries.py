"""
Reporting use case: the profit picture of a single car.
"""

from apps.finance.application.dto import TransactionSummaryDTO
from apps.finance.domain.calculations import (
    calculate_profit_in_target,
    calculate_profit_margin,
    calculate_roi,
    calculate_sale_margin,
    calculate_total_cost_async,
)
from apps.finance.domain.conversion import convert
from apps.finance.domain.interfaces import BaseCurrencyConverter
from apps.finance.domain.models import BASE_CURRENCY, CarTransaction
from apps.finance.domain.validation import needs_conversion_warning


async def summarize_transaction(
    transaction: CarTransaction,
    *,
    converter: BaseCurrencyConverter,
    target=BASE_CURRENCY,
) -> TransactionSummaryDTO:
    """
    Total cost, profit, ROI and both margins of a car.

    Unsold cars only get a total cost. Expenses are converted one by one and
    summed in the target currency before being subtracted from the sale.
    """
    purchase = transaction.purchase_price
    total_cost = await calculate_total_cost_async(
        purchase.amount,
        purchase.currency,
        transaction.expenses,
        converter=converter,
        target=target,
    )

    if not transaction.is_sold:
        return TransactionSummaryDTO(currency=str(target), total_cost=total_cost)

    sale = transaction.sale_price
    expenses_total = total_cost - await convert(purchase.amount, purchase.currency, target, converter)
    profit = await calculate_profit_in_target(
        sale.amount,
        sale.currency,
        purchase.amount,
        purchase.currency,
        expenses_total,
        converter=converter,
        target=target,
    )
    sale_in_target = await convert(sale.amount, sale.currency, target, converter)

    return TransactionSummaryDTO(
        currency=str(target),
        total_cost=total_cost,
        sale_price=sale_in_target,
        profit=profit,
        roi=calculate_roi(profit, total_cost),
        profit_margin=calculate_profit_margin(profit, total_cost),
        sale_margin=calculate_sale_margin(profit, sale_in_target),
        conversion_warning=needs_conversion_warning(sale.amount, sale.currency, target),
    )
