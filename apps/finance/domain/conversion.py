"""
Currency conversion primitive.
The only place in the calculation layer that suspends.
"""

import asyncio
from decimal import Decimal
from typing import Iterable, Sequence

from apps.finance.domain.interfaces import BaseCurrencyConverter
from apps.finance.domain.models import BASE_CURRENCY, coerce_decimal, same_currency


async def convert(
    amount,
    from_currency,
    to_currency,
    converter: BaseCurrencyConverter,
) -> Decimal:
    """
    Convert an amount between two currencies.

    Same-currency conversions return the amount untouched without asking
    the converter. ConversionUnavailable from the converter propagates.
    """
    value = coerce_decimal(amount)
    if same_currency(from_currency, to_currency):
        return value
    return await converter.convert_currency(value, from_currency, to_currency)


async def batch_convert_currency(
    conversions: Iterable[Sequence],
    converter: BaseCurrencyConverter,
) -> list[Decimal]:
    """
    Convert many amounts concurrently.

    Each item is (amount, from) or (amount, from, to); ``to`` defaults to AED.
    Results line up with the inputs whatever order the conversions finish in.
    """
    tasks = []
    for item in conversions:
        amount, from_currency, *rest = item
        to_currency = rest[0] if rest else BASE_CURRENCY
        tasks.append(convert(amount, from_currency, to_currency, converter))

    return list(await asyncio.gather(*tasks))
