from decimal import Decimal

import pytest
from django.core.cache import cache

from apps.finance.domain.exceptions import ConversionUnavailable
from apps.finance.domain.interfaces import BaseCurrencyConverter


class FixedRateConverter(BaseCurrencyConverter):
    """Converter with a hard-coded rate table that records every call."""

    def __init__(self, rates=None):
        self.rates = {
            (source, target): Decimal(str(rate))
            for (source, target), rate in (rates or {}).items()
        }
        self.calls = []

    async def convert_currency(self, amount, from_currency, to_currency):
        key = (str(from_currency), str(to_currency))
        self.calls.append((amount, *key))
        if key not in self.rates:
            raise ConversionUnavailable(*key)
        return Decimal(amount) * self.rates[key]


@pytest.fixture(autouse=True)
def clear_rate_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def converter():
    """Round rates into AED so expected values are easy to check by hand."""
    return FixedRateConverter({
        ("USD", "AED"): "3.5",
        ("EUR", "AED"): "4",
        ("GBP", "AED"): "5",
        ("AED", "USD"): "0.25",
    })


@pytest.fixture
def failing_converter():
    return FixedRateConverter({})
