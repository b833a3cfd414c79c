"""
Static provider backed by a fixed AED rate table.
Used for development, tests and as the last entry of the fallback chain.
"""

import logging
from decimal import Decimal
from datetime import date

from apps.finance.domain.interfaces import BaseExchangeRateProvider
from apps.finance.domain.models import BASE_CURRENCY, RATE_PRECISION

logger = logging.getLogger(__name__)


class StaticRateProvider(BaseExchangeRateProvider):
    """
    Answers from FALLBACK_RATES, whatever the date.

    Lookup order: the direct pair, the inverse of the reverse pair, then a
    cross rate through AED.
    """

    FALLBACK_RATES = {
        ("USD", "AED"): Decimal("3.67"),
        ("EUR", "AED"): Decimal("4.00"),
        ("GBP", "AED"): Decimal("4.60"),
        ("AED", "USD"): Decimal("0.27"),
        ("AED", "EUR"): Decimal("0.25"),
        ("AED", "GBP"): Decimal("0.22"),
    }

    def __init__(self, rates: dict | None = None):
        self.rates = dict(self.FALLBACK_RATES if rates is None else rates)

    def _lookup(self, source_currency: str, exchanged_currency: str) -> Decimal | None:
        rate = self.rates.get((source_currency, exchanged_currency))
        if rate is not None:
            return rate
        reverse = self.rates.get((exchanged_currency, source_currency))
        if reverse:
            return Decimal("1") / reverse
        return None

    def get_exchange_rate_data(
        self,
        source_currency: str,
        exchanged_currency: str,
        date: date
    ) -> Decimal | None:
        if source_currency == exchanged_currency:
            return Decimal("1")

        rate = self._lookup(source_currency, exchanged_currency)

        if rate is None and BASE_CURRENCY.value not in (source_currency, exchanged_currency):
            to_base = self._lookup(source_currency, BASE_CURRENCY.value)
            from_base = self._lookup(BASE_CURRENCY.value, exchanged_currency)
            if to_base is not None and from_base is not None:
                rate = to_base * from_base

        if rate is None:
            logger.warning("StaticRateProvider: unsupported currency pair %s/%s", source_currency, exchanged_currency)
            return None

        return rate.quantize(RATE_PRECISION)
