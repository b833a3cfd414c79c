"""
Domain services - exchange rate retrieval and the converters handed to the
calculation layer.
Implements the cache / database / provider fallback chain.
"""

import asyncio
import logging
from decimal import Decimal
from datetime import date

from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError

from apps.finance.domain.exceptions import ConversionUnavailable
from apps.finance.domain.interfaces import BaseCurrencyConverter, BaseExchangeRateProvider
from apps.finance.domain.models import CurrencyCode, RATE_PRECISION, coerce_decimal
from apps.finance.infrastructure.persistence.repositories import (
    CurrencyExchangeRateRepository,
    CurrencyRepository,
)
from apps.finance.infrastructure.providers.registry import get_active_providers_ordered
from apps.finance.infrastructure.providers.static import StaticRateProvider

logger = logging.getLogger(__name__)

CACHE_KEY_TEMPLATE = "finance:rate:{source}:{target}:{date}"


def _cache_key(source_currency_code: str, exchanged_currency_code: str, valuation_date: date) -> str:
    return CACHE_KEY_TEMPLATE.format(
        source=source_currency_code,
        target=exchanged_currency_code,
        date=valuation_date.isoformat(),
    )


def _supported_pairs():
    for source in CurrencyCode:
        for target in CurrencyCode:
            if source is not target:
                yield source.value, target.value


class ExchangeRateService:
    """
    Handles exchange rate retrieval with a fallback mechanism.

    Fallback strategy:
    1. Same currency is always 1
    2. Quote cached in the last FINANCE_RATE_CACHE_SECONDS
    3. Quote stored in the database for that day
    4. Providers in priority order, the first answer wins
    5. Successful provider answers are saved and cached
    6. Stored reverse pair, inverted, when no provider answers
    7. None if every source fails
    """

    @staticmethod
    def get_exchange_rate(
        source_currency_code: str,
        exchanged_currency_code: str,
        valuation_date: date
    ) -> Decimal | None:
        """
        Get exchange rate with fallback mechanism.

        Args:
            source_currency_code: Base currency (e.g. "USD")
            exchanged_currency_code: Target currency (e.g. "AED")
            valuation_date: Date for the rate

        Returns:
            Exchange rate as Decimal, or None if all sources fail

        Example:
            >>> rate = ExchangeRateService.get_exchange_rate("USD", "AED", date(2024, 1, 15))
            >>> if rate:
            ...     converted = 100 * rate
        """
        source_code = str(source_currency_code).upper()
        target_code = str(exchanged_currency_code).upper()

        if not (CurrencyCode.is_supported(source_code) and CurrencyCode.is_supported(target_code)):
            logger.warning("Currency not supported: %s or %s", source_code, target_code)
            return None

        if source_code == target_code:
            return Decimal("1")

        key = _cache_key(source_code, target_code, valuation_date)
        cached = cache.get(key)
        if cached is not None:
            logger.debug("Rate found in cache: %s/%s on %s", source_code, target_code, valuation_date)
            return cached

        stored = CurrencyExchangeRateRepository.get_rate_value(source_code, target_code, valuation_date)
        if stored is not None:
            logger.debug("Rate found in DB: %s/%s on %s", source_code, target_code, valuation_date)
            cache.set(key, stored, settings.FINANCE_RATE_CACHE_SECONDS)
            return stored

        providers = get_active_providers_ordered()
        if not providers:
            logger.warning("No active providers configured")

        rate_value = None
        successful_provider = None

        for provider in providers:
            provider_name = provider.__class__.__name__
            rate_value = provider.get_exchange_rate_data(source_code, target_code, valuation_date)

            if rate_value is not None:
                successful_provider = provider_name
                logger.info("%s returned rate %s for %s/%s", provider_name, rate_value, source_code, target_code)
                break
            logger.warning("%s failed for %s/%s, trying next...", provider_name, source_code, target_code)

        if rate_value is None:
            inverted = ExchangeRateService._inverted_reverse(source_code, target_code, valuation_date)
            if inverted is not None:
                cache.set(key, inverted, settings.FINANCE_RATE_CACHE_SECONDS)
                return inverted
            logger.error("All sources failed for %s/%s on %s", source_code, target_code, valuation_date)
            return None

        rate_value = rate_value.quantize(RATE_PRECISION)
        ExchangeRateService._store(source_code, target_code, valuation_date, rate_value, successful_provider)
        cache.set(key, rate_value, settings.FINANCE_RATE_CACHE_SECONDS)
        return rate_value

    @staticmethod
    def _inverted_reverse(source_code, target_code, valuation_date):
        reverse = CurrencyExchangeRateRepository.get_rate(target_code, source_code, valuation_date)
        if reverse is None:
            return None
        logger.debug("Inverting stored %s/%s rate on %s", target_code, source_code, valuation_date)
        return reverse.to_domain().inverse().rate_value

    @staticmethod
    def _store(source_code, target_code, valuation_date, rate_value, provider_name):
        try:
            source_currency = CurrencyRepository.get_by_code(source_code)
            exchanged_currency = CurrencyRepository.get_by_code(target_code)
            if source_currency is None or exchanged_currency is None:
                CurrencyRepository.ensure_supported()
                source_currency = CurrencyRepository.get_by_code(source_code)
                exchanged_currency = CurrencyRepository.get_by_code(target_code)

            CurrencyExchangeRateRepository.save_rate(
                source_currency,
                exchanged_currency,
                valuation_date,
                rate_value,
            )
            logger.debug("Saved rate to DB (from %s)", provider_name)
        except DatabaseError as e:
            logger.warning("Failed to save rate to DB: %s", e)

    @staticmethod
    def convert_amount(
        source_currency_code: str,
        exchanged_currency_code: str,
        amount: Decimal,
        valuation_date: date | None = None
    ) -> dict | None:
        """
        Convert an amount from one currency to another.

        Returns:
            Dict with conversion details, or None if no rate is available

        Example:
            >>> ExchangeRateService.convert_amount("USD", "AED", Decimal("100"))
            {
                "source_currency": "USD",
                "exchanged_currency": "AED",
                "amount": Decimal("100"),
                "rate": Decimal("3.672500"),
                "converted_amount": Decimal("367.250000"),
                "valuation_date": date(2024, 1, 15)
            }
        """
        if valuation_date is None:
            valuation_date = date.today()

        rate = ExchangeRateService.get_exchange_rate(
            source_currency_code,
            exchanged_currency_code,
            valuation_date
        )

        if rate is None:
            return None

        converted_amount = (amount * rate).quantize(RATE_PRECISION)

        return {
            "source_currency": source_currency_code,
            "exchanged_currency": exchanged_currency_code,
            "amount": amount,
            "rate": rate,
            "converted_amount": converted_amount,
            "valuation_date": valuation_date
        }

    @staticmethod
    def force_refresh(valuation_date: date | None = None) -> int:
        """Drop cached quotes for every supported pair; returns how many keys were targeted."""
        valuation_date = valuation_date or date.today()
        keys = [_cache_key(s, t, valuation_date) for s, t in _supported_pairs()]
        cache.delete_many(keys)
        logger.info("Cleared cached rates for %s", valuation_date)
        return len(keys)

    @staticmethod
    def get_cache_status(valuation_date: date | None = None) -> dict:
        valuation_date = valuation_date or date.today()
        keys = {_cache_key(s, t, valuation_date): f"{s}/{t}" for s, t in _supported_pairs()}
        found = cache.get_many(list(keys))
        rates = {keys[key]: str(value) for key, value in found.items()}
        return {
            "valuation_date": valuation_date.isoformat(),
            "rates_count": len(rates),
            "rates": rates,
        }


class RateServiceConverter(BaseCurrencyConverter):
    """
    Production converter: runs the blocking ExchangeRateService lookup on
    Django's thread-sensitive sync thread, so ORM and cache access share the
    request's connections, and gives up after FINANCE_PROVIDER_TIMEOUT seconds.
    """

    def __init__(self, valuation_date: date | None = None, timeout: float | None = None):
        self.valuation_date = valuation_date
        self.timeout = settings.FINANCE_PROVIDER_TIMEOUT if timeout is None else timeout

    async def convert_currency(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        source_code = str(from_currency)
        target_code = str(to_currency)
        valuation_date = self.valuation_date or date.today()

        try:
            rate = await asyncio.wait_for(
                sync_to_async(ExchangeRateService.get_exchange_rate, thread_sensitive=True)(
                    source_code,
                    target_code,
                    valuation_date,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise ConversionUnavailable(source_code, target_code, "rate lookup timed out")

        if rate is None:
            raise ConversionUnavailable(source_code, target_code)

        return (coerce_decimal(amount) * rate).quantize(RATE_PRECISION)


class ProviderConverter(BaseCurrencyConverter):
    """Converter over a single in-process provider, with no cache or database."""

    def __init__(self, provider: BaseExchangeRateProvider, valuation_date: date | None = None):
        self.provider = provider
        self.valuation_date = valuation_date

    async def convert_currency(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        source_code = str(from_currency)
        target_code = str(to_currency)
        rate = self.provider.get_exchange_rate_data(
            source_code,
            target_code,
            self.valuation_date or date.today(),
        )
        if rate is None:
            raise ConversionUnavailable(source_code, target_code)
        return (coerce_decimal(amount) * rate).quantize(RATE_PRECISION)


class StaticRateConverter(ProviderConverter):
    """Deterministic converter over the static fallback table."""

    def __init__(self, rates: dict | None = None):
        super().__init__(StaticRateProvider(rates))


def get_default_converter(valuation_date: date | None = None) -> BaseCurrencyConverter:
    return RateServiceConverter(valuation_date=valuation_date)
