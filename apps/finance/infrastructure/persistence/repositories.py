"""
Repository pattern implementation.
Keeps ORM queries out of the rate service and the tasks.
"""

from typing import List, Optional
from datetime import date
from decimal import Decimal

from apps.finance.domain.formatting import CURRENCY_SYMBOLS
from apps.finance.domain.models import CurrencyCode
from apps.finance.infrastructure.persistence.models import (
    Currency,
    CurrencyExchangeRate,
    Provider,
)

CURRENCY_NAMES = {
    CurrencyCode.AED: "UAE Dirham",
    CurrencyCode.USD: "US Dollar",
    CurrencyCode.EUR: "Euro",
    CurrencyCode.GBP: "British Pound",
}


class CurrencyRepository:
    """Repository for Currency aggregate."""

    @staticmethod
    def get_by_code(code: str) -> Optional[Currency]:
        """Get currency by code."""
        try:
            return Currency.objects.get(code=str(code).upper())
        except Currency.DoesNotExist:
            return None

    @staticmethod
    def get_all() -> List[Currency]:
        return list(Currency.objects.all())

    @staticmethod
    def ensure_supported() -> List[Currency]:
        """Create any missing row for the supported currencies and return all four."""
        currencies = []
        for code in CurrencyCode:
            currency, _ = Currency.objects.get_or_create(
                code=code.value,
                defaults={
                    "name": CURRENCY_NAMES[code],
                    "symbol": CURRENCY_SYMBOLS[code],
                },
            )
            currencies.append(currency)
        return currencies


class CurrencyExchangeRateRepository:
    """Repository for CurrencyExchangeRate aggregate."""

    @staticmethod
    def get_rate_value(
        source_code: str,
        exchanged_code: str,
        valuation_date: date
    ) -> Optional[Decimal]:
        """Stored quote for a pair on a date, or None."""
        rate = CurrencyExchangeRate.objects.filter(
            source_currency__code=source_code,
            exchanged_currency__code=exchanged_code,
            valuation_date=valuation_date
        ).values_list("rate_value", flat=True).first()
        return rate

    @staticmethod
    def get_rate(
        source_code: str,
        exchanged_code: str,
        valuation_date: date
    ) -> Optional[CurrencyExchangeRate]:
        return CurrencyExchangeRate.objects.select_related(
            "source_currency",
            "exchanged_currency",
        ).filter(
            source_currency__code=source_code,
            exchanged_currency__code=exchanged_code,
            valuation_date=valuation_date
        ).first()

    @staticmethod
    def exists(source_code: str, exchanged_code: str, valuation_date: date) -> bool:
        return CurrencyExchangeRate.objects.filter(
            source_currency__code=source_code,
            exchanged_currency__code=exchanged_code,
            valuation_date=valuation_date
        ).exists()

    @staticmethod
    def save_rate(
        source_currency: Currency,
        exchanged_currency: Currency,
        valuation_date: date,
        rate_value: Decimal
    ) -> CurrencyExchangeRate:
        """Store a quote, keeping the first one recorded for that day."""
        rate, _ = CurrencyExchangeRate.objects.get_or_create(
            source_currency=source_currency,
            exchanged_currency=exchanged_currency,
            valuation_date=valuation_date,
            defaults={"rate_value": rate_value},
        )
        return rate

    @staticmethod
    def bulk_create(rates: List[dict]) -> List[CurrencyExchangeRate]:
        """Bulk create exchange rates."""
        rate_objects = [
            CurrencyExchangeRate(
                source_currency=r["source_currency"],
                exchanged_currency=r["exchanged_currency"],
                valuation_date=r["valuation_date"],
                rate_value=r["rate_value"]
            )
            for r in rates
        ]
        return CurrencyExchangeRate.objects.bulk_create(
            rate_objects,
            ignore_conflicts=True
        )


class ProviderRepository:
    """Repository for Provider aggregate."""

    @staticmethod
    def get_active_ordered() -> List[Provider]:
        """Get all active providers ordered by priority."""
        return list(
            Provider.objects
            .filter(is_active=True)
            .order_by('priority')
        )
