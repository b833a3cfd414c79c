from abc import ABC, abstractmethod
from decimal import Decimal
from datetime import date


class BaseExchangeRateProvider(ABC):
    """A source of exchange rates (HTTP API, static table, ...)."""

    @abstractmethod
    def get_exchange_rate_data(self, source_currency: str, exchanged_currency: str, date: date) -> Decimal | None:
        pass


class BaseCurrencyConverter(ABC):
    """
    Conversion seam consumed by the calculation layer.

    Implementations must return or raise ConversionUnavailable within a
    bounded time; the calculation layer never retries.
    """

    @abstractmethod
    async def convert_currency(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        pass
