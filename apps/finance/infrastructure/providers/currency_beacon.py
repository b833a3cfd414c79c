import logging

import requests
from decimal import Decimal, InvalidOperation
from datetime import date

from django.conf import settings

from apps.finance.domain.interfaces import BaseExchangeRateProvider

logger = logging.getLogger(__name__)


class CurrencyBeaconProvider(BaseExchangeRateProvider):
    """
    CurrencyBeacon API provider.
    Uses /historical endpoint to fetch exchange rates for a specific date.
    """

    def get_exchange_rate_data(
        self,
        source_currency: str,
        exchanged_currency: str,
        date: date
    ) -> Decimal | None:
        """
        Fetch historical exchange rate from CurrencyBeacon API.

        Args:
            source_currency: Base currency code (e.g. USD)
            exchanged_currency: Target currency code (e.g. AED)
            date: Date for the exchange rate

        Returns:
            Exchange rate as Decimal, or None if error occurs
        """
        if not settings.CURRENCY_BEACON_API_KEY:
            logger.warning("CURRENCY_BEACON_API_KEY is not configured. Cannot fetch exchange rates.")
            return None

        date_str = date.strftime("%Y-%m-%d")
        params = {
            "api_key": settings.CURRENCY_BEACON_API_KEY,
            "base": source_currency,
            "date": date_str,
            "symbols": exchanged_currency,
        }

        try:
            response = requests.get(
                f"{settings.CURRENCY_BEACON_URL}/historical",
                params=params,
                timeout=settings.FINANCE_PROVIDER_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()

            # Response format: {"response": {"rates": {"AED": 3.6725}}}
            rate = data['response']['rates'][exchanged_currency]
            return Decimal(str(rate))

        except requests.exceptions.Timeout:
            logger.warning(
                "Timeout calling CurrencyBeacon API for %s/%s on %s",
                source_currency, exchanged_currency, date_str,
            )
            return None
        except requests.exceptions.RequestException as e:
            logger.warning("HTTP error from CurrencyBeacon: %s", e)
            return None
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            logger.warning("Invalid response from CurrencyBeacon: %r", e)
            return None
