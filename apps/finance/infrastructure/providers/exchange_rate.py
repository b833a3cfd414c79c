import logging

import requests
from decimal import Decimal, InvalidOperation
from datetime import date

from django.conf import settings

from apps.finance.domain.interfaces import BaseExchangeRateProvider

logger = logging.getLogger(__name__)


class ExchangeRateApiProvider(BaseExchangeRateProvider):
    """
    ExchangeRate-API provider.
    Uses the keyless /latest/{base} endpoint, so it only knows today's rates.
    """

    def get_exchange_rate_data(
        self,
        source_currency: str,
        exchanged_currency: str,
        date: date
    ) -> Decimal | None:
        """
        Fetch the latest exchange rate from ExchangeRate-API.

        Args:
            source_currency: Base currency code (e.g. AED)
            exchanged_currency: Target currency code (e.g. USD)
            date: Requested valuation date (ignored, the endpoint serves "now")

        Returns:
            Exchange rate as Decimal, or None if error occurs
        """
        if not settings.EXCHANGERATE_URL:
            logger.warning("EXCHANGERATE_URL is not configured. Cannot fetch exchange rates.")
            return None

        # Format: https://api.exchangerate-api.com/v4/latest/AED
        url = f"{settings.EXCHANGERATE_URL}/latest/{source_currency}"

        try:
            response = requests.get(url, timeout=settings.FINANCE_PROVIDER_TIMEOUT)
            response.raise_for_status()
            data = response.json()

            # Response format: {"base": "AED", "rates": {"USD": 0.2723, ...}}
            rate = data['rates'][exchanged_currency]
            return Decimal(str(rate))

        except requests.exceptions.Timeout:
            logger.warning("Timeout calling ExchangeRate-API for %s/%s", source_currency, exchanged_currency)
            return None
        except requests.exceptions.RequestException as e:
            logger.warning("HTTP error from ExchangeRate-API: %s", e)
            return None
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            logger.warning("Invalid response from ExchangeRate-API: %r", e)
            return None
