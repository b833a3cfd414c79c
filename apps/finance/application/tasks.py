"""
Celery tasks for background rate synchronisation.
"""

import asyncio
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from celery import shared_task

from apps.finance.application.dto import RateSyncResultDTO
from apps.finance.domain.interfaces import BaseExchangeRateProvider
from apps.finance.domain.models import RATE_PRECISION
from apps.finance.domain.services import ExchangeRateService
from apps.finance.infrastructure.persistence.repositories import (
    CurrencyExchangeRateRepository,
    CurrencyRepository,
)
from apps.finance.infrastructure.providers.registry import get_active_providers_ordered

logger = logging.getLogger(__name__)

RateRow = Tuple[str, str, date, Decimal]


def get_top_priority_provider() -> Optional[BaseExchangeRateProvider]:
    """
    Returns an instance of the active provider with the highest priority (lowest number).
    Returns None if no active provider is found or registered.
    """
    providers = get_active_providers_ordered()
    return providers[0] if providers else None


async def fetch_rate_async(
    provider: BaseExchangeRateProvider,
    source_code: str,
    target_code: str,
    valuation_date: date
) -> Optional[RateRow]:
    """
    Fetch one exchange rate by running the synchronous provider in a thread
    via asyncio.to_thread.
    """
    rate = await asyncio.to_thread(
        provider.get_exchange_rate_data,
        source_code,
        target_code,
        valuation_date
    )

    if rate is None:
        logger.warning("No rate for %s/%s on %s", source_code, target_code, valuation_date)
        return None

    return (source_code, target_code, valuation_date, rate)


async def fetch_rates_for_date(
    provider: BaseExchangeRateProvider,
    codes: List[str],
    valuation_date: date
) -> List[RateRow]:
    """
    Fetch every ordered pair of ``codes`` for one date with concurrent requests.
    """
    tasks = [
        fetch_rate_async(provider, source, target, valuation_date)
        for source in codes
        for target in codes
        if source != target
    ]

    results = await asyncio.gather(*tasks, return_exceptions=True)

    valid_results: List[RateRow] = []
    for r in results:
        if isinstance(r, BaseException):
            logger.warning("Rate fetch raised: %r", r)
            continue
        if r is not None:
            valid_results.append(r)

    return valid_results


@shared_task(name="finance.load_historical_data")
def load_historical_data(date_from_str: str, date_to_str: str) -> Dict:
    """
    Load historical exchange rates for a date range using concurrent I/O.

    Uses the active provider with the highest priority only; there is no
    fallback between providers here.

    Args:
        date_from_str: Start date in YYYY-MM-DD format
        date_to_str: End date in YYYY-MM-DD format

    Returns:
        Dict with operation results
    """
    try:
        date_from = date.fromisoformat(date_from_str)
        date_to = date.fromisoformat(date_to_str)
    except ValueError as e:
        return RateSyncResultDTO(False, 0, [], message=f"Invalid date format: {e}").as_dict()

    if date_from > date_to:
        return RateSyncResultDTO(False, 0, [], message="date_from must be before or equal to date_to").as_dict()

    provider = get_top_priority_provider()
    if provider is None:
        return RateSyncResultDTO(
            False, 0, [],
            message="No active provider found. Check that at least one provider is active in the database.",
        ).as_dict()

    currencies = {c.code: c for c in CurrencyRepository.ensure_supported()}
    codes = list(currencies)

    logger.info(
        "Loading rates from %s to %s with %s for %d currencies",
        date_from, date_to, provider.__class__.__name__, len(codes),
    )

    total_rates_loaded = 0
    errors: List[str] = []
    current_date = date_from

    while current_date <= date_to:
        results = asyncio.run(fetch_rates_for_date(provider, codes, current_date))

        if not results:
            errors.append(f"No rates fetched for {current_date}")
            current_date += timedelta(days=1)
            continue

        rates_to_create = [
            {
                "source_currency": currencies[source_code],
                "exchanged_currency": currencies[target_code],
                "valuation_date": val_date,
                "rate_value": rate_value.quantize(RATE_PRECISION),
            }
            for source_code, target_code, val_date, rate_value in results
            if not CurrencyExchangeRateRepository.exists(source_code, target_code, val_date)
        ]

        if rates_to_create:
            CurrencyExchangeRateRepository.bulk_create(rates_to_create)
            total_rates_loaded += len(rates_to_create)
            logger.info("Created %d rates for %s", len(rates_to_create), current_date)

        current_date += timedelta(days=1)

    return RateSyncResultDTO(True, total_rates_loaded, codes, errors).as_dict()


@shared_task(name="finance.refresh_exchange_rates")
def refresh_exchange_rates() -> Dict:
    """
    Drop today's cached quotes and warm the cache again through the full
    fallback chain.
    """
    today = date.today()
    ExchangeRateService.force_refresh(today)

    codes = [c.code for c in CurrencyRepository.ensure_supported()]
    synced = 0
    errors: List[str] = []

    for source in codes:
        for target in codes:
            if source == target:
                continue
            if ExchangeRateService.get_exchange_rate(source, target, today) is None:
                errors.append(f"No rate for {source}/{target}")
            else:
                synced += 1

    return RateSyncResultDTO(synced > 0, synced, codes, errors).as_dict()
