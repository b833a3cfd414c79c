"""
Provider Registry - Maps ProviderName enum to adapter classes.
This is the glue between the database Provider model and the actual implementation.
"""

import logging

from apps.finance.domain.interfaces import BaseExchangeRateProvider
from apps.finance.infrastructure.persistence.models import ProviderName
from apps.finance.infrastructure.persistence.repositories import ProviderRepository
from apps.finance.infrastructure.providers.currency_beacon import CurrencyBeaconProvider
from apps.finance.infrastructure.providers.exchange_rate import ExchangeRateApiProvider
from apps.finance.infrastructure.providers.static import StaticRateProvider

logger = logging.getLogger(__name__)


PROVIDER_REGISTRY: dict[str, type[BaseExchangeRateProvider]] = {
    ProviderName.EXCHANGE_RATE: ExchangeRateApiProvider,
    ProviderName.CURRENCY_BEACON: CurrencyBeaconProvider,
    ProviderName.STATIC: StaticRateProvider,
}


def get_provider_instance(provider_name: str) -> BaseExchangeRateProvider | None:
    """
    Get an instance of a provider by its name.

    Args:
        provider_name: The provider name from ProviderName enum

    Returns:
        Instance of the provider adapter, or None if not found
    """
    provider_class = PROVIDER_REGISTRY.get(provider_name)

    if provider_class is None:
        logger.warning("Provider '%s' not found in registry", provider_name)
        return None

    return provider_class()


def get_active_providers_ordered() -> list[BaseExchangeRateProvider]:
    """
    Instances of every active provider, highest priority (lowest number) first.
    """
    provider_instances = []
    for provider_model in ProviderRepository.get_active_ordered():
        instance = get_provider_instance(provider_model.name)
        if instance is not None:
            provider_instances.append(instance)

    return provider_instances
