"""
Model discovery entry point for Django.
The actual ORM models live in the infrastructure layer.
"""

from apps.finance.infrastructure.persistence.models import (  # noqa: F401
    Currency,
    CurrencyExchangeRate,
    Provider,
    ProviderName,
)
