"""
Data Transfer Objects for the application layer.
DTOs decouple domain values from the API and task contracts.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional


@dataclass
class ConversionRequestDTO:
    """Request DTO for currency conversion."""
    source_currency: str
    exchanged_currency: str
    amount: Decimal
    valuation_date: Optional[date] = None


@dataclass
class ConversionResultDTO:
    """Result DTO for currency conversion."""
    source_currency: str
    exchanged_currency: str
    amount: Decimal
    rate: Decimal
    converted_amount: Decimal
    valuation_date: date

    @classmethod
    def from_dict(cls, data: dict) -> "ConversionResultDTO":
        return cls(
            source_currency=data["source_currency"],
            exchanged_currency=data["exchanged_currency"],
            amount=data["amount"],
            rate=data["rate"],
            converted_amount=data["converted_amount"],
            valuation_date=data["valuation_date"],
        )


@dataclass
class TransactionSummaryDTO:
    """Financial figures of one car, all in the report currency."""
    currency: str
    total_cost: Decimal
    sale_price: Optional[Decimal] = None
    profit: Optional[Decimal] = None
    roi: Decimal = Decimal("0")
    profit_margin: Decimal = Decimal("0")
    sale_margin: Decimal = Decimal("0")
    conversion_warning: bool = False


@dataclass
class RateSyncResultDTO:
    """Result DTO for rate synchronization tasks."""
    success: bool
    rates_synced: int
    currencies_processed: List[str]
    errors: List[str] = field(default_factory=list)
    message: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "success": self.success,
            "rates_synced": self.rates_synced,
            "currencies_processed": list(self.currencies_processed),
            "errors": list(self.errors),
            "message": self.message,
        }
