"""
Domain errors for the finance calculation layer.
"""


class FinanceError(Exception):
    """Base class for finance domain errors."""


class InvalidAmount(FinanceError, ValueError):
    """Raised when a money amount fails validation at construction time."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid amount")


class UnsupportedCurrency(FinanceError, ValueError):
    """Raised when a free-form currency code is not one of the supported codes."""

    def __init__(self, code):
        self.code = code
        super().__init__(f"Unsupported currency: {code!r}")


class ConversionUnavailable(FinanceError, RuntimeError):
    """Raised when no exchange rate could be obtained for a conversion."""

    def __init__(self, source_currency: str, exchanged_currency: str, reason: str = ""):
        self.source_currency = source_currency
        self.exchanged_currency = exchanged_currency
        self.reason = reason
        message = f"No exchange rate available for {source_currency}/{exchanged_currency}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
