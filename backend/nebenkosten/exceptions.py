"""Exception hierarchy for the Nebenkosten billing engine."""


class BillingError(Exception):
    """Base exception for all billing engine errors."""


class BillingValidationError(BillingError, ValueError):
    """Raised when an input is rejected before any computation starts."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class UnknownCategoryError(BillingValidationError):
    """Raised when a cost category identifier is not part of the catalog."""


class StatementRenderError(BillingError):
    """Raised when a statement document could not be serialised or written."""


class ConfigurationError(BillingError):
    """Raised when configuration is invalid or missing."""
