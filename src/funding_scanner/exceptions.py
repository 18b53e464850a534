class FundingScannerError(Exception):
    """Base class for funding-scanner errors."""


class RegistryError(FundingScannerError):
    """Raised when the funder registry data cannot be loaded."""
